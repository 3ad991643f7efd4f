from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional

from .cli.archive_utils import (
    TempDirectoryRegistry,
    clear_result_directory,
    find_zip_files,
    is_zip_path,
    subdirectory_name,
)
from .config import AnalyzerSettings
from .report.html_report import HtmlReportGenerator
from .scanner.errors import ScanError
from .scanner.log_writer import ScanLog
from .scanner.models import BundleScanResult, ScanIssue
from .scanner.orchestrator import BundleScanner

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AnalysisRun:
    """Everything one analyzer run produced."""

    result_dir: Path
    log_path: Path
    report_path: Optional[Path] = None
    bundles: List[BundleScanResult] = field(default_factory=list)
    issues: List[ScanIssue] = field(default_factory=list)

    @property
    def files_placed(self) -> int:
        return sum(len(bundle.placed) for bundle in self.bundles)


def run_analysis(
    inputs: Iterable[Path],
    settings: AnalyzerSettings,
    *,
    timestamp: Optional[datetime] = None,
) -> AnalysisRun:
    """
    Scan every input (directory or ``.zip``) into a freshly cleared result tree.

    Directories are scanned as a bundle themselves and every zip found
    beneath them is extracted and scanned as its own bundle. Extracted
    directories are removed before returning, even when the run fails.
    """
    started = timestamp or datetime.now()
    result_dir = clear_result_directory(settings.result_dir).absolute()
    log_path = result_dir / f"REPORT_{started:%Y%m%d_%H%M%S}.LOG"
    run = AnalysisRun(result_dir=result_dir, log_path=log_path)

    with TempDirectoryRegistry(settings.temp_prefix) as temp_dirs, ScanLog(log_path) as log:
        log.write_message(f"Results will be stored in: {result_dir}")
        scanner = BundleScanner(result_dir, log)

        for raw in inputs:
            source = Path(raw)
            if not source.exists():
                logger.error("The path does not exist: %s", source)
                run.issues.append(ScanIssue(path=str(source), code="FILE_MISSING", message="Path does not exist"))
                continue

            if source.is_dir():
                logger.info("Processing directory: %s", source)
                try:
                    label = subdirectory_name(source)
                except ScanError as exc:
                    logger.error("Skipping directory %s: %s", source, exc)
                    run.issues.append(ScanIssue(path=str(source), code=exc.code, message=str(exc)))
                    continue
                run.bundles.append(scanner.scan_all(source, label))
                zips = find_zip_files(source)
                if zips:
                    logger.info("Found %d zip files in directory: %s", len(zips), source)
                for archive in zips:
                    _scan_archive(archive, scanner, temp_dirs, run)
            elif is_zip_path(source):
                _scan_archive(source, scanner, temp_dirs, run)
            else:
                logger.warning("Skipping unsupported file: %s", source)
                run.issues.append(
                    ScanIssue(path=str(source), code="UNSUPPORTED_FILE_TYPE", message="Not a directory or .zip file")
                )

    if settings.generate_report:
        run.report_path = HtmlReportGenerator(result_dir, timestamp=started).generate()
    return run


def _scan_archive(
    archive: Path,
    scanner: BundleScanner,
    temp_dirs: TempDirectoryRegistry,
    run: AnalysisRun,
) -> None:
    logger.info("Processing zip file: %s", archive)
    try:
        label = subdirectory_name(archive)
        extracted = temp_dirs.extract(archive)
    except ScanError as exc:
        logger.error("Error extracting zip file %s: %s", archive, exc)
        scanner.log.write_message(f"Error extracting {archive.name}: {exc}")
        run.issues.append(ScanIssue(path=str(archive), code=exc.code, message=str(exc)))
        return
    except OSError as exc:
        logger.error("Error extracting zip file %s: %s", archive, exc)
        scanner.log.write_message(f"Error extracting {archive.name}: {exc}")
        run.issues.append(ScanIssue(path=str(archive), code="EXTRACT_FAILED", message=str(exc)))
        return
    run.bundles.append(scanner.scan_all(extracted, label))
