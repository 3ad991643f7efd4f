from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .binding_extractor import BindingExtractor
from .copier import place
from .errors import IOFailure, ParseFailure, TraversalFailure
from .log_writer import ScanLog
from .matcher import qualifies
from .models import ArtifactKind, BundleScanResult, ExtractionRecord, ScanIssue
from .rule_extractor import RuleExtractor

# Kinds scanned under a fixed path relative to the bundle root.
_FIXED_SCANS: Tuple[Tuple[ArtifactKind, Tuple[str, ...]], ...] = (
    (ArtifactKind.SCRIPT, ("webapps", "js")),
    (ArtifactKind.PAGE, ("webapps",)),
    (ArtifactKind.THUMBNAIL, ("webapps", "thumbnails")),
)

# Kinds scanned under a named directory inside any top-level child of the bundle.
_POOL_SCANS: Tuple[Tuple[ArtifactKind, str], ...] = (
    (ArtifactKind.RULE_DOCUMENT, "logicsheet_pool"),
    (ArtifactKind.BINDING_DOCUMENT, "hyfinityBindings"),
)

_HEADINGS: Dict[ArtifactKind, str] = {
    ArtifactKind.SCRIPT: "JavaScript Files Report",
    ArtifactKind.PAGE: "HTML Files Report",
    ArtifactKind.THUMBNAIL: "Thumbnail Files Report",
    ArtifactKind.RULE_DOCUMENT: "Logicsheet Rules with Database Actions Report",
    ArtifactKind.BINDING_DOCUMENT: "Hyfinity Bindings Mapping Report",
}

_DESCRIPTIONS: Dict[ArtifactKind, str] = {
    ArtifactKind.SCRIPT: "JS files",
    ArtifactKind.PAGE: "HTML files",
    ArtifactKind.THUMBNAIL: "thumbnail files",
    ArtifactKind.RULE_DOCUMENT: "rules files",
    ArtifactKind.BINDING_DOCUMENT: "bindings files",
}

logger = logging.getLogger(__name__)


class BundleScanner:
    """
    Scan exported WebMaker bundles and collect their artifacts into ``result_root``.

    Every decision is written to ``log``. Failures on one path, document or
    copy are recorded on the returned ``BundleScanResult`` and never stop the
    remaining scans.
    """

    def __init__(
        self,
        result_root: Path,
        log: ScanLog,
        *,
        rule_extractor: Optional[RuleExtractor] = None,
        binding_extractor: Optional[BindingExtractor] = None,
    ) -> None:
        self.result_root = Path(result_root)
        self.log = log
        self.rule_extractor = rule_extractor or RuleExtractor()
        self.binding_extractor = binding_extractor or BindingExtractor()

    def scan_all(self, bundle_root: Path, label: str = "") -> BundleScanResult:
        root = Path(bundle_root).absolute()
        result = BundleScanResult(root=root, label=label)
        logger.info("Scanning bundle %s into '%s'", root, label or ".")

        for kind, parts in _FIXED_SCANS:
            self.scan_directory(kind, root.joinpath(*parts), label, result)

        for kind, pool_name in _POOL_SCANS:
            try:
                pools = find_pool_directories(root, pool_name)
            except TraversalFailure as exc:
                self._record_traversal_error(kind, root, exc, result)
                continue
            for pool in pools:
                self.log.write_message(f"Found {pool_name} in {pool.parent.name}")
                self.scan_directory(kind, pool, label, result)

        return result

    def scan_directory(
        self,
        kind: ArtifactKind,
        directory: Path,
        label: str,
        result: BundleScanResult,
    ) -> None:
        self.log.write_message(_HEADINGS[kind])
        try:
            candidates = list_candidates(directory, kind)
        except TraversalFailure as exc:
            self._record_traversal_error(kind, directory, exc, result)
            return

        for path in candidates:
            if kind is ArtifactKind.SCRIPT:
                self._collect(path, f"Found JS file: {path.name}", label, result, kind)
            elif kind is ArtifactKind.PAGE:
                self._collect(path, f"Found HTML file: {path.name}", label, result, kind)
            elif kind is ArtifactKind.THUMBNAIL:
                self._collect(path, f"Found thumbnail: {path.name}", label, result, kind)
            elif kind is ArtifactKind.RULE_DOCUMENT:
                self.log.write_message(f"Processing rules file: {path.name}")
                record = self._extract(self.rule_extractor, path, result)
                if record is None:
                    continue
                if record:
                    self.log.write_message(f"Found {len(record)} database actions in {path.name}")
                    self._place_document(path, record, label, result, kind)
                else:
                    self.log.write_message(f"No database actions found in {path.name}")
                    result.count("documents_skipped")
            elif kind is ArtifactKind.BINDING_DOCUMENT:
                self.log.write_message(f"Processing bindings file: {path.name}")
                record = self._extract(self.binding_extractor, path, result)
                if record is None:
                    continue
                if record:
                    self.log.write_message(f"Found {len(record)} mappings in {path.name}")
                    if record.marker_count:
                        self.log.write_message(
                            f"{record.marker_count} mappings reference ProcessVariables in {path.name}"
                        )
                    self._place_document(path, record, label, result, kind)
                else:
                    self.log.write_message(f"No mappings found in {path.name}")
                    result.count("documents_skipped")

    def _collect(
        self,
        path: Path,
        message: str,
        label: str,
        result: BundleScanResult,
        kind: ArtifactKind,
    ) -> None:
        self.log.write_message(message)
        self.log.write_element(str(path))
        self._place(path, label, result, kind)

    def _place_document(
        self,
        path: Path,
        record: ExtractionRecord,
        label: str,
        result: BundleScanResult,
        kind: ArtifactKind,
    ) -> None:
        for entry in record:
            self.log.write_element(entry.text)
        self._place(path, label, result, kind)

    def _extract(
        self,
        extractor: RuleExtractor | BindingExtractor,
        path: Path,
        result: BundleScanResult,
    ) -> Optional[ExtractionRecord]:
        try:
            return extractor.extract(path)
        except ParseFailure as exc:
            self.log.write_message(f"Error processing {path.name}: {exc}")
            logger.warning("Skipping %s: %s", path, exc)
            result.issues.append(ScanIssue(path=str(path), code=exc.code, message=str(exc)))
            result.count("parse_errors")
            return None

    def _place(self, path: Path, label: str, result: BundleScanResult, kind: ArtifactKind) -> None:
        try:
            placed = place(path, self.result_root, label)
        except IOFailure as exc:
            self.log.write_message(f"Error copying {path.name}: {exc}")
            logger.warning("Could not place %s: %s", path, exc)
            result.issues.append(ScanIssue(path=str(path), code=exc.code, message=str(exc)))
            result.count("copy_errors")
            return
        self.log.write_message(f"Copied to: {placed.destination}")
        result.placed.append(placed)
        result.count("files_placed")
        result.count(kind.value)

    def _record_traversal_error(
        self,
        kind: ArtifactKind,
        directory: Path,
        exc: TraversalFailure,
        result: BundleScanResult,
    ) -> None:
        self.log.write_message(f"Error scanning {_DESCRIPTIONS[kind]}: {exc}")
        logger.warning("Skipping %s scan of %s: %s", kind.value, directory, exc)
        result.issues.append(ScanIssue(path=str(directory), code=exc.code, message=str(exc)))
        result.count("traversal_errors")


def list_candidates(directory: Path, kind: ArtifactKind) -> List[Path]:
    """Return files under ``directory`` that qualify as ``kind``, in sorted path order."""
    directory = Path(directory).absolute()
    if not directory.exists():
        raise TraversalFailure(f"{directory} does not exist", "PATH_MISSING")
    if not directory.is_dir():
        raise TraversalFailure(f"{directory} is not a directory", "NOT_A_DIRECTORY")

    def _raise(error: OSError) -> None:
        raise TraversalFailure(f"Unable to read {error.filename}: {error.strerror}", "WALK_FAILED") from error

    found: List[Path] = []
    for current_root, _, files in os.walk(directory, onerror=_raise):
        current_path = Path(current_root)
        for filename in files:
            full_path = current_path / filename
            if full_path.is_file() and qualifies(full_path, kind):
                found.append(full_path)
    return sorted(found)


def find_pool_directories(root: Path, name: str) -> List[Path]:
    """Return ``<child>/<name>`` for every immediate child directory of ``root`` that has one."""
    try:
        children = sorted(child for child in Path(root).iterdir() if child.is_dir())
    except OSError as exc:
        raise TraversalFailure(f"Unable to list {root}: {exc}", "WALK_FAILED") from exc
    return [child / name for child in children if (child / name).is_dir()]
