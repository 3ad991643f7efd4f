from __future__ import annotations

import logging
import os
import re
import shutil
import tempfile
import zipfile
from pathlib import Path, PurePosixPath
from typing import List

from ..config import DEFAULT_TEMP_PREFIX
from ..scanner.errors import CorruptArchiveError, ScanError, UnsupportedArchiveError

_UNSAFE_LABEL_CHARS = re.compile(r"[^a-zA-Z0-9.-]")

logger = logging.getLogger(__name__)


def subdirectory_name(path: Path) -> str:
    """Result-tree label for a bundle: its name without ``.zip``, unsafe characters replaced by ``_``.

    The name comes from the normalized absolute path, so ``.`` and ``..``
    are labelled after the directory they point at.
    """
    absolute = Path(os.path.abspath(path))
    name = absolute.name
    if name.lower().endswith(".zip"):
        name = name[: name.rfind(".")]
    label = _UNSAFE_LABEL_CHARS.sub("_", name)
    if not label.strip("."):
        raise ScanError(f"Cannot derive a result label from {absolute}", "INVALID_LABEL")
    return label


def is_zip_path(path: Path) -> bool:
    return Path(path).name.lower().endswith(".zip")


def find_zip_files(directory: Path) -> List[Path]:
    found: List[Path] = []
    for current_root, _, files in os.walk(directory):
        for filename in files:
            full_path = Path(current_root) / filename
            if is_zip_path(full_path) and full_path.is_file():
                found.append(full_path)
    return sorted(found)


def extract_zip(archive_path: Path, prefix: str = DEFAULT_TEMP_PREFIX) -> Path:
    """Extract ``archive_path`` into a fresh temporary directory and return it."""
    archive = Path(archive_path)
    if not archive.exists():
        raise UnsupportedArchiveError(f"Archive not found: {archive}", "FILE_MISSING")
    if not is_zip_path(archive):
        raise UnsupportedArchiveError("Only .zip files are allowed.", "UNSUPPORTED_FILE_TYPE")
    if not zipfile.is_zipfile(archive):
        raise CorruptArchiveError("Zip is corrupted or unsafe.", "CORRUPT_OR_UNZIP_ERROR")

    target = Path(tempfile.mkdtemp(prefix=prefix))
    logger.info("Extracting %s to %s", archive, target)
    try:
        with zipfile.ZipFile(archive) as zf:
            for info in zf.infolist():
                normalized = _normalize_entry(info.filename)
                if normalized is None:
                    raise CorruptArchiveError("Zip is corrupted or unsafe.", "CORRUPT_OR_UNZIP_ERROR")
                destination = target / normalized
                if info.is_dir():
                    destination.mkdir(parents=True, exist_ok=True)
                    continue
                destination.parent.mkdir(parents=True, exist_ok=True)
                with zf.open(info) as source, destination.open("wb") as sink:
                    shutil.copyfileobj(source, sink)
    except zipfile.BadZipFile as exc:
        remove_directory(target)
        raise CorruptArchiveError("Zip is corrupted or unsafe.", "CORRUPT_OR_UNZIP_ERROR") from exc
    except Exception:
        remove_directory(target)
        raise
    return target


def _normalize_entry(filename: str) -> str | None:
    # Reject absolute paths or traversal attempts; return cleaned archive path.
    path = PurePosixPath(filename.replace("\\", "/"))
    if path.is_absolute():
        return None
    if any(part == ".." for part in path.parts):
        return None
    return path.as_posix()


def remove_directory(directory: Path) -> None:
    try:
        shutil.rmtree(directory)
    except FileNotFoundError:
        return
    except OSError as exc:
        logger.error("Error cleaning up directory %s: %s", directory, exc)


def clear_result_directory(result_dir: Path) -> Path:
    """Remove everything inside ``result_dir`` (creating it when missing) and return it."""
    result_dir = Path(result_dir)
    if not result_dir.exists():
        result_dir.mkdir(parents=True)
        return result_dir

    for child in result_dir.iterdir():
        if child.is_dir() and not child.is_symlink():
            shutil.rmtree(child)
        else:
            child.unlink()
    logger.info("Cleared all files and subdirectories in %s", result_dir)
    return result_dir


class TempDirectoryRegistry:
    """Track extracted bundle directories and remove them together."""

    def __init__(self, prefix: str = DEFAULT_TEMP_PREFIX) -> None:
        self.prefix = prefix
        self.directories: List[Path] = []

    def extract(self, archive_path: Path) -> Path:
        extracted = extract_zip(archive_path, self.prefix)
        self.directories.append(extracted)
        return extracted

    def cleanup(self) -> None:
        while self.directories:
            remove_directory(self.directories.pop())

    def __enter__(self) -> "TempDirectoryRegistry":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.cleanup()
