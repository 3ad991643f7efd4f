from __future__ import annotations

import logging
import shutil
from pathlib import Path

from .errors import IOFailure
from .models import PlacedArtifact

logger = logging.getLogger(__name__)


def place(source: Path, destination_root: Path, label: str = "") -> PlacedArtifact:
    """
    Copy ``source`` into ``destination_root/label`` without overwriting.

    When the basename is already taken, ``_1``, ``_2``, ... is appended to the
    stem until a free name is found. The check happens at call time, so
    placements into one directory must not run concurrently.
    """
    source = Path(source)
    target_dir = Path(destination_root) / label if label else Path(destination_root)
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise IOFailure(f"Failed to create subdirectory {target_dir}: {exc}", "MKDIR_FAILED") from exc

    target = free_destination(target_dir, source.name)
    try:
        shutil.copyfile(source, target)
    except OSError as exc:
        raise IOFailure(f"Failed to copy {source} to {target}: {exc}", "COPY_FAILED") from exc

    logger.debug("Copied %s -> %s", source, target)
    return PlacedArtifact(source=source, destination=target)


def free_destination(directory: Path, filename: str) -> Path:
    """Return the first path in ``directory`` for ``filename`` that does not exist yet."""
    candidate = directory / filename
    if not candidate.exists():
        return candidate

    stem, extension = split_extension(filename)
    count = 1
    while candidate.exists():
        candidate = directory / f"{stem}_{count}{extension}"
        count += 1
    return candidate


def split_extension(filename: str) -> tuple[str, str]:
    # A leading dot marks a hidden file, not an extension.
    dot = filename.rfind(".")
    if dot > 0:
        return filename[:dot], filename[dot:]
    return filename, ""
