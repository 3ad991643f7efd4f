from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ThumbnailInfo:
    """Pixel size of a page thumbnail, or the reason it could not be read."""

    width: Optional[int] = None
    height: Optional[int] = None
    error: Optional[str] = None

    @property
    def label(self) -> str:
        if self.width is None or self.height is None:
            return ""
        return f"{self.width}×{self.height}"


def read_thumbnail(path: Path) -> ThumbnailInfo:
    try:
        with Image.open(path) as image:
            width, height = int(image.width), int(image.height)
    except (OSError, UnidentifiedImageError) as exc:
        logger.debug("Could not read thumbnail %s: %s", path, exc)
        return ThumbnailInfo(error=f"Failed to read image: {exc}")
    if width <= 0 or height <= 0:
        return ThumbnailInfo(error=f"Invalid image dimensions width={width}, height={height}")
    logger.debug("Read thumbnail %s: width=%s height=%s", path, width, height)
    return ThumbnailInfo(width=width, height=height)
