from __future__ import annotations

from pathlib import Path

from PIL import Image

from webmaker_analyzer.scanner.thumbnails import read_thumbnail


def test_reads_png_dimensions(tmp_path: Path) -> None:
    path = tmp_path / "LeaveForm_1024.png"
    Image.new("RGB", (64, 48), color="white").save(path)

    info = read_thumbnail(path)

    assert (info.width, info.height) == (64, 48)
    assert info.error is None
    assert info.label == "64×48"


def test_unreadable_image_reports_error(tmp_path: Path) -> None:
    path = tmp_path / "Broken_1024.png"
    path.write_bytes(b"not really a png")

    info = read_thumbnail(path)

    assert info.width is None
    assert info.label == ""
    assert info.error.startswith("Failed to read image")


def test_missing_image_reports_error(tmp_path: Path) -> None:
    info = read_thumbnail(tmp_path / "absent_1024.png")

    assert info.error is not None
