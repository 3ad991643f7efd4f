from __future__ import annotations

import logging
from pathlib import Path
from typing import TextIO

SEPARATOR = "-" * 40

logger = logging.getLogger(__name__)


class ScanLog:
    """Append-only run log kept next to the copied artifacts.

    ``write_message`` records a status line framed as ``== message ==``;
    ``write_element`` records a verbatim block followed by a separator line.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._stream: TextIO | None = self.path.open("w", encoding="utf-8")

    def write_message(self, message: str) -> None:
        logger.debug(message)
        self._write(f"== {message} ==\n")

    def write_element(self, element: str) -> None:
        self._write(f"{element}\n{SEPARATOR}\n")

    def _write(self, text: str) -> None:
        if self._stream is None:
            raise ValueError(f"Scan log {self.path} is closed")
        self._stream.write(text)

    @property
    def closed(self) -> bool:
        return self._stream is None

    def close(self) -> None:
        if self._stream is not None:
            self._stream.close()
            self._stream = None

    def __enter__(self) -> "ScanLog":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
