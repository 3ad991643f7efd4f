from __future__ import annotations


class ScanError(Exception):
    def __init__(self, message: str, code: str) -> None:
        super().__init__(message)
        self.code = code


class ParseFailure(ScanError):
    pass


class IOFailure(ScanError):
    pass


class TraversalFailure(ScanError):
    pass


class UnsupportedArchiveError(ScanError):
    pass


class CorruptArchiveError(ScanError):
    pass
