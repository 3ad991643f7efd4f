from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterator, List


class ArtifactKind(str, Enum):
    SCRIPT = "script"
    PAGE = "page"
    THUMBNAIL = "thumbnail"
    RULE_DOCUMENT = "rule-document"
    BINDING_DOCUMENT = "binding-document"


@dataclass(frozen=True, slots=True)
class ExclusionRules:
    """
    Name and path rules for one artifact kind.

    A candidate qualifies when its basename ends with one of ``extensions``
    (case-insensitive) and none of the deny rules match. Fields suffixed with
    ``_nocase`` compare lower-cased values and must themselves be lower-case.
    """

    extensions: tuple[str, ...]
    names: frozenset[str] = frozenset()
    prefixes: tuple[str, ...] = ()
    prefixes_nocase: tuple[str, ...] = ()
    suffixes: tuple[str, ...] = ()
    suffixes_nocase: tuple[str, ...] = ()
    segments: tuple[str, ...] = ()
    segment_prefixes_nocase: tuple[str, ...] = ()
    substrings: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ExtractionEntry:
    text: str
    name: str | None = None
    marker: bool = False


@dataclass(slots=True)
class ExtractionRecord:
    """Ordered text blocks extracted from one document, one per matched element."""

    entries: List[ExtractionEntry] = field(default_factory=list)

    def add(self, text: str, *, name: str | None = None, marker: bool = False) -> None:
        self.entries.append(ExtractionEntry(text=text, name=name, marker=marker))

    @property
    def texts(self) -> List[str]:
        return [entry.text for entry in self.entries]

    @property
    def marker_count(self) -> int:
        return sum(1 for entry in self.entries if entry.marker)

    def __iter__(self) -> Iterator[ExtractionEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True, slots=True)
class PlacedArtifact:
    source: Path
    destination: Path


@dataclass(slots=True)
class ScanIssue:
    path: str
    code: str
    message: str


@dataclass(slots=True)
class BundleScanResult:
    root: Path
    label: str
    placed: List[PlacedArtifact] = field(default_factory=list)
    issues: List[ScanIssue] = field(default_factory=list)
    summary: Dict[str, int] = field(default_factory=dict)

    def count(self, key: str, amount: int = 1) -> None:
        self.summary[key] = self.summary.get(key, 0) + amount
