"""
Scan-classify-extract-place pipeline for exported WebMaker bundles.
"""

from .binding_extractor import BindingExtractor
from .copier import place
from .errors import (
    CorruptArchiveError,
    IOFailure,
    ParseFailure,
    ScanError,
    TraversalFailure,
    UnsupportedArchiveError,
)
from .log_writer import ScanLog
from .matcher import qualifies
from .models import ArtifactKind, BundleScanResult, ExtractionRecord, PlacedArtifact, ScanIssue
from .orchestrator import BundleScanner
from .rule_extractor import RuleExtractor

__all__ = [
    "ArtifactKind",
    "BindingExtractor",
    "BundleScanResult",
    "BundleScanner",
    "CorruptArchiveError",
    "ExtractionRecord",
    "IOFailure",
    "ParseFailure",
    "PlacedArtifact",
    "RuleExtractor",
    "ScanError",
    "ScanIssue",
    "ScanLog",
    "TraversalFailure",
    "UnsupportedArchiveError",
    "place",
    "qualifies",
]
