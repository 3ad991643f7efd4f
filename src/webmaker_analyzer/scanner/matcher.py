from __future__ import annotations

from pathlib import Path, PurePath
from typing import Dict

from .models import ArtifactKind, ExclusionRules


# Library and utility scripts shipped with every WebMaker export.
_SCRIPT_LIBRARIES = frozenset(
    {
        "basicwihactionclient.js",
        "bizflowFunctions.js",
        "BooleanValidator.js",
        "CalendarPopup.js",
        "combobox.js",
        "date.js",
        "DateValidator.js",
        "DisplayMessages.js",
        "DisplayUtils.js",
        "engineer_review.js",
        "ErrorDisplay.js",
        "FMActions.js",
        "FormValidator.js",
        "jquery-ui.min.js",
        "jquery.min.js",
        "NumberValidator.js",
        "PIE_uncompressed.js",
        "PIE.js",
        "StringValidator.js",
        "ValidationError.js",
        "ValueConverter.js",
        "editabletable.js",
        "checkbox_switch.js",
    }
)

_PAGE_TEMPLATES = frozenset({"Page_preview_BizFlowEntry.html"})

_RULE_EXCLUSIONS = frozenset({"GetWICDetails_Controller_rules.xml"})

EXCLUSION_RULES: Dict[ArtifactKind, ExclusionRules] = {
    ArtifactKind.SCRIPT: ExclusionRules(
        extensions=(".js",),
        names=_SCRIPT_LIBRARIES,
        prefixes_nocase=("test", "sample", "angular"),
        suffixes_nocase=("min.js", "debug.js"),
        segment_prefixes_nocase=("angular",),
        substrings=("PIE",),
    ),
    ArtifactKind.PAGE: ExclusionRules(
        extensions=(".html",),
        names=_PAGE_TEMPLATES,
        suffixes=("_BizFlowEntry.html",),
        segments=("theme",),
    ),
    ArtifactKind.THUMBNAIL: ExclusionRules(
        extensions=("1024.png",),
        prefixes=("BizFlowEntry",),
    ),
    ArtifactKind.RULE_DOCUMENT: ExclusionRules(
        extensions=("controller_rules.xml",),
        names=_RULE_EXCLUSIONS,
    ),
    ArtifactKind.BINDING_DOCUMENT: ExclusionRules(
        extensions=("_bindings.xml",),
    ),
}


def qualifies(candidate: Path | str, kind: ArtifactKind) -> bool:
    """Return True when ``candidate`` passes every name and path rule for ``kind``.

    Only the path string is inspected; the file is never touched.
    """
    return matches_rules(PurePath(candidate), EXCLUSION_RULES[kind])


def matches_rules(path: PurePath, rules: ExclusionRules) -> bool:
    name = path.name
    lowered = name.lower()

    if not lowered.endswith(rules.extensions):
        return False
    if name in rules.names:
        return False
    if rules.prefixes and name.startswith(rules.prefixes):
        return False
    if rules.prefixes_nocase and lowered.startswith(rules.prefixes_nocase):
        return False
    if rules.suffixes and name.endswith(rules.suffixes):
        return False
    if rules.suffixes_nocase and lowered.endswith(rules.suffixes_nocase):
        return False

    full_path = str(path)
    if any(fragment in full_path for fragment in rules.substrings):
        return False

    parts = path.parts
    if any(part in rules.segments for part in parts):
        return False
    if rules.segment_prefixes_nocase and any(
        part.lower().startswith(rules.segment_prefixes_nocase) for part in parts
    ):
        return False

    return True
