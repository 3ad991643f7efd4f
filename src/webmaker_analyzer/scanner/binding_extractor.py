from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple
from xml.etree import ElementTree as ET

from .models import ExtractionRecord
from .xml_support import FM_NAMESPACE, Document, first, first_text, parse_document, qualified, select

MARKER_TERM = "ProcessVariables"

# Record line order: label shown in the record, tag holding the value.
_FIELDS: Tuple[Tuple[str, str], ...] = (
    ("Form", "xform_xpath"),
    ("Transform", "transform_xpath"),
    ("Value", "value_xpath"),
    ("Text", "text_xpath"),
    ("Repeat", "repeat_xpath"),
)

logger = logging.getLogger(__name__)


class BindingExtractor:
    """Collect UI-to-data mappings from ``*_bindings.xml`` documents."""

    def extract(self, document: Document) -> ExtractionRecord:
        root = parse_document(document)
        record = ExtractionRecord()

        elements = list(root.iter(qualified(FM_NAMESPACE, "element")))
        if not elements:
            logger.debug("No elements in the formmaker namespace, matching by local name")
            elements = select(root, "element", FM_NAMESPACE, include_self=True)

        for element in elements:
            name = element.get("name", "")
            values = read_fields(element)
            marker = contains_marker(values)
            if marker:
                logger.debug("Processing element: %s (contains %s)", name, MARKER_TERM)
            else:
                logger.debug("Processing element: %s", name)

            text = format_mapping(name, values)
            if text:
                record.add(text, name=name, marker=marker)

        logger.debug(
            "Finished parsing %s, found %d mappings",
            getattr(document, "name", document),
            len(record),
        )
        return record


def read_fields(element: ET.Element) -> Dict[str, Optional[str]]:
    values: Dict[str, Optional[str]] = {}
    for _, tag in _FIELDS:
        if tag == "xform_xpath":
            action = first(element, "action", FM_NAMESPACE)
            values[tag] = first_text(action, tag, FM_NAMESPACE) if action is not None else None
        else:
            values[tag] = first_text(element, tag, FM_NAMESPACE)
    return values


def contains_marker(values: Dict[str, Optional[str]]) -> bool:
    return any(value is not None and MARKER_TERM in value for value in values.values())


def format_mapping(name: str, values: Dict[str, Optional[str]]) -> str:
    lines: List[str] = [f"Element: {name}"]
    for label, tag in _FIELDS:
        value = values.get(tag)
        if value:
            lines.append(f"  {label} XPath: {value}")
    return "\n".join(lines) + "\n"
