"""
Shared XML helpers for the rule and binding extractors.

WebMaker documents are seen both with and without their namespace declared on
the root element, so lookups here run in two stages: a namespace-qualified
query first, then a match on the local tag name ignoring namespace.
"""

from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import BinaryIO, Iterator, List, Optional, Union
from xml.etree import ElementTree as ET

from defusedxml import ElementTree as DefusedET
from defusedxml.common import DefusedXmlException

from .errors import ParseFailure

HY_NAMESPACE = "http://www.hyfinity.com/xengine"
FM_NAMESPACE = "http://www.hyfinity.com/formmaker"

# Keep the customary prefixes when subtrees are serialized.
ET.register_namespace("hy", HY_NAMESPACE)
ET.register_namespace("fm", FM_NAMESPACE)

Document = Union[str, Path, BinaryIO]

logger = logging.getLogger(__name__)


def parse_document(document: Document) -> ET.Element:
    """Parse ``document`` with the hardened parser and return its root element."""
    name = getattr(document, "name", document)
    try:
        tree = DefusedET.parse(document)
    except (ET.ParseError, DefusedXmlException) as exc:
        raise ParseFailure(f"Malformed XML in {name}: {exc}", "XML_PARSE_ERROR") from exc
    except OSError as exc:
        raise ParseFailure(f"Unable to read {name}: {exc}", "XML_READ_ERROR") from exc
    return tree.getroot()


def qualified(namespace: str, local: str) -> str:
    return f"{{{namespace}}}{local}"


def local_name(tag: object) -> str:
    # Comments and processing instructions carry callables as tags.
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def _iter_scope(scope: ET.Element, include_self: bool) -> Iterator[ET.Element]:
    for element in scope.iter():
        if element is scope and not include_self:
            continue
        yield element


def select(
    scope: ET.Element,
    local: str,
    namespace: str,
    *,
    include_self: bool = False,
) -> List[ET.Element]:
    """Return elements named ``local`` under ``scope``, namespace first, local name second."""
    tag = qualified(namespace, local)
    found = [element for element in _iter_scope(scope, include_self) if element.tag == tag]
    if found:
        return found
    return [
        element
        for element in _iter_scope(scope, include_self)
        if local_name(element.tag) == local
    ]


def first(scope: ET.Element, local: str, namespace: str) -> Optional[ET.Element]:
    matches = select(scope, local, namespace)
    return matches[0] if matches else None


def first_text(scope: ET.Element, local: str, namespace: str) -> Optional[str]:
    """Text content of the first descendant named ``local``, or None when absent."""
    element = first(scope, local, namespace)
    if element is None:
        return None
    return text_content(element)


def text_content(element: ET.Element) -> str:
    return "".join(element.itertext())


def serialize(element: ET.Element) -> str:
    """Render ``element`` and its whole subtree, indented by two spaces, without a declaration."""
    detached = copy.deepcopy(element)
    detached.tail = None
    ET.indent(detached, space="  ")
    return ET.tostring(detached, encoding="unicode")
