from __future__ import annotations

import logging
from xml.etree import ElementTree as ET

from .models import ExtractionRecord
from .xml_support import HY_NAMESPACE, Document, parse_document, qualified, serialize

QUERY_ACTION = "Query"
SQL_PARAM_NAME = "sql_statement"

_TARGET = qualified(HY_NAMESPACE, "target")
_PARAMS = qualified(HY_NAMESPACE, "params")
_PARAM = qualified(HY_NAMESPACE, "param")

logger = logging.getLogger(__name__)


class RuleExtractor:
    """Find database query actions in ``*controller_rules.xml`` logicsheets.

    A match is an ``hy:target`` whose ``action`` is ``Query`` and that holds,
    at any depth, ``hy:params`` with an ``hy:param name="sql_statement"``.
    Each match is returned as its full serialized subtree.
    """

    def extract(self, document: Document) -> ExtractionRecord:
        root = parse_document(document)
        record = ExtractionRecord()
        for target in root.iter(_TARGET):
            if target.get("action") != QUERY_ACTION:
                continue
            if not has_sql_statement(target):
                continue
            record.add(serialize(target), name=target.get("name"))
        logger.debug("Found %d query actions in %s", len(record), getattr(document, "name", document))
        return record


def has_sql_statement(target: ET.Element) -> bool:
    for params in target.iter(_PARAMS):
        for param in params.iter(_PARAM):
            if param.get("name") == SQL_PARAM_NAME:
                return True
    return False
