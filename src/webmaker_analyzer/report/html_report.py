from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Tuple
from urllib.parse import quote

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..scanner.binding_extractor import MARKER_TERM, BindingExtractor
from ..scanner.errors import ParseFailure
from ..scanner.thumbnails import ThumbnailInfo, read_thumbnail

TEMPLATE_DIR = Path(__file__).parent / "templates"
TEMPLATE_NAME = "report.html.j2"
EXPORT_SUFFIX = "_export"

_SQL_PARAM = re.compile(
    r'<(?:[\w.-]+:)?param\b[^>]*\bname="sql_statement"[^>]*(?<!/)>(.*?)</(?:[\w.-]+:)?param>',
    re.DOTALL,
)
_RULE_ID = re.compile(r'<(?:[\w.-]+:)?rule\b[^>]*?\bid="([^"]*)"')
_NUMERIC_SUFFIX = re.compile(r"_\d+$")

# Highlighted spans inside a block: (text, highlighted).
Segment = Tuple[str, bool]

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SqlQuery:
    file_name: str
    rule_id: str
    sql: str


@dataclass(slots=True)
class Thumbnail:
    name: str
    href: str
    info: ThumbnailInfo
    page_name: Optional[str] = None
    page_href: Optional[str] = None


@dataclass(slots=True)
class DocumentView:
    name: str
    href: str
    segments: List[Segment] = field(default_factory=list)
    error: Optional[str] = None


@dataclass(slots=True)
class Section:
    name: str
    display_index: str
    is_export: bool
    thumbnails: List[Thumbnail] = field(default_factory=list)
    pages: List[Tuple[str, str]] = field(default_factory=list)
    rules: List[DocumentView] = field(default_factory=list)
    bindings: List[DocumentView] = field(default_factory=list)
    scripts: List[DocumentView] = field(default_factory=list)


class HtmlReportGenerator:
    """Render the result tree of one run as a single HTML page.

    Every immediate subdirectory of ``result_dir`` becomes one section. Rule
    documents are shown with their SQL statements highlighted and collected
    into an appendix; binding documents are re-extracted and shown as mapping
    records.
    """

    def __init__(self, result_dir: Path, *, timestamp: Optional[datetime] = None) -> None:
        self.result_dir = Path(result_dir)
        self.generated_at = timestamp or datetime.now()
        self.sql_queries: List[SqlQuery] = []
        self.binding_extractor = BindingExtractor()
        self._env = Environment(
            loader=FileSystemLoader(str(TEMPLATE_DIR)),
            autoescape=select_autoescape(["html", "j2"]),
        )

    @property
    def report_path(self) -> Path:
        return self.result_dir / f"REPORT_{self.generated_at:%Y%m%d_%H%M%S}.html"

    def generate(self) -> Path:
        self.sql_queries = []
        sections = [
            self.build_section(folder, index)
            for index, folder in enumerate(self._sorted_subdirectories(), start=1)
        ]
        template = self._env.get_template(TEMPLATE_NAME)
        html = template.render(
            generated_on=self.generated_at.strftime("%Y/%m/%d"),
            generated_at=self.generated_at.strftime("%Y-%m-%d %H:%M:%S"),
            sections=sections,
            sql_queries=self.sql_queries,
        )
        path = self.report_path
        path.write_text(html, encoding="utf-8")
        logger.info("HTML report generated at %s", path)
        return path

    def _sorted_subdirectories(self) -> List[Path]:
        if not self.result_dir.is_dir():
            return []
        folders = [child for child in self.result_dir.iterdir() if child.is_dir()]
        return sorted(folders, key=lambda folder: folder.name.lower())

    def build_section(self, folder: Path, index: int) -> Section:
        is_export = folder.name.endswith(EXPORT_SUFFIX)
        section = Section(
            name=folder.name,
            display_index=f"E{index}" if is_export else str(index),
            is_export=is_export,
        )

        pngs: Dict[str, Path] = {}
        pages: Dict[str, Path] = {}
        for path in sorted(folder.iterdir(), key=lambda item: item.name.lower()):
            if not path.is_file():
                continue
            lowered = path.name.lower()
            href = _href(folder.name, path.name)
            if lowered.endswith(".png"):
                pngs[path.name] = path
            elif lowered.endswith(".html"):
                pages[extract_base_name(path.name)] = path
                section.pages.append((path.name, href))
            elif lowered.endswith("controller_rules.xml"):
                section.rules.append(self.render_rule_document(path, href))
            elif lowered.endswith("_bindings.xml"):
                section.bindings.append(self.render_binding_document(path, href))
            elif lowered.endswith(".js"):
                section.scripts.append(_plain_view(path, href))

        for name, path in pngs.items():
            thumbnail = Thumbnail(name=name, href=_href(folder.name, name), info=read_thumbnail(path))
            page = find_matching_page(extract_base_name(name), pages)
            if page is not None:
                thumbnail.page_name = page.name
                thumbnail.page_href = _href(folder.name, page.name)
            section.thumbnails.append(thumbnail)
        return section

    def render_rule_document(self, path: Path, href: str) -> DocumentView:
        try:
            content = path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            logger.warning("Could not read %s: %s", path, exc)
            return DocumentView(name=path.name, href=href, error=str(exc))

        view = DocumentView(name=path.name, href=href)
        position = 0
        for match in _SQL_PARAM.finditer(content):
            sql_start, sql_end = match.span(1)
            view.segments.append((content[position:sql_start], False))
            view.segments.append((match.group(1), True))
            position = sql_end
            self.sql_queries.append(
                SqlQuery(
                    file_name=path.name,
                    rule_id=find_rule_id(content, match.start()),
                    sql=match.group(1),
                )
            )
        view.segments.append((content[position:], False))
        return view

    def render_binding_document(self, path: Path, href: str) -> DocumentView:
        view = DocumentView(name=path.name, href=href)
        try:
            record = self.binding_extractor.extract(path)
        except ParseFailure as exc:
            logger.warning("Could not render bindings %s: %s", path, exc)
            view.error = str(exc)
            return view

        for entry in record:
            for line in entry.text.splitlines(keepends=True):
                view.segments.append((line, MARKER_TERM in line))
        return view


def extract_base_name(file_name: str) -> str:
    """Normalize a thumbnail or page name so ``Page_preview_Form_1024.png`` pairs with ``Form.html``."""
    name = file_name.lower()
    if "." in name:
        name = name[: name.rfind(".")]
    name = _NUMERIC_SUFFIX.sub("", name)
    return name.replace("page_preview_", "")


def find_matching_page(base_name: str, pages: Dict[str, Path]) -> Optional[Path]:
    if base_name in pages:
        return pages[base_name]
    for key, page in pages.items():
        if key in base_name or base_name in key:
            return page
    return None


def find_rule_id(content: str, position: int) -> str:
    rule_id = "Unknown"
    for match in _RULE_ID.finditer(content, 0, position):
        rule_id = match.group(1)
    return rule_id


def _href(folder: str, file_name: str) -> str:
    return f"{quote(folder)}/{quote(file_name)}"


def _plain_view(path: Path, href: str) -> DocumentView:
    try:
        content = path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        return DocumentView(name=path.name, href=href, error=str(exc))
    return DocumentView(name=path.name, href=href, segments=[(content, False)])
