from __future__ import annotations

from datetime import datetime
from pathlib import Path

from PIL import Image

from webmaker_analyzer.report.html_report import (
    HtmlReportGenerator,
    extract_base_name,
    find_matching_page,
    find_rule_id,
)

from conftest import BINDINGS_WITH_NAMESPACE, RULES_WITH_QUERY, write_file

STAMP = datetime(2024, 3, 5, 14, 30, 9)


def _png(path: Path, size: tuple[int, int] = (32, 24)) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", size, color="white").save(path)
    return path


def test_report_path_uses_timestamp(result_dir: Path) -> None:
    generator = HtmlReportGenerator(result_dir, timestamp=STAMP)

    assert generator.report_path == result_dir / "REPORT_20240305_143009.html"


def test_generate_writes_sections_in_name_order(result_dir: Path) -> None:
    write_file(result_dir / "beta" / "app.js", "var beta = 1;")
    write_file(result_dir / "Alpha_export" / "Form.html", "<html></html>")
    write_file(result_dir / "REPORT_20240305_143009.LOG", "log")

    path = HtmlReportGenerator(result_dir, timestamp=STAMP).generate()

    html = path.read_text(encoding="utf-8")
    assert path.name == "REPORT_20240305_143009.html"
    assert "WebMaker Analysis Report (2024/03/05)" in html
    assert "E1. Alpha_export" in html
    assert "2. beta" in html
    assert html.index("Alpha_export") < html.index("2. beta")
    assert "var beta = 1;" in html
    assert "No SQL queries found." in html


def test_export_sections_are_flagged(result_dir: Path) -> None:
    (result_dir / "Leave_export").mkdir()
    (result_dir / "Leave").mkdir()
    generator = HtmlReportGenerator(result_dir, timestamp=STAMP)

    export = generator.build_section(result_dir / "Leave_export", 3)
    plain = generator.build_section(result_dir / "Leave", 4)

    assert (export.display_index, export.is_export) == ("E3", True)
    assert (plain.display_index, plain.is_export) == ("4", False)


def test_rule_documents_collect_sql_appendix(result_dir: Path) -> None:
    write_file(result_dir / "Leave" / "Main_Controller_rules.xml", RULES_WITH_QUERY)
    generator = HtmlReportGenerator(result_dir, timestamp=STAMP)

    html = generator.generate().read_text(encoding="utf-8")

    assert len(generator.sql_queries) == 1
    query = generator.sql_queries[0]
    assert query.file_name == "Main_Controller_rules.xml"
    assert query.rule_id == "LoadRequests"
    assert query.sql == "SELECT * FROM REQUEST WHERE ID = 1"
    assert '<span class="sql-highlight">SELECT * FROM REQUEST WHERE ID = 1</span>' in html
    assert "&lt;hy:target" in html
    assert "No SQL queries found." not in html


def test_rule_segments_rebuild_document(result_dir: Path) -> None:
    path = write_file(result_dir / "Leave" / "Main_Controller_rules.xml", RULES_WITH_QUERY)

    view = HtmlReportGenerator(result_dir).render_rule_document(path, "Leave/Main_Controller_rules.xml")

    assert "".join(text for text, _ in view.segments) == RULES_WITH_QUERY
    assert [text for text, highlighted in view.segments if highlighted] == ["SELECT * FROM REQUEST WHERE ID = 1"]


def test_self_closing_sql_param_is_not_highlighted(result_dir: Path) -> None:
    body = """<hy:rules xmlns:hy="http://www.hyfinity.com/xengine">
  <rule id="Empty">
    <hy:target action="Query">
      <hy:params>
        <hy:param name="sql_statement" type="java.lang.String"/>
        <hy:param name="datasource">jdbc/app</hy:param>
      </hy:params>
    </hy:target>
  </rule>
  <rule id="Filled">
    <hy:target action="Query">
      <hy:params>
        <hy:param name="sql_statement">SELECT 2 FROM DUAL</hy:param>
      </hy:params>
    </hy:target>
  </rule>
</hy:rules>
"""
    path = write_file(result_dir / "Leave" / "Main_Controller_rules.xml", body)
    generator = HtmlReportGenerator(result_dir)

    view = generator.render_rule_document(path, "Leave/Main_Controller_rules.xml")

    assert [text for text, highlighted in view.segments if highlighted] == ["SELECT 2 FROM DUAL"]
    assert [(query.rule_id, query.sql) for query in generator.sql_queries] == [("Filled", "SELECT 2 FROM DUAL")]


def test_binding_documents_highlight_marker_lines(result_dir: Path) -> None:
    path = write_file(result_dir / "Leave" / "LeaveForm_bindings.xml", BINDINGS_WITH_NAMESPACE)

    view = HtmlReportGenerator(result_dir).render_binding_document(path, "Leave/LeaveForm_bindings.xml")

    highlighted = [text for text, flag in view.segments if flag]
    assert highlighted == ["  Value XPath: /Data/ProcessVariables/firstName\n"]
    assert view.segments[0] == ("Element: FirstName\n", False)
    assert view.error is None


def test_broken_binding_document_reports_error(result_dir: Path) -> None:
    path = write_file(result_dir / "Leave" / "Broken_bindings.xml", "<bindings><element>")

    view = HtmlReportGenerator(result_dir).render_binding_document(path, "Leave/Broken_bindings.xml")

    assert view.error
    assert view.segments == []


def test_thumbnails_link_to_matching_pages(result_dir: Path) -> None:
    write_file(result_dir / "Leave" / "LeaveForm.html", "<html></html>")
    _png(result_dir / "Leave" / "Page_preview_LeaveForm_1024.png", (40, 30))
    _png(result_dir / "Leave" / "Orphan_1024.png")

    section = HtmlReportGenerator(result_dir).build_section(result_dir / "Leave", 1)

    by_name = {thumb.name: thumb for thumb in section.thumbnails}
    matched = by_name["Page_preview_LeaveForm_1024.png"]
    assert matched.page_name == "LeaveForm.html"
    assert matched.page_href == "Leave/LeaveForm.html"
    assert matched.info.label == "40×30"
    assert by_name["Orphan_1024.png"].page_name is None


def test_generated_report_shows_thumbnail_dimensions(result_dir: Path) -> None:
    write_file(result_dir / "Leave Request" / "LeaveForm.html", "<html></html>")
    _png(result_dir / "Leave Request" / "LeaveForm_1024.png", (40, 30))

    html = HtmlReportGenerator(result_dir, timestamp=STAMP).generate().read_text(encoding="utf-8")

    assert "40×30" in html
    assert 'src="Leave%20Request/LeaveForm_1024.png"' in html


def test_extract_base_name() -> None:
    assert extract_base_name("Page_preview_LeaveForm_1024.png") == "leaveform"
    assert extract_base_name("LeaveForm.html") == "leaveform"
    assert extract_base_name("Summary_2.HTML") == "summary"
    assert extract_base_name("noextension") == "noextension"


def test_find_matching_page_prefers_exact_match() -> None:
    pages = {"leaveformdetails": Path("LeaveFormDetails.html"), "leaveform": Path("LeaveForm.html")}

    assert find_matching_page("leaveform", pages) == Path("LeaveForm.html")
    assert find_matching_page("leaveformdetailsextra", pages) == Path("LeaveFormDetails.html")
    assert find_matching_page("unrelated", pages) is None


def test_find_rule_id_uses_nearest_preceding_rule() -> None:
    content = '<rule id="First"/><x/><rule id="Second"><param/></rule>'

    assert find_rule_id(content, content.index("<param")) == "Second"
    assert find_rule_id(content, content.index("<x/>")) == "First"
    assert find_rule_id(content, 0) == "Unknown"


def test_empty_result_directory_renders_empty_report(tmp_path: Path) -> None:
    target = tmp_path / "empty"
    target.mkdir()

    html = HtmlReportGenerator(target, timestamp=STAMP).generate().read_text(encoding="utf-8")

    assert "No SQL queries found." in html
