from .html_report import HtmlReportGenerator

__all__ = ["HtmlReportGenerator"]
