from .formatter import RenderedReports, ReportFormatter, format_money, format_reports

__all__ = ["RenderedReports", "ReportFormatter", "format_money", "format_reports"]
