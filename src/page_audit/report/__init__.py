"""Report generation."""

from .generator import ReportGenerator, generate_report, write_report

__all__ = ["ReportGenerator", "generate_report", "write_report"]
