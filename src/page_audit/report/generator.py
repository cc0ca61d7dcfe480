"""Report rendering for result records and flow results."""

import csv
import html
import io
import logging
from pathlib import Path
from typing import TextIO

from ..core.errors import UsageError
from ..core.types import AuditResult, FlowResult, ResultRecord, ScoreDisplayMode

logger = logging.getLogger(__name__)

OUTPUT_MODES = ("json", "html", "csv")

HTML_STYLE = """
        body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
               background: #f5f5f5; color: #333; margin: 0; padding: 24px; }
        .card { background: white; border-radius: 8px; box-shadow: 0 2px 4px rgba(0,0,0,0.1);
                padding: 16px 24px; margin-bottom: 24px; }
        .categories { display: flex; gap: 24px; flex-wrap: wrap; }
        .category { text-align: center; min-width: 120px; }
        .gauge { font-size: 2em; font-weight: bold; }
        .score-pass { color: #0c6; }
        .score-average { color: #fa3; }
        .score-fail { color: #f33; }
        .score-na { color: #999; }
        table { border-collapse: collapse; width: 100%; }
        th, td { text-align: left; padding: 6px 8px; border-bottom: 1px solid #eee; }
        .runtime-error { background: #fee; border-left: 4px solid #f33; padding: 8px 12px; }
        .warning { background: #ffe; border-left: 4px solid #fa3; padding: 8px 12px; }
"""


def escape_html(text: str | None) -> str:
    """Escape HTML special characters.

    Args:
        text: Text to escape (can be None)

    Returns:
        HTML-escaped text, or empty string if None
    """
    if text is None:
        return ""
    return html.escape(str(text), quote=True)


def _score_class(score: float | None) -> str:
    if score is None:
        return "score-na"
    if score >= 0.9:
        return "score-pass"
    if score >= 0.5:
        return "score-average"
    return "score-fail"


def _format_score(score: float | None) -> str:
    return "-" if score is None else str(round(score * 100))


class ReportGenerator:
    """Renders a ResultRecord or FlowResult as json, html or csv."""

    def generate(self, result: ResultRecord | FlowResult, output_mode: str = "html") -> str:
        """Render a report.

        Args:
            result: A single result record or a flow result
            output_mode: One of json, html, csv

        Returns:
            The rendered report

        Raises:
            UsageError: For unknown formats, or csv requested for a flow
        """
        if output_mode not in OUTPUT_MODES:
            raise UsageError(f"Unknown output format: {output_mode}")

        if output_mode == "json":
            return result.model_dump_json(indent=2)

        if isinstance(result, FlowResult):
            if output_mode == "csv":
                raise UsageError("CSV output is not supported for flow results")
            return self._flow_html(result)

        if output_mode == "csv":
            return self._csv(result)
        return self._html(result)

    def _csv(self, lhr: ResultRecord) -> str:
        output = io.StringIO()
        writer = csv.writer(output)

        writer.writerow(["requested_url", "final_url", "fetch_time", "gather_mode"])
        writer.writerow([lhr.requested_url or "", lhr.final_url or "", lhr.fetch_time, lhr.gather_mode.value])
        writer.writerow([])

        writer.writerow(["category", "score"])
        for category in lhr.categories.values():
            writer.writerow([category.title, "" if category.score is None else category.score])
        writer.writerow([])

        writer.writerow(["category", "audit_id", "title", "type", "score", "display_value"])
        listed = set()
        for category in lhr.categories.values():
            for ref in category.audit_refs:
                audit = lhr.audits.get(ref.id)
                if audit is None:
                    continue
                listed.add(audit.id)
                writer.writerow(self._csv_audit_row(category.title, audit))
        for audit in lhr.audits.values():
            if audit.id not in listed:
                writer.writerow(self._csv_audit_row("", audit))

        return output.getvalue()

    @staticmethod
    def _csv_audit_row(category: str, audit: AuditResult) -> list[str]:
        return [
            category,
            audit.id,
            audit.title,
            audit.score_display_mode.value,
            "" if audit.score is None else str(audit.score),
            audit.display_value or "",
        ]

    def _html(self, lhr: ResultRecord) -> str:
        f = io.StringIO()
        title = f"Page audit report: {lhr.final_url or lhr.requested_url or ''}"
        self._write_html_header(f, title)
        self._write_html_result(f, lhr)
        f.write("</body>\n</html>\n")
        return f.getvalue()

    def _flow_html(self, flow: FlowResult) -> str:
        f = io.StringIO()
        self._write_html_header(f, flow.name)
        f.write(f"<h1>{escape_html(flow.name)}</h1>\n<ol>\n")
        for i, step in enumerate(flow.steps, 1):
            f.write(f'<li><a href="#step-{i}">{escape_html(step.name)}</a></li>\n')
        f.write("</ol>\n")
        for i, step in enumerate(flow.steps, 1):
            f.write(f'<section id="step-{i}">\n<h2>{escape_html(step.name)}</h2>\n')
            self._write_html_result(f, step.lhr)
            f.write("</section>\n")
        f.write("</body>\n</html>\n")
        return f.getvalue()

    @staticmethod
    def _write_html_header(f: TextIO, title: str) -> None:
        f.write(
            "<!DOCTYPE html>\n<html lang=\"en\">\n<head>\n"
            "    <meta charset=\"UTF-8\">\n"
            "    <meta name=\"viewport\" content=\"width=device-width, initial-scale=1.0\">\n"
            f"    <title>{escape_html(title)}</title>\n"
            f"    <style>{HTML_STYLE}    </style>\n</head>\n<body>\n"
        )

    def _write_html_result(self, f: TextIO, lhr: ResultRecord) -> None:
        f.write('<div class="card">\n')
        f.write(f"<p><strong>URL:</strong> {escape_html(lhr.final_url)}</p>\n")
        f.write(f"<p><strong>Mode:</strong> {escape_html(lhr.gather_mode.value)}</p>\n")
        f.write(f"<p><strong>Fetched:</strong> {escape_html(lhr.fetch_time)}</p>\n")
        if lhr.runtime_error:
            f.write(
                f'<div class="runtime-error">{escape_html(lhr.runtime_error.code)}: '
                f"{escape_html(lhr.runtime_error.message)}</div>\n"
            )
        for warning in lhr.run_warnings:
            f.write(f'<div class="warning">{escape_html(warning)}</div>\n')
        f.write("</div>\n")

        f.write('<div class="card categories">\n')
        for category in lhr.categories.values():
            f.write(
                f'<div class="category"><div class="gauge {_score_class(category.score)}">'
                f"{_format_score(category.score)}</div>"
                f"<div>{escape_html(category.title)}</div></div>\n"
            )
        f.write("</div>\n")

        f.write('<div class="card">\n<table>\n')
        f.write("<tr><th>Audit</th><th>Score</th><th>Value</th><th>Notes</th></tr>\n")
        for audit in lhr.audits.values():
            if audit.score_display_mode == ScoreDisplayMode.NOT_APPLICABLE:
                notes = "Not applicable"
            else:
                notes = audit.error_message or audit.explanation or ""
            f.write(
                f"<tr><td>{escape_html(audit.title)}</td>"
                f'<td class="{_score_class(audit.score)}">{_format_score(audit.score)}</td>'
                f"<td>{escape_html(audit.display_value)}</td>"
                f"<td>{escape_html(notes)}</td></tr>\n"
            )
        f.write("</table>\n</div>\n")


def generate_report(result: ResultRecord | FlowResult, output_mode: str = "html") -> str:
    """Render ``result`` in ``output_mode`` (json, html or csv)."""
    return ReportGenerator().generate(result, output_mode)


def write_report(report: str, output_path: Path) -> Path:
    """Write a rendered report to disk, creating parent directories."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(report, encoding="utf-8")
    logger.info(f"Report saved to {output_path}")
    return output_path
