"""
Report Exporter
===============

Generate downloadable conflict reports: Markdown, DOCX and PDF.
"""

from typing import List
from io import BytesIO

from .schemas import Conflict, ExportFormat, Report

MEDIA_TYPES = {
    ExportFormat.MARKDOWN: "text/markdown",
    ExportFormat.DOCX: "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ExportFormat.PDF: "application/pdf",
}


def report_filename(report: Report, fmt: ExportFormat = ExportFormat.MARKDOWN) -> str:
    return f"conflict-report-{report.id}.{fmt.value}"


def _format_timestamp(report: Report) -> str:
    return report.generated_at.strftime("%Y-%m-%d %H:%M:%S")


def _summary_lines(report: Report) -> List[str]:
    return [
        f"Documents Analyzed: {', '.join(report.documents)}",
        f"Total Conflicts: {report.total_conflicts}",
        f"High Priority: {report.high_severity}",
        f"Medium Priority: {report.medium_severity}",
        f"Low Priority: {report.low_severity}",
    ]


def _conflict_header(index: int, conflict: Conflict) -> str:
    return f"Conflict {index}: {conflict.description}"


def _conflict_facts(conflict: Conflict) -> List[str]:
    return [
        f"Type: {conflict.type.value}",
        f"Severity: {conflict.severity.value}",
        f"Affected Documents: {', '.join(conflict.documents)}",
    ]


def render_report_markdown(report: Report) -> str:
    """Render a report in the Markdown download layout"""
    lines = [
        "# Document Conflict Analysis Report",
        f"Generated on: {_format_timestamp(report)}",
        "",
        "## Summary",
    ]
    lines.extend(f"- {line}" for line in _summary_lines(report))
    lines.append("")
    lines.append("## Detailed Conflicts")

    if not report.conflicts:
        lines.append("")
        lines.append("No conflicts detected.")

    for idx, conflict in enumerate(report.conflicts, start=1):
        lines.append("")
        lines.append(f"### {_conflict_header(idx, conflict)}")
        lines.extend(f"- {fact}" for fact in _conflict_facts(conflict))
        lines.append("")
        lines.append("#### Conflicting Text:")
        for item in conflict.conflicting_text:
            lines.append(f"- **{item.document}**: \"{item.text}\"")
            lines.append(f"  Context: {item.context}")
        lines.append("")
        lines.append("#### Suggestions:")
        lines.extend(f"- {suggestion}" for suggestion in conflict.suggestions)

    return "\n".join(lines) + "\n"


def build_report_docx(report: Report) -> bytes:
    try:
        from docx import Document
    except ImportError as exc:
        raise RuntimeError("python-docx is required for DOCX export") from exc

    doc = Document()
    doc.add_heading("Document Conflict Analysis Report", level=0)
    doc.add_paragraph(f"Generated on: {_format_timestamp(report)} | Report: {report.id}")

    doc.add_heading("Summary", level=1)
    for line in _summary_lines(report):
        doc.add_paragraph(line, style="List Bullet")

    doc.add_heading("Detailed Conflicts", level=1)
    if not report.conflicts:
        doc.add_paragraph("No conflicts detected.")

    for idx, conflict in enumerate(report.conflicts, start=1):
        doc.add_heading(_conflict_header(idx, conflict), level=2)
        for fact in _conflict_facts(conflict):
            doc.add_paragraph(fact)

        doc.add_paragraph("Conflicting Text:")
        for item in conflict.conflicting_text:
            para = doc.add_paragraph(style="List Bullet")
            para.add_run(f"{item.document}: ").bold = True
            para.add_run(f"\"{item.text}\"")
            doc.add_paragraph(f"Context: {item.context}")

        doc.add_paragraph("Suggestions:")
        for suggestion in conflict.suggestions:
            doc.add_paragraph(suggestion, style="List Bullet")

    buf = BytesIO()
    doc.save(buf)
    buf.seek(0)
    return buf.read()


def build_report_pdf(report: Report) -> bytes:
    try:
        from reportlab.pdfgen import canvas
        from reportlab.lib.pagesizes import A4
        from reportlab.lib.utils import simpleSplit
    except ImportError as exc:
        raise RuntimeError("reportlab is required for PDF export") from exc

    font = "Helvetica"
    buf = BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)

    width, height = A4
    margin = 40
    y = height - 50

    def draw_text(text: str, size: int = 11):
        nonlocal y
        for line in simpleSplit(text, font, size, width - 2 * margin) or [""]:
            if y < 80:
                c.showPage()
                y = height - 50
            c.setFont(font, size)
            c.drawString(margin, y, line)
            y -= size + 6

    draw_text("Document Conflict Analysis Report", 16)
    draw_text(f"Generated on: {_format_timestamp(report)} | Report: {report.id}", 10)

    draw_text("Summary", 14)
    for line in _summary_lines(report):
        draw_text(f"- {line}", 11)

    draw_text("Detailed Conflicts", 14)
    if not report.conflicts:
        draw_text("No conflicts detected.", 11)

    for idx, conflict in enumerate(report.conflicts, start=1):
        draw_text(_conflict_header(idx, conflict), 12)
        for fact in _conflict_facts(conflict):
            draw_text(fact, 10)
        for item in conflict.conflicting_text:
            draw_text(f"{item.document}: \"{item.text}\"", 10)
            draw_text(f"  Context: {item.context}", 9)
        for suggestion in conflict.suggestions:
            draw_text(f"- {suggestion}", 10)

    c.save()
    buf.seek(0)
    return buf.read()


def export_report(report: Report, fmt: ExportFormat) -> bytes:
    """Render a report in the requested format"""
    if fmt == ExportFormat.DOCX:
        return build_report_docx(report)
    if fmt == ExportFormat.PDF:
        return build_report_pdf(report)
    return render_report_markdown(report).encode("utf-8")
