"""PDF Renderer - ReportTable → PDF bytes via reportlab platypus.

Design Decisions:
    - Landscape letter: summary tables have up to 9 columns
    - Header row repeats on every page (repeatRows=1)
"""

import io

from reportlab.lib import colors
from reportlab.lib.pagesizes import letter, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer

from sis.reports.table import ReportTable


def render_pdf(table: ReportTable) -> bytes:
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer, pagesize=landscape(letter),
        leftMargin=0.5 * inch, rightMargin=0.5 * inch,
        topMargin=0.5 * inch, bottomMargin=0.5 * inch,
        title=table.title,
    )
    styles = getSampleStyleSheet()
    story = [
        Paragraph(table.title, styles["Title"]),
        Paragraph(table.subtitle, styles["Heading3"]),
        Spacer(1, 0.2 * inch),
    ]

    data = [table.headers] + [[str(c) for c in row] for row in table.rows]
    if not table.rows:
        data.append(["No records"] + [""] * (len(table.headers) - 1))
    grid = Table(data, repeatRows=1)
    grid.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#1f3b5c")),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.whitesmoke),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 8),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#f2f2f2")]),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
    ]))
    story.append(grid)

    if table.summary_lines:
        story.append(Spacer(1, 0.2 * inch))
        summary = Table([[label, value] for label, value in table.summary_lines])
        summary.setStyle(TableStyle([
            ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), 9),
        ]))
        story.append(summary)

    doc.build(story)
    return buffer.getvalue()
