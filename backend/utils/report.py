"""
PDF export of generated designs and their breakdown, using reportlab.
"""

import io
import re
from typing import List, Optional
from dataclasses import dataclass
from datetime import date
from xml.sax.saxutils import escape

from PIL import Image as PILImage
from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import (
    SimpleDocTemplate,
    Paragraph,
    Spacer,
    Image as RImage,
    Table,
    TableStyle,
    PageBreak,
)


PAGE_MARGIN = 0.75 * inch
MAX_IMAGE_HEIGHT = 5.5 * inch

TABLE_SEPARATOR = re.compile(r"^\|?\s*:?-{2,}:?\s*(\|\s*:?-{2,}:?\s*)*\|?\s*$")
BOLD = re.compile(r"\*\*(.+?)\*\*")
NUMBERED = re.compile(r"^(\d+)[.)]\s+(.*)$")


@dataclass
class ReportDesign:
    """One design image for the report."""
    image_bytes: bytes
    caption: str = ""


def _styles():
    styles = getSampleStyleSheet()
    styles.add(ParagraphStyle(
        name="Caption",
        parent=styles["BodyText"],
        fontSize=8,
        leading=10,
        textColor=colors.HexColor("#555555"),
    ))
    styles.add(ParagraphStyle(
        name="TableCell",
        parent=styles["BodyText"],
        fontSize=8,
        leading=10,
    ))
    styles.add(ParagraphStyle(
        name="TableHeader",
        parent=styles["TableCell"],
        fontName="Helvetica-Bold",
        textColor=colors.white,
    ))
    return styles


def _inline(text: str) -> str:
    """Escape text for a Paragraph and keep **bold** spans."""
    return BOLD.sub(r"<b>\1</b>", escape(text.strip()))


def _split_row(line: str) -> List[str]:
    return [cell.strip() for cell in line.strip().strip("|").split("|")]


def _table(rows: List[List[str]], styles, width: float) -> Table:
    columns = max(len(row) for row in rows)
    data = [
        [
            Paragraph(_inline(cell), styles["TableHeader" if i == 0 else "TableCell"])
            for cell in row + [""] * (columns - len(row))
        ]
        for i, row in enumerate(rows)
    ]
    table = Table(data, colWidths=[width / columns] * columns, repeatRows=1)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#2F5D3A")),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.HexColor("#AAAAAA")),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, colors.HexColor("#F3F6F1")]),
    ]))
    return table


def markdown_to_flowables(markdown: str, styles, width: float) -> list:
    """
    Render the breakdown markdown subset the vision model produces.

    Handles headings, pipe tables, bullet and numbered lists, and plain
    paragraphs. Anything else is treated as body text.
    """
    flowables = []
    table_rows: List[List[str]] = []

    def flush_table():
        if table_rows:
            flowables.append(_table(table_rows, styles, width))
            flowables.append(Spacer(1, 8))
            table_rows.clear()

    for raw in markdown.splitlines():
        line = raw.rstrip()
        stripped = line.strip()

        if stripped.startswith("|"):
            if not TABLE_SEPARATOR.match(stripped):
                table_rows.append(_split_row(stripped))
            continue
        flush_table()

        if not stripped:
            continue
        if stripped.startswith("#"):
            level = len(stripped) - len(stripped.lstrip("#"))
            style = styles["Heading%d" % min(max(level, 1) + 1, 4)]
            flowables.append(Paragraph(_inline(stripped.lstrip("#")), style))
        elif stripped.startswith(("- ", "* ")):
            flowables.append(Paragraph(_inline(stripped[2:]), styles["BodyText"], bulletText="•"))
        elif NUMBERED.match(stripped):
            number, text = NUMBERED.match(stripped).groups()
            flowables.append(Paragraph(_inline(text), styles["BodyText"], bulletText=f"{number}."))
        else:
            flowables.append(Paragraph(_inline(stripped), styles["BodyText"]))

    flush_table()
    return flowables


def _design_image(image_bytes: bytes, max_width: float) -> RImage:
    """Scale an image to fit the frame width and MAX_IMAGE_HEIGHT."""
    with PILImage.open(io.BytesIO(image_bytes)) as img:
        width, height = img.size
    scale = min(max_width / width, MAX_IMAGE_HEIGHT / height)
    return RImage(io.BytesIO(image_bytes), width=width * scale, height=height * scale)


def build_report_pdf(
    title: str,
    designs: List[ReportDesign],
    breakdown_markdown: Optional[str] = None,
    address: Optional[str] = None,
) -> bytes:
    """
    Assemble the downloadable design report.

    Args:
        title: Report title
        designs: Images with captions, in display order
        breakdown_markdown: Optional breakdown text
        address: Optional property address

    Returns:
        PDF file bytes
    """
    if not designs:
        raise ValueError("At least one design is required")

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=letter,
        leftMargin=PAGE_MARGIN,
        rightMargin=PAGE_MARGIN,
        topMargin=PAGE_MARGIN,
        bottomMargin=PAGE_MARGIN,
        title=title,
    )
    styles = _styles()
    frame_width = doc.width

    story = [Paragraph(escape(title), styles["Title"])]
    if address:
        story.append(Paragraph(escape(address), styles["Heading3"]))
    story.append(Paragraph(date.today().strftime("%B %d, %Y"), styles["Caption"]))
    story.append(Spacer(1, 16))

    for index, design in enumerate(designs, start=1):
        story.append(Paragraph(f"Concept {index}", styles["Heading2"]))
        story.append(_design_image(design.image_bytes, frame_width))
        if design.caption:
            story.append(Spacer(1, 4))
            story.append(Paragraph(_inline(design.caption), styles["Caption"]))
        story.append(Spacer(1, 16))

    if breakdown_markdown and breakdown_markdown.strip():
        story.append(PageBreak())
        story.append(Paragraph("Cost &amp; Plant Breakdown", styles["Heading1"]))
        story.extend(markdown_to_flowables(breakdown_markdown, styles, frame_width))

    doc.build(story)
    return buffer.getvalue()
