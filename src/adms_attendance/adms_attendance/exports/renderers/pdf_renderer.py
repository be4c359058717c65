from __future__ import annotations

import io
from typing import Any, Mapping, Sequence

from reportlab.lib.pagesizes import A4, landscape
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from .base import ExportRenderer, cell_text

FONT = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
FONT_SIZE = 8
ROW_HEIGHT = 13
MARGIN = 30


def _fit(text: str, width: float, font: str) -> str:
    if stringWidth(text, font, FONT_SIZE) <= width:
        return text
    while text and stringWidth(text + "...", font, FONT_SIZE) > width:
        text = text[:-1]
    return text + "..."


class PdfRenderer(ExportRenderer):
    """Landscape A4 table, header repeated on every page.

    ``invariant=1`` keeps the output byte-identical for identical rows.
    """

    extension = "pdf"
    mimetype = "application/pdf"

    def render(self, rows: Sequence[Mapping[str, Any]], columns: Sequence[str], *, title: str) -> bytes:
        buf = io.BytesIO()
        page_size = landscape(A4)
        width, height = page_size
        c = canvas.Canvas(buf, pagesize=page_size, invariant=1)
        c.setTitle(title)

        col_width = (width - 2 * MARGIN) / max(len(columns), 1)
        page_no = 1

        def draw_header() -> float:
            y = height - MARGIN
            c.setFont(FONT_BOLD, 12)
            c.drawString(MARGIN, y, title)
            c.setFont(FONT, FONT_SIZE)
            c.drawRightString(width - MARGIN, y, f"Halaman {page_no}")
            y -= 22
            c.setFont(FONT_BOLD, FONT_SIZE)
            for i, column in enumerate(columns):
                c.drawString(MARGIN + i * col_width + 2, y, _fit(column, col_width - 4, FONT_BOLD))
            y -= 4
            c.line(MARGIN, y, width - MARGIN, y)
            c.setFont(FONT, FONT_SIZE)
            return y - ROW_HEIGHT + 2

        y = draw_header()
        if not rows:
            c.drawString(MARGIN, y, "Tidak ada data")

        for row in rows:
            if y < MARGIN:
                c.showPage()
                page_no += 1
                y = draw_header()
            for i, column in enumerate(columns):
                text = _fit(cell_text(row.get(column)), col_width - 4, FONT)
                c.drawString(MARGIN + i * col_width + 2, y, text)
            y -= ROW_HEIGHT

        c.showPage()
        c.save()
        return buf.getvalue()
