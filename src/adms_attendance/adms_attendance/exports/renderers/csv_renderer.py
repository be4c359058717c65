from __future__ import annotations

import csv
import io
from typing import Any, Mapping, Sequence

from .base import ExportRenderer, cell_text


class CsvRenderer(ExportRenderer):
    """UTF-8 with BOM so spreadsheet tools detect the encoding."""

    extension = "csv"
    mimetype = "text/csv"

    def render(self, rows: Sequence[Mapping[str, Any]], columns: Sequence[str], *, title: str) -> bytes:
        out = io.StringIO(newline="")
        writer = csv.DictWriter(out, fieldnames=list(columns), extrasaction="ignore", lineterminator="\r\n")
        writer.writeheader()
        for row in rows:
            writer.writerow({c: cell_text(row.get(c)) for c in columns})
        return out.getvalue().encode("utf-8-sig")
