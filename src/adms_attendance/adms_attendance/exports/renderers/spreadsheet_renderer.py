from __future__ import annotations

import io
import re
from typing import Any, Mapping, Sequence

import pandas as pd

from .base import ExportRenderer

_SHEET_FORBIDDEN = re.compile(r"[\[\]:*?/\\]")


def sheet_name(title: str) -> str:
    # Excel: max 31 chars, no []:*?/\
    name = _SHEET_FORBIDDEN.sub(" ", title or "").strip()
    return (name or "Sheet1")[:31]


class SpreadsheetRenderer(ExportRenderer):
    extension = "xlsx"
    mimetype = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

    def render(self, rows: Sequence[Mapping[str, Any]], columns: Sequence[str], *, title: str) -> bytes:
        df = pd.DataFrame([[row.get(c) for c in columns] for row in rows], columns=list(columns))

        output = io.BytesIO()
        with pd.ExcelWriter(output, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name=sheet_name(title))
        return output.getvalue()
