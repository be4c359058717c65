from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..common.validators import require_non_empty
from ..core.enums import ExportFormat
from ..core.exceptions import ValidationError
from .renderers.base import ExportRenderer
from .renderers.csv_renderer import CsvRenderer
from .renderers.pdf_renderer import PdfRenderer
from .renderers.spreadsheet_renderer import SpreadsheetRenderer


def parse_format(value: Any) -> ExportFormat:
    text = require_non_empty(value, "format").lower()
    if text == "xlsx":
        text = ExportFormat.EXCEL.value
    try:
        return ExportFormat(text)
    except ValueError:
        raise ValidationError("Invalid format value (excel, pdf, csv)")


@dataclass
class ExportRendererFactory:
    """Factory Pattern: one renderer per export format."""

    def for_format(self, fmt: ExportFormat) -> ExportRenderer:
        if fmt == ExportFormat.CSV:
            return CsvRenderer()
        if fmt == ExportFormat.PDF:
            return PdfRenderer()
        if fmt == ExportFormat.EXCEL:
            return SpreadsheetRenderer()
        raise ValidationError(f"Unsupported export format: {fmt}")
