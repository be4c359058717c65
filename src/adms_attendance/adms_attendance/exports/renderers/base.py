from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping, Sequence


class ExportRenderer(ABC):
    """Strategy Pattern: turn tabular rows into the bytes of one file format."""

    extension: str = ""
    mimetype: str = "application/octet-stream"

    @abstractmethod
    def render(self, rows: Sequence[Mapping[str, Any]], columns: Sequence[str], *, title: str) -> bytes:
        raise NotImplementedError


def cell_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)
