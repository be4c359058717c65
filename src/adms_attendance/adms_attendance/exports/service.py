from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..attendance.model import AttendanceEvent
from ..core.enums import ExportFormat
from ..reports.model import SummaryRow
from .factory import ExportRendererFactory, parse_format

RECORD_COLUMNS = (
    "No",
    "Tanggal",
    "Waktu",
    "User ID",
    "NIP",
    "Nama",
    "Jabatan",
    "Tipe",
    "Verifikasi",
    "Device",
)

SUMMARY_COLUMNS = (
    "No",
    "User ID",
    "NIP",
    "Nama",
    "Jabatan",
    "Masuk",
    "Pulang",
    "Hadir",
    "Hari Kerja",
    "Terlambat",
    "Persentase (%)",
    "Check-in Terakhir",
    "Check-out Terakhir",
)


@dataclass(frozen=True)
class ExportFile:
    content: bytes
    filename: str
    mimetype: str


def record_rows(events: Iterable[AttendanceEvent]) -> list[dict]:
    """Ledger events as export rows, in the order given."""

    return [
        {
            "No": i,
            "Tanggal": e.tanggal_absensi.isoformat(),
            "Waktu": e.waktu_absensi.strftime("%H:%M:%S"),
            "User ID": e.user_id,
            "NIP": e.nip,
            "Nama": e.nama,
            "Jabatan": e.jabatan.value,
            "Tipe": e.tipe_absensi.value,
            "Verifikasi": e.verifikasi,
            "Device": e.device_id,
        }
        for i, e in enumerate(events, start=1)
    ]


def summary_rows(summary: Iterable[SummaryRow]) -> list[dict]:
    return [
        {
            "No": r.no,
            "User ID": r.user_id,
            "NIP": r.nip,
            "Nama": r.nama,
            "Jabatan": r.jabatan.value,
            "Masuk": r.total_masuk,
            "Pulang": r.total_pulang,
            "Hadir": r.present,
            "Hari Kerja": r.working_days,
            "Terlambat": r.late,
            "Persentase (%)": f"{r.percentage:.2f}",
            "Check-in Terakhir": r.last_check_in.strftime("%Y-%m-%d %H:%M:%S") if r.last_check_in else "",
            "Check-out Terakhir": r.last_check_out.strftime("%Y-%m-%d %H:%M:%S") if r.last_check_out else "",
        }
        for r in summary
    ]


class ExportService:
    def __init__(self, factory: Optional[ExportRendererFactory] = None):
        self._factory = factory or ExportRendererFactory()

    def render(
        self,
        rows: Sequence[Mapping[str, Any]],
        fmt: Any,
        *,
        title: str,
        basename: str,
        columns: Optional[Sequence[str]] = None,
    ) -> ExportFile:
        export_format = fmt if isinstance(fmt, ExportFormat) else parse_format(fmt)
        renderer = self._factory.for_format(export_format)
        cols = list(columns) if columns is not None else (list(rows[0].keys()) if rows else [])
        content = renderer.render(rows, cols, title=title)
        return ExportFile(
            content=content,
            filename=f"{basename}.{renderer.extension}",
            mimetype=renderer.mimetype,
        )
