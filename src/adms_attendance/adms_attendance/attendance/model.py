from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Generic, Optional, Sequence, TypeVar

from ..core.enums import DeletedFilter, Jabatan, TipeAbsensi

T = TypeVar("T")


@dataclass(frozen=True)
class NewAttendanceEvent:
    """Attendance fact accepted by the ingestion pipeline, not yet stored."""

    cloud_id: str
    device_id: str
    user_id: str
    nip: str
    nama: str
    jabatan: Jabatan
    tanggal_absensi: date
    waktu_absensi: time
    tipe_absensi: TipeAbsensi
    verifikasi: str
    tanggal_upload: datetime

    @property
    def business_key(self) -> tuple[str, date, TipeAbsensi]:
        return (self.user_id, self.tanggal_absensi, self.tipe_absensi)


@dataclass(frozen=True)
class AttendanceEvent:
    """Entitas domain: satu baris ledger absensi (never mutated in place)."""

    id: int
    cloud_id: str
    device_id: str
    user_id: str
    nip: str
    nama: str
    jabatan: Jabatan
    tanggal_absensi: date
    waktu_absensi: time
    tipe_absensi: TipeAbsensi
    verifikasi: str
    tanggal_upload: datetime
    is_deleted: bool = False
    deleted_at: Optional[datetime] = None
    deleted_by: Optional[str] = None

    @property
    def occurred_at(self) -> datetime:
        return datetime.combine(self.tanggal_absensi, self.waktu_absensi)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "cloud_id": self.cloud_id,
            "device_id": self.device_id,
            "user_id": self.user_id,
            "nip": self.nip,
            "nama": self.nama,
            "jabatan": self.jabatan.value,
            "tanggal_absensi": self.tanggal_absensi.isoformat(),
            "waktu_absensi": self.waktu_absensi.strftime("%H:%M:%S"),
            "tipe_absensi": self.tipe_absensi.value,
            "verifikasi": self.verifikasi,
            "tanggal_upload": self.tanggal_upload.isoformat(sep=" ", timespec="seconds"),
            "is_deleted": self.is_deleted,
            "deleted_at": self.deleted_at.isoformat(sep=" ", timespec="seconds") if self.deleted_at else None,
            "deleted_by": self.deleted_by,
        }


@dataclass(frozen=True)
class AttendanceFilter:
    user_id: Optional[str] = None
    device_id: Optional[str] = None
    jabatan: Optional[Jabatan] = None
    tipe_absensi: Optional[TipeAbsensi] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    deleted: DeletedFilter = DeletedFilter.LIVE


@dataclass(frozen=True)
class Page(Generic[T]):
    items: Sequence[T]
    total: int
    page: int
    per_page: int

    @property
    def total_pages(self) -> int:
        if self.total == 0:
            return 0
        return (self.total + self.per_page - 1) // self.per_page

    def pagination(self) -> dict:
        return {
            "current_page": self.page,
            "total_pages": self.total_pages,
            "total_records": self.total,
            "per_page": self.per_page,
        }


# Kolom yang boleh dipakai untuk ORDER BY (whitelist, never user text in SQL).
ORDERABLE_COLUMNS = ("tanggal_absensi", "waktu_absensi", "tanggal_upload", "nama", "id")


@dataclass(frozen=True)
class Ordering:
    column: str = "tanggal_absensi"
    descending: bool = True
    tie_breakers: tuple[str, ...] = field(default=("waktu_absensi", "id"))
