from __future__ import annotations

from enum import Enum


class Jabatan(str, Enum):
    """Kategori subjek absensi (dosen / karyawan)."""

    DOSEN = "DOSEN"
    KARYAWAN = "KARYAWAN"


class TipeAbsensi(str, Enum):
    """Dua sisi satu hari absensi: check-in (MASUK) dan check-out (PULANG)."""

    MASUK = "MASUK"
    PULANG = "PULANG"


class DeletedFilter(str, Enum):
    """Which rows a ledger query may see with respect to soft delete."""

    LIVE = "LIVE"
    DELETED = "DELETED"
    ALL = "ALL"


class ConflictKind(str, Enum):
    CLOUD_ID = "duplicate_cloud_id"
    BUSINESS_KEY = "duplicate_attendance"
    DEVICE = "duplicate_device"


class ExportFormat(str, Enum):
    """Output formats understood by the export collaborator."""

    EXCEL = "excel"
    PDF = "pdf"
    CSV = "csv"
