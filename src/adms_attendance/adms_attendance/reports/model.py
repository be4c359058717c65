from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import Jabatan


def _dt(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat(sep=" ", timespec="seconds") if value else None


def _t(value: Optional[time]) -> Optional[str]:
    return value.strftime("%H:%M:%S") if value else None


@dataclass(frozen=True)
class SummaryRow:
    """Rekap bulanan satu orang."""

    no: int
    user_id: str
    nip: str
    nama: str
    jabatan: Jabatan
    total_masuk: int
    total_pulang: int
    present: int
    working_days: int
    late: int
    percentage: Decimal
    last_check_in: Optional[datetime] = None
    last_check_out: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "no": self.no,
            "user_id": self.user_id,
            "nip": self.nip,
            "nama": self.nama,
            "jabatan": self.jabatan.value,
            "total_masuk": self.total_masuk,
            "total_pulang": self.total_pulang,
            "present": self.present,
            "working_days": self.working_days,
            "late": self.late,
            "percentage": float(self.percentage),
            "last_check_in": _dt(self.last_check_in),
            "last_check_out": _dt(self.last_check_out),
        }


@dataclass(frozen=True)
class DayRecord:
    """One person on one date: MASUK and PULANG merged into a single line."""

    user_id: str
    nip: str
    nama: str
    jabatan: Jabatan
    tanggal: date
    check_in: Optional[time]
    check_out: Optional[time]
    late: bool

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "nip": self.nip,
            "nama": self.nama,
            "jabatan": self.jabatan.value,
            "tanggal": self.tanggal.isoformat(),
            "check_in": _t(self.check_in),
            "check_out": _t(self.check_out),
            "late": self.late,
        }


@dataclass(frozen=True)
class Period:
    month: int
    year: int
    start: date
    end: date
    working_days: int
    category: Optional[Jabatan] = None

    def to_dict(self) -> dict:
        return {
            "month": self.month,
            "year": self.year,
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "working_days": self.working_days,
            "category": self.category.value if self.category else None,
        }


@dataclass(frozen=True)
class MonthlySummary:
    period: Period
    rows: Sequence[SummaryRow]

    def to_dict(self) -> dict:
        return {"period": self.period.to_dict(), "rows": [r.to_dict() for r in self.rows]}


@dataclass(frozen=True)
class MonthlyReport:
    period: Period
    days: Sequence[DayRecord]

    def to_dict(self) -> dict:
        return {"period": self.period.to_dict(), "days": [d.to_dict() for d in self.days]}


@dataclass(frozen=True)
class LastSeen:
    nama: str
    user_id: str
    timestamp: datetime

    def to_dict(self) -> dict:
        return {"nama": self.nama, "user_id": self.user_id, "timestamp": _dt(self.timestamp)}


@dataclass(frozen=True)
class CategoryStats:
    total_records: int = 0
    total_users: int = 0
    total_present: int = 0
    total_late: int = 0
    percentage: Decimal = Decimal("0.00")

    def to_dict(self) -> dict:
        return {
            "total_records": self.total_records,
            "total_users": self.total_users,
            "total_present": self.total_present,
            "total_late": self.total_late,
            "percentage": float(self.percentage),
        }


@dataclass(frozen=True)
class DashboardSummary:
    total_records: int
    total_users: int
    total_masuk: int
    total_pulang: int
    total_present: int
    working_days: int
    total_late: int
    percentage: Decimal
    last_check_in: Optional[LastSeen] = None
    last_check_out: Optional[LastSeen] = None
    by_category: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "total_records": self.total_records,
            "total_users": self.total_users,
            "total_masuk": self.total_masuk,
            "total_pulang": self.total_pulang,
            "total_present": self.total_present,
            "working_days": self.working_days,
            "total_late": self.total_late,
            "percentage": float(self.percentage),
            "last_check_in": self.last_check_in.to_dict() if self.last_check_in else None,
            "last_check_out": self.last_check_out.to_dict() if self.last_check_out else None,
            "by_category": {k.value: v.to_dict() for k, v in self.by_category.items()},
        }
