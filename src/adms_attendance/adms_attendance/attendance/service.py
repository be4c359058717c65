from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Mapping, Optional

from ..audit.sink import AuditSink
from ..common.datetime_utils import now_local, parse_iso_date
from ..common.validators import optional_enum, parse_positive_int
from ..core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ..core.enums import DeletedFilter, Jabatan, TipeAbsensi
from ..core.exceptions import NotFoundError, ValidationError
from ..reports.calendar import month_range
from .model import ORDERABLE_COLUMNS, AttendanceEvent, AttendanceFilter, Ordering, Page
from .repository import AttendanceRepository


def clamp_per_page(value: Any) -> int:
    if value is None or (isinstance(value, str) and not value.strip()):
        return DEFAULT_PAGE_SIZE
    try:
        number = int(str(value).strip())
    except ValueError:
        raise ValidationError("per_page must be an integer")
    return max(1, min(MAX_PAGE_SIZE, number))


def parse_ordering(order_by: Optional[str], direction: Optional[str]) -> Ordering:
    column = (order_by or "tanggal_absensi").strip()
    if column not in ORDERABLE_COLUMNS:
        raise ValidationError("Invalid order_by value")

    d = (direction or "desc").strip().lower()
    if d not in ("asc", "desc"):
        raise ValidationError("Invalid direction value")

    return Ordering(column=column, descending=(d == "desc"))


def _optional_date(value: Any, field_name: str):
    if value in (None, ""):
        return None
    try:
        return parse_iso_date(str(value).strip())
    except ValueError:
        raise ValidationError(f"Invalid {field_name} value (YYYY-MM-DD)")


def build_filter(params: Mapping[str, Any], *, jabatan: Optional[Jabatan] = None) -> AttendanceFilter:
    """Turn operator query parameters into an AttendanceFilter.

    ``month``/``year`` expand to the month range unless explicit dates are
    given.
    """

    date_from = _optional_date(params.get("date_from"), "date_from")
    date_to = _optional_date(params.get("date_to"), "date_to")

    month = params.get("month")
    year = params.get("year")
    if month not in (None, "") or year not in (None, ""):
        first, last = month_range(month, year)
        date_from = date_from or first
        date_to = date_to or last

    if date_from and date_to and date_from > date_to:
        raise ValidationError("date_from must not be after date_to")

    return AttendanceFilter(
        user_id=(str(params.get("user_id")).strip() or None) if params.get("user_id") else None,
        device_id=(str(params.get("device_id")).strip() or None) if params.get("device_id") else None,
        jabatan=jabatan or optional_enum(params.get("category"), Jabatan, "category"),
        tipe_absensi=optional_enum(params.get("tipe_absensi"), TipeAbsensi, "tipe_absensi"),
        date_from=date_from,
        date_to=date_to,
    )


class AttendanceService:
    """Operator-side access to the attendance ledger.

    Reads never see soft-deleted rows except through ``list_deleted`` and
    ``get_record(include_deleted=True)``.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        audit: AuditSink,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attendance = attendance
        self._audit = audit
        self._clock = clock

    def list_records(
        self,
        filters: AttendanceFilter,
        *,
        page: Any = None,
        per_page: Any = None,
        order_by: Optional[str] = None,
        direction: Optional[str] = None,
        actor: Optional[str] = None,
    ) -> Page[AttendanceEvent]:
        p = parse_positive_int(page, "page", default=1)
        size = clamp_per_page(per_page)
        ordering = parse_ordering(order_by, direction)

        result = self._attendance.query(
            replace(filters, deleted=DeletedFilter.LIVE), page=p, per_page=size, ordering=ordering
        )
        self._audit.record(
            "VIEW_ATTENDANCE",
            actor=actor,
            category=filters.jabatan,
            date_from=filters.date_from,
            date_to=filters.date_to,
            page=p,
            records=len(result.items),
        )
        return result

    def list_deleted(
        self,
        filters: AttendanceFilter,
        *,
        page: Any = None,
        per_page: Any = None,
        actor: Optional[str] = None,
    ) -> Page[AttendanceEvent]:
        p = parse_positive_int(page, "page", default=1)
        size = clamp_per_page(per_page)

        result = self._attendance.query(
            replace(filters, deleted=DeletedFilter.DELETED),
            page=p,
            per_page=size,
            ordering=Ordering(column="id", descending=True, tie_breakers=()),
        )
        self._audit.record("VIEW_DELETED_ATTENDANCE", actor=actor, page=p, records=len(result.items))
        return result

    def get_record(self, attendance_id: int, *, include_deleted: bool = False) -> AttendanceEvent:
        record = self._attendance.get_by_id(int(attendance_id), include_deleted=include_deleted)
        if record is None:
            raise NotFoundError("Attendance record not found")
        return record

    def soft_delete(self, attendance_id: int, *, actor: str) -> AttendanceEvent:
        if not actor:
            raise ValidationError("actor is required")

        record = self.get_record(attendance_id)
        deleted_at = self._clock()
        if not self._attendance.soft_delete(record.id, actor=actor, deleted_at=deleted_at):
            # Deleted concurrently by someone else.
            raise NotFoundError("Attendance record not found")

        self._audit.record(
            "DELETE_ATTENDANCE",
            actor=actor,
            attendance_id=record.id,
            cloud_id=record.cloud_id,
            user_id=record.user_id,
            nama=record.nama,
            tanggal_absensi=record.tanggal_absensi,
            tipe_absensi=record.tipe_absensi,
        )
        return self._attendance.get_by_id(record.id, include_deleted=True) or replace(
            record, is_deleted=True, deleted_at=deleted_at, deleted_by=actor
        )
