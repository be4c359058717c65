from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import Jabatan, TipeAbsensi
from .model import AttendanceEvent, AttendanceFilter, NewAttendanceEvent, Ordering, Page


class AttendanceRepository(Protocol):
    """Attendance ledger.

    ``insert`` raises ConflictError when either uniqueness rule is violated at
    the storage layer. Every read filters out soft-deleted rows unless the
    filter explicitly asks for them.
    """

    # True when the storage itself rejects duplicate cloud_id / business keys.
    enforces_uniqueness: bool

    def insert(self, event: NewAttendanceEvent) -> int:
        raise NotImplementedError

    def get_by_id(self, attendance_id: int, *, include_deleted: bool = False) -> Optional[AttendanceEvent]:
        raise NotImplementedError

    def find_live_by_cloud_id(self, cloud_id: str) -> Optional[AttendanceEvent]:
        raise NotImplementedError

    def find_live_by_business_key(
        self, user_id: str, tanggal_absensi: date, tipe_absensi: TipeAbsensi
    ) -> Optional[AttendanceEvent]:
        raise NotImplementedError

    def query(
        self,
        filters: AttendanceFilter,
        *,
        page: int,
        per_page: int,
        ordering: Ordering = Ordering(),
    ) -> Page[AttendanceEvent]:
        raise NotImplementedError

    def list_for_period(
        self,
        start: date,
        end: date,
        *,
        jabatan: Optional[Jabatan] = None,
        user_id: Optional[str] = None,
    ) -> Sequence[AttendanceEvent]:
        raise NotImplementedError

    def soft_delete(self, attendance_id: int, *, actor: str, deleted_at: datetime) -> bool:
        raise NotImplementedError
