from __future__ import annotations

from contextlib import nullcontext
from dataclasses import asdict
from typing import Optional

from ..common.keyed_lock import KeyedLocks
from ..core.enums import ConflictKind
from ..core.exceptions import ConflictError
from .model import AttendanceEvent, NewAttendanceEvent
from .repository import AttendanceRepository


class DeduplicationService:
    """Decides whether an incoming event duplicates a committed one, then commits it.

    The lookups before the insert are only a fast path. The ledger insert is
    the operation that closes the race: a uniqueness violation reported by
    storage comes back as the same ConflictError the fast path raises.
    """

    def __init__(self, ledger: AttendanceRepository, *, locks: Optional[KeyedLocks] = None):
        self._ledger = ledger
        self._locks = locks
        if not getattr(ledger, "enforces_uniqueness", False) and self._locks is None:
            # Storage cannot arbitrate, so serialize per key in-process.
            self._locks = KeyedLocks()

    @property
    def serializes_in_process(self) -> bool:
        return self._locks is not None

    def check(self, event: NewAttendanceEvent) -> None:
        if self._ledger.find_live_by_cloud_id(event.cloud_id) is not None:
            raise ConflictError(ConflictKind.CLOUD_ID, "Attendance with this cloud_id already exists")

        existing = self._ledger.find_live_by_business_key(event.user_id, event.tanggal_absensi, event.tipe_absensi)
        if existing is not None:
            raise ConflictError(ConflictKind.BUSINESS_KEY, "Attendance already exists for this user, date, and type")

    def commit(self, event: NewAttendanceEvent) -> AttendanceEvent:
        if self._locks is not None:
            scope = self._locks.hold(("cloud_id", event.cloud_id), ("fact", *event.business_key))
        else:
            scope = nullcontext()

        with scope:
            self.check(event)
            attendance_id = self._ledger.insert(event)

        return AttendanceEvent(id=attendance_id, **asdict(event))
