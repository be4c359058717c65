from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

import mysql.connector

from ..core.enums import ConflictKind, DeletedFilter, Jabatan, TipeAbsensi
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, duplicate_key_name, fetchall, fetchone, is_duplicate_key, normalize_mysql_time
from .model import ORDERABLE_COLUMNS, AttendanceEvent, AttendanceFilter, NewAttendanceEvent, Ordering, Page
from .repository import AttendanceRepository

_COLUMNS = """
    id, cloud_id, device_id, user_id, nip, nama, jabatan, tanggal_absensi, waktu_absensi,
    tipe_absensi, verifikasi, tanggal_upload, is_deleted, deleted_at, deleted_by
"""

CLOUD_ID_INDEX = "uq_attendance_cloud_id"
BUSINESS_KEY_INDEX = "uq_attendance_business_key"


def _to_event(r: Dict[str, Any]) -> AttendanceEvent:
    return AttendanceEvent(
        id=int(r["id"]),
        cloud_id=r["cloud_id"],
        device_id=r["device_id"],
        user_id=r["user_id"],
        nip=r["nip"],
        nama=r["nama"],
        jabatan=Jabatan(r["jabatan"]),
        tanggal_absensi=r["tanggal_absensi"],
        waktu_absensi=normalize_mysql_time(r["waktu_absensi"]),
        tipe_absensi=TipeAbsensi(r["tipe_absensi"]),
        verifikasi=r["verifikasi"],
        tanggal_upload=r["tanggal_upload"],
        is_deleted=bool(r.get("is_deleted")),
        deleted_at=r.get("deleted_at"),
        deleted_by=r.get("deleted_by"),
    )


def _where(filters: AttendanceFilter) -> tuple[str, list[object]]:
    clauses: list[str] = []
    params: list[object] = []

    if filters.deleted == DeletedFilter.LIVE:
        clauses.append("is_deleted=0")
    elif filters.deleted == DeletedFilter.DELETED:
        clauses.append("is_deleted=1")

    if filters.user_id:
        clauses.append("user_id=%s")
        params.append(filters.user_id)
    if filters.device_id:
        clauses.append("device_id=%s")
        params.append(filters.device_id)
    if filters.jabatan is not None:
        clauses.append("jabatan=%s")
        params.append(filters.jabatan.value)
    if filters.tipe_absensi is not None:
        clauses.append("tipe_absensi=%s")
        params.append(filters.tipe_absensi.value)
    if filters.date_from is not None:
        clauses.append("tanggal_absensi >= %s")
        params.append(filters.date_from)
    if filters.date_to is not None:
        clauses.append("tanggal_absensi <= %s")
        params.append(filters.date_to)

    return (" AND ".join(clauses) or "1=1"), params


def _order_by(ordering: Ordering) -> str:
    direction = "DESC" if ordering.descending else "ASC"
    columns = [ordering.column, *[c for c in ordering.tie_breakers if c != ordering.column]]
    for column in columns:
        if column not in ORDERABLE_COLUMNS:
            raise ValueError(f"Unsupported ordering column: {column!r}")
    return ", ".join(f"{column} {direction}" for column in columns)


class MySQLAttendanceRepository(AttendanceRepository):
    enforces_uniqueness = True

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def insert(self, event: NewAttendanceEvent) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance(
                        cloud_id, device_id, user_id, nip, nama, jabatan, tanggal_absensi,
                        waktu_absensi, tipe_absensi, verifikasi, tanggal_upload, is_deleted
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,0)
                    """,
                    (
                        event.cloud_id,
                        event.device_id,
                        event.user_id,
                        event.nip,
                        event.nama,
                        event.jabatan.value,
                        event.tanggal_absensi,
                        event.waktu_absensi,
                        event.tipe_absensi.value,
                        event.verifikasi,
                        event.tanggal_upload,
                    ),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError as exc:
            if not is_duplicate_key(exc):
                raise
            if duplicate_key_name(exc) == CLOUD_ID_INDEX:
                raise ConflictError(ConflictKind.CLOUD_ID, "Attendance with this cloud_id already exists") from exc
            raise ConflictError(
                ConflictKind.BUSINESS_KEY, "Attendance already exists for this user, date, and type"
            ) from exc

    def get_by_id(self, attendance_id: int, *, include_deleted: bool = False) -> Optional[AttendanceEvent]:
        sql = f"SELECT {_COLUMNS} FROM attendance WHERE id=%s"
        if not include_deleted:
            sql += " AND is_deleted=0"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, (int(attendance_id),))
            r = fetchone(cur)
            return _to_event(r) if r else None

    def find_live_by_cloud_id(self, cloud_id: str) -> Optional[AttendanceEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance WHERE cloud_id=%s AND is_deleted=0",
                (cloud_id,),
            )
            r = fetchone(cur)
            return _to_event(r) if r else None

    def find_live_by_business_key(
        self, user_id: str, tanggal_absensi: date, tipe_absensi: TipeAbsensi
    ) -> Optional[AttendanceEvent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance
                WHERE user_id=%s AND tanggal_absensi=%s AND tipe_absensi=%s AND is_deleted=0
                """,
                (user_id, tanggal_absensi, tipe_absensi.value),
            )
            r = fetchone(cur)
            return _to_event(r) if r else None

    def query(
        self,
        filters: AttendanceFilter,
        *,
        page: int,
        per_page: int,
        ordering: Ordering = Ordering(),
    ) -> Page[AttendanceEvent]:
        where, params = _where(filters)
        order_by = _order_by(ordering)
        offset = (int(page) - 1) * int(per_page)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM attendance WHERE {where}", tuple(params))
            total = int((fetchone(cur) or {}).get("total") or 0)

            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance
                WHERE {where}
                ORDER BY {order_by}
                LIMIT %s OFFSET %s
                """,
                (*params, int(per_page), offset),
            )
            items = [_to_event(r) for r in fetchall(cur)]

        return Page(items=items, total=total, page=int(page), per_page=int(per_page))

    def list_for_period(
        self,
        start: date,
        end: date,
        *,
        jabatan: Optional[Jabatan] = None,
        user_id: Optional[str] = None,
    ) -> Sequence[AttendanceEvent]:
        where, params = _where(
            AttendanceFilter(user_id=user_id, jabatan=jabatan, date_from=start, date_to=end)
        )
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance
                WHERE {where}
                ORDER BY tanggal_absensi ASC, waktu_absensi ASC, id ASC
                """,
                tuple(params),
            )
            return [_to_event(r) for r in fetchall(cur)]

    def soft_delete(self, attendance_id: int, *, actor: str, deleted_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance
                SET is_deleted=1, deleted_at=%s, deleted_by=%s
                WHERE id=%s AND is_deleted=0
                """,
                (deleted_at, actor, int(attendance_id)),
            )
            return cur.rowcount > 0
