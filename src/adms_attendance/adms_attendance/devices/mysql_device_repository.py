from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional, Sequence

import mysql.connector

from ..core.enums import ConflictKind
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import Device
from .repository import DeviceRepository

_COLUMNS = "id, device_id, serial_number, ip_address, api_key, is_active, location, faculty, last_seen, created_at"


def _to_device(r: Dict[str, Any]) -> Device:
    return Device(
        id=int(r["id"]),
        device_id=r["device_id"],
        serial_number=r["serial_number"],
        ip_address=r["ip_address"],
        api_key=r["api_key"],
        is_active=bool(r.get("is_active", True)),
        location=r.get("location"),
        faculty=r.get("faculty"),
        last_seen=r.get("last_seen"),
        created_at=r.get("created_at"),
    )


class MySQLDeviceRepository(DeviceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find_active_by_credential(self, api_key: str) -> Optional[Device]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM devices WHERE api_key=%s AND is_active=1",
                (api_key,),
            )
            r = fetchone(cur)
            return _to_device(r) if r else None

    def find_by_serial(self, serial_number: str) -> Optional[Device]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM devices WHERE serial_number=%s", (serial_number,))
            r = fetchone(cur)
            return _to_device(r) if r else None

    def find_by_device_id(self, device_id: str) -> Optional[Device]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM devices WHERE device_id=%s", (device_id,))
            r = fetchone(cur)
            return _to_device(r) if r else None

    def list_all(self) -> Sequence[Device]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM devices ORDER BY device_id ASC")
            return [_to_device(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        device_id: str,
        serial_number: str,
        ip_address: str,
        api_key: str,
        location: Optional[str] = None,
        faculty: Optional[str] = None,
    ) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO devices(device_id, serial_number, ip_address, api_key, location, faculty, is_active)
                    VALUES(%s,%s,%s,%s,%s,%s,1)
                    """,
                    (device_id, serial_number, ip_address, api_key, location, faculty),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError as exc:
            if is_duplicate_key(exc):
                raise ConflictError(ConflictKind.DEVICE, "Device id or serial number already registered") from exc
            raise

    def set_active(self, device_id: str, *, is_active: bool) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE devices SET is_active=%s WHERE device_id=%s",
                (1 if is_active else 0, device_id),
            )
            return cur.rowcount > 0

    def touch_last_seen(self, device_pk: int, seen_at: datetime) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE devices SET last_seen=%s WHERE id=%s", (seen_at, int(device_pk)))
