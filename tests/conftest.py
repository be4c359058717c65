from __future__ import annotations

import logging
import threading
from dataclasses import replace
from datetime import date, datetime, timezone
from typing import Optional

import pytest

from src.adms_attendance.adms_attendance.attendance.dedup import DeduplicationService
from src.adms_attendance.adms_attendance.attendance.model import AttendanceEvent, Page
from src.adms_attendance.adms_attendance.container import assemble
from src.adms_attendance.adms_attendance.core.enums import ConflictKind, DeletedFilter, TipeAbsensi
from src.adms_attendance.adms_attendance.core.exceptions import ConflictError
from src.adms_attendance.adms_attendance.devices.model import Device
from src.adms_attendance.adms_attendance.ingestion.factory import GuardFactory, IngestionSettings
from src.adms_attendance.adms_attendance.ingestion.guard import IngestionGuard
from src.adms_attendance.adms_attendance.ingestion.service import IngestionService

DEVICE_KEY = "a1b2c3d4" * 8
INACTIVE_KEY = "ffffeeee" * 8


class InMemoryDevices:
    def __init__(self, devices=()):
        self._by_id: dict[int, Device] = {d.id: d for d in devices}
        self.touched: list[tuple[int, datetime]] = []
        self.credential_lookups = 0

    def find_active_by_credential(self, api_key: str) -> Optional[Device]:
        self.credential_lookups += 1
        for d in self._by_id.values():
            if d.api_key == api_key and d.is_active:
                return d
        return None

    def find_by_serial(self, serial_number: str) -> Optional[Device]:
        return next((d for d in self._by_id.values() if d.serial_number == serial_number), None)

    def find_by_device_id(self, device_id: str) -> Optional[Device]:
        return next((d for d in self._by_id.values() if d.device_id == device_id), None)

    def list_all(self):
        return sorted(self._by_id.values(), key=lambda d: d.device_id)

    def create(self, *, device_id, serial_number, ip_address, api_key, location=None, faculty=None) -> int:
        if self.find_by_device_id(device_id) or self.find_by_serial(serial_number):
            raise ConflictError(ConflictKind.DEVICE, "Device id or serial number already registered")
        pk = max(self._by_id, default=0) + 1
        self._by_id[pk] = Device(
            id=pk,
            device_id=device_id,
            serial_number=serial_number,
            ip_address=ip_address,
            api_key=api_key,
            location=location,
            faculty=faculty,
        )
        return pk

    def set_active(self, device_id: str, *, is_active: bool) -> bool:
        d = self.find_by_device_id(device_id)
        if not d:
            return False
        self._by_id[d.id] = replace(d, is_active=is_active)
        return True

    def touch_last_seen(self, device_pk: int, seen_at: datetime) -> None:
        self.touched.append((device_pk, seen_at))
        d = self._by_id.get(device_pk)
        if d:
            self._by_id[device_pk] = replace(d, last_seen=seen_at)


class InMemoryLedger:
    """Attendance ledger kept in a list.

    With ``enforce=True`` it rejects duplicates on insert like the MySQL
    unique indexes do; otherwise it stores whatever it is given.
    """

    def __init__(self, *, enforce: bool = False):
        self.enforces_uniqueness = enforce
        self.rows: list[AttendanceEvent] = []
        self._lock = threading.Lock()

    def _live(self):
        return [r for r in self.rows if not r.is_deleted]

    def insert(self, event) -> int:
        with self._lock:
            if self.enforces_uniqueness:
                if any(r.cloud_id == event.cloud_id for r in self._live()):
                    raise ConflictError(ConflictKind.CLOUD_ID, "Attendance with this cloud_id already exists")
                if any(
                    (r.user_id, r.tanggal_absensi, r.tipe_absensi) == event.business_key for r in self._live()
                ):
                    raise ConflictError(
                        ConflictKind.BUSINESS_KEY, "Attendance already exists for this user, date, and type"
                    )
            new_id = len(self.rows) + 1
            self.rows.append(AttendanceEvent(id=new_id, **event.__dict__))
            return new_id

    def get_by_id(self, attendance_id: int, *, include_deleted: bool = False):
        for r in self.rows:
            if r.id == attendance_id and (include_deleted or not r.is_deleted):
                return r
        return None

    def find_live_by_cloud_id(self, cloud_id: str):
        return next((r for r in self._live() if r.cloud_id == cloud_id), None)

    def find_live_by_business_key(self, user_id: str, tanggal_absensi: date, tipe_absensi: TipeAbsensi):
        key = (user_id, tanggal_absensi, tipe_absensi)
        return next((r for r in self._live() if (r.user_id, r.tanggal_absensi, r.tipe_absensi) == key), None)

    def query(self, filters, *, page, per_page, ordering=None):
        if filters.deleted == DeletedFilter.LIVE:
            items = self._live()
        elif filters.deleted == DeletedFilter.DELETED:
            items = [r for r in self.rows if r.is_deleted]
        else:
            items = list(self.rows)
        if filters.user_id:
            items = [r for r in items if r.user_id == filters.user_id]
        if filters.device_id:
            items = [r for r in items if r.device_id == filters.device_id]
        if filters.jabatan:
            items = [r for r in items if r.jabatan == filters.jabatan]
        if filters.tipe_absensi:
            items = [r for r in items if r.tipe_absensi == filters.tipe_absensi]
        if filters.date_from:
            items = [r for r in items if r.tanggal_absensi >= filters.date_from]
        if filters.date_to:
            items = [r for r in items if r.tanggal_absensi <= filters.date_to]
        items.sort(key=lambda r: (r.tanggal_absensi, r.waktu_absensi, r.id), reverse=True)
        start = (page - 1) * per_page
        return Page(items=items[start:start + per_page], total=len(items), page=page, per_page=per_page)

    def list_for_period(self, start, end, *, jabatan=None, user_id=None):
        items = [r for r in self._live() if start <= r.tanggal_absensi <= end]
        if jabatan:
            items = [r for r in items if r.jabatan == jabatan]
        if user_id:
            items = [r for r in items if r.user_id == user_id]
        return sorted(items, key=lambda r: (r.tanggal_absensi, r.waktu_absensi, r.id))

    def soft_delete(self, attendance_id: int, *, actor: str, deleted_at: datetime) -> bool:
        for i, r in enumerate(self.rows):
            if r.id == attendance_id and not r.is_deleted:
                self.rows[i] = replace(r, is_deleted=True, deleted_at=deleted_at, deleted_by=actor)
                return True
        return False


class RecordingAudit:
    def __init__(self):
        self.events: list[dict] = []

    def record(self, action, *, actor=None, level=logging.INFO, **details):
        self.events.append({"action": action, "actor": actor, "level": level, **details})

    def actions(self) -> list[str]:
        return [e["action"] for e in self.events]

    def last(self, action: str) -> dict:
        return [e for e in self.events if e["action"] == action][-1]


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 2, 15, 1, 30, 0, tzinfo=timezone.utc)


@pytest.fixture
def devices() -> InMemoryDevices:
    return InMemoryDevices(
        [
            Device(
                id=1,
                device_id="FP-FT-01",
                serial_number="SN-FT-0001",
                ip_address="10.10.1.21",
                api_key=DEVICE_KEY,
                location="Gedung A",
                faculty="Fakultas Teknik",
            ),
            Device(
                id=2,
                device_id="FP-OLD-01",
                serial_number="SN-OLD-0001",
                ip_address="10.10.9.9",
                api_key=INACTIVE_KEY,
                is_active=False,
            ),
        ]
    )


@pytest.fixture
def ledger() -> InMemoryLedger:
    return InMemoryLedger()


@pytest.fixture
def audit() -> RecordingAudit:
    return RecordingAudit()


@pytest.fixture
def make_payload():
    def _make(**overrides):
        payload = {
            "cloud_id": "CLD-0001",
            "device_id": "FP-FT-01",
            "user_id": "U001",
            "nip": "198001012005011001",
            "nama": "Budi Santoso",
            "jabatan": "DOSEN",
            "tanggal_absensi": "2024-02-15",
            "waktu_absensi": "07:45:00",
            "tipe_absensi": "MASUK",
            "api_key": DEVICE_KEY,
        }
        payload.update(overrides)
        return {k: v for k, v in payload.items() if v is not None}

    return _make


@pytest.fixture
def make_ingestion(devices, ledger, audit, fixed_now):
    def _make(settings: Optional[IngestionSettings] = None, *, ledger_override=None, clock=None) -> IngestionService:
        guards = GuardFactory(settings or IngestionSettings(), devices)
        return IngestionService(
            push_guard=IngestionGuard(guards.for_push(), audit),
            status_guard=IngestionGuard(guards.for_status(), audit),
            dedup=DeduplicationService(ledger_override if ledger_override is not None else ledger),
            devices=devices,
            audit=audit,
            clock=clock or (lambda: fixed_now),
        )

    return _make


@pytest.fixture
def container(devices, ledger, audit):
    return assemble(
        devices_repo=devices,
        attendance_repo=ledger,
        ingestion_settings=IngestionSettings(),
        audit=audit,
    )


@pytest.fixture
def app(monkeypatch, container):
    monkeypatch.setenv("APP_ENV", "testing")
    from src.adms_attendance.adms_attendance.main import create_app

    application = create_app(container=container)
    application.config["TESTING"] = True
    return application


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def operator_client(client):
    with client.session_transaction() as sess:
        sess["operator_id"] = "admin01"
    return client
