from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.dedup import DeduplicationService
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .audit.sink import AuditSink, LoggingAuditSink
from .database.connection import DBConfig, DatabaseConnection
from .devices.mysql_device_repository import MySQLDeviceRepository
from .devices.repository import DeviceRepository
from .devices.service import DeviceService
from .exports.service import ExportService
from .ingestion.factory import GuardFactory, IngestionSettings
from .ingestion.guard import IngestionGuard
from .ingestion.service import IngestionService
from .reports.service import ReportService


@dataclass(frozen=True)
class Container:
    devices_repo: DeviceRepository
    attendance_repo: AttendanceRepository
    audit: AuditSink

    dedup: DeduplicationService
    ingestion_service: IngestionService
    attendance_service: AttendanceService
    report_service: ReportService
    device_service: DeviceService
    export_service: ExportService

    conn: Optional[DatabaseConnection] = None


def assemble(
    *,
    devices_repo: DeviceRepository,
    attendance_repo: AttendanceRepository,
    ingestion_settings: IngestionSettings,
    audit: Optional[AuditSink] = None,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services around the given repositories (MySQL or in-memory)."""

    audit = audit or LoggingAuditSink()
    guards = GuardFactory(ingestion_settings, devices_repo)
    dedup = DeduplicationService(attendance_repo)

    ingestion_service = IngestionService(
        push_guard=IngestionGuard(guards.for_push(), audit),
        status_guard=IngestionGuard(guards.for_status(), audit),
        dedup=dedup,
        devices=devices_repo,
        audit=audit,
    )

    return Container(
        devices_repo=devices_repo,
        attendance_repo=attendance_repo,
        audit=audit,
        dedup=dedup,
        ingestion_service=ingestion_service,
        attendance_service=AttendanceService(attendance_repo, audit),
        report_service=ReportService(attendance_repo, audit),
        device_service=DeviceService(devices_repo, audit),
        export_service=ExportService(),
        conn=conn,
    )


def build_container(*, db_config: dict, ingestion_settings: IngestionSettings) -> Container:
    config = DBConfig.from_mapping(db_config)
    conn = DatabaseConnection.get_instance(config)

    return assemble(
        devices_repo=MySQLDeviceRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        ingestion_settings=ingestion_settings,
        conn=conn,
    )
