from __future__ import annotations

from datetime import date, datetime

import pytest

from src.adms_attendance.adms_attendance.attendance.service import (
    AttendanceService,
    build_filter,
    clamp_per_page,
    parse_ordering,
)
from src.adms_attendance.adms_attendance.core.enums import Jabatan
from src.adms_attendance.adms_attendance.core.exceptions import NotFoundError, ValidationError
from src.adms_attendance.adms_attendance.reports.service import ReportService

DELETED_AT = datetime(2024, 2, 20, 10, 0, 0)


@pytest.fixture
def seeded(make_ingestion, make_payload, ledger):
    svc = make_ingestion()
    svc.push(make_payload(cloud_id="C1"), source_ip="10.10.1.21")
    svc.push(make_payload(cloud_id="C2", tipe_absensi="PULANG", waktu_absensi="16:00:00"), source_ip="10.10.1.21")
    svc.push(
        make_payload(cloud_id="C3", user_id="U002", nama="Citra", jabatan="KARYAWAN", waktu_absensi="08:10:00"),
        source_ip="10.10.1.21",
    )
    return ledger


@pytest.fixture
def service(seeded, audit):
    return AttendanceService(seeded, audit, clock=lambda: DELETED_AT)


def test_per_page_is_clamped():
    assert clamp_per_page(None) == 50
    assert clamp_per_page("0") == 1
    assert clamp_per_page("500") == 200
    assert clamp_per_page(25) == 25
    with pytest.raises(ValidationError):
        clamp_per_page("many")


def test_ordering_is_whitelisted():
    assert parse_ordering("nama", "asc").descending is False
    with pytest.raises(ValidationError):
        parse_ordering("nama; DROP TABLE attendance", None)
    with pytest.raises(ValidationError):
        parse_ordering(None, "sideways")


def test_build_filter_expands_month_and_checks_range():
    f = build_filter({"month": "2", "year": "2024", "category": "dosen"})
    assert (f.date_from, f.date_to) == (date(2024, 2, 1), date(2024, 2, 29))
    assert f.jabatan == Jabatan.DOSEN

    with pytest.raises(ValidationError):
        build_filter({"month": "13", "year": "2024"})
    with pytest.raises(ValidationError):
        build_filter({"month": "1", "year": "10000"})
    with pytest.raises(ValidationError):
        build_filter({"month": "2"})
    with pytest.raises(ValidationError):
        build_filter({"date_from": "2024-03-01", "date_to": "2024-02-01"})


def test_list_records_pages_and_audits(service, audit):
    page = service.list_records(build_filter({}), page="1", per_page="2", actor="admin01")

    assert page.total == 3
    assert len(page.items) == 2
    assert page.pagination() == {"current_page": 1, "total_pages": 2, "total_records": 3, "per_page": 2}
    assert audit.last("VIEW_ATTENDANCE")["actor"] == "admin01"


def test_category_listing(service):
    page = service.list_records(build_filter({}, jabatan=Jabatan.KARYAWAN))
    assert [r.user_id for r in page.items] == ["U002"]


def test_soft_delete_hides_record_everywhere_but_deleted_path(service, seeded, audit):
    reports = ReportService(seeded, audit)
    before = reports.monthly_summary(2, 2024)
    assert {r.user_id for r in before.rows} == {"U001", "U002"}

    deleted = service.soft_delete(3, actor="admin01")

    assert deleted.is_deleted
    assert deleted.deleted_by == "admin01"
    assert deleted.deleted_at == DELETED_AT
    assert audit.last("DELETE_ATTENDANCE")["user_id"] == "U002"

    assert [r.id for r in service.list_records(build_filter({})).items] == [2, 1]
    with pytest.raises(NotFoundError):
        service.get_record(3)
    assert {r.user_id for r in reports.monthly_summary(2, 2024).rows} == {"U001"}

    hidden = service.list_deleted(build_filter({}))
    assert [(r.id, r.deleted_by, r.deleted_at) for r in hidden.items] == [(3, "admin01", DELETED_AT)]
    assert service.get_record(3, include_deleted=True).is_deleted


def test_soft_delete_of_unknown_or_deleted_record(service):
    with pytest.raises(NotFoundError):
        service.soft_delete(99, actor="admin01")

    service.soft_delete(1, actor="admin01")
    with pytest.raises(NotFoundError):
        service.soft_delete(1, actor="admin01")
