from __future__ import annotations

from datetime import datetime

import pytest

from src.adms_attendance.adms_attendance.core.enums import Jabatan
from src.adms_attendance.adms_attendance.core.exceptions import ValidationError
from src.adms_attendance.adms_attendance.reports.service import ReportService


@pytest.fixture
def reports(make_ingestion, make_payload, ledger, audit):
    svc = make_ingestion()
    svc.push(make_payload(cloud_id="C1", waktu_absensi="08:20:00"), source_ip="10.10.1.21")
    svc.push(make_payload(cloud_id="C2", tipe_absensi="PULANG", waktu_absensi="16:00:00"), source_ip="10.10.1.21")
    svc.push(
        make_payload(cloud_id="C3", user_id="U002", nama="Ani", jabatan="KARYAWAN", tanggal_absensi="2024-03-01"),
        source_ip="10.10.1.21",
    )
    return ReportService(ledger, audit, clock=lambda: datetime(2024, 3, 10, 9, 0))


def test_monthly_summary_for_requested_month(reports, audit):
    summary = reports.monthly_summary("2", "2024", actor="admin01")

    assert summary.period.working_days == 21
    (row,) = summary.rows
    assert (row.user_id, row.present, row.late) == ("U001", 1, 1)
    assert summary.to_dict()["rows"][0]["percentage"] == 4.76
    assert audit.last("VIEW_ATTENDANCE_SUMMARY")["actor"] == "admin01"


def test_period_defaults_to_current_month(reports):
    summary = reports.monthly_summary()
    assert (summary.period.month, summary.period.year) == (3, 2024)
    assert [r.nama for r in summary.rows] == ["Ani"]


def test_category_filter(reports):
    assert reports.monthly_summary(2, 2024, category="KARYAWAN").rows == []
    summary = reports.monthly_summary(3, 2024, category=Jabatan.KARYAWAN)
    assert summary.period.category == Jabatan.KARYAWAN
    assert len(summary.rows) == 1

    with pytest.raises(ValidationError):
        reports.monthly_summary(2, 2024, category="REKTOR")


def test_monthly_report_and_dashboard_are_audited(reports, audit):
    report = reports.monthly_report(2, 2024, actor="admin01")
    (day,) = report.days
    assert day.late is True
    assert day.to_dict()["check_out"] == "16:00:00"

    period, dash = reports.dashboard(2, 2024, actor="admin01")
    assert period.working_days == 21
    assert dash.total_records == 2

    assert audit.actions()[-2:] == ["VIEW_MONTHLY_REPORT", "VIEW_DASHBOARD"]


def test_repeated_reports_are_identical(reports):
    assert reports.monthly_summary(2, 2024) == reports.monthly_summary(2, 2024)
    assert reports.monthly_report(2, 2024) == reports.monthly_report(2, 2024)
