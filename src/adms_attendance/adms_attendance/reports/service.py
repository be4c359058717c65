from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Optional

from ..attendance.repository import AttendanceRepository
from ..audit.sink import AuditSink
from ..common.datetime_utils import now_local
from ..common.validators import optional_enum
from ..core.enums import Jabatan
from . import aggregation
from .calendar import month_range, parse_period, working_days
from .model import DashboardSummary, MonthlyReport, MonthlySummary, Period


class ReportService:
    """Monthly summaries, day-level reports and the dashboard.

    Every result is a deterministic function of the live ledger rows for the
    requested period.
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

    def period(self, month: Any = None, year: Any = None, category: Any = None) -> Period:
        """Resolve the reporting period; missing month/year mean the current one."""

        today = self._clock().date()
        m, y = parse_period(
            month if month not in (None, "") else today.month,
            year if year not in (None, "") else today.year,
        )
        start, end = month_range(m, y)
        jabatan = category if isinstance(category, Jabatan) else optional_enum(category, Jabatan, "category")
        return Period(month=m, year=y, start=start, end=end, working_days=working_days(m, y), category=jabatan)

    def _events(self, period: Period, user_id: Optional[str]):
        return self._attendance.list_for_period(
            period.start,
            period.end,
            jabatan=period.category,
            user_id=(user_id or "").strip() or None,
        )

    def monthly_summary(
        self,
        month: Any = None,
        year: Any = None,
        *,
        category: Any = None,
        user_id: Optional[str] = None,
        actor: Optional[str] = None,
    ) -> MonthlySummary:
        period = self.period(month, year, category)
        rows = aggregation.summarize(self._events(period, user_id), period.working_days)
        self._audit.record(
            "VIEW_ATTENDANCE_SUMMARY",
            actor=actor,
            month=period.month,
            year=period.year,
            category=period.category,
            rows=len(rows),
        )
        return MonthlySummary(period=period, rows=rows)

    def monthly_report(
        self,
        month: Any = None,
        year: Any = None,
        *,
        category: Any = None,
        user_id: Optional[str] = None,
        actor: Optional[str] = None,
    ) -> MonthlyReport:
        period = self.period(month, year, category)
        days = aggregation.pair_days(self._events(period, user_id))
        self._audit.record(
            "VIEW_MONTHLY_REPORT",
            actor=actor,
            month=period.month,
            year=period.year,
            category=period.category,
            days=len(days),
        )
        return MonthlyReport(period=period, days=days)

    def dashboard(self, month: Any = None, year: Any = None, *, actor: Optional[str] = None) -> tuple[Period, DashboardSummary]:
        period = self.period(month, year)
        summary = aggregation.dashboard(self._events(period, None), period.working_days)
        self._audit.record("VIEW_DASHBOARD", actor=actor, month=period.month, year=period.year)
        return period, summary

    def records(self, month: Any = None, year: Any = None, *, category: Any = None):
        """Raw live events of a period, for record exports."""

        period = self.period(month, year, category)
        return period, list(self._events(period, None))
