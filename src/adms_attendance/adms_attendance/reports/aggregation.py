"""Pure aggregation over ledger events.

Nothing here touches storage or the clock, so the same events always give
the same summary.
"""
from __future__ import annotations

from collections import defaultdict
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..attendance.model import AttendanceEvent
from ..core.constants import LATE_CUTOFF
from ..core.enums import Jabatan, TipeAbsensi
from .model import CategoryStats, DashboardSummary, DayRecord, LastSeen, SummaryRow

_TWO_PLACES = Decimal("0.01")


def percentage(numerator: int, denominator: int) -> Decimal:
    if denominator <= 0:
        return Decimal("0.00")
    value = Decimal(numerator) * 100 / Decimal(denominator)
    return value.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)


def is_late(event: AttendanceEvent) -> bool:
    return event.tipe_absensi == TipeAbsensi.MASUK and event.waktu_absensi > LATE_CUTOFF


def _chrono_key(event: AttendanceEvent):
    return (event.tanggal_absensi, event.waktu_absensi, event.id)


def _group_by_user(events: Iterable[AttendanceEvent]) -> Dict[str, List[AttendanceEvent]]:
    grouped: Dict[str, List[AttendanceEvent]] = defaultdict(list)
    for e in events:
        if e.is_deleted:
            continue
        grouped[e.user_id].append(e)
    return grouped


def summarize(events: Iterable[AttendanceEvent], working_days: int) -> List[SummaryRow]:
    """Per-person monthly rollup, ordered by (nama, user_id)."""

    rows = []
    for user_id, user_events in _group_by_user(events).items():
        # Identity fields follow the most recent event.
        latest = max(user_events, key=_chrono_key)
        masuk = [e for e in user_events if e.tipe_absensi == TipeAbsensi.MASUK]
        pulang = [e for e in user_events if e.tipe_absensi == TipeAbsensi.PULANG]
        present = min(len(masuk), len(pulang))

        rows.append(
            dict(
                user_id=user_id,
                nip=latest.nip,
                nama=latest.nama,
                jabatan=latest.jabatan,
                total_masuk=len(masuk),
                total_pulang=len(pulang),
                present=present,
                working_days=int(working_days),
                late=sum(1 for e in masuk if is_late(e)),
                percentage=percentage(present, int(working_days)),
                last_check_in=max(masuk, key=_chrono_key).occurred_at if masuk else None,
                last_check_out=max(pulang, key=_chrono_key).occurred_at if pulang else None,
            )
        )

    rows.sort(key=lambda r: (r["nama"], r["user_id"]))
    return [SummaryRow(no=i, **r) for i, r in enumerate(rows, start=1)]


def pair_days(events: Iterable[AttendanceEvent]) -> List[DayRecord]:
    """Merge MASUK/PULANG of the same (user_id, date) into one DayRecord."""

    grouped: Dict[Tuple[str, date], List[AttendanceEvent]] = defaultdict(list)
    for e in events:
        if e.is_deleted:
            continue
        grouped[(e.user_id, e.tanggal_absensi)].append(e)

    days = []
    for (user_id, tanggal), day_events in grouped.items():
        latest = max(day_events, key=_chrono_key)
        check_ins = [e.waktu_absensi for e in day_events if e.tipe_absensi == TipeAbsensi.MASUK]
        check_outs = [e.waktu_absensi for e in day_events if e.tipe_absensi == TipeAbsensi.PULANG]
        check_in = min(check_ins) if check_ins else None
        check_out = max(check_outs) if check_outs else None

        days.append(
            DayRecord(
                user_id=user_id,
                nip=latest.nip,
                nama=latest.nama,
                jabatan=latest.jabatan,
                tanggal=tanggal,
                check_in=check_in,
                check_out=check_out,
                late=check_in is not None and check_in > LATE_CUTOFF,
            )
        )

    days.sort(key=lambda d: (d.tanggal, d.nama, d.user_id))
    return days


def _last_seen(events: Sequence[AttendanceEvent], tipe: TipeAbsensi) -> Optional[LastSeen]:
    candidates = [e for e in events if e.tipe_absensi == tipe]
    if not candidates:
        return None
    e = max(candidates, key=_chrono_key)
    return LastSeen(nama=e.nama, user_id=e.user_id, timestamp=e.occurred_at)


def _stats(rows: Sequence[SummaryRow], records: int, working_days: int) -> CategoryStats:
    present = sum(r.present for r in rows)
    return CategoryStats(
        total_records=records,
        total_users=len(rows),
        total_present=present,
        total_late=sum(r.late for r in rows),
        percentage=percentage(present, len(rows) * working_days),
    )


def dashboard(events: Iterable[AttendanceEvent], working_days: int) -> DashboardSummary:
    live = [e for e in events if not e.is_deleted]
    rows = summarize(live, working_days)
    overall = _stats(rows, len(live), working_days)

    by_category = {}
    for jabatan in Jabatan:
        cat_rows = [r for r in rows if r.jabatan == jabatan]
        cat_records = sum(1 for e in live if e.jabatan == jabatan)
        by_category[jabatan] = _stats(cat_rows, cat_records, working_days)

    return DashboardSummary(
        total_records=overall.total_records,
        total_users=overall.total_users,
        total_masuk=sum(r.total_masuk for r in rows),
        total_pulang=sum(r.total_pulang for r in rows),
        total_present=overall.total_present,
        working_days=int(working_days),
        total_late=overall.total_late,
        percentage=overall.percentage,
        last_check_in=_last_seen(live, TipeAbsensi.MASUK),
        last_check_out=_last_seen(live, TipeAbsensi.PULANG),
        by_category=by_category,
    )
