# Overview: Service-layer operations for reporting; read-only joins over medicines, patients, usage and clinics.

"""
Report Builder

Pure read-side joins. Nothing here writes to the workbook.

Time semantics:
- UsageEvent timestamps are stored as UTC.
- Period boundaries (day, week, month, range) are local calendar days in
  the configured timezone; events are bucketed by their local date.
- Weeks start on Monday (ISO weeks).
- Range bounds are inclusive dates; either bound may be omitted.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from app.errors import ValidationError
from app.models import CLINICS, MEDICINES, USAGE_EVENTS, USERS, UsageEvent
from app.storage import WorkbookStore
from app.time_utils import (
    local_day_bounds,
    month_end,
    month_start,
    parse_iso_date,
    to_local,
    utcnow,
    week_start,
)
from .usage_service import used_by_medicine


MODE_ALL = "all"
MODE_DAY = "day"
MODE_WEEK = "week"
MODE_MONTH = "month"
MODE_RANGE = "range"
MODES = (MODE_ALL, MODE_DAY, MODE_WEEK, MODE_MONTH, MODE_RANGE)


@dataclass(frozen=True)
class ReportFilter:
    mode: str = MODE_ALL
    start: date | None = None
    end: date | None = None

    @classmethod
    def from_args(cls, mode: str | None, start: str | None = None, end: str | None = None) -> "ReportFilter":
        mode = (mode or MODE_ALL).strip().lower()
        if mode not in MODES:
            raise ValidationError(f"mode must be one of: {', '.join(MODES)}")
        if mode != MODE_RANGE:
            return cls(mode=mode)
        try:
            start_day = parse_iso_date(start)
            end_day = parse_iso_date(end)
        except ValueError:
            raise ValidationError("from/to must be dates in YYYY-MM-DD format")
        if start_day and end_day and start_day > end_day:
            raise ValidationError("'from' must not be after 'to'")
        return cls(mode=mode, start=start_day, end=end_day)

    def local_dates(self, today: date) -> tuple[date | None, date | None]:
        """Inclusive local calendar days covered by this filter."""
        if self.mode == MODE_DAY:
            return today, today
        if self.mode == MODE_WEEK:
            first = week_start(today)
            return first, first + timedelta(days=6)
        if self.mode == MODE_MONTH:
            return month_start(today), month_end(today)
        if self.mode == MODE_RANGE:
            return self.start, self.end
        return None, None

    def utc_bounds(self, today: date, tz: ZoneInfo) -> tuple[datetime | None, datetime | None]:
        """UTC-naive [start, end) for the period; None means unbounded."""
        first, last = self.local_dates(today)
        start_dt = end_dt = None
        if first:
            start_dt, _ = local_day_bounds(first, first, tz)
        if last:
            _, end_dt = local_day_bounds(last, last, tz)
        return start_dt, end_dt


def _zone(tz: ZoneInfo | str) -> ZoneInfo:
    return tz if isinstance(tz, ZoneInfo) else ZoneInfo(tz)


def _local_today(tz: ZoneInfo, today: date | None) -> date:
    if today is not None:
        return today
    return to_local(utcnow(), tz).date()


def filter_events(
    events: list[UsageEvent],
    report_filter: ReportFilter,
    *,
    tz: ZoneInfo,
    today: date,
) -> list[UsageEvent]:
    start_dt, end_dt = report_filter.utc_bounds(today, tz)
    if start_dt is None and end_dt is None:
        return [e for e in events if e.timestamp is not None]
    matching = []
    for event in events:
        if event.timestamp is None:
            continue
        if start_dt is not None and event.timestamp < start_dt:
            continue
        if end_dt is not None and event.timestamp >= end_dt:
            continue
        matching.append(event)
    return matching


def build_stock_dashboard(store: WorkbookStore) -> dict:
    medicines = store.table(MEDICINES).load()
    used = used_by_medicine(store.table(USAGE_EVENTS).load())

    rows = []
    for medicine in medicines:
        total_used = used.get(medicine.id, 0)
        rows.append({
            **medicine.to_dict(),
            "used": total_used,
            "remaining": medicine.quantity_on_hand - total_used,
        })

    return {
        "medicines": rows,
        "is_empty": not rows,
        "message": "No medicine data found" if not rows else None,
    }


def build_usage_report(
    store: WorkbookStore,
    report_filter: ReportFilter | None = None,
    *,
    include_users_with_no_usage: bool = True,
    tz: ZoneInfo | str = "UTC",
    today: date | None = None,
    date_format: str = "%d/%m/%Y",
    time_format: str = "%H:%M",
) -> dict:
    """
    Usage grouped by patient, then by local calendar day (newest first).

    Usage recorded for a patient who has since been deleted is listed under
    the name captured on the event and flagged deleted=True.
    """
    report_filter = report_filter or ReportFilter()
    zone = _zone(tz)
    today = _local_today(zone, today)

    users = store.table(USERS).load()
    medicine_names = {m.id: m.name for m in store.table(MEDICINES).load()}
    clinic_names = {c.id: c.name for c in store.table(CLINICS).load()}
    events = filter_events(store.table(USAGE_EVENTS).load(), report_filter, tz=zone, today=today)
    if clinic_id is not None:
        clinics = [c for c in clinics if c.id == clinic_id]
        users = [u for u in users if u.clinic_id == clinic_id]
        events = [e for e in events if e.clinic_id == clinic_id]

    by_user: dict[str, list[UsageEvent]] = {}
    for event in events:
        by_user.setdefault(event.user_id, []).append(event)

    def _entry(user_id: str, name: str, clinic_id: str | None, deleted: bool) -> dict:
        user_events = sorted(by_user.get(user_id, []), key=lambda e: e.timestamp)
        days: dict[date, list[dict]] = {}
        for event in user_events:
            local_dt = to_local(event.timestamp, zone)
            days.setdefault(local_dt.date(), []).append({
                "usage_id": event.id,
                "medicine_id": event.medicine_id,
                "medicine_name": medicine_names.get(event.medicine_id, "(deleted medicine)"),
                "quantity": event.quantity_used,
                "time": local_dt.strftime(time_format),
                "notes": event.notes,
                "clinic_id": event.clinic_id,
            })
        return {
            "user_id": user_id,
            "name": name,
            "clinic_id": clinic_id,
            "clinic_name": clinic_names.get(clinic_id) if clinic_id else None,
            "deleted": deleted,
            "total_quantity": sum(e.quantity_used for e in user_events),
            "days": [
                {
                    "date": day.strftime(date_format),
                    "iso_date": day.isoformat(),
                    "items": items,
                }
                for day, items in sorted(days.items(), key=lambda kv: kv[0], reverse=True)
            ],
        }

    entries = []
    known_ids = set()
    for user in sorted(users, key=lambda u: u.name.casefold()):
        known_ids.add(user.id)
        if user.id not in by_user and not include_users_with_no_usage:
            continue
        entries.append(_entry(user.id, user.name, user.clinic_id, deleted=False))

    orphan_ids = [user_id for user_id in by_user if user_id not in known_ids]
    for user_id in sorted(orphan_ids, key=lambda uid: by_user[uid][-1].user_name_snapshot.casefold()):
        latest = max(by_user[user_id], key=lambda e: e.timestamp)
        entries.append(_entry(user_id, latest.user_name_snapshot, latest.clinic_id, deleted=True))

    first, last = report_filter.local_dates(today)
    return {
        "mode": report_filter.mode,
        "from": first.isoformat() if first else None,
        "to": last.isoformat() if last else None,
        "users": entries,
        "event_count": len(events),
        "is_empty": not events,
    }


def build_clinic_statistics(
    store: WorkbookStore,
    report_filter: ReportFilter | None = None,
    *,
    tz: ZoneInfo | str = "UTC",
    today: date | None = None,
    top_n: int | None = 10,
    clinic_id: str | None = None,
) -> dict:
    """
    Per-clinic patient activity and consumption, plus a most-consumed ranking.

    - A patient counts toward their current clinic.
    - Active = at least one usage event in the period ("ever" without a filter).
    - Consumption counts toward the clinic stamped on each event.
    - With `clinic_id`, only that clinic's patients and events are counted.
    """
    report_filter = report_filter or ReportFilter()
    zone = _zone(tz)
    today = _local_today(zone, today)

    clinics = store.table(CLINICS).load()
    users = store.table(USERS).load()
    medicine_names = {m.id: m.name for m in store.table(MEDICINES).load()}
    events = filter_events(store.table(USAGE_EVENTS).load(), report_filter, tz=zone, today=today)

    active_ids = {e.user_id for e in events}
    if clinic_id is not None:
        clinics = [c for c in clinics if c.id == clinic_id]
        users = [u for u in users if u.clinic_id == clinic_id]
        events = [e for e in events if e.clinic_id == clinic_id]

    rows: dict[str | None, dict] = {}

    def _row(clinic_id: str | None, name: str | None = None) -> dict:
        if clinic_id not in rows:
            rows[clinic_id] = {
                "clinic_id": clinic_id,
                "name": name if name is not None else (clinic_id or "(no clinic)"),
                "known": name is not None,
                "total_users": 0,
                "active_users": 0,
                "inactive_users": 0,
                "total_quantity": 0,
                "_medicines": {},
            }
        return rows[clinic_id]

    for clinic in clinics:
        _row(clinic.id, clinic.name)

    for user in users:
        row = _row(user.clinic_id)
        row["total_users"] += 1
        if user.id in active_ids:
            row["active_users"] += 1
        else:
            row["inactive_users"] += 1

    totals: dict[str, int] = {}
    for event in events:
        row = _row(event.clinic_id)
        row["total_quantity"] += event.quantity_used
        row["_medicines"][event.medicine_id] = row["_medicines"].get(event.medicine_id, 0) + event.quantity_used
        totals[event.medicine_id] = totals.get(event.medicine_id, 0) + event.quantity_used

    def _ranking(quantities: dict[str, int]) -> list[dict]:
        ranked = [
            {
                "medicine_id": medicine_id,
                "name": medicine_names.get(medicine_id, "(deleted medicine)"),
                "quantity": quantity,
            }
            for medicine_id, quantity in quantities.items()
        ]
        ranked.sort(key=lambda r: (-r["quantity"], r["name"].casefold()))
        return ranked

    clinic_rows = []
    for row in rows.values():
        medicines = row.pop("_medicines")
        row["medicines"] = _ranking(medicines)
        clinic_rows.append(row)

    top = _ranking(totals)
    first, last = report_filter.local_dates(today)
    return {
        "mode": report_filter.mode,
        "from": first.isoformat() if first else None,
        "to": last.isoformat() if last else None,
        "clinics": clinic_rows,
        "top_medicines": top[:top_n] if top_n else top,
        "total_quantity": sum(totals.values()),
        "total_users": len(users),
        "active_users": sum(1 for u in users if u.id in active_ids),
    }
