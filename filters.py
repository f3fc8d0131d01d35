"""Period, status and text filtering over an in-memory list of requests.

Everything here is pure: callers pass the snapshot fetched from the store
plus "now", and get new lists back. The three filters are independent
predicates, so their order does not change the result.
"""

from __future__ import annotations

from calendar import monthrange
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Iterable, NamedTuple

from models import TaskStatus, task_type_label, status_label

EPOCH = datetime(1970, 1, 1)
DATE_FORMAT = "%Y-%m-%d"

ALL = "all"


class Period(str, Enum):
    ALL = "all"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


EXPORT_PERIODS = (Period.WEEKLY, Period.MONTHLY, Period.YEARLY)

EXPORT_COLUMNS = (
    "Task ID",
    "Requester Name",
    "Employee ID",
    "Branch / Department",
    "Email",
    "Task Type",
    "Description",
    "Date Requested",
    "Deadline",
    "Status",
    "Notes",
)


class StatusCounts(NamedTuple):
    total: int = 0
    pending: int = 0
    in_progress: int = 0
    completed: int = 0
    cancelled: int = 0


# ── Parsing ──────────────────────────────────────────────────────────

def parse_period(value: str | None, default: Period = Period.ALL) -> Period:
    if not value:
        return default
    return Period(value.strip().lower())


def parse_status_filter(value: str | None) -> TaskStatus | None:
    """None means "all statuses"."""
    if not value or value.strip().lower() == ALL:
        return None
    return TaskStatus(value.strip().lower())


# ── Period bucketing ─────────────────────────────────────────────────

def _day_start(day: date) -> datetime:
    return datetime.combine(day, time.min)


def _day_end(day: date) -> datetime:
    return datetime.combine(day, time.max)


def period_bounds(period: Period, now: datetime) -> tuple[datetime, datetime]:
    """Inclusive (start, end) interval for `period` around `now`.

    Weeks start on Monday. ALL spans from the epoch up to `now`.
    """
    period = Period(period)
    today = now.date()
    if period is Period.WEEKLY:
        monday = today - timedelta(days=today.weekday())
        return _day_start(monday), _day_end(monday + timedelta(days=6))
    if period is Period.MONTHLY:
        last_day = monthrange(today.year, today.month)[1]
        return _day_start(today.replace(day=1)), _day_end(today.replace(day=last_day))
    if period is Period.YEARLY:
        return _day_start(date(today.year, 1, 1)), _day_end(date(today.year, 12, 31))
    return EPOCH, now


def in_period(req, period: Period, now: datetime) -> bool:
    if Period(period) is Period.ALL:
        return True
    start, end = period_bounds(period, now)
    return start <= req.date_requested <= end


def filter_by_period(requests: Iterable, period: Period, now: datetime) -> list:
    return [r for r in requests if in_period(r, period, now)]


# ── Status ───────────────────────────────────────────────────────────

def matches_status(req, status: TaskStatus | str | None) -> bool:
    if status is None or status == ALL:
        return True
    return req.status == TaskStatus(status).value


def filter_by_status(requests: Iterable, status: TaskStatus | str | None) -> list:
    return [r for r in requests if matches_status(r, status)]


# ── Free-text search ─────────────────────────────────────────────────

def _search_fields(req):
    employee = req.employee
    yield req.task_id
    if employee is not None:
        yield employee.full_name
        yield employee.email
    yield req.task_description
    if employee is not None:
        yield employee.branch
    yield task_type_label(req.task_type)


def matches_query(req, query: str | None) -> bool:
    needle = (query or "").strip().lower()
    if not needle:
        return True
    return any(needle in field.lower() for field in _search_fields(req) if field)


def search_requests(requests: Iterable, query: str | None) -> list:
    if not (query or "").strip():
        return list(requests)
    return [r for r in requests if matches_query(r, query)]


# ── Composition & aggregation ────────────────────────────────────────

def apply_filters(requests: Iterable, period: Period = Period.ALL,
                  status: TaskStatus | str | None = None,
                  query: str | None = None, now: datetime | None = None) -> list:
    now = now or datetime.now()
    filtered = filter_by_period(requests, period, now)
    filtered = filter_by_status(filtered, status)
    return search_requests(filtered, query)


def count_by_status(requests: Iterable) -> StatusCounts:
    counts = dict.fromkeys(StatusCounts._fields, 0)
    for req in requests:
        counts["total"] += 1
        counts[TaskStatus(req.status).value] += 1
    return StatusCounts(**counts)


# ── Export projection ────────────────────────────────────────────────

def export_row(req) -> dict:
    employee = req.employee
    return {
        "Task ID": req.task_id,
        "Requester Name": employee.full_name,
        "Employee ID": employee.employee_id,
        "Branch / Department": employee.branch,
        "Email": employee.email or "",
        "Task Type": task_type_label(req.task_type),
        "Description": req.task_description,
        "Date Requested": req.date_requested.strftime(DATE_FORMAT),
        "Deadline": req.target_completion_date.strftime(DATE_FORMAT),
        "Status": status_label(req.status),
        "Notes": req.notes or "",
    }


def export_rows(requests: Iterable, period: Period, now: datetime | None = None) -> list[dict]:
    now = now or datetime.now()
    return [export_row(r) for r in filter_by_period(requests, period, now)]
