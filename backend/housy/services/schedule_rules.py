"""Pure scheduling rules: chore rotation, due dates, bill status, waste days.

Nothing here touches the database; callers pass "now"/"today" explicitly.
"""

from __future__ import annotations

import calendar
from collections.abc import Sequence
from datetime import date, datetime, timedelta
from typing import TypeVar
from uuid import UUID

from housy.models.bill import DEFAULT_REMINDER_DAYS, BillStatus
from housy.models.chore import ChoreFrequency
from housy.models.waste import WasteSchedule

ScheduleT = TypeVar("ScheduleT", bound=WasteSchedule)


def add_months(value: datetime, months: int) -> datetime:
    """Shift ``value`` by calendar months, clamping to the target month's last day."""
    month_index = (value.month - 1) + months
    year = value.year + (month_index // 12)
    month = (month_index % 12) + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def first_day_of_month(value: date) -> date:
    return value.replace(day=1)


def last_day_of_month(value: date) -> date:
    return value.replace(day=calendar.monthrange(value.year, value.month)[1])


def next_due_date(frequency: ChoreFrequency, from_time: datetime) -> datetime:
    if frequency == ChoreFrequency.DAILY:
        return from_time + timedelta(days=1)
    if frequency == ChoreFrequency.WEEKLY:
        return from_time + timedelta(days=7)
    if frequency == ChoreFrequency.MONTHLY:
        return add_months(from_time, 1)
    raise ValueError(f"Unsupported chore frequency: {frequency!r}")


def next_assignee(
    rotation_order: Sequence[str],
    completed_by: UUID,
    current_assignee: UUID | None,
) -> UUID | None:
    """Who takes the chore after ``completed_by`` finishes it.

    The hand-off wraps to the head of the rotation when the completer is last
    or not part of the rotation at all. An empty rotation keeps the current
    assignee.
    """
    if not rotation_order:
        return current_assignee

    try:
        index = list(rotation_order).index(str(completed_by))
    except ValueError:
        return UUID(rotation_order[0])

    if index >= len(rotation_order) - 1:
        return UUID(rotation_order[0])
    return UUID(rotation_order[index + 1])


def normalize_rotation_order(user_ids: Sequence[UUID | str]) -> list[str]:
    seen: set[str] = set()
    order: list[str] = []
    for user_id in user_ids:
        key = str(UUID(str(user_id)))
        if key in seen:
            continue
        seen.add(key)
        order.append(key)
    return order


def is_paid_this_month(last_paid_date: date | None, today: date) -> bool:
    if last_paid_date is None:
        return False
    return last_paid_date.year == today.year and last_paid_date.month == today.month


def get_bill_status(
    *,
    due_day: int,
    reminder_days_before: int | None,
    last_paid_date: date | None,
    today: date,
) -> BillStatus:
    # Plain day-of-month arithmetic: a bill due on the 31st is never overdue in
    # a 30-day month.
    if is_paid_this_month(last_paid_date, today):
        return BillStatus.PAID
    if today.day > due_day:
        return BillStatus.OVERDUE

    # An unset or zero reminder window falls back to the default.
    reminder_days = reminder_days_before or DEFAULT_REMINDER_DAYS
    if due_day - today.day <= reminder_days:
        return BillStatus.UPCOMING
    return BillStatus.NORMAL


def is_bill_upcoming(
    *,
    due_day: int,
    reminder_days_before: int | None,
    last_paid_date: date | None,
    today: date,
) -> bool:
    status = get_bill_status(
        due_day=due_day,
        reminder_days_before=reminder_days_before,
        last_paid_date=last_paid_date,
        today=today,
    )
    return status == BillStatus.UPCOMING


def sunday_based_weekday(value: date) -> int:
    """Weekday with 0 = Sunday .. 6 = Saturday."""
    return (value.weekday() + 1) % 7


def next_waste_collection(
    schedules: Sequence[ScheduleT],
    today_weekday: int,
) -> list[ScheduleT]:
    """Schedules collected on the next collection day strictly after today.

    Wraps to the earliest weekday (next week) when nothing is left this week.
    Every schedule sharing that day is returned.
    """
    if not schedules:
        return []

    days = sorted({schedule.day_of_week for schedule in schedules})
    later_this_week = [day for day in days if day > today_weekday]
    target_day = later_this_week[0] if later_this_week else days[0]
    return [schedule for schedule in schedules if schedule.day_of_week == target_day]


def days_until_weekday(today_weekday: int, target_weekday: int) -> int:
    """Days from today to the next occurrence of ``target_weekday`` (1..7)."""
    return (target_weekday - today_weekday) % 7 or 7
