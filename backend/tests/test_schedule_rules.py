from datetime import date, datetime, time, timedelta
from uuid import uuid4

import pytest

from housy.models.bill import BillStatus
from housy.models.chore import ChoreFrequency
from housy.models.waste import WasteSchedule, WasteType
from housy.services.schedule_rules import (
    add_months,
    days_until_weekday,
    get_bill_status,
    is_bill_upcoming,
    next_assignee,
    next_due_date,
    next_waste_collection,
    normalize_rotation_order,
    sunday_based_weekday,
)


def _schedule(day_of_week: int, waste_type: WasteType = WasteType.GENERAL) -> WasteSchedule:
    return WasteSchedule(
        household_id=uuid4(),
        waste_type=waste_type,
        day_of_week=day_of_week,
        reminder_time=time(20, 0),
    )


def test_rotation_returns_to_first_member_after_full_cycle() -> None:
    members = [uuid4() for _ in range(4)]
    order = [str(member) for member in members]

    assignee = members[0]
    for _ in range(len(order)):
        assignee = next_assignee(order, assignee, assignee)

    assert assignee == members[0]


def test_rotation_hands_to_next_member_in_order() -> None:
    first, second, third = uuid4(), uuid4(), uuid4()
    order = [str(first), str(second), str(third)]

    assert next_assignee(order, first, first) == second
    assert next_assignee(order, second, second) == third
    assert next_assignee(order, third, third) == first


def test_rotation_falls_back_to_first_member_for_outsider() -> None:
    first, second = uuid4(), uuid4()
    outsider = uuid4()

    assert next_assignee([str(first), str(second)], outsider, outsider) == first


def test_empty_rotation_keeps_current_assignee() -> None:
    current = uuid4()
    assert next_assignee([], uuid4(), current) == current
    assert next_assignee([], uuid4(), None) is None


def test_normalize_rotation_order_drops_duplicates_keeping_first_position() -> None:
    first, second = uuid4(), uuid4()
    assert normalize_rotation_order([first, second, first, str(second)]) == [str(first), str(second)]


@pytest.mark.parametrize(
    ("frequency", "expected_delta"),
    [
        (ChoreFrequency.DAILY, timedelta(days=1)),
        (ChoreFrequency.WEEKLY, timedelta(days=7)),
    ],
)
def test_fixed_interval_due_dates(frequency: ChoreFrequency, expected_delta: timedelta) -> None:
    completed_at = datetime(2026, 3, 14, 18, 30)
    due = next_due_date(frequency, completed_at)

    assert due == completed_at + expected_delta
    assert due > completed_at


def test_monthly_due_date_uses_calendar_months() -> None:
    assert next_due_date(ChoreFrequency.MONTHLY, datetime(2026, 3, 14, 9, 0)) == datetime(2026, 4, 14, 9, 0)
    assert next_due_date(ChoreFrequency.MONTHLY, datetime(2026, 12, 5)) == datetime(2027, 1, 5)


def test_monthly_due_date_clamps_to_end_of_shorter_month() -> None:
    assert next_due_date(ChoreFrequency.MONTHLY, datetime(2025, 1, 31, 8, 0)) == datetime(2025, 2, 28, 8, 0)
    assert next_due_date(ChoreFrequency.MONTHLY, datetime(2024, 1, 31, 8, 0)) == datetime(2024, 2, 29, 8, 0)
    assert add_months(datetime(2026, 5, 31), 1) == datetime(2026, 6, 30)


def test_unknown_frequency_is_rejected() -> None:
    with pytest.raises(ValueError):
        next_due_date("fortnightly", datetime(2026, 1, 1))  # type: ignore[arg-type]


@pytest.mark.parametrize(
    ("today", "expected"),
    [
        (date(2026, 3, 8), BillStatus.UPCOMING),
        (date(2026, 3, 12), BillStatus.OVERDUE),
        (date(2026, 3, 5), BillStatus.NORMAL),
        (date(2026, 3, 10), BillStatus.UPCOMING),
        (date(2026, 3, 7), BillStatus.UPCOMING),
    ],
)
def test_bill_status_for_due_day_ten(today: date, expected: BillStatus) -> None:
    status = get_bill_status(
        due_day=10,
        reminder_days_before=3,
        last_paid_date=None,
        today=today,
    )
    assert status == expected


def test_bill_paid_this_month_wins_over_overdue() -> None:
    status = get_bill_status(
        due_day=5,
        reminder_days_before=3,
        last_paid_date=date(2026, 3, 2),
        today=date(2026, 3, 20),
    )
    assert status == BillStatus.PAID


def test_bill_paid_last_month_or_last_year_is_not_paid() -> None:
    kwargs = {"due_day": 5, "reminder_days_before": 3, "today": date(2026, 3, 20)}
    assert get_bill_status(last_paid_date=date(2026, 2, 5), **kwargs) == BillStatus.OVERDUE
    assert get_bill_status(last_paid_date=date(2025, 3, 5), **kwargs) == BillStatus.OVERDUE


def test_bill_status_is_deterministic() -> None:
    kwargs = {
        "due_day": 15,
        "reminder_days_before": 3,
        "last_paid_date": None,
        "today": date(2026, 6, 13),
    }
    assert get_bill_status(**kwargs) == get_bill_status(**kwargs)


def test_bill_reminder_window_defaults_to_three_days() -> None:
    assert (
        get_bill_status(due_day=10, reminder_days_before=None, last_paid_date=None, today=date(2026, 3, 7))
        == BillStatus.UPCOMING
    )
    assert (
        get_bill_status(due_day=10, reminder_days_before=None, last_paid_date=None, today=date(2026, 3, 6))
        == BillStatus.NORMAL
    )


@pytest.mark.parametrize("today", [date(2026, 3, 6), date(2026, 3, 7), date(2026, 3, 8), date(2026, 3, 10)])
def test_zero_reminder_window_behaves_like_the_default(today: date) -> None:
    kwargs = {"due_day": 10, "last_paid_date": None, "today": today}
    assert get_bill_status(reminder_days_before=0, **kwargs) == get_bill_status(
        reminder_days_before=3, **kwargs
    )


def test_zero_reminder_window_still_flags_a_bill_two_days_out() -> None:
    status = get_bill_status(
        due_day=10,
        reminder_days_before=0,
        last_paid_date=None,
        today=date(2026, 3, 8),
    )
    assert status == BillStatus.UPCOMING


def test_bill_due_on_31st_is_never_overdue_in_a_30_day_month() -> None:
    status = get_bill_status(
        due_day=31,
        reminder_days_before=3,
        last_paid_date=None,
        today=date(2026, 4, 30),
    )
    assert status == BillStatus.UPCOMING


def test_is_bill_upcoming() -> None:
    assert is_bill_upcoming(due_day=10, reminder_days_before=3, last_paid_date=None, today=date(2026, 3, 8))
    assert not is_bill_upcoming(
        due_day=10,
        reminder_days_before=3,
        last_paid_date=date(2026, 3, 1),
        today=date(2026, 3, 8),
    )
    assert not is_bill_upcoming(due_day=10, reminder_days_before=3, last_paid_date=None, today=date(2026, 3, 11))


def test_sunday_based_weekday() -> None:
    assert sunday_based_weekday(date(2026, 10, 18)) == 0
    assert sunday_based_weekday(date(2026, 10, 19)) == 1
    assert sunday_based_weekday(date(2026, 10, 24)) == 6


def test_next_waste_collection_picks_next_day_this_week() -> None:
    tuesday = _schedule(2, WasteType.PAPER)
    friday = _schedule(5, WasteType.GLASS)

    assert next_waste_collection([friday, tuesday], 3) == [friday]
    assert next_waste_collection([friday, tuesday], 1) == [tuesday]


def test_next_waste_collection_skips_today_and_wraps_to_next_week() -> None:
    monday = _schedule(1)
    wednesday = _schedule(3)

    assert next_waste_collection([monday, wednesday], 3) == [monday]
    assert next_waste_collection([monday, wednesday], 6) == [monday]


def test_next_waste_collection_returns_every_type_on_that_day() -> None:
    plastic = _schedule(4, WasteType.PLASTIC)
    paper = _schedule(4, WasteType.PAPER)
    organic = _schedule(6, WasteType.ORGANIC)

    assert next_waste_collection([plastic, organic, paper], 2) == [plastic, paper]


def test_next_waste_collection_without_schedules() -> None:
    assert next_waste_collection([], 3) == []


def test_days_until_weekday() -> None:
    assert days_until_weekday(1, 4) == 3
    assert days_until_weekday(5, 1) == 3
    assert days_until_weekday(3, 3) == 7
