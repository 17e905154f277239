"""Home screen summary: this month's spending, chores, waste and bills at a glance."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, time

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from housy.models.bill import BillStatus, RecurringBill
from housy.models.chore import Chore, ChoreCompletion
from housy.models.household import Household
from housy.services.access import require_household
from housy.services.bill_service import bill_status, fetch_bills
from housy.services.expense_service import ExpenseRow, ExpenseSummary, fetch_expense_rows, summarize_expenses
from housy.services.schedule_rules import first_day_of_month, last_day_of_month
from housy.services.types import Actor
from housy.services.waste_service import NextCollection, fetch_schedules, resolve_next_collection

RECENT_EXPENSES = 4


@dataclass
class ChoreOverview:
    due_today: int = 0
    overdue: int = 0
    my_points: int = 0
    next_chore: Chore | None = None


@dataclass
class BillOverview:
    upcoming: int = 0
    overdue: int = 0
    next_bill: RecurringBill | None = None


@dataclass
class DashboardSummary:
    period_start: datetime
    period_end: datetime
    budget: float | None
    expenses: ExpenseSummary
    recent_expenses: list[ExpenseRow]
    chores: ChoreOverview
    next_collection: NextCollection | None
    bills: BillOverview


def summarize_chores(chores: list[Chore], *, actor: Actor, now: datetime) -> ChoreOverview:
    """Count due/overdue chores and pick the actor's soonest one.

    ``chores`` must already be ordered by due date.
    """
    today_start = datetime.combine(now.date(), time.min)
    today_end = datetime.combine(now.date(), time.max)
    overview = ChoreOverview()
    for chore in chores:
        if chore.next_due is not None:
            if chore.next_due < today_start:
                overview.overdue += 1
            elif chore.next_due <= today_end:
                overview.due_today += 1
        if overview.next_chore is None and chore.current_assignee == actor.user_id:
            overview.next_chore = chore
    return overview


def summarize_bills(bills: list[RecurringBill], *, now: datetime) -> BillOverview:
    overview = BillOverview()
    for bill in bills:
        status = bill_status(bill, now.date())
        if status == BillStatus.OVERDUE:
            overview.overdue += 1
        elif status == BillStatus.UPCOMING:
            overview.upcoming += 1
            if overview.next_bill is None:
                overview.next_bill = bill
    return overview


async def get_dashboard_summary(
    session: AsyncSession,
    *,
    actor: Actor | None,
    now: datetime | None = None,
) -> DashboardSummary:
    household_id = require_household(actor)
    now = now or datetime.now(UTC).replace(tzinfo=None)
    month_start = first_day_of_month(now.date())
    month_end = last_day_of_month(now.date())
    period_start = datetime.combine(month_start, time.min)
    period_end = datetime.combine(month_end, time.max)

    budget_result = await session.execute(
        select(Household.monthly_budget).where(Household.id == household_id)
    )
    budget = budget_result.scalar_one_or_none()

    rows = await fetch_expense_rows(
        session,
        household_id=household_id,
        start=month_start,
        end=month_end,
    )

    chores_result = await session.execute(
        select(Chore)
        .where(Chore.household_id == household_id, Chore.is_active.is_(True))
        .order_by(Chore.next_due.is_(None), Chore.next_due.asc())
    )
    chores = summarize_chores(list(chores_result.scalars().all()), actor=actor, now=now)

    points_result = await session.execute(
        select(func.coalesce(func.sum(ChoreCompletion.points_earned), 0)).where(
            ChoreCompletion.household_id == household_id,
            ChoreCompletion.user_id == actor.user_id,
            ChoreCompletion.completed_at >= period_start,
            ChoreCompletion.completed_at <= period_end,
        )
    )
    chores.my_points = int(points_result.scalar_one())

    schedules = await fetch_schedules(session, household_id=household_id, active_only=True)
    bills = await fetch_bills(session, household_id=household_id, active_only=True)

    return DashboardSummary(
        period_start=period_start,
        period_end=period_end,
        budget=budget,
        expenses=summarize_expenses(rows),
        recent_expenses=rows[:RECENT_EXPENSES],
        chores=chores,
        next_collection=resolve_next_collection(schedules, now.date()),
        bills=summarize_bills(bills, now=now),
    )
