from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from housy.api.deps import get_actor
from housy.api.expenses import to_expense_item, to_group_response
from housy.api.waste import to_next_collection_response
from housy.core.db import get_session
from housy.schemas.dashboard import (
    DashboardBills,
    DashboardChores,
    DashboardExpenses,
    DashboardNextBill,
    DashboardNextChore,
    DashboardResponse,
)
from housy.services import dashboard_service
from housy.services.types import Actor

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardResponse)
async def dashboard(
    actor: Actor | None = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
) -> DashboardResponse:
    summary = await dashboard_service.get_dashboard_summary(session, actor=actor)
    next_chore = summary.chores.next_chore
    next_bill = summary.bills.next_bill

    return DashboardResponse(
        period_start=summary.period_start.date().isoformat(),
        period_end=summary.period_end.date().isoformat(),
        expenses=DashboardExpenses(
            total_month=round(summary.expenses.total, 2),
            expense_count=summary.expenses.count,
            average_expense=round(summary.expenses.average, 2),
            budget=summary.budget,
            by_category=[to_group_response(group) for group in summary.expenses.by_category],
            recent=[to_expense_item(row) for row in summary.recent_expenses],
        ),
        chores=DashboardChores(
            due_today=summary.chores.due_today,
            overdue=summary.chores.overdue,
            my_points=summary.chores.my_points,
            next_chore=(
                DashboardNextChore(
                    id=str(next_chore.id),
                    name=next_chore.name,
                    next_due=next_chore.next_due.isoformat() if next_chore.next_due else None,
                )
                if next_chore
                else None
            ),
        ),
        waste=(
            to_next_collection_response(summary.next_collection)
            if summary.next_collection
            else None
        ),
        bills=DashboardBills(
            upcoming_count=summary.bills.upcoming,
            overdue_count=summary.bills.overdue,
            next_bill=(
                DashboardNextBill(
                    id=str(next_bill.id),
                    name=next_bill.name,
                    due_day=next_bill.due_day,
                    amount=next_bill.amount,
                )
                if next_bill
                else None
            ),
        ),
    )
