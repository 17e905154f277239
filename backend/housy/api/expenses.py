from datetime import date
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from housy.api.deps import get_actor
from housy.core.db import get_session
from housy.schemas.common import ActionResponse
from housy.schemas.expense import (
    ExpenseActionResponse,
    ExpenseCategoryRef,
    ExpenseCreateRequest,
    ExpenseGroupResponse,
    ExpenseItem,
    ExpenseListResponse,
    ExpenseSummaryResponse,
    ExpenseUpdateRequest,
)
from housy.services import expense_service
from housy.services.expense_service import ExpenseGroup, ExpenseRow
from housy.services.types import Actor

router = APIRouter(prefix="/expenses", tags=["expenses"])


def to_expense_item(row: ExpenseRow) -> ExpenseItem:
    expense = row.expense
    return ExpenseItem(
        id=str(expense.id),
        amount=expense.amount,
        description=expense.description,
        date_incurred=str(expense.date_incurred),
        is_shared=expense.is_shared,
        category=(
            ExpenseCategoryRef(
                id=str(expense.category_id),
                name=row.category_name or expense_service.UNCATEGORIZED_NAME,
                color=row.category_color,
            )
            if expense.category_id
            else None
        ),
        user_id=str(expense.user_id),
        user_name=row.user_name,
        created_at=expense.created_at.isoformat(),
    )


def to_group_response(group: ExpenseGroup) -> ExpenseGroupResponse:
    return ExpenseGroupResponse(
        key=group.key,
        name=group.name,
        color=group.color,
        total=round(group.total, 2),
        count=group.count,
    )


@router.get("", response_model=ExpenseListResponse)
async def list_expenses(
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    category_id: UUID | None = Query(default=None),
    user_id: UUID | None = Query(default=None),
    limit: int = Query(default=50, ge=1, le=expense_service.MAX_PAGE_SIZE),
    offset: int = Query(default=0, ge=0),
    actor: Actor | None = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
) -> ExpenseListResponse:
    rows, total_count = await expense_service.list_expenses(
        session,
        actor=actor,
        start=start_date,
        end=end_date,
        category_id=category_id,
        user_id=user_id,
        limit=limit,
        offset=offset,
    )
    return ExpenseListResponse(
        items=[to_expense_item(row) for row in rows],
        total_count=total_count,
    )


@router.get("/summary", response_model=ExpenseSummaryResponse)
async def expenses_summary(
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    actor: Actor | None = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
) -> ExpenseSummaryResponse:
    period_start, period_end, summary = await expense_service.get_expenses_summary(
        session,
        actor=actor,
        start=start_date,
        end=end_date,
    )
    return ExpenseSummaryResponse(
        period_start=period_start.isoformat(),
        period_end=period_end.isoformat(),
        total=round(summary.total, 2),
        count=summary.count,
        average=round(summary.average, 2),
        by_category=[to_group_response(group) for group in summary.by_category],
        by_user=[to_group_response(group) for group in summary.by_user],
    )


@router.post("", response_model=ExpenseActionResponse, status_code=status.HTTP_201_CREATED)
async def create_expense(
    payload: ExpenseCreateRequest,
    actor: Actor | None = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
) -> ExpenseActionResponse:
    row = await expense_service.create_expense(
        session,
        actor=actor,
        amount=payload.amount,
        description=payload.description,
        category_id=payload.category_id,
        date_incurred=payload.date_incurred,
        is_shared=payload.is_shared,
    )
    return ExpenseActionResponse(expense=to_expense_item(row))


@router.patch("/{expense_id}", response_model=ExpenseActionResponse)
async def update_expense(
    expense_id: UUID,
    payload: ExpenseUpdateRequest,
    actor: Actor | None = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
) -> ExpenseActionResponse:
    row = await expense_service.update_expense(
        session,
        actor=actor,
        expense_id=expense_id,
        changes=payload.model_dump(exclude_unset=True),
    )
    return ExpenseActionResponse(expense=to_expense_item(row))


@router.delete("/{expense_id}", response_model=ActionResponse)
async def delete_expense(
    expense_id: UUID,
    actor: Actor | None = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
) -> ActionResponse:
    await expense_service.delete_expense(session, actor=actor, expense_id=expense_id)
    return ActionResponse()
