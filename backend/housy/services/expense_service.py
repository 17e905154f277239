"""Expense records and the grouping/summation used by summaries."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from uuid import UUID

from sqlalchemy import delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from housy.core.errors import Forbidden, NotFound, ValidationError
from housy.models.expense import Expense
from housy.models.expense_category import DEFAULT_CATEGORY_COLOR, ExpenseCategory
from housy.models.user import User
from housy.services.access import commit_or_raise, require_household
from housy.services.category_service import get_category
from housy.services.schedule_rules import first_day_of_month, last_day_of_month
from housy.services.types import Actor

EXPENSE_NOT_FOUND = "Expense not found."
MAX_PAGE_SIZE = 200
UNCATEGORIZED_NAME = "Uncategorized"
UNKNOWN_USER_NAME = "Former member"


def _today() -> date:
    return datetime.now(UTC).date()


@dataclass
class ExpenseRow:
    """An expense joined with the display names needed for grouping."""

    expense: Expense
    category_name: str | None = None
    category_color: str | None = None
    user_name: str | None = None


@dataclass
class ExpenseGroup:
    key: str | None
    name: str
    color: str | None = None
    total: float = 0.0
    count: int = 0


@dataclass
class ExpenseSummary:
    total: float = 0.0
    count: int = 0
    average: float = 0.0
    by_category: list[ExpenseGroup] = field(default_factory=list)
    by_user: list[ExpenseGroup] = field(default_factory=list)


def _group(rows: Iterable[tuple[str | None, str, str | None, float]]) -> list[ExpenseGroup]:
    groups: dict[str | None, ExpenseGroup] = {}
    for key, name, color, amount in rows:
        group = groups.get(key)
        if group is None:
            group = groups[key] = ExpenseGroup(key=key, name=name, color=color)
        group.total += amount
        group.count += 1
    return sorted(groups.values(), key=lambda group: group.total, reverse=True)


def summarize_expenses(rows: Iterable[ExpenseRow]) -> ExpenseSummary:
    rows = list(rows)
    total = sum(row.expense.amount for row in rows)
    count = len(rows)
    return ExpenseSummary(
        total=total,
        count=count,
        average=total / count if count else 0.0,
        by_category=_group(
            (
                str(row.expense.category_id) if row.expense.category_id else None,
                row.category_name or UNCATEGORIZED_NAME,
                row.category_color or DEFAULT_CATEGORY_COLOR,
                row.expense.amount,
            )
            for row in rows
        ),
        by_user=_group(
            (
                str(row.expense.user_id),
                row.user_name or UNKNOWN_USER_NAME,
                None,
                row.expense.amount,
            )
            for row in rows
        ),
    )


def _validate_amount(amount: float) -> float:
    if amount is None or amount <= 0:
        raise ValidationError("Amount must be greater than zero.")
    return float(amount)


def _clean_description(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = " ".join(value.strip().split())
    return cleaned or None


async def _require_category(
    session: AsyncSession,
    *,
    household_id: UUID,
    category_id: UUID | None,
) -> UUID | None:
    if category_id is None:
        return None
    category = await get_category(session, household_id=household_id, category_id=category_id)
    if not category:
        raise ValidationError("The category does not belong to your household.")
    return category.id


def _row_filters(
    household_id: UUID,
    *,
    start: date | None = None,
    end: date | None = None,
    category_id: UUID | None = None,
    user_id: UUID | None = None,
) -> list:
    filters = [Expense.household_id == household_id]
    if start is not None:
        filters.append(Expense.date_incurred >= start)
    if end is not None:
        filters.append(Expense.date_incurred <= end)
    if category_id is not None:
        filters.append(Expense.category_id == category_id)
    if user_id is not None:
        filters.append(Expense.user_id == user_id)
    return filters


async def fetch_expense_rows(
    session: AsyncSession,
    *,
    household_id: UUID,
    start: date | None = None,
    end: date | None = None,
    category_id: UUID | None = None,
    user_id: UUID | None = None,
    limit: int | None = None,
    offset: int = 0,
) -> list[ExpenseRow]:
    stmt = (
        select(Expense, ExpenseCategory.name, ExpenseCategory.color, User)
        .join(ExpenseCategory, ExpenseCategory.id == Expense.category_id, isouter=True)
        .join(User, User.id == Expense.user_id, isouter=True)
        .where(
            *_row_filters(
                household_id,
                start=start,
                end=end,
                category_id=category_id,
                user_id=user_id,
            )
        )
        .order_by(Expense.date_incurred.desc(), Expense.created_at.desc())
    )
    if offset:
        stmt = stmt.offset(offset)
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await session.execute(stmt)
    return [
        ExpenseRow(
            expense=expense,
            category_name=category_name,
            category_color=category_color,
            user_name=user.display_name if user else None,
        )
        for expense, category_name, category_color, user in result.all()
    ]


async def list_expenses(
    session: AsyncSession,
    *,
    actor: Actor | None,
    start: date | None = None,
    end: date | None = None,
    category_id: UUID | None = None,
    user_id: UUID | None = None,
    limit: int = 50,
    offset: int = 0,
) -> tuple[list[ExpenseRow], int]:
    household_id = require_household(actor)
    if limit < 1 or limit > MAX_PAGE_SIZE:
        raise ValidationError(f"Limit must be between 1 and {MAX_PAGE_SIZE}.")
    if offset < 0:
        raise ValidationError("Offset cannot be negative.")

    total_result = await session.execute(
        select(func.count())
        .select_from(Expense)
        .where(
            *_row_filters(
                household_id,
                start=start,
                end=end,
                category_id=category_id,
                user_id=user_id,
            )
        )
    )
    rows = await fetch_expense_rows(
        session,
        household_id=household_id,
        start=start,
        end=end,
        category_id=category_id,
        user_id=user_id,
        limit=limit,
        offset=offset,
    )
    return rows, int(total_result.scalar_one())


async def _get_row(session: AsyncSession, *, household_id: UUID, expense_id: UUID) -> ExpenseRow:
    result = await session.execute(
        select(Expense, ExpenseCategory.name, ExpenseCategory.color, User)
        .join(ExpenseCategory, ExpenseCategory.id == Expense.category_id, isouter=True)
        .join(User, User.id == Expense.user_id, isouter=True)
        .where(Expense.id == expense_id, Expense.household_id == household_id)
    )
    row = result.first()
    if row is None:
        raise NotFound(EXPENSE_NOT_FOUND)
    expense, category_name, category_color, user = row
    return ExpenseRow(
        expense=expense,
        category_name=category_name,
        category_color=category_color,
        user_name=user.display_name if user else None,
    )


async def create_expense(
    session: AsyncSession,
    *,
    actor: Actor | None,
    amount: float,
    description: str | None = None,
    category_id: UUID | None = None,
    date_incurred: date | None = None,
    is_shared: bool = True,
) -> ExpenseRow:
    household_id = require_household(actor)
    expense = Expense(
        household_id=household_id,
        user_id=actor.user_id,
        category_id=await _require_category(
            session,
            household_id=household_id,
            category_id=category_id,
        ),
        amount=_validate_amount(amount),
        description=_clean_description(description),
        date_incurred=date_incurred or _today(),
        is_shared=is_shared,
    )
    session.add(expense)
    await commit_or_raise(session, action="expense creation")
    return await _get_row(session, household_id=household_id, expense_id=expense.id)


async def _require_owned_expense(
    session: AsyncSession,
    *,
    actor: Actor,
    household_id: UUID,
    expense_id: UUID,
) -> Expense:
    result = await session.execute(
        select(Expense).where(
            Expense.id == expense_id,
            Expense.household_id == household_id,
        )
    )
    expense = result.scalar_one_or_none()
    if not expense:
        raise NotFound(EXPENSE_NOT_FOUND)
    if expense.user_id != actor.user_id:
        raise Forbidden("You can only change expenses you created.")
    return expense


async def update_expense(
    session: AsyncSession,
    *,
    actor: Actor | None,
    expense_id: UUID,
    changes: dict,
) -> ExpenseRow:
    household_id = require_household(actor)
    expense = await _require_owned_expense(
        session,
        actor=actor,
        household_id=household_id,
        expense_id=expense_id,
    )

    if "amount" in changes:
        expense.amount = _validate_amount(changes["amount"])
    if "description" in changes:
        expense.description = _clean_description(changes["description"])
    if "category_id" in changes:
        expense.category_id = await _require_category(
            session,
            household_id=household_id,
            category_id=changes["category_id"],
        )
    if "date_incurred" in changes and changes["date_incurred"] is not None:
        expense.date_incurred = changes["date_incurred"]
    if "is_shared" in changes and changes["is_shared"] is not None:
        expense.is_shared = bool(changes["is_shared"])

    session.add(expense)
    await commit_or_raise(session, action="expense update")
    return await _get_row(session, household_id=household_id, expense_id=expense.id)


async def delete_expense(session: AsyncSession, *, actor: Actor | None, expense_id: UUID) -> None:
    household_id = require_household(actor)
    expense = await _require_owned_expense(
        session,
        actor=actor,
        household_id=household_id,
        expense_id=expense_id,
    )
    await session.execute(delete(Expense).where(Expense.id == expense.id))
    await commit_or_raise(session, action="expense deletion")


async def get_expenses_summary(
    session: AsyncSession,
    *,
    actor: Actor | None,
    start: date | None = None,
    end: date | None = None,
    today: date | None = None,
) -> tuple[date, date, ExpenseSummary]:
    household_id = require_household(actor)
    today = today or _today()
    start = start or first_day_of_month(today)
    end = end or last_day_of_month(today)
    if start > end:
        raise ValidationError("The start date must be on or before the end date.")

    rows = await fetch_expense_rows(session, household_id=household_id, start=start, end=end)
    return start, end, summarize_expenses(rows)
