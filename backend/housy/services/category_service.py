from __future__ import annotations

from uuid import UUID

from sqlalchemy import delete, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from housy.core.errors import AlreadyExists, NotFound, ValidationError
from housy.models.expense import Expense
from housy.models.expense_category import (
    DEFAULT_CATEGORY_COLOR,
    DEFAULT_CATEGORY_ICON,
    ExpenseCategory,
)
from housy.services.access import commit_or_raise, require_admin, require_household
from housy.services.types import Actor

CATEGORY_NOT_FOUND = "Category not found."


def normalize_category_name(name: str) -> str:
    return " ".join(str(name or "").strip().lower().split())


def clean_category_name(name: str) -> str:
    return " ".join(str(name or "").strip().split())


async def get_category(
    session: AsyncSession,
    *,
    household_id: UUID,
    category_id: UUID,
) -> ExpenseCategory | None:
    result = await session.execute(
        select(ExpenseCategory).where(
            ExpenseCategory.id == category_id,
            ExpenseCategory.household_id == household_id,
        )
    )
    return result.scalar_one_or_none()


async def _ensure_unique_name(
    session: AsyncSession,
    *,
    household_id: UUID,
    normalized_name: str,
    exclude_id: UUID | None = None,
) -> None:
    stmt = select(ExpenseCategory.id).where(
        ExpenseCategory.household_id == household_id,
        ExpenseCategory.normalized_name == normalized_name,
    )
    if exclude_id is not None:
        stmt = stmt.where(ExpenseCategory.id != exclude_id)
    result = await session.execute(stmt)
    if result.first() is not None:
        raise AlreadyExists("A category with this name already exists.")


async def list_categories(session: AsyncSession, *, actor: Actor | None) -> list[ExpenseCategory]:
    household_id = require_household(actor)
    result = await session.execute(
        select(ExpenseCategory)
        .where(ExpenseCategory.household_id == household_id)
        .order_by(ExpenseCategory.normalized_name.asc())
    )
    return list(result.scalars().all())


async def create_category(
    session: AsyncSession,
    *,
    actor: Actor | None,
    name: str,
    icon: str | None = None,
    color: str | None = None,
) -> ExpenseCategory:
    household_id = require_admin(actor, "Only household admins can manage categories.")
    cleaned = clean_category_name(name)
    if not cleaned:
        raise ValidationError("Category name cannot be empty.")
    normalized = normalize_category_name(cleaned)
    await _ensure_unique_name(session, household_id=household_id, normalized_name=normalized)

    category = ExpenseCategory(
        household_id=household_id,
        name=cleaned,
        normalized_name=normalized,
        icon=icon or DEFAULT_CATEGORY_ICON,
        color=color or DEFAULT_CATEGORY_COLOR,
    )
    session.add(category)
    await commit_or_raise(session, action="category creation")
    await session.refresh(category)
    return category


async def update_category(
    session: AsyncSession,
    *,
    actor: Actor | None,
    category_id: UUID,
    name: str | None = None,
    icon: str | None = None,
    color: str | None = None,
) -> ExpenseCategory:
    household_id = require_admin(actor, "Only household admins can manage categories.")
    category = await get_category(session, household_id=household_id, category_id=category_id)
    if not category:
        raise NotFound(CATEGORY_NOT_FOUND)

    if name is not None:
        cleaned = clean_category_name(name)
        if not cleaned:
            raise ValidationError("Category name cannot be empty.")
        normalized = normalize_category_name(cleaned)
        await _ensure_unique_name(
            session,
            household_id=household_id,
            normalized_name=normalized,
            exclude_id=category.id,
        )
        category.name = cleaned
        category.normalized_name = normalized
    if icon is not None:
        category.icon = icon
    if color is not None:
        category.color = color

    session.add(category)
    await commit_or_raise(session, action="category update")
    await session.refresh(category)
    return category


async def delete_category(session: AsyncSession, *, actor: Actor | None, category_id: UUID) -> None:
    """Delete a category; its expenses are kept and become uncategorized."""
    household_id = require_admin(actor, "Only household admins can manage categories.")
    category = await get_category(session, household_id=household_id, category_id=category_id)
    if not category:
        raise NotFound(CATEGORY_NOT_FOUND)

    await session.execute(
        update(Expense)
        .where(Expense.category_id == category.id)
        .values(category_id=None)
    )
    await session.execute(delete(ExpenseCategory).where(ExpenseCategory.id == category.id))
    await commit_or_raise(session, action="category deletion")
