from __future__ import annotations

import logging
from datetime import UTC, date, datetime
from uuid import UUID

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from housy.core.config import get_settings
from housy.core.errors import NotFound, ValidationError
from housy.models.bill import BillCategory, BillSource, BillStatus, RecurringBill
from housy.services.access import commit_or_raise, require_admin, require_household
from housy.services.schedule_rules import get_bill_status
from housy.services.types import Actor

logger = logging.getLogger(__name__)
settings = get_settings()

BILL_NOT_FOUND = "Bill not found."


def _today() -> date:
    return datetime.now(UTC).date()


def _validate_due_day(due_day: int) -> int:
    if due_day < 1 or due_day > 31:
        raise ValidationError("Due day must be between 1 and 31.")
    return due_day


def _validate_reminder_days(days: int) -> int:
    if days < 0:
        raise ValidationError("Reminder days cannot be negative.")
    return days


def _validate_amount(amount: float | None) -> float | None:
    if amount is not None and amount < 0:
        raise ValidationError("Amount cannot be negative.")
    return amount


def _clean_name(name: str | None) -> str:
    cleaned = " ".join(str(name or "").split())
    if not cleaned:
        raise ValidationError("Bill name cannot be empty.")
    return cleaned


def bill_status(bill: RecurringBill, today: date) -> BillStatus:
    return get_bill_status(
        due_day=bill.due_day,
        reminder_days_before=bill.reminder_days_before,
        last_paid_date=bill.last_paid_date,
        today=today,
    )


async def get_bill(session: AsyncSession, *, household_id: UUID, bill_id: UUID) -> RecurringBill | None:
    result = await session.execute(
        select(RecurringBill).where(
            RecurringBill.id == bill_id,
            RecurringBill.household_id == household_id,
        )
    )
    return result.scalar_one_or_none()


async def _require_bill(session: AsyncSession, *, household_id: UUID, bill_id: UUID) -> RecurringBill:
    bill = await get_bill(session, household_id=household_id, bill_id=bill_id)
    if not bill:
        raise NotFound(BILL_NOT_FOUND)
    return bill


async def fetch_bills(
    session: AsyncSession,
    *,
    household_id: UUID,
    active_only: bool = False,
) -> list[RecurringBill]:
    stmt = select(RecurringBill).where(RecurringBill.household_id == household_id)
    if active_only:
        stmt = stmt.where(RecurringBill.is_active.is_(True))
    stmt = stmt.order_by(RecurringBill.due_day.asc(), RecurringBill.name.asc())
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def list_bills(session: AsyncSession, *, actor: Actor | None) -> list[RecurringBill]:
    household_id = require_household(actor)
    return await fetch_bills(session, household_id=household_id)


async def create_bill(
    session: AsyncSession,
    *,
    actor: Actor | None,
    name: str,
    due_day: int,
    amount: float | None = None,
    reminder_days_before: int | None = None,
    category: BillCategory | None = None,
) -> RecurringBill:
    household_id = require_admin(actor, "Only household admins can manage bills.")
    reminder_days = reminder_days_before or settings.default_bill_reminder_days
    bill = RecurringBill(
        household_id=household_id,
        name=_clean_name(name),
        amount=_validate_amount(amount),
        due_day=_validate_due_day(due_day),
        reminder_days_before=_validate_reminder_days(reminder_days),
        category=category,
        is_active=True,
        source=BillSource.MANUAL,
    )
    session.add(bill)
    await commit_or_raise(session, action="bill creation")
    await session.refresh(bill)
    return bill


async def update_bill(
    session: AsyncSession,
    *,
    actor: Actor | None,
    bill_id: UUID,
    changes: dict,
) -> RecurringBill:
    household_id = require_admin(actor, "Only household admins can manage bills.")
    bill = await _require_bill(session, household_id=household_id, bill_id=bill_id)

    if "name" in changes:
        bill.name = _clean_name(changes["name"])
    if "amount" in changes:
        bill.amount = _validate_amount(changes["amount"])
    if "due_day" in changes and changes["due_day"] is not None:
        bill.due_day = _validate_due_day(changes["due_day"])
    if "reminder_days_before" in changes and changes["reminder_days_before"] is not None:
        bill.reminder_days_before = _validate_reminder_days(changes["reminder_days_before"])
    if "category" in changes:
        bill.category = changes["category"]
    if "is_active" in changes and changes["is_active"] is not None:
        bill.is_active = bool(changes["is_active"])

    session.add(bill)
    await commit_or_raise(session, action="bill update")
    await session.refresh(bill)
    return bill


async def delete_bill(session: AsyncSession, *, actor: Actor | None, bill_id: UUID) -> None:
    household_id = require_admin(actor, "Only household admins can manage bills.")
    bill = await _require_bill(session, household_id=household_id, bill_id=bill_id)
    await session.execute(delete(RecurringBill).where(RecurringBill.id == bill.id))
    await commit_or_raise(session, action="bill deletion")


async def mark_bill_paid(
    session: AsyncSession,
    *,
    actor: Actor | None,
    bill_id: UUID,
    paid_on: date | None = None,
) -> RecurringBill:
    household_id = require_household(actor)
    bill = await _require_bill(session, household_id=household_id, bill_id=bill_id)

    bill.last_paid_date = paid_on or _today()
    session.add(bill)
    await commit_or_raise(session, action="bill payment")
    await session.refresh(bill)

    logger.info("User %s marked bill %s paid on %s", actor.user_id, bill.id, bill.last_paid_date)
    return bill


async def list_upcoming_bills(
    session: AsyncSession,
    *,
    actor: Actor | None,
    today: date | None = None,
) -> list[tuple[RecurringBill, BillStatus]]:
    """Active bills inside their reminder window, soonest due day first."""
    household_id = require_household(actor)
    today = today or _today()
    bills = await fetch_bills(session, household_id=household_id, active_only=True)

    flagged: list[tuple[RecurringBill, BillStatus]] = []
    for bill in bills:
        status = bill_status(bill, today)
        if status == BillStatus.UPCOMING:
            flagged.append((bill, status))
    return flagged
