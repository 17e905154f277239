from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta
from uuid import UUID

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from housy.core.errors import NotFound, ValidationError
from housy.models.waste import DAY_NAMES, WasteSchedule, WasteType
from housy.services.access import commit_or_raise, require_admin, require_household
from housy.services.schedule_rules import (
    days_until_weekday,
    next_waste_collection,
    sunday_based_weekday,
)
from housy.services.types import Actor

SCHEDULE_NOT_FOUND = "Waste schedule not found."


def _today() -> date:
    return datetime.now(UTC).date()


@dataclass
class NextCollection:
    day_of_week: int
    day_name: str
    collection_date: date
    schedules: list[WasteSchedule]


def _validate_day(day_of_week: int) -> int:
    if day_of_week < 0 or day_of_week > 6:
        raise ValidationError("Day of week must be between 0 (Sunday) and 6 (Saturday).")
    return day_of_week


async def get_schedule(
    session: AsyncSession,
    *,
    household_id: UUID,
    schedule_id: UUID,
) -> WasteSchedule | None:
    result = await session.execute(
        select(WasteSchedule).where(
            WasteSchedule.id == schedule_id,
            WasteSchedule.household_id == household_id,
        )
    )
    return result.scalar_one_or_none()


async def _require_schedule(
    session: AsyncSession,
    *,
    household_id: UUID,
    schedule_id: UUID,
) -> WasteSchedule:
    schedule = await get_schedule(session, household_id=household_id, schedule_id=schedule_id)
    if not schedule:
        raise NotFound(SCHEDULE_NOT_FOUND)
    return schedule


async def fetch_schedules(
    session: AsyncSession,
    *,
    household_id: UUID,
    active_only: bool = False,
) -> list[WasteSchedule]:
    stmt = select(WasteSchedule).where(WasteSchedule.household_id == household_id)
    if active_only:
        stmt = stmt.where(WasteSchedule.is_active.is_(True))
    stmt = stmt.order_by(WasteSchedule.day_of_week.asc(), WasteSchedule.reminder_time.asc())
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def list_schedules(session: AsyncSession, *, actor: Actor | None) -> list[WasteSchedule]:
    household_id = require_household(actor)
    return await fetch_schedules(session, household_id=household_id)


async def create_schedule(
    session: AsyncSession,
    *,
    actor: Actor | None,
    waste_type: WasteType,
    day_of_week: int,
    reminder_time: time,
    deadline_time: time | None = None,
) -> WasteSchedule:
    household_id = require_admin(actor, "Only household admins can manage the waste calendar.")
    schedule = WasteSchedule(
        household_id=household_id,
        waste_type=WasteType(waste_type),
        day_of_week=_validate_day(day_of_week),
        reminder_time=reminder_time,
        deadline_time=deadline_time,
        is_active=True,
    )
    session.add(schedule)
    await commit_or_raise(session, action="waste schedule creation")
    await session.refresh(schedule)
    return schedule


async def update_schedule(
    session: AsyncSession,
    *,
    actor: Actor | None,
    schedule_id: UUID,
    changes: dict,
) -> WasteSchedule:
    household_id = require_admin(actor, "Only household admins can manage the waste calendar.")
    schedule = await _require_schedule(session, household_id=household_id, schedule_id=schedule_id)

    if "waste_type" in changes and changes["waste_type"] is not None:
        schedule.waste_type = WasteType(changes["waste_type"])
    if "day_of_week" in changes and changes["day_of_week"] is not None:
        schedule.day_of_week = _validate_day(changes["day_of_week"])
    if "reminder_time" in changes and changes["reminder_time"] is not None:
        schedule.reminder_time = changes["reminder_time"]
    if "deadline_time" in changes:
        schedule.deadline_time = changes["deadline_time"]
    if "is_active" in changes and changes["is_active"] is not None:
        schedule.is_active = bool(changes["is_active"])

    session.add(schedule)
    await commit_or_raise(session, action="waste schedule update")
    await session.refresh(schedule)
    return schedule


async def toggle_schedule(session: AsyncSession, *, actor: Actor | None, schedule_id: UUID) -> WasteSchedule:
    household_id = require_admin(actor, "Only household admins can manage the waste calendar.")
    schedule = await _require_schedule(session, household_id=household_id, schedule_id=schedule_id)
    schedule.is_active = not schedule.is_active
    session.add(schedule)
    await commit_or_raise(session, action="waste schedule toggle")
    await session.refresh(schedule)
    return schedule


async def delete_schedule(session: AsyncSession, *, actor: Actor | None, schedule_id: UUID) -> None:
    household_id = require_admin(actor, "Only household admins can manage the waste calendar.")
    schedule = await _require_schedule(session, household_id=household_id, schedule_id=schedule_id)
    await session.execute(delete(WasteSchedule).where(WasteSchedule.id == schedule.id))
    await commit_or_raise(session, action="waste schedule deletion")


def resolve_next_collection(schedules: list[WasteSchedule], today: date) -> NextCollection | None:
    weekday = sunday_based_weekday(today)
    upcoming = next_waste_collection(schedules, weekday)
    if not upcoming:
        return None
    day = upcoming[0].day_of_week
    return NextCollection(
        day_of_week=day,
        day_name=DAY_NAMES[day],
        collection_date=today + timedelta(days=days_until_weekday(weekday, day)),
        schedules=upcoming,
    )


async def get_next_collection(
    session: AsyncSession,
    *,
    actor: Actor | None,
    today: date | None = None,
) -> NextCollection | None:
    household_id = require_household(actor)
    schedules = await fetch_schedules(session, household_id=household_id, active_only=True)
    return resolve_next_collection(schedules, today or _today())
