"""Chore scheduling: CRUD, rotation on completion and the points leaderboard."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import delete, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from housy.core.errors import NotAssignee, NotFound, ValidationError
from housy.models.chore import Chore, ChoreCompletion, ChoreFrequency
from housy.models.member import HouseholdMember
from housy.models.user import User
from housy.schemas.chore import ChoreStatsEntry
from housy.services.access import commit_or_raise, require_admin, require_household
from housy.services.membership_service import list_household_members
from housy.services.schedule_rules import next_assignee, next_due_date, normalize_rotation_order
from housy.services.types import Actor

logger = logging.getLogger(__name__)

CHORE_NOT_FOUND = "Chore not found."


def _current_time() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


@dataclass
class CompletionOutcome:
    chore: Chore
    completion: ChoreCompletion
    points_earned: int
    next_assignee: UUID | None
    next_due: datetime


async def get_chore(
    session: AsyncSession,
    *,
    household_id: UUID,
    chore_id: UUID,
) -> Chore | None:
    result = await session.execute(
        select(Chore).where(
            Chore.id == chore_id,
            Chore.household_id == household_id,
        )
    )
    return result.scalar_one_or_none()


async def _validated_rotation(
    session: AsyncSession,
    *,
    household_id: UUID,
    user_ids: Sequence[UUID],
) -> list[str]:
    order = normalize_rotation_order(user_ids)
    if not order:
        return order

    result = await session.execute(
        select(HouseholdMember.user_id).where(HouseholdMember.household_id == household_id)
    )
    member_ids = {str(user_id) for user_id in result.scalars().all()}
    outsiders = [user_id for user_id in order if user_id not in member_ids]
    if outsiders:
        raise ValidationError("The rotation can only include members of this household.")
    return order


def _clean_name(name: str | None) -> str:
    cleaned = " ".join(str(name or "").split())
    if not cleaned:
        raise ValidationError("Chore name cannot be empty.")
    return cleaned


def _validate_points(points: int) -> int:
    if points <= 0:
        raise ValidationError("Points must be a positive number.")
    return points


async def list_chores(session: AsyncSession, *, actor: Actor | None) -> list[tuple[Chore, User | None]]:
    household_id = require_household(actor)
    result = await session.execute(
        select(Chore, User)
        .join(User, User.id == Chore.current_assignee, isouter=True)
        .where(Chore.household_id == household_id)
        .order_by(Chore.next_due.is_(None), Chore.next_due.asc(), Chore.created_at.asc())
    )
    return [(chore, assignee) for chore, assignee in result.all()]


async def create_chore(
    session: AsyncSession,
    *,
    actor: Actor | None,
    name: str,
    frequency: ChoreFrequency,
    points: int = 1,
    rotation_order: Sequence[UUID] = (),
    now: datetime | None = None,
) -> Chore:
    household_id = require_admin(actor, "Only household admins can create chores.")
    order = await _validated_rotation(
        session,
        household_id=household_id,
        user_ids=rotation_order,
    )
    created_at = now or _current_time()

    chore = Chore(
        household_id=household_id,
        name=_clean_name(name),
        frequency=frequency,
        points=_validate_points(points),
        rotation_order=order,
        current_assignee=UUID(order[0]) if order else None,
        next_due=next_due_date(frequency, created_at),
        is_active=True,
        created_at=created_at,
    )
    session.add(chore)
    await commit_or_raise(session, action="chore creation")
    await session.refresh(chore)
    return chore


async def update_chore(
    session: AsyncSession,
    *,
    actor: Actor | None,
    chore_id: UUID,
    changes: dict,
) -> Chore:
    """Apply the keys present in ``changes``; absent keys are left alone."""
    household_id = require_admin(actor, "Only household admins can edit chores.")
    chore = await get_chore(session, household_id=household_id, chore_id=chore_id)
    if not chore:
        raise NotFound(CHORE_NOT_FOUND)

    if "name" in changes:
        chore.name = _clean_name(changes["name"])
    if "frequency" in changes and changes["frequency"] is not None:
        chore.frequency = ChoreFrequency(changes["frequency"])
    if "points" in changes and changes["points"] is not None:
        chore.points = _validate_points(changes["points"])
    if "is_active" in changes and changes["is_active"] is not None:
        chore.is_active = bool(changes["is_active"])

    if "rotation_order" in changes and changes["rotation_order"] is not None:
        order = await _validated_rotation(
            session,
            household_id=household_id,
            user_ids=changes["rotation_order"],
        )
        chore.rotation_order = order
        if str(chore.current_assignee) not in order:
            chore.current_assignee = UUID(order[0]) if order else None

    if "current_assignee" in changes:
        assignee = changes["current_assignee"]
        if assignee is not None and str(assignee) not in chore.rotation_order:
            raise ValidationError("The assignee must be part of the rotation.")
        chore.current_assignee = assignee

    session.add(chore)
    await commit_or_raise(session, action="chore update")
    await session.refresh(chore)
    return chore


async def delete_chore(session: AsyncSession, *, actor: Actor | None, chore_id: UUID) -> None:
    household_id = require_admin(actor, "Only household admins can delete chores.")
    chore = await get_chore(session, household_id=household_id, chore_id=chore_id)
    if not chore:
        raise NotFound(CHORE_NOT_FOUND)

    await session.execute(delete(ChoreCompletion).where(ChoreCompletion.chore_id == chore.id))
    await session.execute(delete(Chore).where(Chore.id == chore.id))
    await commit_or_raise(session, action="chore deletion")


async def complete_chore(
    session: AsyncSession,
    *,
    actor: Actor | None,
    chore_id: UUID,
    now: datetime | None = None,
) -> CompletionOutcome:
    """Record a completion by the current assignee and hand the chore on.

    The chore update is conditional on the assignee still being the actor, and
    it commits together with the completion row, so two racing completions
    cannot both succeed.
    """
    household_id = require_household(actor)
    chore = await get_chore(session, household_id=household_id, chore_id=chore_id)
    if not chore or not chore.is_active:
        raise NotFound(CHORE_NOT_FOUND)
    if chore.current_assignee != actor.user_id:
        raise NotAssignee()

    completed_at = now or _current_time()
    points_earned = chore.points
    assignee = next_assignee(chore.rotation_order, actor.user_id, chore.current_assignee)
    due = next_due_date(chore.frequency, completed_at)

    result = await session.execute(
        update(Chore)
        .where(
            Chore.id == chore.id,
            Chore.household_id == household_id,
            Chore.current_assignee == actor.user_id,
        )
        .values(
            last_completed=completed_at,
            current_assignee=assignee,
            next_due=due,
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        await session.rollback()
        logger.warning("Chore %s was handed on before %s could complete it", chore.id, actor.user_id)
        raise NotAssignee()

    completion = ChoreCompletion(
        chore_id=chore.id,
        household_id=household_id,
        user_id=actor.user_id,
        points_earned=points_earned,
        completed_at=completed_at,
    )
    session.add(completion)
    await commit_or_raise(session, action="chore completion")
    await session.refresh(chore)

    logger.info(
        "User %s completed chore %s (+%d points), next assignee %s",
        actor.user_id,
        chore.id,
        points_earned,
        assignee,
    )
    return CompletionOutcome(
        chore=chore,
        completion=completion,
        points_earned=points_earned,
        next_assignee=assignee,
        next_due=due,
    )


def fold_chore_stats(
    members: Sequence[tuple[HouseholdMember, User]],
    completions: Sequence[tuple[UUID, int]],
) -> list[ChoreStatsEntry]:
    """Leaderboard: one zeroed row per member, completions folded in, best first.

    Completions by users who are no longer members are dropped. Ties keep the
    membership order.
    """
    stats: dict[UUID, ChoreStatsEntry] = {}
    for member, user in members:
        stats[member.user_id] = ChoreStatsEntry(
            user_id=str(member.user_id),
            user_name=user.display_name,
            user_email=str(user.email),
        )

    for user_id, points_earned in completions:
        entry = stats.get(user_id)
        if entry is None:
            continue
        entry.total_points += points_earned
        entry.completed_count += 1

    return sorted(stats.values(), key=lambda entry: entry.total_points, reverse=True)


async def get_chore_stats(
    session: AsyncSession,
    *,
    actor: Actor | None,
    start: datetime | None = None,
    end: datetime | None = None,
) -> list[ChoreStatsEntry]:
    household_id = require_household(actor)
    members = await list_household_members(session, household_id=household_id)
    if not members:
        return []

    stmt = select(ChoreCompletion.user_id, ChoreCompletion.points_earned).where(
        ChoreCompletion.household_id == household_id
    )
    if start is not None:
        stmt = stmt.where(ChoreCompletion.completed_at >= start)
    if end is not None:
        stmt = stmt.where(ChoreCompletion.completed_at <= end)
    result = await session.execute(stmt)

    return fold_chore_stats(members, [(row[0], row[1]) for row in result.all()])


async def get_recent_completions(
    session: AsyncSession,
    *,
    actor: Actor | None,
    limit: int = 10,
) -> list[tuple[ChoreCompletion, Chore | None, User | None]]:
    household_id = require_household(actor)
    result = await session.execute(
        select(ChoreCompletion, Chore, User)
        .join(Chore, Chore.id == ChoreCompletion.chore_id, isouter=True)
        .join(User, User.id == ChoreCompletion.user_id, isouter=True)
        .where(ChoreCompletion.household_id == household_id)
        .order_by(ChoreCompletion.completed_at.desc())
        .limit(limit)
    )
    return [(completion, chore, user) for completion, chore, user in result.all()]
