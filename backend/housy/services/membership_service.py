"""Household membership operations and the sole-admin invariant.

A household with two or more members must always keep at least one admin.
Every path that removes a membership row (leave, remove, switch, account
deletion) goes through :func:`ensure_not_sole_admin` first.
"""

from __future__ import annotations

import logging
import secrets
from uuid import UUID

from sqlalchemy import delete, func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from housy.core.config import get_settings
from housy.core.errors import (
    AlreadyAdmin,
    AlreadyMember,
    Forbidden,
    NotFound,
    PersistenceError,
    SoleAdminConstraint,
    ValidationError,
)
from housy.models.chore import Chore
from housy.models.household import INVITE_CODE_ALPHABET, Household
from housy.models.member import HouseholdMember, MemberRole
from housy.models.user import User
from housy.services.access import (
    NO_HOUSEHOLD_MESSAGE,
    commit_or_raise,
    get_membership,
    require_actor,
    require_admin,
)
from housy.services.types import Actor

logger = logging.getLogger(__name__)
settings = get_settings()

INVITE_CODE_ATTEMPTS = 10


def normalize_invite_code(code: str) -> str:
    return "".join(str(code or "").split()).upper()


def new_invite_code(length: int | None = None) -> str:
    size = length or settings.invite_code_length
    return "".join(secrets.choice(INVITE_CODE_ALPHABET) for _ in range(size))


async def generate_unique_invite_code(session: AsyncSession) -> str:
    for _ in range(INVITE_CODE_ATTEMPTS):
        candidate = new_invite_code()
        result = await session.execute(
            select(Household.id).where(Household.invite_code == candidate)
        )
        if result.scalar_one_or_none() is None:
            return candidate
    raise PersistenceError("Unable to generate invite code. Try again.")


async def get_household_by_invite_code(session: AsyncSession, code: str) -> Household | None:
    normalized = normalize_invite_code(code)
    if not normalized:
        return None
    result = await session.execute(
        select(Household).where(Household.invite_code == normalized)
    )
    return result.scalar_one_or_none()


async def get_household(session: AsyncSession, household_id: UUID) -> Household | None:
    result = await session.execute(select(Household).where(Household.id == household_id))
    return result.scalar_one_or_none()


async def list_household_members(
    session: AsyncSession,
    *,
    household_id: UUID,
) -> list[tuple[HouseholdMember, User]]:
    result = await session.execute(
        select(HouseholdMember, User)
        .join(User, User.id == HouseholdMember.user_id)
        .where(HouseholdMember.household_id == household_id)
        .order_by(HouseholdMember.joined_at.asc())
    )
    return [(member, user) for member, user in result.all()]


async def _count_members(
    session: AsyncSession,
    *,
    household_id: UUID,
    exclude_user_id: UUID,
    role: MemberRole | None = None,
) -> int:
    stmt = (
        select(func.count())
        .select_from(HouseholdMember)
        .where(
            HouseholdMember.household_id == household_id,
            HouseholdMember.user_id != exclude_user_id,
        )
    )
    if role is not None:
        stmt = stmt.where(HouseholdMember.role == role)
    result = await session.execute(stmt)
    return int(result.scalar_one())


async def ensure_not_sole_admin(
    session: AsyncSession,
    membership: HouseholdMember,
    *,
    message: str | None = None,
) -> None:
    """Reject removing ``membership`` when it is the last admin of a shared household.

    A sole admin who is also the only member may go; the household is then
    left empty.
    """
    if membership.role != MemberRole.ADMIN:
        return

    other_admins = await _count_members(
        session,
        household_id=membership.household_id,
        exclude_user_id=membership.user_id,
        role=MemberRole.ADMIN,
    )
    if other_admins > 0:
        return

    other_members = await _count_members(
        session,
        household_id=membership.household_id,
        exclude_user_id=membership.user_id,
    )
    if other_members > 0:
        logger.warning(
            "Blocked removal of sole admin %s from household %s (%d other members)",
            membership.user_id,
            membership.household_id,
            other_members,
        )
        raise SoleAdminConstraint(message)


async def _delete_membership(session: AsyncSession, membership: HouseholdMember) -> None:
    # Flushed now so the insert of a switch cannot precede it on the unique user_id.
    if membership in session:
        session.expunge(membership)
    await session.execute(
        delete(HouseholdMember).where(
            HouseholdMember.household_id == membership.household_id,
            HouseholdMember.user_id == membership.user_id,
        )
    )


async def _require_own_membership(session: AsyncSession, actor: Actor) -> HouseholdMember:
    membership = await get_membership(session, user_id=actor.user_id)
    if not membership:
        raise NotFound(NO_HOUSEHOLD_MESSAGE)
    return membership


async def _require_admin_membership(
    session: AsyncSession,
    actor: Actor,
    *,
    message: str,
) -> HouseholdMember:
    membership = await _require_own_membership(session, actor)
    if membership.role != MemberRole.ADMIN:
        raise Forbidden(message)
    return membership


async def _require_target_membership(
    session: AsyncSession,
    *,
    household_id: UUID,
    user_id: UUID,
) -> HouseholdMember:
    result = await session.execute(
        select(HouseholdMember).where(
            HouseholdMember.household_id == household_id,
            HouseholdMember.user_id == user_id,
        )
    )
    target = result.scalar_one_or_none()
    if not target:
        raise NotFound("Member not found in your household.")
    return target


async def create_household(
    session: AsyncSession,
    *,
    actor: Actor | None,
    name: str,
    monthly_budget: float | None = None,
) -> Household:
    actor = require_actor(actor)
    if await get_membership(session, user_id=actor.user_id):
        raise AlreadyMember("You already belong to a household. Leave it or switch instead.")

    cleaned_name = " ".join(str(name or "").split())
    if not cleaned_name:
        raise ValidationError("Household name cannot be empty.")
    if monthly_budget is not None and monthly_budget < 0:
        raise ValidationError("The budget cannot be negative.")

    household = Household(
        name=cleaned_name,
        invite_code=await generate_unique_invite_code(session),
        created_by=actor.user_id,
        monthly_budget=monthly_budget,
    )
    session.add(household)
    await session.flush()
    session.add(
        HouseholdMember(
            household_id=household.id,
            user_id=actor.user_id,
            role=MemberRole.ADMIN,
        )
    )
    await commit_or_raise(session, action="household creation")
    await session.refresh(household)

    logger.info("User %s created household %s", actor.user_id, household.id)
    return household


async def join_household(
    session: AsyncSession,
    *,
    actor: Actor | None,
    invite_code: str,
) -> Household:
    actor = require_actor(actor)
    household = await get_household_by_invite_code(session, invite_code)
    if not household:
        raise NotFound("Invalid invite code.")

    current = await get_membership(session, user_id=actor.user_id)
    if current:
        if current.household_id == household.id:
            raise AlreadyMember()
        raise AlreadyMember(
            "You already belong to another household. Switch household instead."
        )

    session.add(
        HouseholdMember(
            household_id=household.id,
            user_id=actor.user_id,
            role=MemberRole.MEMBER,
        )
    )
    await commit_or_raise(session, action="household join")

    logger.info("User %s joined household %s", actor.user_id, household.id)
    return household


async def leave_household(session: AsyncSession, *, actor: Actor | None) -> None:
    actor = require_actor(actor)
    membership = await _require_own_membership(session, actor)
    await ensure_not_sole_admin(
        session,
        membership,
        message="You are the only admin. Promote another member to admin before leaving.",
    )

    await _delete_membership(session, membership)
    await commit_or_raise(session, action="household leave")

    logger.info("User %s left household %s", actor.user_id, membership.household_id)


async def switch_household(
    session: AsyncSession,
    *,
    actor: Actor | None,
    invite_code: str,
) -> Household:
    actor = require_actor(actor)
    # Resolve the target first so a bad code fails before anything changes.
    household = await get_household_by_invite_code(session, invite_code)
    if not household:
        raise NotFound("Invalid invite code.")

    current = await get_membership(session, user_id=actor.user_id)
    if current and current.household_id == household.id:
        raise AlreadyMember()

    if current:
        await ensure_not_sole_admin(
            session,
            current,
            message="You are the only admin. Promote another member before switching household.",
        )
        await _delete_membership(session, current)

    session.add(
        HouseholdMember(
            household_id=household.id,
            user_id=actor.user_id,
            role=MemberRole.MEMBER,
        )
    )
    await commit_or_raise(session, action="household switch")

    logger.info(
        "User %s switched household %s -> %s",
        actor.user_id,
        current.household_id if current else None,
        household.id,
    )
    return household


async def promote_member(
    session: AsyncSession,
    *,
    actor: Actor | None,
    target_user_id: UUID,
) -> HouseholdMember:
    actor = require_actor(actor)
    membership = await _require_admin_membership(
        session,
        actor,
        message="Only household admins can promote members.",
    )
    target = await _require_target_membership(
        session,
        household_id=membership.household_id,
        user_id=target_user_id,
    )
    if target.role == MemberRole.ADMIN:
        raise AlreadyAdmin()

    target.role = MemberRole.ADMIN
    session.add(target)
    await commit_or_raise(session, action="member promotion")

    logger.info(
        "User %s promoted %s to admin in household %s",
        actor.user_id,
        target_user_id,
        membership.household_id,
    )
    return target


async def remove_member(
    session: AsyncSession,
    *,
    actor: Actor | None,
    target_user_id: UUID,
) -> None:
    actor = require_actor(actor)
    if target_user_id == actor.user_id:
        raise ValidationError("You cannot remove yourself. Leave the household instead.")

    membership = await _require_admin_membership(
        session,
        actor,
        message="Only household admins can remove members.",
    )
    target = await _require_target_membership(
        session,
        household_id=membership.household_id,
        user_id=target_user_id,
    )
    await ensure_not_sole_admin(session, target)

    await _delete_membership(session, target)
    await commit_or_raise(session, action="member removal")

    logger.info(
        "User %s removed %s from household %s",
        actor.user_id,
        target_user_id,
        membership.household_id,
    )


async def delete_account(session: AsyncSession, *, actor: Actor | None) -> None:
    actor = require_actor(actor)
    membership = await get_membership(session, user_id=actor.user_id)
    if membership:
        await ensure_not_sole_admin(
            session,
            membership,
            message=(
                "You are the only admin of your household. "
                "Promote another member to admin before deleting your account."
            ),
        )
        await _delete_membership(session, membership)

    await session.execute(
        update(Chore)
        .where(Chore.current_assignee == actor.user_id)
        .values(current_assignee=None)
    )
    await session.execute(delete(User).where(User.id == actor.user_id))
    await commit_or_raise(session, action="account deletion")

    logger.info("User %s deleted their account", actor.user_id)


async def regenerate_invite_code(session: AsyncSession, *, actor: Actor | None) -> str:
    household_id = require_admin(actor, "Only household admins can regenerate the invite code.")
    household = await get_household(session, household_id)
    if not household:
        raise NotFound("Household not found.")

    household.invite_code = await generate_unique_invite_code(session)
    session.add(household)
    await commit_or_raise(session, action="invite code regeneration")
    return household.invite_code


async def update_household_budget(
    session: AsyncSession,
    *,
    actor: Actor | None,
    monthly_budget: float | None,
) -> Household:
    household_id = require_admin(actor, "Only household admins can change the budget.")
    if monthly_budget is not None and monthly_budget < 0:
        raise ValidationError("The budget cannot be negative.")

    household = await get_household(session, household_id)
    if not household:
        raise NotFound("Household not found.")

    household.monthly_budget = monthly_budget
    session.add(household)
    await commit_or_raise(session, action="budget update")
    return household


async def rename_household(
    session: AsyncSession,
    *,
    actor: Actor | None,
    name: str,
) -> Household:
    household_id = require_admin(actor, "Only household admins can rename the household.")
    cleaned_name = " ".join(str(name or "").split())
    if not cleaned_name:
        raise ValidationError("Household name cannot be empty.")

    household = await get_household(session, household_id)
    if not household:
        raise NotFound("Household not found.")

    household.name = cleaned_name
    session.add(household)
    await commit_or_raise(session, action="household rename")
    return household


async def get_household_overview(
    session: AsyncSession,
    *,
    actor: Actor | None,
) -> tuple[Household, list[tuple[HouseholdMember, User]]]:
    actor = require_actor(actor)
    membership = await _require_own_membership(session, actor)
    household = await get_household(session, membership.household_id)
    if not household:
        raise NotFound("Household not found.")

    members = await list_household_members(session, household_id=household.id)
    return household, members
