import logging
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from housy.core.errors import Forbidden, NotFound, PersistenceError, Unauthenticated
from housy.models.member import HouseholdMember
from housy.models.user import User
from housy.services.types import Actor

logger = logging.getLogger(__name__)

NO_HOUSEHOLD_MESSAGE = "You are not a member of any household."


async def load_actor(session: AsyncSession, *, user_id: UUID) -> Actor | None:
    user_result = await session.execute(select(User).where(User.id == user_id))
    user = user_result.scalar_one_or_none()
    if not user or not user.is_active:
        return None

    membership = await get_membership(session, user_id=user.id)
    return Actor(
        user_id=user.id,
        email=str(user.email),
        full_name=user.full_name,
        household_id=membership.household_id if membership else None,
        role=membership.role if membership else None,
    )


async def get_membership(session: AsyncSession, *, user_id: UUID) -> HouseholdMember | None:
    result = await session.execute(
        select(HouseholdMember).where(HouseholdMember.user_id == user_id)
    )
    return result.scalar_one_or_none()


def require_actor(actor: Actor | None) -> Actor:
    if actor is None:
        raise Unauthenticated()
    return actor


def require_household(actor: Actor | None) -> UUID:
    actor = require_actor(actor)
    if actor.household_id is None:
        raise NotFound(NO_HOUSEHOLD_MESSAGE)
    return actor.household_id


def require_admin(actor: Actor | None, message: str | None = None) -> UUID:
    household_id = require_household(actor)
    if not actor.is_admin:
        raise Forbidden(message)
    return household_id


async def commit_or_raise(session: AsyncSession, *, action: str) -> None:
    try:
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.error("Persisting %s failed", action, exc_info=exc)
        raise PersistenceError() from exc
