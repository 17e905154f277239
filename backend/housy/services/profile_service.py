from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from housy.core.config import get_settings
from housy.core.errors import AlreadyExists, NotFound, Unauthenticated, ValidationError
from housy.core.security import hash_password, verify_password
from housy.models.household import Household
from housy.models.user import User
from housy.services.access import commit_or_raise, require_actor
from housy.services.types import Actor

logger = logging.getLogger(__name__)
settings = get_settings()


@dataclass
class Profile:
    user: User
    household: Household | None
    actor: Actor


def normalize_email(email: str) -> str:
    return str(email or "").lower().strip()


def _clean_full_name(value: str | None) -> str | None:
    if value is None:
        return None
    cleaned = " ".join(value.strip().split())
    return cleaned or None


def _validate_password(password: str) -> str:
    if len(password or "") < settings.password_min_length:
        raise ValidationError(
            f"Password must be at least {settings.password_min_length} characters long."
        )
    return password


async def get_user_by_email(session: AsyncSession, email: str) -> User | None:
    result = await session.execute(select(User).where(User.email == normalize_email(email)))
    return result.scalar_one_or_none()


async def register_user(
    session: AsyncSession,
    *,
    email: str,
    password: str,
    full_name: str | None = None,
) -> User:
    """Create an account that does not belong to any household yet."""
    if await get_user_by_email(session, email):
        raise AlreadyExists("Email already exists.")

    user = User(
        email=normalize_email(email),
        hashed_password=hash_password(_validate_password(password)),
        full_name=_clean_full_name(full_name),
    )
    session.add(user)
    await commit_or_raise(session, action="user registration")
    await session.refresh(user)

    logger.info("Registered user %s", user.id)
    return user


async def authenticate_user(session: AsyncSession, *, email: str, password: str) -> User:
    user = await get_user_by_email(session, email)
    if not user or not user.is_active or not verify_password(password, user.hashed_password):
        raise Unauthenticated("Invalid email or password.")
    return user


async def _require_user(session: AsyncSession, actor: Actor) -> User:
    result = await session.execute(select(User).where(User.id == actor.user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise NotFound("User not found.")
    return user


async def get_profile(session: AsyncSession, *, actor: Actor | None) -> Profile:
    actor = require_actor(actor)
    user = await _require_user(session, actor)
    household = None
    if actor.household_id is not None:
        result = await session.execute(select(Household).where(Household.id == actor.household_id))
        household = result.scalar_one_or_none()
    return Profile(user=user, household=household, actor=actor)


async def update_profile(
    session: AsyncSession,
    *,
    actor: Actor | None,
    changes: dict,
) -> User:
    actor = require_actor(actor)
    if "full_name" not in changes:
        raise ValidationError("Nothing to update.")

    user = await _require_user(session, actor)
    user.full_name = _clean_full_name(changes["full_name"])
    session.add(user)
    await commit_or_raise(session, action="profile update")
    await session.refresh(user)
    return user


async def change_password(
    session: AsyncSession,
    *,
    actor: Actor | None,
    new_password: str,
) -> None:
    actor = require_actor(actor)
    user = await _require_user(session, actor)
    user.hashed_password = hash_password(_validate_password(new_password))
    session.add(user)
    await commit_or_raise(session, action="password change")

    logger.info("User %s changed their password", actor.user_id)
