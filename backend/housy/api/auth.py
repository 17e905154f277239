from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from housy.api.deps import get_actor
from housy.core.db import get_session
from housy.core.security import create_access_token
from housy.models.user import User
from housy.schemas.auth import (
    AuthResponse,
    LoginRequest,
    PasswordChangeRequest,
    ProfileUpdateRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from housy.schemas.common import ActionResponse
from housy.services import membership_service, profile_service
from housy.services.access import load_actor
from housy.services.types import Actor

router = APIRouter(prefix="/auth", tags=["auth"])


def to_user_response(profile: profile_service.Profile) -> UserResponse:
    return UserResponse(
        id=str(profile.user.id),
        email=profile.user.email,
        full_name=profile.user.full_name,
        household_id=str(profile.household.id) if profile.household else None,
        household_name=profile.household.name if profile.household else None,
        role=profile.actor.role.value if profile.actor.role else None,
    )


async def _user_response(session: AsyncSession, user: User) -> UserResponse:
    actor = await load_actor(session, user_id=user.id)
    return to_user_response(await profile_service.get_profile(session, actor=actor))


async def _auth_response(session: AsyncSession, user: User) -> AuthResponse:
    return AuthResponse(
        token=TokenResponse(access_token=create_access_token(user.id)),
        user=await _user_response(session, user),
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    payload: RegisterRequest,
    session: AsyncSession = Depends(get_session),
) -> AuthResponse:
    user = await profile_service.register_user(
        session,
        email=payload.email,
        password=payload.password,
        full_name=payload.full_name,
    )
    return await _auth_response(session, user)


@router.post("/login", response_model=AuthResponse)
async def login(
    payload: LoginRequest,
    session: AsyncSession = Depends(get_session),
) -> AuthResponse:
    user = await profile_service.authenticate_user(
        session,
        email=payload.email,
        password=payload.password,
    )
    return await _auth_response(session, user)


@router.post("/token", response_model=TokenResponse)
async def token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    session: AsyncSession = Depends(get_session),
) -> TokenResponse:
    # For OAuth2 password flow, username field is used to carry email.
    user = await profile_service.authenticate_user(
        session,
        email=form_data.username,
        password=form_data.password,
    )
    return TokenResponse(access_token=create_access_token(user.id))


@router.get("/me", response_model=UserResponse)
async def me(
    actor: Actor | None = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
) -> UserResponse:
    return to_user_response(await profile_service.get_profile(session, actor=actor))


@router.patch("/me", response_model=UserResponse)
async def update_me(
    payload: ProfileUpdateRequest,
    actor: Actor | None = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
) -> UserResponse:
    user = await profile_service.update_profile(
        session,
        actor=actor,
        changes=payload.model_dump(exclude_unset=True),
    )
    return await _user_response(session, user)


@router.post("/password", response_model=ActionResponse)
async def change_password(
    payload: PasswordChangeRequest,
    actor: Actor | None = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
) -> ActionResponse:
    await profile_service.change_password(
        session,
        actor=actor,
        new_password=payload.new_password,
    )
    return ActionResponse()


@router.delete("/me", response_model=ActionResponse)
async def delete_me(
    actor: Actor | None = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
) -> ActionResponse:
    await membership_service.delete_account(session, actor=actor)
    return ActionResponse()
