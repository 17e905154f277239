from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from housy.api.deps import get_actor
from housy.core.db import get_session
from housy.models.household import Household
from housy.models.member import HouseholdMember, MemberRole
from housy.models.user import User
from housy.schemas.common import ActionResponse
from housy.schemas.household import (
    BudgetUpdateRequest,
    HouseholdActionResponse,
    HouseholdCreateRequest,
    HouseholdMemberResponse,
    HouseholdOverviewResponse,
    HouseholdRenameRequest,
    HouseholdResponse,
    InviteCodeRequest,
    InviteCodeResponse,
)
from housy.services import membership_service
from housy.services.types import Actor

router = APIRouter(prefix="/households", tags=["households"])


def to_household_response(household: Household, *, show_invite_code: bool) -> HouseholdResponse:
    return HouseholdResponse(
        id=str(household.id),
        name=household.name,
        invite_code=household.invite_code if show_invite_code else None,
        created_by=str(household.created_by) if household.created_by else None,
        monthly_budget=household.monthly_budget,
        created_at=household.created_at.isoformat(),
    )


def to_member_response(member: HouseholdMember, user: User) -> HouseholdMemberResponse:
    return HouseholdMemberResponse(
        user_id=str(user.id),
        email=str(user.email),
        full_name=user.full_name,
        display_name=user.display_name,
        role=member.role.value,
        joined_at=member.joined_at.isoformat(),
    )


@router.post("", response_model=HouseholdActionResponse, status_code=status.HTTP_201_CREATED)
async def create_household(
    payload: HouseholdCreateRequest,
    actor: Actor | None = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
) -> HouseholdActionResponse:
    household = await membership_service.create_household(
        session,
        actor=actor,
        name=payload.name,
        monthly_budget=payload.monthly_budget,
    )
    return HouseholdActionResponse(
        household=to_household_response(household, show_invite_code=True),
    )


@router.get("/current", response_model=HouseholdOverviewResponse)
async def household_overview(
    actor: Actor | None = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
) -> HouseholdOverviewResponse:
    household, members = await membership_service.get_household_overview(session, actor=actor)
    role = next(member.role for member, _ in members if member.user_id == actor.user_id)
    return HouseholdOverviewResponse(
        household=to_household_response(household, show_invite_code=role == MemberRole.ADMIN),
        role=role.value,
        members=[to_member_response(member, user) for member, user in members],
    )


@router.post("/join", response_model=HouseholdActionResponse)
async def join_household(
    payload: InviteCodeRequest,
    actor: Actor | None = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
) -> HouseholdActionResponse:
    household = await membership_service.join_household(
        session,
        actor=actor,
        invite_code=payload.invite_code,
    )
    return HouseholdActionResponse(
        household=to_household_response(household, show_invite_code=False),
    )


@router.post("/switch", response_model=HouseholdActionResponse)
async def switch_household(
    payload: InviteCodeRequest,
    actor: Actor | None = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
) -> HouseholdActionResponse:
    household = await membership_service.switch_household(
        session,
        actor=actor,
        invite_code=payload.invite_code,
    )
    return HouseholdActionResponse(
        household=to_household_response(household, show_invite_code=False),
    )


@router.post("/leave", response_model=ActionResponse)
async def leave_household(
    actor: Actor | None = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
) -> ActionResponse:
    await membership_service.leave_household(session, actor=actor)
    return ActionResponse()


@router.post("/members/{user_id}/promote", response_model=ActionResponse)
async def promote_member(
    user_id: UUID,
    actor: Actor | None = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
) -> ActionResponse:
    await membership_service.promote_member(session, actor=actor, target_user_id=user_id)
    return ActionResponse()


@router.delete("/members/{user_id}", response_model=ActionResponse)
async def remove_member(
    user_id: UUID,
    actor: Actor | None = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
) -> ActionResponse:
    await membership_service.remove_member(session, actor=actor, target_user_id=user_id)
    return ActionResponse()


@router.post("/invite-code", response_model=InviteCodeResponse)
async def regenerate_invite_code(
    actor: Actor | None = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
) -> InviteCodeResponse:
    code = await membership_service.regenerate_invite_code(session, actor=actor)
    return InviteCodeResponse(invite_code=code)


@router.patch("/current/budget", response_model=HouseholdActionResponse)
async def update_budget(
    payload: BudgetUpdateRequest,
    actor: Actor | None = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
) -> HouseholdActionResponse:
    household = await membership_service.update_household_budget(
        session,
        actor=actor,
        monthly_budget=payload.monthly_budget,
    )
    return HouseholdActionResponse(
        household=to_household_response(household, show_invite_code=True),
    )


@router.patch("/current/name", response_model=HouseholdActionResponse)
async def rename_household(
    payload: HouseholdRenameRequest,
    actor: Actor | None = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
) -> HouseholdActionResponse:
    household = await membership_service.rename_household(
        session,
        actor=actor,
        name=payload.name,
    )
    return HouseholdActionResponse(
        household=to_household_response(household, show_invite_code=True),
    )
