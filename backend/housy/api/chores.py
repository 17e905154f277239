from datetime import date, datetime, time
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from housy.api.deps import get_actor
from housy.core.db import get_session
from housy.models.chore import Chore
from housy.models.user import User
from housy.schemas.chore import (
    ChoreActionResponse,
    ChoreAssignee,
    ChoreCompleteResponse,
    ChoreCompletionListResponse,
    ChoreCompletionResponse,
    ChoreCreateRequest,
    ChoreListResponse,
    ChoreResponse,
    ChoreStatsResponse,
    ChoreUpdateRequest,
)
from housy.schemas.common import ActionResponse
from housy.services import chore_service
from housy.services.types import Actor

router = APIRouter(prefix="/chores", tags=["chores"])


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def to_chore_response(chore: Chore, assignee: User | None = None) -> ChoreResponse:
    return ChoreResponse(
        id=str(chore.id),
        household_id=str(chore.household_id),
        name=chore.name,
        frequency=chore.frequency.value,
        points=chore.points,
        rotation_order=list(chore.rotation_order or []),
        current_assignee=str(chore.current_assignee) if chore.current_assignee else None,
        assignee=(
            ChoreAssignee(
                id=str(assignee.id),
                display_name=assignee.display_name,
                email=str(assignee.email),
            )
            if assignee
            else None
        ),
        last_completed=_isoformat(chore.last_completed),
        next_due=_isoformat(chore.next_due),
        is_active=chore.is_active,
    )


@router.get("", response_model=ChoreListResponse)
async def list_chores(
    actor: Actor | None = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
) -> ChoreListResponse:
    chores = await chore_service.list_chores(session, actor=actor)
    return ChoreListResponse(
        items=[to_chore_response(chore, assignee) for chore, assignee in chores],
    )


@router.post("", response_model=ChoreActionResponse, status_code=status.HTTP_201_CREATED)
async def create_chore(
    payload: ChoreCreateRequest,
    actor: Actor | None = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
) -> ChoreActionResponse:
    chore = await chore_service.create_chore(
        session,
        actor=actor,
        name=payload.name,
        frequency=payload.frequency,
        points=payload.points,
        rotation_order=payload.rotation_order,
    )
    return ChoreActionResponse(chore=to_chore_response(chore))


@router.get("/stats", response_model=ChoreStatsResponse)
async def chore_stats(
    start_date: date | None = Query(default=None),
    end_date: date | None = Query(default=None),
    actor: Actor | None = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
) -> ChoreStatsResponse:
    # Both bounds are inclusive whole days.
    items = await chore_service.get_chore_stats(
        session,
        actor=actor,
        start=datetime.combine(start_date, time.min) if start_date else None,
        end=datetime.combine(end_date, time.max) if end_date else None,
    )
    return ChoreStatsResponse(start_date=start_date, end_date=end_date, items=items)


@router.get("/completions", response_model=ChoreCompletionListResponse)
async def recent_completions(
    limit: int = Query(default=10, ge=1, le=100),
    actor: Actor | None = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
) -> ChoreCompletionListResponse:
    rows = await chore_service.get_recent_completions(session, actor=actor, limit=limit)
    return ChoreCompletionListResponse(
        items=[
            ChoreCompletionResponse(
                id=str(completion.id),
                chore_id=str(completion.chore_id),
                chore_name=chore.name if chore else None,
                user_id=str(completion.user_id),
                user_name=user.display_name if user else None,
                points_earned=completion.points_earned,
                completed_at=completion.completed_at.isoformat(),
            )
            for completion, chore, user in rows
        ]
    )


@router.patch("/{chore_id}", response_model=ChoreActionResponse)
async def update_chore(
    chore_id: UUID,
    payload: ChoreUpdateRequest,
    actor: Actor | None = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
) -> ChoreActionResponse:
    chore = await chore_service.update_chore(
        session,
        actor=actor,
        chore_id=chore_id,
        changes=payload.model_dump(exclude_unset=True),
    )
    return ChoreActionResponse(chore=to_chore_response(chore))


@router.delete("/{chore_id}", response_model=ActionResponse)
async def delete_chore(
    chore_id: UUID,
    actor: Actor | None = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
) -> ActionResponse:
    await chore_service.delete_chore(session, actor=actor, chore_id=chore_id)
    return ActionResponse()


@router.post("/{chore_id}/complete", response_model=ChoreCompleteResponse)
async def complete_chore(
    chore_id: UUID,
    actor: Actor | None = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
) -> ChoreCompleteResponse:
    outcome = await chore_service.complete_chore(session, actor=actor, chore_id=chore_id)
    return ChoreCompleteResponse(
        points_earned=outcome.points_earned,
        next_assignee=str(outcome.next_assignee) if outcome.next_assignee else None,
        next_due=outcome.next_due.isoformat(),
    )
