from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from housy.api.deps import get_actor
from housy.core.db import get_session
from housy.models.waste import DAY_NAMES, WasteSchedule
from housy.schemas.common import ActionResponse
from housy.schemas.waste import (
    NextCollectionResponse,
    WasteScheduleActionResponse,
    WasteScheduleCreateRequest,
    WasteScheduleListResponse,
    WasteScheduleResponse,
    WasteScheduleUpdateRequest,
)
from housy.services import waste_service
from housy.services.types import Actor
from housy.services.waste_service import NextCollection

router = APIRouter(prefix="/waste", tags=["waste"])


def to_schedule_response(schedule: WasteSchedule) -> WasteScheduleResponse:
    return WasteScheduleResponse(
        id=str(schedule.id),
        waste_type=schedule.waste_type.value,
        day_of_week=schedule.day_of_week,
        day_name=DAY_NAMES[schedule.day_of_week],
        reminder_time=schedule.reminder_time.isoformat(timespec="minutes"),
        deadline_time=(
            schedule.deadline_time.isoformat(timespec="minutes") if schedule.deadline_time else None
        ),
        is_active=schedule.is_active,
    )


def to_next_collection_response(collection: NextCollection | None) -> NextCollectionResponse:
    if collection is None:
        return NextCollectionResponse()
    return NextCollectionResponse(
        day_of_week=collection.day_of_week,
        day_name=collection.day_name,
        collection_date=collection.collection_date.isoformat(),
        waste_types=[schedule.waste_type.value for schedule in collection.schedules],
        schedules=[to_schedule_response(schedule) for schedule in collection.schedules],
    )


@router.get("", response_model=WasteScheduleListResponse)
async def list_schedules(
    actor: Actor | None = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
) -> WasteScheduleListResponse:
    schedules = await waste_service.list_schedules(session, actor=actor)
    return WasteScheduleListResponse(items=[to_schedule_response(item) for item in schedules])


@router.get("/next", response_model=NextCollectionResponse)
async def next_collection(
    actor: Actor | None = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
) -> NextCollectionResponse:
    collection = await waste_service.get_next_collection(session, actor=actor)
    return to_next_collection_response(collection)


@router.post("", response_model=WasteScheduleActionResponse, status_code=status.HTTP_201_CREATED)
async def create_schedule(
    payload: WasteScheduleCreateRequest,
    actor: Actor | None = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
) -> WasteScheduleActionResponse:
    schedule = await waste_service.create_schedule(
        session,
        actor=actor,
        waste_type=payload.waste_type,
        day_of_week=payload.day_of_week,
        reminder_time=payload.reminder_time,
        deadline_time=payload.deadline_time,
    )
    return WasteScheduleActionResponse(schedule=to_schedule_response(schedule))


@router.patch("/{schedule_id}", response_model=WasteScheduleActionResponse)
async def update_schedule(
    schedule_id: UUID,
    payload: WasteScheduleUpdateRequest,
    actor: Actor | None = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
) -> WasteScheduleActionResponse:
    schedule = await waste_service.update_schedule(
        session,
        actor=actor,
        schedule_id=schedule_id,
        changes=payload.model_dump(exclude_unset=True),
    )
    return WasteScheduleActionResponse(schedule=to_schedule_response(schedule))


@router.post("/{schedule_id}/toggle", response_model=WasteScheduleActionResponse)
async def toggle_schedule(
    schedule_id: UUID,
    actor: Actor | None = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
) -> WasteScheduleActionResponse:
    schedule = await waste_service.toggle_schedule(session, actor=actor, schedule_id=schedule_id)
    return WasteScheduleActionResponse(schedule=to_schedule_response(schedule))


@router.delete("/{schedule_id}", response_model=ActionResponse)
async def delete_schedule(
    schedule_id: UUID,
    actor: Actor | None = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
) -> ActionResponse:
    await waste_service.delete_schedule(session, actor=actor, schedule_id=schedule_id)
    return ActionResponse()
