from datetime import UTC, date, datetime
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from housy.api.deps import get_actor
from housy.core.db import get_session
from housy.models.bill import BillStatus, RecurringBill
from housy.schemas.bill import (
    BillActionResponse,
    BillCreateRequest,
    BillListResponse,
    BillPaidRequest,
    BillResponse,
    BillUpdateRequest,
)
from housy.schemas.common import ActionResponse
from housy.services import bill_service
from housy.services.types import Actor

router = APIRouter(prefix="/bills", tags=["bills"])


def to_bill_response(
    bill: RecurringBill,
    current_status: BillStatus | None = None,
    *,
    today: date | None = None,
) -> BillResponse:
    if current_status is None:
        current_status = bill_service.bill_status(bill, today or datetime.now(UTC).date())
    return BillResponse(
        id=str(bill.id),
        name=bill.name,
        amount=bill.amount,
        due_day=bill.due_day,
        reminder_days_before=bill.reminder_days_before,
        category=bill.category.value if bill.category else None,
        is_active=bill.is_active,
        last_paid_date=bill.last_paid_date.isoformat() if bill.last_paid_date else None,
        source=bill.source.value,
        status=current_status.value,
    )


@router.get("", response_model=BillListResponse)
async def list_bills(
    actor: Actor | None = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
) -> BillListResponse:
    bills = await bill_service.list_bills(session, actor=actor)
    return BillListResponse(items=[to_bill_response(bill) for bill in bills])


@router.get("/upcoming", response_model=BillListResponse)
async def upcoming_bills(
    actor: Actor | None = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
) -> BillListResponse:
    bills = await bill_service.list_upcoming_bills(session, actor=actor)
    return BillListResponse(items=[to_bill_response(bill, bill_status) for bill, bill_status in bills])


@router.post("", response_model=BillActionResponse, status_code=status.HTTP_201_CREATED)
async def create_bill(
    payload: BillCreateRequest,
    actor: Actor | None = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
) -> BillActionResponse:
    bill = await bill_service.create_bill(
        session,
        actor=actor,
        name=payload.name,
        due_day=payload.due_day,
        amount=payload.amount,
        reminder_days_before=payload.reminder_days_before,
        category=payload.category,
    )
    return BillActionResponse(bill=to_bill_response(bill))


@router.patch("/{bill_id}", response_model=BillActionResponse)
async def update_bill(
    bill_id: UUID,
    payload: BillUpdateRequest,
    actor: Actor | None = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
) -> BillActionResponse:
    bill = await bill_service.update_bill(
        session,
        actor=actor,
        bill_id=bill_id,
        changes=payload.model_dump(exclude_unset=True),
    )
    return BillActionResponse(bill=to_bill_response(bill))


@router.delete("/{bill_id}", response_model=ActionResponse)
async def delete_bill(
    bill_id: UUID,
    actor: Actor | None = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
) -> ActionResponse:
    await bill_service.delete_bill(session, actor=actor, bill_id=bill_id)
    return ActionResponse()


@router.post("/{bill_id}/paid", response_model=BillActionResponse)
async def mark_paid(
    bill_id: UUID,
    payload: BillPaidRequest | None = None,
    actor: Actor | None = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
) -> BillActionResponse:
    bill = await bill_service.mark_bill_paid(
        session,
        actor=actor,
        bill_id=bill_id,
        paid_on=payload.paid_on if payload else None,
    )
    return BillActionResponse(bill=to_bill_response(bill))
