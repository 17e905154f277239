from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from housy.api.deps import get_actor
from housy.core.db import get_session
from housy.models.expense_category import ExpenseCategory
from housy.schemas.category import (
    CategoryActionResponse,
    CategoryCreateRequest,
    CategoryListResponse,
    CategoryResponse,
    CategoryUpdateRequest,
)
from housy.schemas.common import ActionResponse
from housy.services import category_service
from housy.services.types import Actor

router = APIRouter(prefix="/categories", tags=["categories"])


def to_category_response(category: ExpenseCategory) -> CategoryResponse:
    return CategoryResponse(
        id=str(category.id),
        name=category.name,
        icon=category.icon,
        color=category.color,
        created_at=category.created_at.isoformat(),
    )


@router.get("", response_model=CategoryListResponse)
async def list_categories(
    actor: Actor | None = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
) -> CategoryListResponse:
    categories = await category_service.list_categories(session, actor=actor)
    return CategoryListResponse(items=[to_category_response(item) for item in categories])


@router.post("", response_model=CategoryActionResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    payload: CategoryCreateRequest,
    actor: Actor | None = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
) -> CategoryActionResponse:
    category = await category_service.create_category(
        session,
        actor=actor,
        name=payload.name,
        icon=payload.icon,
        color=payload.color,
    )
    return CategoryActionResponse(category=to_category_response(category))


@router.patch("/{category_id}", response_model=CategoryActionResponse)
async def update_category(
    category_id: UUID,
    payload: CategoryUpdateRequest,
    actor: Actor | None = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
) -> CategoryActionResponse:
    category = await category_service.update_category(
        session,
        actor=actor,
        category_id=category_id,
        name=payload.name,
        icon=payload.icon,
        color=payload.color,
    )
    return CategoryActionResponse(category=to_category_response(category))


@router.delete("/{category_id}", response_model=ActionResponse)
async def delete_category(
    category_id: UUID,
    actor: Actor | None = Depends(get_actor),
    session: AsyncSession = Depends(get_session),
) -> ActionResponse:
    await category_service.delete_category(session, actor=actor, category_id=category_id)
    return ActionResponse()
