from datetime import date
from uuid import UUID

from pydantic import BaseModel, Field

from housy.schemas.common import ActionResponse


class ExpenseCreateRequest(BaseModel):
    amount: float = Field(gt=0)
    description: str | None = Field(default=None, max_length=255)
    category_id: UUID | None = None
    date_incurred: date | None = None
    is_shared: bool = True


class ExpenseUpdateRequest(BaseModel):
    amount: float | None = Field(default=None, gt=0)
    description: str | None = Field(default=None, max_length=255)
    category_id: UUID | None = None
    date_incurred: date | None = None
    is_shared: bool | None = None


class ExpenseCategoryRef(BaseModel):
    id: str
    name: str
    color: str | None = None


class ExpenseItem(BaseModel):
    id: str
    amount: float
    description: str | None = None
    date_incurred: str
    is_shared: bool
    category: ExpenseCategoryRef | None = None
    user_id: str
    user_name: str | None = None
    created_at: str


class ExpenseListResponse(BaseModel):
    items: list[ExpenseItem]
    total_count: int


class ExpenseActionResponse(ActionResponse):
    expense: ExpenseItem


class ExpenseGroupResponse(BaseModel):
    key: str | None = None
    name: str
    color: str | None = None
    total: float
    count: int


class ExpenseSummaryResponse(BaseModel):
    period_start: str
    period_end: str
    total: float
    count: int
    average: float
    by_category: list[ExpenseGroupResponse]
    by_user: list[ExpenseGroupResponse]
