from datetime import date

from pydantic import BaseModel, Field

from housy.models.bill import BillCategory
from housy.schemas.common import ActionResponse


class BillCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    amount: float | None = Field(default=None, ge=0)
    due_day: int = Field(ge=1, le=31)
    reminder_days_before: int | None = Field(default=None, ge=0)
    category: BillCategory | None = None


class BillUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=120)
    amount: float | None = Field(default=None, ge=0)
    due_day: int | None = Field(default=None, ge=1, le=31)
    reminder_days_before: int | None = Field(default=None, ge=0)
    category: BillCategory | None = None
    is_active: bool | None = None


class BillPaidRequest(BaseModel):
    paid_on: date | None = None


class BillResponse(BaseModel):
    id: str
    name: str
    amount: float | None = None
    due_day: int
    reminder_days_before: int
    category: str | None = None
    is_active: bool
    last_paid_date: str | None = None
    source: str
    status: str


class BillListResponse(BaseModel):
    items: list[BillResponse]


class BillActionResponse(ActionResponse):
    bill: BillResponse
