from pydantic import BaseModel, Field

from housy.schemas.common import ActionResponse


class HouseholdCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    monthly_budget: float | None = None


class InviteCodeRequest(BaseModel):
    invite_code: str = Field(min_length=1, max_length=32)


class HouseholdRenameRequest(BaseModel):
    name: str = Field(min_length=1, max_length=120)


class BudgetUpdateRequest(BaseModel):
    monthly_budget: float | None = None


class HouseholdResponse(BaseModel):
    id: str
    name: str
    invite_code: str | None = None
    created_by: str | None = None
    monthly_budget: float | None = None
    created_at: str


class HouseholdActionResponse(ActionResponse):
    household: HouseholdResponse


class InviteCodeResponse(ActionResponse):
    invite_code: str


class HouseholdMemberResponse(BaseModel):
    user_id: str
    email: str
    full_name: str | None = None
    display_name: str
    role: str
    joined_at: str


class HouseholdOverviewResponse(BaseModel):
    household: HouseholdResponse
    role: str
    members: list[HouseholdMemberResponse]
