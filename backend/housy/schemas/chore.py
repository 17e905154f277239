from datetime import date
from uuid import UUID

from pydantic import BaseModel, Field

from housy.models.chore import ChoreFrequency
from housy.schemas.common import ActionResponse


class ChoreCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    frequency: ChoreFrequency
    points: int = Field(default=1, gt=0)
    rotation_order: list[UUID] = Field(default_factory=list)


class ChoreUpdateRequest(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=120)
    frequency: ChoreFrequency | None = None
    points: int | None = Field(default=None, gt=0)
    rotation_order: list[UUID] | None = None
    current_assignee: UUID | None = None
    is_active: bool | None = None


class ChoreAssignee(BaseModel):
    id: str
    display_name: str
    email: str


class ChoreResponse(BaseModel):
    id: str
    household_id: str
    name: str
    frequency: str
    points: int
    rotation_order: list[str]
    current_assignee: str | None = None
    assignee: ChoreAssignee | None = None
    last_completed: str | None = None
    next_due: str | None = None
    is_active: bool


class ChoreListResponse(BaseModel):
    items: list[ChoreResponse]


class ChoreActionResponse(ActionResponse):
    chore: ChoreResponse


class ChoreCompleteResponse(ActionResponse):
    points_earned: int
    next_assignee: str | None = None
    next_due: str


class ChoreStatsEntry(BaseModel):
    user_id: str
    user_name: str
    user_email: str
    total_points: int = 0
    completed_count: int = 0


class ChoreStatsResponse(BaseModel):
    start_date: date | None = None
    end_date: date | None = None
    items: list[ChoreStatsEntry]


class ChoreCompletionResponse(BaseModel):
    id: str
    chore_id: str
    chore_name: str | None = None
    user_id: str
    user_name: str | None = None
    points_earned: int
    completed_at: str


class ChoreCompletionListResponse(BaseModel):
    items: list[ChoreCompletionResponse]
