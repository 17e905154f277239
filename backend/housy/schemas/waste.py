from datetime import time

from pydantic import BaseModel, Field

from housy.models.waste import WasteType
from housy.schemas.common import ActionResponse


class WasteScheduleCreateRequest(BaseModel):
    waste_type: WasteType
    day_of_week: int = Field(ge=0, le=6)
    reminder_time: time
    deadline_time: time | None = None


class WasteScheduleUpdateRequest(BaseModel):
    waste_type: WasteType | None = None
    day_of_week: int | None = Field(default=None, ge=0, le=6)
    reminder_time: time | None = None
    deadline_time: time | None = None
    is_active: bool | None = None


class WasteScheduleResponse(BaseModel):
    id: str
    waste_type: str
    day_of_week: int
    day_name: str
    reminder_time: str
    deadline_time: str | None = None
    is_active: bool


class WasteScheduleListResponse(BaseModel):
    items: list[WasteScheduleResponse]


class WasteScheduleActionResponse(ActionResponse):
    schedule: WasteScheduleResponse


class NextCollectionResponse(BaseModel):
    day_of_week: int | None = None
    day_name: str | None = None
    collection_date: str | None = None
    waste_types: list[str] = Field(default_factory=list)
    schedules: list[WasteScheduleResponse] = Field(default_factory=list)
