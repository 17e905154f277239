from datetime import UTC, datetime, time
from enum import Enum
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel


def utc_now_naive() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class WasteType(str, Enum):
    GENERAL = "general"
    PLASTIC = "plastic"
    PAPER = "paper"
    GLASS = "glass"
    ORGANIC = "organic"
    METAL = "metal"
    OTHER = "other"


# Sunday-based numbering: 0 = Sunday .. 6 = Saturday.
DAY_NAMES = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)


class WasteSchedule(SQLModel, table=True):
    __tablename__ = "waste_schedules"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    household_id: UUID = Field(foreign_key="households.id", nullable=False, index=True)
    waste_type: WasteType = Field(nullable=False)
    day_of_week: int = Field(nullable=False, index=True)
    reminder_time: time = Field(nullable=False)
    deadline_time: time | None = Field(default=None)
    is_active: bool = Field(default=True, nullable=False, index=True)
    created_at: datetime = Field(default_factory=utc_now_naive, nullable=False)
