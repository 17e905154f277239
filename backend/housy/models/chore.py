from datetime import UTC, datetime
from enum import Enum
from uuid import UUID, uuid4

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


def utc_now_naive() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class ChoreFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class Chore(SQLModel, table=True):
    __tablename__ = "chores"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    household_id: UUID = Field(foreign_key="households.id", nullable=False, index=True)
    name: str = Field(nullable=False, max_length=120)
    frequency: ChoreFrequency = Field(default=ChoreFrequency.WEEKLY, nullable=False)
    points: int = Field(default=1, nullable=False)
    # User ids as strings, in hand-off order.
    rotation_order: list[str] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False),
    )
    current_assignee: UUID | None = Field(default=None, index=True)
    last_completed: datetime | None = Field(default=None)
    next_due: datetime | None = Field(default=None, index=True)
    is_active: bool = Field(default=True, nullable=False, index=True)
    created_at: datetime = Field(default_factory=utc_now_naive, nullable=False)


class ChoreCompletion(SQLModel, table=True):
    __tablename__ = "chore_completions"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    chore_id: UUID = Field(foreign_key="chores.id", nullable=False, index=True)
    household_id: UUID = Field(foreign_key="households.id", nullable=False, index=True)
    user_id: UUID = Field(nullable=False, index=True)
    points_earned: int = Field(nullable=False)
    completed_at: datetime = Field(default_factory=utc_now_naive, nullable=False, index=True)
