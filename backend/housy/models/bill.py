from datetime import UTC, date, datetime
from enum import Enum
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel


def utc_now_naive() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


DEFAULT_REMINDER_DAYS = 3


class BillCategory(str, Enum):
    UTILITIES = "utilities"
    INTERNET = "internet"
    INSURANCE = "insurance"
    SUBSCRIPTION = "subscription"
    RENT = "rent"
    CONDOMINIUM = "condominium"
    OTHER = "other"


class BillSource(str, Enum):
    MANUAL = "manual"


class BillStatus(str, Enum):
    PAID = "paid"
    OVERDUE = "overdue"
    UPCOMING = "upcoming"
    NORMAL = "normal"


class RecurringBill(SQLModel, table=True):
    __tablename__ = "recurring_bills"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    household_id: UUID = Field(foreign_key="households.id", nullable=False, index=True)
    name: str = Field(nullable=False, max_length=120)
    amount: float | None = Field(default=None)
    due_day: int = Field(nullable=False)
    reminder_days_before: int = Field(default=DEFAULT_REMINDER_DAYS, nullable=False)
    category: BillCategory | None = Field(default=None)
    is_active: bool = Field(default=True, nullable=False, index=True)
    last_paid_date: date | None = Field(default=None)
    source: BillSource = Field(default=BillSource.MANUAL, nullable=False)
    created_at: datetime = Field(default_factory=utc_now_naive, nullable=False)
