from datetime import UTC, date, datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel


def utc_now_naive() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class Expense(SQLModel, table=True):
    __tablename__ = "expenses"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    household_id: UUID = Field(foreign_key="households.id", nullable=False, index=True)
    # Owner of the row; the only user allowed to edit or delete it.
    user_id: UUID = Field(nullable=False, index=True)
    category_id: UUID | None = Field(
        default=None,
        foreign_key="expense_categories.id",
        index=True,
    )
    amount: float = Field(nullable=False)
    description: str | None = Field(default=None, max_length=255)
    date_incurred: date = Field(nullable=False, index=True)
    is_shared: bool = Field(default=True, nullable=False)
    created_at: datetime = Field(default_factory=utc_now_naive, nullable=False)
