from datetime import UTC, datetime
from uuid import UUID, uuid4

from sqlalchemy import Column, String, UniqueConstraint
from sqlmodel import Field, SQLModel


def utc_now_naive() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


DEFAULT_CATEGORY_ICON = "tag"
DEFAULT_CATEGORY_COLOR = "#6b7280"


class ExpenseCategory(SQLModel, table=True):
    __tablename__ = "expense_categories"
    __table_args__ = (
        UniqueConstraint(
            "household_id",
            "normalized_name",
            name="uq_expense_category_normalized_name",
        ),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    household_id: UUID = Field(foreign_key="households.id", nullable=False, index=True)
    name: str = Field(sa_column=Column(String(80), nullable=False))
    normalized_name: str = Field(sa_column=Column(String(80), nullable=False, index=True))
    icon: str = Field(default=DEFAULT_CATEGORY_ICON, max_length=40)
    color: str = Field(default=DEFAULT_CATEGORY_COLOR, max_length=16)
    created_at: datetime = Field(default_factory=utc_now_naive, nullable=False)
