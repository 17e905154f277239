from datetime import UTC, datetime
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel


def utc_now_naive() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


INVITE_CODE_ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


class Household(SQLModel, table=True):
    __tablename__ = "households"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    name: str = Field(max_length=120, nullable=False)
    invite_code: str = Field(index=True, unique=True, nullable=False, max_length=16)
    created_by: UUID | None = Field(default=None, nullable=True)
    monthly_budget: float | None = Field(default=None, nullable=True)
    created_at: datetime = Field(
        default_factory=utc_now_naive,
        nullable=False,
    )
