from datetime import UTC, datetime
from enum import Enum
from uuid import UUID

from sqlmodel import Field, SQLModel


def utc_now_naive() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


class MemberRole(str, Enum):
    ADMIN = "admin"
    MEMBER = "member"


class HouseholdMember(SQLModel, table=True):
    __tablename__ = "household_members"

    household_id: UUID = Field(foreign_key="households.id", primary_key=True, index=True)
    # Unique: a user belongs to at most one household at a time.
    user_id: UUID = Field(foreign_key="users.id", primary_key=True, unique=True, index=True)
    role: MemberRole = Field(default=MemberRole.MEMBER, nullable=False)
    joined_at: datetime = Field(default_factory=utc_now_naive, nullable=False)
