from uuid import UUID

from pydantic import BaseModel

from housy.models.member import MemberRole


class Actor(BaseModel):
    """The authenticated user a service call runs on behalf of.

    Resolved fresh for every request; services never look the current user up
    on their own.
    """

    user_id: UUID
    email: str
    full_name: str | None = None
    household_id: UUID | None = None
    role: MemberRole | None = None

    @property
    def is_admin(self) -> bool:
        return self.household_id is not None and self.role == MemberRole.ADMIN
