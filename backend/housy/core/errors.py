"""Domain errors raised by the service layer.

Each error carries a stable machine-readable ``code`` and the HTTP status the
API layer answers with. The message is shown to the user verbatim.
"""

from fastapi import status


class HousyError(Exception):
    code = "error"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "The request could not be completed."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(HousyError):
    code = "unauthenticated"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "User is not authenticated."


class Forbidden(HousyError):
    code = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Only household admins can perform this action."


class NotFound(HousyError):
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found."


class ValidationError(HousyError):
    code = "validation_error"
    status_code = 422
    default_message = "Invalid input."


class SoleAdminConstraint(HousyError):
    code = "sole_admin"
    status_code = status.HTTP_409_CONFLICT
    default_message = "You are the only admin. Promote another member to admin first."


class AlreadyMember(HousyError):
    code = "already_member"
    status_code = status.HTTP_409_CONFLICT
    default_message = "You are already a member of this household."


class AlreadyAdmin(HousyError):
    code = "already_admin"
    status_code = status.HTTP_409_CONFLICT
    default_message = "This member is already an admin."


class AlreadyExists(HousyError):
    code = "already_exists"
    status_code = status.HTTP_409_CONFLICT
    default_message = "A resource with this name already exists."


class NotAssignee(HousyError):
    code = "not_assignee"
    status_code = status.HTTP_409_CONFLICT
    default_message = "You are not the current assignee of this chore."


class PersistenceError(HousyError):
    code = "persistence_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "The change could not be saved. Try again."
