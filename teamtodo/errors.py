"""Domain errors.

Authentication and authorization messages are deliberately generic so a caller
cannot learn whether an object exists in another tenant.
"""


class TeamTodoError(Exception):
    """Base error for the application."""

    status_code = 500
    detail = "Internal error"

    def __init__(self, detail: str | None = None):
        super().__init__(detail or self.detail)
        if detail:
            self.detail = detail


class UnauthenticatedError(TeamTodoError):
    """No valid session."""

    status_code = 401
    detail = "Not authenticated"


class InvalidCredentialsError(TeamTodoError):
    """Login failed; never says which field was wrong."""

    status_code = 401
    detail = "Invalid email or password"


class NotFoundError(TeamTodoError):
    """Missing object or object owned by another tenant."""

    status_code = 404
    detail = "Not found or no permission"


class BadRequestError(TeamTodoError):
    status_code = 400
    detail = "Bad request"


class ConflictError(TeamTodoError):
    status_code = 409
    detail = "Conflict"


class StorageError(TeamTodoError):
    """Underlying store unavailable. Propagated so auth never fails open."""

    status_code = 503
    detail = "Storage unavailable"


class DispatchError(TeamTodoError):
    """A single reminder email could not be sent."""

    detail = "Reminder dispatch failed"
