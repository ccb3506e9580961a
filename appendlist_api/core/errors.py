"""Error kinds raised by the service layer.

Routers never translate these by hand: ``main.py`` registers a single
exception handler that maps ``status_code`` and ``detail`` onto the response.
"""


class AppendListError(Exception):
    """Base exception for append list errors."""

    status_code = 400
    default_detail = "Request failed"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class NotFoundError(AppendListError):
    """Resource does not exist (or is not visible to the caller)."""

    status_code = 404
    default_detail = "Not found"


class ListNotFoundError(NotFoundError):
    """Append list not found."""

    default_detail = "Append list not found"


class PersonNotFoundError(NotFoundError):
    """Member record not found on this list."""

    default_detail = "Person not found"


class NotificationNotFoundError(NotFoundError):
    """Notification not found."""

    default_detail = "Notification not found"


class ValidationFailedError(AppendListError):
    """Blank required field or malformed list-type payload."""

    status_code = 422
    default_detail = "Validation failed"


class ForbiddenError(AppendListError):
    """Authenticated but not authorized."""

    status_code = 403
    default_detail = "Not allowed"


class UnauthenticatedError(AppendListError):
    """No principal where one is mandatory."""

    status_code = 401
    default_detail = "Not authenticated"
