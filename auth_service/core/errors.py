"""
Error taxonomy for the auth service.

Every failure a request can end in is one of the classes below. Each carries
the HTTP status code and the error type name rendered in the response body,
so the boundary handler in main.py never needs to inspect anything else.

    AuthServiceError
    ├── RequestValidationFailed  400
    ├── BadCredentialsError      400
    ├── EmailConflictError       400
    ├── NotAuthenticatedError    401
    ├── NotFoundError            404
    └── InternalError            500
"""

from typing import Any

from auth_service.schemas.errors import ErrorItem, FieldError


class AuthServiceError(Exception):
    """Base class; not raised directly."""

    status_code: int = 500
    error_type: str = "InternalServerError"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def to_items(self) -> list[ErrorItem]:
        """Error entries for the {"errors": [...]} response body."""
        return [ErrorItem(type=self.error_type, msg=self.message, path="", location="")]


class RequestValidationFailed(AuthServiceError):
    """One or more request fields failed validation."""

    status_code = 400
    error_type = "ValidationError"

    def __init__(self, errors: list[FieldError]) -> None:
        self.errors = errors
        super().__init__(errors[0].msg if errors else "Invalid request")

    def to_items(self) -> list[ErrorItem]:
        return [
            ErrorItem(type=e.type, msg=e.msg, path=e.path, location=e.location)
            for e in self.errors
        ]


class BadCredentialsError(AuthServiceError):
    """Login failed. Deliberately does not say whether the email or the password was wrong."""

    status_code = 400
    error_type = "BadRequestError"

    def __init__(self) -> None:
        super().__init__("Email or Password is incorrect")


class EmailConflictError(AuthServiceError):
    """Registration with an email that is already taken. Reported as 400, not 409."""

    status_code = 400
    error_type = "BadRequestError"

    def __init__(self) -> None:
        super().__init__("Email already exists!")


class NotAuthenticatedError(AuthServiceError):
    status_code = 401
    error_type = "UnauthorizedError"

    def __init__(self, message: str = "Not authenticated") -> None:
        super().__init__(message)


class NotFoundError(AuthServiceError):
    status_code = 404
    error_type = "NotFoundError"


class InternalError(AuthServiceError):
    """Anything unexpected: signing failure, hashing failure, persistence outage."""

    status_code = 500
    error_type = "InternalServerError"

    # Never shown to clients; the real message only goes to the log.
    public_message = "Internal server error"

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.cause = cause
        super().__init__(message)

    def to_items(self) -> list[ErrorItem]:
        return [
            ErrorItem(type=self.error_type, msg=self.public_message, path="", location="")
        ]


def error_body(items: list[ErrorItem]) -> dict[str, Any]:
    """Uniform error response body."""
    return {"errors": [item.model_dump() for item in items]}
