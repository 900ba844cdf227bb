# collabhub/shared/errors.py
from typing import Any, Optional


class AppError(Exception):
    """Base for errors services raise; main.py maps them onto the error envelope."""
    status = 400
    code = "bad_request"

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class Unauthorized(AppError):
    status = 401
    code = "unauthorized"


class Forbidden(AppError):
    status = 403
    code = "forbidden"


class NotFound(AppError):
    status = 404
    code = "not_found"


class ValidationError(AppError):
    """Input problems. `details` carries one {"item", "reason"} entry per bad item."""
    status = 422
    code = "validation_error"

    def __init__(self, message: str, problems: Optional[list[dict]] = None):
        super().__init__(message, details=problems or [])

    @property
    def problems(self) -> list[dict]:
        return self.details


class UpstreamFailure(AppError):
    status = 502
    code = "upstream_failure"
