"""Custom application exceptions."""


class AppException(Exception):
    """Base application exception."""

    retryable: bool = False

    def __init__(self, message: str, status_code: int = 500):
        """Initialize exception with message and status code."""
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class NotFoundException(AppException):
    """Resource not found exception."""

    def __init__(self, message: str = "Resource not found"):
        """Initialize with 404 status code."""
        super().__init__(message, status_code=404)


class UnauthorizedException(AppException):
    """Unauthorized access exception."""

    def __init__(self, message: str = "Unauthorized"):
        """Initialize with 401 status code."""
        super().__init__(message, status_code=401)


class ForbiddenException(AppException):
    """Forbidden access exception."""

    def __init__(self, message: str = "Forbidden"):
        """Initialize with 403 status code."""
        super().__init__(message, status_code=403)


class ValidationException(AppException):
    """Missing or contradictory input, rejected before touching the store."""

    def __init__(self, message: str = "Validation error"):
        """Initialize with 422 status code."""
        super().__init__(message, status_code=422)


class InvalidTransitionException(AppException):
    """Requested status change is not legal from the current status."""

    def __init__(
        self,
        current_status: str,
        requested_status: str | None = None,
        message: str | None = None,
    ):
        """Initialize with 409 status code."""
        self.current_status = current_status
        self.requested_status = requested_status
        if message is None:
            message = f"Cannot change appointment status from '{current_status}' to '{requested_status}'"
        super().__init__(message, status_code=409)


class StoreUnavailableException(AppException):
    """Transient failure reaching the appointment store; safe to retry."""

    retryable = True

    def __init__(self, message: str = "Appointment store is temporarily unavailable"):
        """Initialize with 503 status code."""
        super().__init__(message, status_code=503)
