"""Custom exception types for domain and API layers."""


class AppError(Exception):
    """Base app exception."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class InvalidLocator(AppError):
    """Repository reference does not match host/owner/name."""

    status_code = 400


class MalformedInput(AppError):
    """Request body is oversized, not JSON, or missing required fields."""

    status_code = 400


class RemoteError(AppError):
    """Non-2xx response from the remote host."""

    status_code = 502


class RemoteNotFound(RemoteError):
    """Requested remote resource does not exist."""

    status_code = 404


class RemoteConflict(RemoteError):
    """Remote rejected a create because the name is already taken."""

    status_code = 409


class RemoteRejected(RemoteError):
    """Any other remote failure: auth, validation, rate limit."""


class RemoteUnavailable(RemoteRejected):
    """Transport failure before a remote response was received."""

    status_code = 502
