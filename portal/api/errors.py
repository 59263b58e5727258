"""Error taxonomy for remote API calls and client-side checks."""

GENERIC_SERVER_ERROR = "Server error. Please try again later."
GENERIC_REQUEST_FAILED = "Request failed"
INVALID_RESPONSE = "Invalid response from server"
GENERIC_NETWORK_ERROR = "Network error. Please check your connection and try again."
SESSION_EXPIRED = "Your session has expired. Please login again."


class PortalError(Exception):
    """Base class for all portal errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ApiError(PortalError):
    """The API answered with a non-2xx status."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotFound(ApiError):
    """404 - resource absent."""

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(404, message)


class Unauthorized(ApiError):
    """401 - missing or expired credentials."""

    def __init__(self, message: str = SESSION_EXPIRED) -> None:
        super().__init__(401, message)


class Forbidden(ApiError):
    """403 - authenticated, but the role is insufficient."""

    def __init__(self, message: str = "You don't have permission to perform this action.") -> None:
        super().__init__(403, message)


class ServerError(ApiError):
    """5xx - generic, retry later."""

    def __init__(self, status_code: int = 500, message: str = GENERIC_SERVER_ERROR) -> None:
        super().__init__(status_code, message)


class RequestFailed(ApiError):
    """Any other non-2xx, carrying the server-provided detail when present."""


class NetworkError(PortalError):
    """The request never reached the server."""

    def __init__(self, message: str = GENERIC_NETWORK_ERROR) -> None:
        super().__init__(message)


class LoginRequired(PortalError):
    """No usable session; the caller must send the user to the login page."""

    def __init__(self, message: str, redirect_to: str) -> None:
        super().__init__(message)
        self.redirect_to = redirect_to


class ValidationFailed(PortalError):
    """Client-side form validation rejected the input."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
