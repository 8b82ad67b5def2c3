"""
Error taxonomy surfaced by the video operations.

Each error carries the HTTP status the server maps it to. InternalError
always uses a generic message; the underlying cause is logged where it is
caught, never returned to the caller.
"""


class VideoServiceError(Exception):
    """Base class for errors returned to API clients."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(VideoServiceError):
    """The client omitted or malformed a required field."""

    status_code = 400
    default_message = "Invalid request"


class AuthError(VideoServiceError):
    """The request principal could not be resolved."""

    status_code = 401
    default_message = "Authentication required"


class InternalError(VideoServiceError):
    """A persistence or unexpected failure."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self) -> None:
        super().__init__(self.default_message)
