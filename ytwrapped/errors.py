"""Error kinds surfaced by the YouTrack gateway and the collection pipeline."""


class YouTrackError(RuntimeError):
    """Base class for failures talking to the YouTrack REST API."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Attach HTTP status metadata to the exception instance."""
        super().__init__(message)
        self.status_code = status_code


class TransportError(YouTrackError):
    """Raised when a request could not be sent or no response arrived."""


class AuthError(YouTrackError):
    """Raised when YouTrack rejects the token (HTTP 401 or 403)."""


class ProtocolError(YouTrackError):
    """Raised for any other non-2xx status or an unexpected payload."""

    def __init__(self, message: str, *, status_code: int | None = None, body: str = "") -> None:
        """Keep the raw response body next to the status code."""
        super().__init__(message, status_code=status_code)
        self.body = body


class ValidationError(ValueError):
    """Raised when a required input such as the endpoint, token, or year is missing."""
