"""Commerce Layer API client exceptions."""


class CommerceLayerError(Exception):
    """Base exception for Commerce Layer API errors."""

    pass


class AuthenticationError(CommerceLayerError):
    """Raised when the API rejects the credentials or token (401)."""

    pass


class NotFoundError(CommerceLayerError):
    """Raised when a resource is not found (404)."""

    pass


class RateLimitedError(CommerceLayerError):
    """Raised when the API answers 429 Too Many Requests."""

    def __init__(self, message: str, retry_after: float | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class ApiError(CommerceLayerError):
    """Raised for any other unsuccessful API response."""

    def __init__(self, status_code: int, detail: str) -> None:
        super().__init__(f"Commerce Layer API error ({status_code}): {detail}")
        self.status_code = status_code
        self.detail = detail
