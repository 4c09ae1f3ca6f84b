"""Errors raised by the export commands."""


class ExportsError(Exception):
    """Base exception for export command failures."""

    pass


class ValidationError(ExportsError):
    """Raised for unsupported options, before any network call."""

    pass


class AuthRefreshError(ExportsError):
    """Raised when a new access token cannot be obtained.

    The underlying failure is chained as ``__cause__``.
    """

    def __init__(self, message: str = "Unable to refresh access token") -> None:
        super().__init__(message)


class ExportFailedError(ExportsError):
    """Raised when an export job ends in the ``interrupted`` status."""

    def __init__(self, export_id: str) -> None:
        super().__init__(f"Export {export_id} ended with errors")
        self.export_id = export_id


class PollingTimeoutError(ExportsError):
    """Raised when a poll deadline elapses before the job terminates."""

    def __init__(self, export_id: str, timeout: float) -> None:
        super().__init__(
            f"Export {export_id} did not finish within {timeout:g} seconds "
            "(the job keeps running on the server)"
        )
        self.export_id = export_id
        self.timeout = timeout
