"""Enums for export schemas."""

from enum import StrEnum


class ExportFormat(StrEnum):
    """File format of an export attachment."""

    CSV = "csv"
    JSON = "json"


class ExportStatus(StrEnum):
    """Lifecycle statuses reported by the exports endpoint.

    The server owns the list; values outside it are kept as plain strings
    on the export record and treated as in-progress.
    """

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    INTERRUPTED = "interrupted"
    COMPLETED = "completed"


class OutputFormat(StrEnum):
    """Output format for CLI commands."""

    TEXT = "text"
    """Human-readable table output."""

    JSON = "json"
    """Machine-readable JSON output."""


TERMINAL_STATUSES: frozenset[str] = frozenset(
    {ExportStatus.COMPLETED.value, ExportStatus.INTERRUPTED.value}
)
