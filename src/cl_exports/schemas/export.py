"""Pydantic schemas for the exports endpoint.

These schemas represent:
- Export: an export job as returned by create/retrieve/list
- ExportCreate: the attributes sent to create a job
- PageMeta / ExportPage: one page of the list endpoint
"""

from datetime import datetime
from typing import Any

from pydantic import Field

from .base import SchemaBase
from .enums import TERMINAL_STATUSES, ExportFormat

RESOURCE_TYPE = "exports"


class Export(SchemaBase):
    """An export job owned by the remote service.

    The client holds a read-only copy that is replaced on every retrieve.
    """

    id: str = Field(description="Server-assigned identifier")
    resource_type: str = Field(description="Type of the exported resources")
    format: ExportFormat = Field(default=ExportFormat.JSON)
    dry_data: bool = Field(default=False, description="Redundant attributes skipped")
    includes: list[str] = Field(default_factory=list)
    filters: dict[str, Any] = Field(default_factory=dict)
    status: str = Field(default="pending")
    records_count: int | None = Field(
        default=None,
        ge=0,
        description="Authoritative only once the job leaves the pending states",
    )
    errors_count: int | None = Field(default=None, ge=0)
    warnings_count: int | None = Field(default=None, ge=0)
    attachment_url: str | None = Field(default=None)
    started_at: datetime | None = Field(default=None)
    completed_at: datetime | None = Field(default=None)
    interrupted_at: datetime | None = Field(default=None)
    created_at: datetime | None = Field(default=None)

    @property
    def is_terminal(self) -> bool:
        """True once the job is completed or interrupted."""
        return self.status in TERMINAL_STATUSES

    @property
    def resource_description(self) -> str:
        """Resource type in words, e.g. ``sku lists``."""
        return self.resource_type.replace("_", " ")


class ExportCreate(SchemaBase):
    """Attributes of a new export job."""

    resource_type: str
    format: ExportFormat = ExportFormat.JSON
    dry_data: bool = False
    includes: list[str] = Field(default_factory=list)
    filters: dict[str, Any] = Field(default_factory=dict)

    def to_document(self) -> dict[str, Any]:
        """Build the JSON:API request document, leaving out empty optionals."""
        attributes: dict[str, Any] = {
            "resource_type": self.resource_type,
            "format": self.format.value,
            "dry_data": self.dry_data,
        }
        if self.includes:
            attributes["includes"] = list(self.includes)
        if self.filters:
            attributes["filters"] = dict(self.filters)
        return {"data": {"type": RESOURCE_TYPE, "attributes": attributes}}


class PageMeta(SchemaBase):
    """Pagination metadata of a list response."""

    current_page: int = Field(ge=1)
    page_count: int = Field(default=0, ge=0)
    record_count: int = Field(default=0, ge=0)

    @property
    def has_next(self) -> bool:
        """True if the server reports pages after this one."""
        return self.current_page < self.page_count


class ExportPage(SchemaBase):
    """One page of export summaries, newest first."""

    items: list[Export] = Field(default_factory=list)
    meta: PageMeta

    def __len__(self) -> int:
        return len(self.items)
