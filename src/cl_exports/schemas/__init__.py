"""Pydantic schemas for Commerce Layer export data."""

from .auth import AccessToken, Credentials, TokenClaims
from .base import SchemaBase
from .enums import TERMINAL_STATUSES, ExportFormat, ExportStatus, OutputFormat
from .export import Export, ExportCreate, ExportPage, PageMeta

__all__ = [
    # Base
    "SchemaBase",
    # Enums
    "ExportFormat",
    "ExportStatus",
    "OutputFormat",
    "TERMINAL_STATUSES",
    # Exports
    "Export",
    "ExportCreate",
    "ExportPage",
    "PageMeta",
    # Auth
    "AccessToken",
    "Credentials",
    "TokenClaims",
]
