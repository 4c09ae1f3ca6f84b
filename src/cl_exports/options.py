"""Parsing and validation of export command options."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from cl_exports.exceptions import ValidationError
from cl_exports.schemas import ExportCreate, ExportFormat


def parse_include(values: Iterable[str] | None) -> list[str]:
    """Flatten repeated, comma separated ``--include`` values.

    Example:
        ["prices,stock_items", "shipping_category"]
        -> ["prices", "stock_items", "shipping_category"]
    """
    includes: list[str] = []
    for value in values or ():
        for item in value.split(","):
            item = item.strip()
            if item and item not in includes:
                includes.append(item)
    return includes


def parse_where(values: Iterable[str] | None) -> dict[str, Any]:
    """Parse repeated, comma separated ``predicate=value`` filters.

    Example:
        ["code_start=TS,name_cont=shirt"] -> {"code_start": "TS", "name_cont": "shirt"}

    Raises:
        ValidationError: If an entry has no ``=`` or an empty predicate
    """
    filters: dict[str, Any] = {}
    for value in values or ():
        for item in value.split(","):
            if not item.strip():
                continue
            predicate, sep, operand = item.partition("=")
            predicate = predicate.strip()
            if not sep or not predicate:
                raise ValidationError(f"Invalid query filter: {item.strip()}")
            filters[predicate] = operand.strip()
    return filters


class ExportOptions(BaseModel):
    """Every option recognized by ``exports create``."""

    model_config = ConfigDict(frozen=True)

    resource_type: str
    format: ExportFormat = ExportFormat.JSON
    dry_data: bool = False
    includes: list[str] = Field(default_factory=list)
    filters: dict[str, Any] = Field(default_factory=dict)
    save_path: Path
    create_dirs: bool = False
    pretty: bool = False
    notify: bool = False
    blind: bool = False
    timeout: float | None = None

    @property
    def resource_description(self) -> str:
        return self.resource_type.replace("_", " ")

    def to_create(self) -> ExportCreate:
        """Request attributes for the export job."""
        return ExportCreate(
            resource_type=self.resource_type,
            format=self.format,
            dry_data=self.dry_data,
            includes=self.includes,
            filters=self.filters,
        )


def build_export_options(
    *,
    resource_type: str,
    supported_types: Iterable[str],
    format: ExportFormat | None = None,
    csv: bool = False,
    dry_data: bool = False,
    include: Iterable[str] | None = None,
    where: Iterable[str] | None = None,
    save: Path | None = None,
    save_path: Path | None = None,
    pretty: bool = False,
    notify: bool = False,
    blind: bool = False,
    timeout: float | None = None,
) -> ExportOptions:
    """Validate raw command options and build ExportOptions.

    Raises:
        ValidationError: For an unsupported type or incompatible options
    """
    if resource_type not in set(supported_types):
        raise ValidationError(f"Unsupported resource type: {resource_type}")

    if save and save_path:
        raise ValidationError("Options --save and --save-path cannot be used together")
    target = save or save_path
    if target is None:
        raise ValidationError("Undefined output file path")

    if csv and format is not None and format != ExportFormat.CSV:
        raise ValidationError("Options --csv and --format json cannot be used together")
    effective_format = ExportFormat.CSV if csv else (format or ExportFormat.JSON)

    if pretty and effective_format == ExportFormat.CSV:
        raise ValidationError("Option --pretty can only be used with JSON format")

    if timeout is not None and timeout <= 0:
        raise ValidationError("Timeout must be a positive number of seconds")

    return ExportOptions(
        resource_type=resource_type,
        format=effective_format,
        dry_data=dry_data,
        includes=parse_include(include),
        filters=parse_where(where),
        save_path=target,
        create_dirs=save_path is not None,
        pretty=pretty,
        notify=notify,
        blind=blind,
        timeout=timeout,
    )
