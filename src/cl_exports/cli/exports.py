"""Export job commands."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any

import typer
from rich.markup import escape
from rich.table import Table

from cl_exports.api import (
    AuthClient,
    CommerceLayerClient,
    check_application,
    decode_access_token,
)
from cl_exports.cli.common import (
    OutputFormatOption,
    ResourceTypeOption,
    console,
    run_async_command,
)
from cl_exports.config import Settings, get_settings
from cl_exports.core import (
    AggregateResult,
    ExportPoller,
    PageAggregator,
    TokenRefresher,
    compute_delay,
    should_poll,
    validate_list_options,
)
from cl_exports.exceptions import ValidationError
from cl_exports.notify import ConsoleNotifier, Notifier, send_notification
from cl_exports.options import ExportOptions, build_export_options
from cl_exports.output import save_export
from cl_exports.schemas import (
    AccessToken,
    Credentials,
    Export,
    ExportFormat,
    ExportStatus,
    OutputFormat,
)

app = typer.Typer(help="Create and list export jobs")


def get_notifier() -> Notifier:
    """Notifier used for completion messages."""
    return ConsoleNotifier()


def _credentials(settings: Settings) -> Credentials:
    return Credentials(
        client_id=settings.cl_client_id,
        client_secret=settings.cl_client_secret,
        organization=settings.cl_organization,
        domain=settings.cl_domain,
    )


async def _initial_token(
    settings: Settings, credentials: Credentials, auth: AuthClient
) -> AccessToken:
    """Token from CL_ACCESS_TOKEN, or a new one from the client credentials."""
    if settings.cl_access_token:
        value = settings.cl_access_token
        return AccessToken(value=value, claims=decode_access_token(value))
    return await auth.get_access_token(credentials)


def _fail(message: str) -> typer.Exit:
    console.print(f"[red]Error:[/red] {escape(message)}")
    return typer.Exit(1)


def _status_text(status: str) -> str:
    return escape(status.replace("_", " "))


def _get_status_style(status: str) -> str:
    """Get rich markup for an export status."""
    match status:
        case ExportStatus.COMPLETED:
            return f"[green]{_status_text(status)}[/green]"
        case ExportStatus.INTERRUPTED:
            return f"[red]{_status_text(status)}[/red]"
        case ExportStatus.IN_PROGRESS:
            return f"[yellow]{_status_text(status)}[/yellow]"
        case _:
            return _status_text(status)


def _format_date(value: datetime | None) -> str:
    if value is None:
        return ""
    return value.astimezone().strftime("%Y-%m-%d %H:%M:%S")


# -----------------------------------------------------------------------------
# exports create
# -----------------------------------------------------------------------------
@app.command("create")
def create_export(
    resource_type: str = typer.Option(
        ...,
        "--type",
        "-t",
        help="The type of resource being exported",
    ),
    include: list[str] | None = typer.Option(  # noqa: B008
        None,
        "--include",
        "-i",
        help="Comma separated resources to include",
    ),
    where: list[str] | None = typer.Option(  # noqa: B008
        None,
        "--where",
        "-w",
        help="Comma separated list of query filters (predicate=value)",
    ),
    dry_data: bool = typer.Option(
        False,
        "--dry-data",
        "-D",
        help="Skip redundant attributes",
    ),
    export_format: ExportFormat | None = typer.Option(  # noqa: B008
        None,
        "--format",
        "-F",
        help="Export file format [default: json]",
    ),
    csv: bool = typer.Option(
        False,
        "--csv",
        "-C",
        help="Export data in CSV format",
    ),
    save: Path | None = typer.Option(  # noqa: B008
        None,
        "--save",
        "-x",
        help="Save command output to file",
    ),
    save_path: Path | None = typer.Option(  # noqa: B008
        None,
        "--save-path",
        "-X",
        help="Save command output to file and create missing path directories",
    ),
    notify: bool = typer.Option(
        False,
        "--notify",
        "-N",
        help="Force system notification when export has finished",
        hidden=True,
    ),
    blind: bool = typer.Option(
        False,
        "--blind",
        "-b",
        help="Execute in blind mode without showing the progress monitor",
    ),
    pretty: bool = typer.Option(
        False,
        "--pretty",
        "-P",
        help="Prettify JSON output format",
    ),
    timeout: float | None = typer.Option(
        None,
        "--timeout",
        help="Stop waiting after this many seconds (the export keeps running)",
    ),
) -> None:
    """Create a new export and wait for it to finish.

    Examples:
        clexports exports create -t skus -x skus.json
        clexports exports create -t orders -w status_eq=placed -C -X out/orders.csv
        clexports exports create -t prices -i sku -P --blind -x prices.json
    """
    settings = get_settings()
    try:
        options = build_export_options(
            resource_type=resource_type,
            supported_types=settings.exports.types,
            format=export_format,
            csv=csv,
            dry_data=dry_data,
            include=include,
            where=where,
            save=save,
            save_path=save_path,
            pretty=pretty,
            notify=notify,
            blind=blind,
            timeout=timeout,
        )
    except ValidationError as e:
        raise _fail(str(e)) from None

    run_async_command(_create(options, settings))


async def _create(options: ExportOptions, settings: Settings) -> Export | None:
    credentials = _credentials(settings)
    description = options.resource_description

    async with AuthClient(timeout=settings.api.timeout_seconds) as auth:
        token = await _initial_token(settings, credentials, auth)
        check_application(token.claims)

        organization = credentials.organization or token.claims.organization_slug or ""
        async with CommerceLayerClient(
            organization,
            access_token=token.value,
            domain=credentials.domain,
        ) as client:
            export = await client.create_export(options.to_create())

            if not should_poll(export):
                console.print("\n[italic]No records found[/italic]\n")
                return None
            console.print(f"Started export [bold cyan]{escape(export.id)}[/bold cyan]")

            refresher = TokenRefresher(
                credentials,
                auth,
                security_margin=settings.exports.token_security_margin,
                on_refresh=lambda fresh: client.configure(fresh.value),
            )
            delay_ms = compute_delay(settings.api.burst_budget, settings.api.average_budget)

            if options.blind:
                poller = ExportPoller(
                    client, refresher, delay_ms=delay_ms, timeout=options.timeout
                )
                result = await poller.run(export, token)
            else:
                label = f"Exporting {description}"
                with console.status(f"{label}... {_status_text(export.status)}") as status:
                    poller = ExportPoller(
                        client,
                        refresher,
                        delay_ms=delay_ms,
                        timeout=options.timeout,
                        on_status=lambda e: status.update(f"{label}... {_status_text(e.status)}"),
                    )
                    result = await poller.run(export, token)
                console.print(f"{label}... {_get_status_style(result.export.status)}")

            console.print(
                f"\nExported [bright_yellow]{result.records_count}[/bright_yellow] {description}"
            )

            saved = await save_export(
                client,
                result.export,
                options.save_path,
                pretty=options.pretty,
                create_dirs=options.create_dirs,
            )
            console.print(f"Export saved to [cyan]{escape(str(saved))}[/cyan]")

    message = f"Export of {result.records_count} {description} is finished!"
    if options.blind:
        console.print(message)
    elif options.notify:
        send_notification(get_notifier(), message)

    return result.export


# -----------------------------------------------------------------------------
# exports list
# -----------------------------------------------------------------------------
@app.command("list")
def list_exports(
    all_items: bool = typer.Option(
        False,
        "--all",
        "-A",
        help="Show all exports instead of the first 25 only",
    ),
    limit: int | None = typer.Option(
        None,
        "--limit",
        "-l",
        help="Limit number of exports in output",
    ),
    resource_type: ResourceTypeOption = None,
    status: str | None = typer.Option(
        None,
        "--status",
        "-s",
        help="The export job status",
    ),
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """List the created exports, newest first.

    Examples:
        clexports exports list
        clexports exports list --all
        clexports exports list -t skus -s completed --limit 50
        clexports exports list --format json
    """
    settings = get_settings()
    try:
        validate_list_options(limit, all_items)
        filters = _list_filters(settings, resource_type, status)
    except ValidationError as e:
        raise _fail(str(e)) from None

    result = run_async_command(_collect(settings, filters, limit, all_items))

    if output_format == OutputFormat.JSON:
        console.print_json(
            json.dumps(
                {
                    "exports": [item.model_dump(mode="json") for item in result.items],
                    "displayed": result.fetched,
                    "total": result.total,
                }
            )
        )
        return

    console.print()
    if result.items:
        console.print(_exports_table(result))
        _footer(result, limit=limit, all_items=all_items, max_items=settings.exports.max_listed)
    else:
        console.print("[italic]No exports found[/italic]")
    console.print()


def _list_filters(settings: Settings, resource_type: str | None, status: str | None) -> dict[str, Any]:
    filters: dict[str, Any] = {}
    if resource_type:
        if resource_type not in settings.exports.types:
            raise ValidationError(f"Unsupported resource type: {resource_type}")
        filters["resource_type_eq"] = resource_type
    if status:
        if status not in settings.exports.statuses:
            raise ValidationError(f"Unsupported export status: {status}")
        filters["status_eq"] = status
    return filters


async def _collect(
    settings: Settings, filters: dict[str, Any], limit: int | None, all_items: bool
) -> AggregateResult:
    credentials = _credentials(settings)
    async with AuthClient(timeout=settings.api.timeout_seconds) as auth:
        token = await _initial_token(settings, credentials, auth)

    organization = credentials.organization or token.claims.organization_slug or ""
    async with CommerceLayerClient(
        organization,
        access_token=token.value,
        domain=credentials.domain,
    ) as client:
        aggregator = PageAggregator(
            client,
            page_max_size=settings.api.page_max_size,
            max_items=settings.exports.max_listed,
            default_items=settings.exports.default_listed,
        )
        with console.status("Fetching exports"):
            return await aggregator.collect(filters, limit=limit, all_items=all_items)


def _exports_table(result: AggregateResult) -> Table:
    table = Table(header_style="bold bright_yellow")
    table.add_column("ID", style="bright_blue")
    table.add_column("Resource type")
    table.add_column("Status", justify="center")
    table.add_column("Items", justify="center")
    table.add_column("Format", justify="center")
    table.add_column("Dry data", justify="center")
    table.add_column("Started at")

    for export in result.items:
        table.add_row(
            escape(export.id),
            escape(export.resource_type),
            _get_status_style(export.status),
            "" if export.records_count is None else str(export.records_count),
            export.format.value,
            "✓" if export.dry_data else "",
            _format_date(export.started_at),
        )
    return table


def _footer(result: AggregateResult, *, limit: int | None, all_items: bool, max_items: int) -> None:
    """Print the displayed/total counts and any truncation hint."""
    console.print()
    console.print(f"Total displayed exports: [bright_yellow]{result.fetched}[/bright_yellow]")
    console.print(f"Total export count: [bright_yellow]{result.total}[/bright_yellow]")

    if not result.truncated:
        return

    console.print()
    if all_items or (limit or 0) > max_items:
        console.print(
            "[yellow]Warning:[/yellow] The maximum number of exports that can be displayed "
            f"is [bright_yellow]{max_items}[/bright_yellow]"
        )
    elif not limit:
        displayed = f"Only {result.fetched} of {result.total} records are displayed"
        if result.total < max_items:
            console.print(
                f"[yellow]Warning:[/yellow] {displayed}, to see all existing items "
                "run the command with the --all flag enabled"
            )
        else:
            console.print(
                f"[yellow]Warning:[/yellow] {displayed}, to see more items "
                f"(max {max_items}) run the command with the --limit flag enabled"
            )
