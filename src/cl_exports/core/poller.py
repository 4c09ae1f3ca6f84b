"""Export job polling.

Drives one export from its creation response to a terminal status:

    ensure token valid -> retrieve export -> terminal? stop : wait delay

Each iteration makes at most one token refresh followed by exactly one
status call. The wait is skipped once a terminal status is observed, so
nothing touches the network after the job has finished.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from cl_exports.exceptions import ExportFailedError, ExportsError, PollingTimeoutError
from cl_exports.logging import bind_export
from cl_exports.schemas import AccessToken, Export, ExportStatus

from .token import Sleeper, TokenRefresher

if TYPE_CHECKING:
    from cl_exports.api.client import CommerceLayerClient

_STATUS_RANK: dict[str, int] = {
    ExportStatus.PENDING.value: 0,
    ExportStatus.IN_PROGRESS.value: 1,
    ExportStatus.COMPLETED.value: 2,
    ExportStatus.INTERRUPTED.value: 2,
}
_UNKNOWN_RANK = 1


def status_rank(status: str) -> int:
    """Position of a status in the job lifecycle (unknown = in progress)."""
    return _STATUS_RANK.get(status, _UNKNOWN_RANK)


def should_poll(export: Export) -> bool:
    """False when the creation response already reports nothing to export."""
    return bool(export.records_count)


@dataclass
class PollResult:
    """Outcome of a completed poll session."""

    export: Export
    """Final export record, status ``completed``."""

    token: AccessToken
    """Token held at the end of the session (may have been refreshed)."""

    iterations: int = 0
    """Number of status calls made."""

    @property
    def records_count(self) -> int:
        return self.export.records_count or 0


class ExportPoller:
    """Polls an export job until it completes or is interrupted.

    There is no iteration cap. A ``timeout`` may be given to bound the
    session; without it the poller relies on the server reaching a
    terminal status.

    Usage:
        poller = ExportPoller(client, refresher, delay_ms=compute_delay(b, a))
        result = await poller.run(export, token)
        print(result.export.records_count)
    """

    def __init__(
        self,
        client: CommerceLayerClient,
        refresher: TokenRefresher,
        *,
        delay_ms: int,
        timeout: float | None = None,
        on_status: Callable[[Export], None] | None = None,
        sleep: Sleeper = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the poller.

        Args:
            client: API client used to retrieve the export
            refresher: Refresher consulted before every status call
            delay_ms: Wait between two status calls, in milliseconds
            timeout: Optional bound on the whole session, in seconds
            on_status: Called with the local export copy after every retrieve
            sleep: Awaitable sleep used for the inter-poll wait
            clock: Monotonic clock used for the timeout
        """
        if delay_ms < 0:
            raise ValueError("delay_ms cannot be negative")
        if timeout is not None and timeout <= 0:
            raise ValueError("timeout must be positive")
        self._client = client
        self._refresher = refresher
        self._delay = delay_ms / 1000
        self._timeout = timeout
        self._on_status = on_status
        self._sleep = sleep
        self._clock = clock

    async def run(self, export: Export, token: AccessToken) -> PollResult:
        """Poll until the export reaches a terminal status.

        Args:
            export: Export as returned by the creation call
            token: Access token currently configured on the client

        Returns:
            PollResult with the completed export

        Raises:
            ExportFailedError: If the job ends ``interrupted``
            PollingTimeoutError: If a timeout was set and elapsed
            AuthRefreshError: If the token could not be refreshed
            ExportsError: If the server answers with a different export
        """
        export_id = export.id
        log = bind_export(export_id)
        started = self._clock()
        iterations = 0

        while not export.is_terminal:
            if self._timeout is not None and self._clock() - started >= self._timeout:
                raise PollingTimeoutError(export_id, self._timeout)

            token = await self._refresher.ensure_valid(token)
            latest = await self._client.retrieve_export(export_id)
            iterations += 1
            if latest.id != export_id:
                raise ExportsError(f"Requested export {export_id}, received export {latest.id}")

            if status_rank(latest.status) < status_rank(export.status):
                log.warning(
                    "Ignoring status regression {} -> {}", export.status, latest.status
                )
            else:
                if latest.status != export.status:
                    log.debug("Status {} -> {}", export.status, latest.status)
                export = latest

            if self._on_status is not None:
                self._on_status(export)

            if export.is_terminal:
                break
            await self._sleep(self._delay)

        log.info("Export finished with status {} after {} polls", export.status, iterations)

        if export.status == ExportStatus.INTERRUPTED:
            raise ExportFailedError(export_id)

        return PollResult(export=export, token=token, iterations=iterations)
