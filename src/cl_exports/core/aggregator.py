"""Bounded aggregation of the exports list endpoint.

Pages are requested strictly forward, newest export first. The number of
items to collect is only known after the first page, when the server
reports the total record count:

    all_items -> min(total, max_items)
    limit     -> min(limit, max_items)
    otherwise -> min(default_items, max_items)
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from cl_exports.exceptions import ValidationError
from cl_exports.logging import get_logger
from cl_exports.schemas import Export

if TYPE_CHECKING:
    from cl_exports.api.client import CommerceLayerClient

logger = get_logger(__name__)

SORT_NEWEST_FIRST = ("-started_at",)


@dataclass
class AggregateResult:
    """Exports collected by one list invocation."""

    items: list[Export] = field(default_factory=list)
    """Exports in server order (newest first)."""

    fetched: int = 0
    """Number of exports collected."""

    total: int = 0
    """Total record count reported by the server."""

    @property
    def truncated(self) -> bool:
        """True if the server holds more exports than were collected."""
        return self.fetched < self.total


def validate_list_options(limit: int | None, all_items: bool) -> None:
    """Reject option combinations before any network call.

    Raises:
        ValidationError: If limit is not positive or combined with all_items
    """
    if limit is not None and limit < 1:
        raise ValidationError("Limit must be a positive integer")
    if limit is not None and all_items:
        raise ValidationError("Options --all and --limit cannot be used together")


class PageAggregator:
    """Collects export summaries page by page under a record cap.

    Usage:
        aggregator = PageAggregator(client)
        result = await aggregator.collect({"status_eq": "completed"}, limit=50)
        print(f"{result.fetched} of {result.total}")
    """

    def __init__(
        self,
        client: CommerceLayerClient,
        *,
        page_max_size: int = 25,
        max_items: int = 1000,
        default_items: int = 25,
    ) -> None:
        """Initialize the aggregator.

        Args:
            client: API client used to list exports
            page_max_size: Largest page size the server accepts
            max_items: Hard ceiling of exports collected in one call
            default_items: Exports collected when neither limit nor all is set
        """
        self._client = client
        self._page_max_size = page_max_size
        self._max_items = max_items
        self._default_items = default_items

    @property
    def max_items(self) -> int:
        """Hard ceiling of exports collected in one call."""
        return self._max_items

    def page_size_for(self, page_size: int | None, limit: int | None) -> int:
        """Effective page size: requested size bounded by the limit and server max."""
        size = min(page_size or self._page_max_size, self._page_max_size)
        if limit is not None:
            size = min(size, limit)
        return max(1, size)

    def item_cap(self, total: int, limit: int | None, all_items: bool) -> int:
        """Number of items to collect once the server total is known."""
        if all_items:
            wanted = total
        elif limit is not None:
            wanted = limit
        else:
            wanted = self._default_items
        return min(wanted, self._max_items)

    async def collect(
        self,
        filters: dict[str, Any] | None = None,
        page_size: int | None = None,
        limit: int | None = None,
        all_items: bool = False,
    ) -> AggregateResult:
        """Fetch exports until the cap is reached or the server runs out.

        Args:
            filters: Ransack-style filters, e.g. ``{"resource_type_eq": "skus"}``
            page_size: Requested page size (bounded by the server maximum)
            limit: Maximum number of exports to collect
            all_items: Collect every export up to the hard ceiling

        Returns:
            AggregateResult with items in server order

        Raises:
            ValidationError: For a non-positive limit or limit with all_items
        """
        validate_list_options(limit, all_items)

        size = self.page_size_for(page_size, limit)
        result = AggregateResult()
        cap: int | None = None  # known after the first page
        page_number = 0
        page_count = 1

        while page_number < page_count and (cap is None or result.fetched < cap):
            page_number += 1
            page = await self._client.list_exports(
                page_number=page_number,
                page_size=size,
                sort=SORT_NEWEST_FIRST,
                filters=filters or {},
            )
            logger.debug(
                "Fetched exports page {}/{} ({} items)",
                page.meta.current_page,
                page.meta.page_count,
                len(page.items),
            )

            if not page.items:
                break

            if page_number == 1:
                # a missing record count still covers the first page
                result.total = max(page.meta.record_count, len(page.items))
                cap = self.item_cap(result.total, limit, all_items)
                page_count = min(page.meta.page_count, math.ceil(cap / size))

            result.items.extend(page.items)
            result.fetched += len(page.items)

        if cap is not None and result.fetched > cap:
            del result.items[cap:]
            result.fetched = cap

        logger.info("Collected {} of {} exports", result.fetched, result.total)
        return result
