"""Poll interval derived from the API request budgets.

The Commerce Layer API enforces two independent ceilings, a short burst
window and a longer average window. Spacing requests by the larger of
the two per-request delays keeps a single poll loop under both.

Algorithm:
    burst_delay   = burst.window_seconds / burst.max_requests
    average_delay = average.window_seconds / average.max_requests
    delay_ms      = ceil(max(burst_delay, average_delay) * 1000)
"""

from __future__ import annotations

import math

from pydantic import BaseModel, ConfigDict, Field


class RateBudget(BaseModel):
    """A request ceiling: at most ``max_requests`` per ``window_seconds``."""

    model_config = ConfigDict(frozen=True)

    max_requests: int = Field(gt=0, description="Requests allowed per window")
    window_seconds: float = Field(gt=0, description="Window length in seconds")

    @property
    def per_request_delay(self) -> float:
        """Seconds between requests that exhausts the budget exactly."""
        return self.window_seconds / self.max_requests


def compute_delay(burst: RateBudget, average: RateBudget) -> int:
    """Milliseconds to wait between two polls.

    Example:
        5 req / 2 s (400 ms) and 100 req / 60 s (600 ms) gives 600.
    """
    return max(_delay_ms(burst), _delay_ms(average))


def _delay_ms(budget: RateBudget) -> int:
    return math.ceil(budget.window_seconds * 1000 / budget.max_requests)
