"""Export job lifecycle and list aggregation.

Components:
- compute_delay / RateBudget: poll interval from the API rate budgets
- TokenRefresher: refreshes the access token ahead of expiry
- ExportPoller: drives one export to a terminal status
- PageAggregator: bounded, ordered collection of listed exports
"""

from .aggregator import AggregateResult, PageAggregator, validate_list_options
from .pacing import RateBudget, compute_delay
from .poller import ExportPoller, PollResult, should_poll, status_rank
from .token import TokenRefresher

__all__ = [
    # Pacing
    "RateBudget",
    "compute_delay",
    # Token
    "TokenRefresher",
    # Polling
    "ExportPoller",
    "PollResult",
    "should_poll",
    "status_rank",
    # Listing
    "AggregateResult",
    "PageAggregator",
    "validate_list_options",
]
