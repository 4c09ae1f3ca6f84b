"""Commerce Layer API access.

This module provides:
- CommerceLayerClient: Async JSON:API client for export jobs
- AuthClient: Token endpoint client and JWT claim decoding
- API exceptions mapped from HTTP error responses
"""

from .auth import AuthClient, check_application, decode_access_token
from .client import CommerceLayerClient
from .exceptions import (
    ApiError,
    AuthenticationError,
    CommerceLayerError,
    NotFoundError,
    RateLimitedError,
)

__all__ = [
    # Clients
    "AuthClient",
    "CommerceLayerClient",
    "check_application",
    "decode_access_token",
    # Exceptions
    "ApiError",
    "AuthenticationError",
    "CommerceLayerError",
    "NotFoundError",
    "RateLimitedError",
]
