"""Async Commerce Layer API client for the exports endpoint.

This module provides a typed async interface over httpx to the
JSON:API exports resource: create, retrieve, list and attachment download.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import httpx

from cl_exports.config import get_settings
from cl_exports.logging import get_logger
from cl_exports.schemas import Export, ExportCreate, ExportPage, PageMeta

from .exceptions import (
    ApiError,
    AuthenticationError,
    CommerceLayerError,
    NotFoundError,
    RateLimitedError,
)

logger = get_logger(__name__)

JSONAPI_MEDIA_TYPE = "application/vnd.api+json"


def api_base_url(organization: str, domain: str) -> str:
    """Base URL of an organization's REST API."""
    return f"https://{organization}.{domain}/api"


class CommerceLayerClient:
    """Async client for Commerce Layer export jobs.

    Usage:
        async with CommerceLayerClient("my-org", access_token=token) as client:
            export = await client.create_export(ExportCreate(resource_type="skus"))
            export = await client.retrieve_export(export.id)

    Or without context manager:
        client = CommerceLayerClient("my-org", access_token=token)
        page = await client.list_exports(page_number=1, page_size=25)
        await client.close()
    """

    def __init__(
        self,
        organization: str,
        *,
        access_token: str,
        domain: str = "commercelayer.io",
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the API client.

        Args:
            organization: Organization slug
            access_token: Bearer token for API calls
            domain: API domain
            timeout: Per-request timeout in seconds (defaults to settings)
            transport: Optional httpx transport (used by tests)

        Raises:
            AuthenticationError: If organization or token is missing.
        """
        if not organization:
            raise AuthenticationError(
                "Organization slug required. Set CL_ORGANIZATION environment variable."
            )
        if not access_token:
            raise AuthenticationError("Access token required to call the Commerce Layer API")
        self._organization = organization
        self._domain = domain
        self._access_token = access_token
        self._http = httpx.AsyncClient(
            base_url=api_base_url(organization, domain),
            timeout=timeout or get_settings().api.timeout_seconds,
            transport=transport,
            headers={
                "Accept": JSONAPI_MEDIA_TYPE,
                "Content-Type": JSONAPI_MEDIA_TYPE,
            },
        )

    @property
    def organization(self) -> str:
        return self._organization

    def configure(self, access_token: str) -> None:
        """Replace the bearer token used for subsequent calls."""
        self._access_token = access_token
        logger.debug("API client reconfigured with a new access token")

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._access_token}"}

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._http.aclose()

    async def __aenter__(self) -> CommerceLayerClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        await self.close()

    # -------------------------------------------------------------------------
    # Exports
    # -------------------------------------------------------------------------
    async def create_export(self, new_export: ExportCreate) -> Export:
        """Create a new export job.

        Args:
            new_export: Resource type, format and optional includes/filters

        Returns:
            The export as accepted by the server (status usually ``pending``)
        """
        document = await self._request("POST", "/exports", json=new_export.to_document())
        export = Export.from_resource(document["data"])
        logger.debug("Created export {} ({})", export.id, export.resource_type)
        return export

    async def retrieve_export(self, export_id: str) -> Export:
        """Get the current state of an export job.

        Raises:
            NotFoundError: If the export doesn't exist
        """
        document = await self._request("GET", f"/exports/{export_id}")
        return Export.from_resource(document["data"])

    async def list_exports(
        self,
        *,
        page_number: int = 1,
        page_size: int = 25,
        sort: Sequence[str] = ("-started_at",),
        filters: dict[str, Any] | None = None,
    ) -> ExportPage:
        """List one page of export jobs.

        Args:
            page_number: 1-based page to fetch
            page_size: Items per page (the server caps this at 25)
            sort: Sort keys, ``-`` prefix for descending
            filters: Ransack predicates, e.g. ``{"status_eq": "completed"}``

        Returns:
            ExportPage with the items and pagination metadata
        """
        params: dict[str, Any] = {
            "page[number]": page_number,
            "page[size]": page_size,
        }
        if sort:
            params["sort"] = ",".join(sort)
        for key, value in (filters or {}).items():
            params[f"filter[q][{key}]"] = value

        document = await self._request("GET", "/exports", params=params)
        meta = document.get("meta") or {}
        return ExportPage(
            items=Export.from_resource_list(document.get("data") or []),
            meta=PageMeta(
                current_page=page_number,
                page_count=meta.get("page_count", 0),
                record_count=meta.get("record_count", 0),
            ),
        )

    async def download(self, url: str) -> bytes:
        """Download an export attachment.

        Attachment URLs are pre-signed, so no bearer is sent.
        """
        try:
            response = await self._http.get(url, headers={"Accept": "*/*"})
        except httpx.HTTPError as e:
            raise CommerceLayerError(f"Unable to download export attachment: {e}") from e
        if response.is_error:
            raise self._handle_error(response)
        return response.content

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------
    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = await self._http.request(
                method, path, headers=self._auth_headers(), **kwargs
            )
        except httpx.HTTPError as e:
            raise CommerceLayerError(f"{method} {path} failed: {e}") from e

        if response.is_error:
            raise self._handle_error(response)
        document: dict[str, Any] = response.json()
        return document

    # -------------------------------------------------------------------------
    # Error Handling
    # -------------------------------------------------------------------------
    def _handle_error(self, response: httpx.Response) -> CommerceLayerError:
        """Convert an error response to our custom exceptions."""
        status = response.status_code
        detail = _error_detail(response)

        if status == 401:
            return AuthenticationError(f"Invalid access token: {detail}")
        elif status == 404:
            return NotFoundError(detail)
        elif status == 429:
            return RateLimitedError(
                "Commerce Layer rate limit exceeded",
                retry_after=_retry_after(response),
            )
        else:
            return ApiError(status, detail)


def _error_detail(response: httpx.Response) -> str:
    """Join the ``detail`` entries of a JSON:API errors document."""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    errors = body.get("errors") or [] if isinstance(body, dict) else []
    details = [str(e.get("detail") or e.get("title")) for e in errors if isinstance(e, dict)]
    return "; ".join(details) or response.reason_phrase


def _retry_after(response: httpx.Response) -> float | None:
    value = response.headers.get("retry-after")
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None
