"""Tests for CommerceLayerClient.

Tests cover:
- JSON:API request documents and query parameters
- Response parsing into Export / ExportPage
- Bearer reconfiguration
- HTTP error mapping
"""

import json

import httpx
import pytest

from cl_exports.api.client import CommerceLayerClient, api_base_url
from cl_exports.api.exceptions import (
    ApiError,
    AuthenticationError,
    CommerceLayerError,
    NotFoundError,
    RateLimitedError,
)
from cl_exports.schemas import ExportCreate, ExportFormat
from tests.factories import make_export_resource, make_list_document


def make_client(handler, token: str = "token-1") -> CommerceLayerClient:
    return CommerceLayerClient(
        "the-blue-brand",
        access_token=token,
        transport=httpx.MockTransport(handler),
    )


# -----------------------------------------------------------------------------
# Test: Initialization
# -----------------------------------------------------------------------------
class TestClientInit:
    """Tests for client initialization."""

    def test_base_url(self) -> None:
        assert api_base_url("the-blue-brand", "commercelayer.io") == (
            "https://the-blue-brand.commercelayer.io/api"
        )

    def test_requires_organization(self) -> None:
        with pytest.raises(AuthenticationError):
            CommerceLayerClient("", access_token="token")

    def test_requires_token(self) -> None:
        with pytest.raises(AuthenticationError):
            CommerceLayerClient("the-blue-brand", access_token="")


# -----------------------------------------------------------------------------
# Test: Exports
# -----------------------------------------------------------------------------
class TestCreateExport:
    """Tests for create_export."""

    async def test_posts_jsonapi_document(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(201, json={"data": make_export_resource("new1")})

        async with make_client(handler) as client:
            export = await client.create_export(
                ExportCreate(
                    resource_type="skus",
                    format=ExportFormat.CSV,
                    includes=["prices"],
                    filters={"code_start": "TS"},
                )
            )

        request = seen[0]
        assert request.method == "POST"
        assert request.url == "https://the-blue-brand.commercelayer.io/api/exports"
        assert request.headers["Authorization"] == "Bearer token-1"
        assert request.headers["Content-Type"] == "application/vnd.api+json"
        assert json.loads(request.content) == {
            "data": {
                "type": "exports",
                "attributes": {
                    "resource_type": "skus",
                    "format": "csv",
                    "dry_data": False,
                    "includes": ["prices"],
                    "filters": {"code_start": "TS"},
                },
            }
        }
        assert export.id == "new1"
        assert export.status == "pending"

    async def test_omits_empty_includes_and_filters(self) -> None:
        bodies: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            return httpx.Response(201, json={"data": make_export_resource()})

        async with make_client(handler) as client:
            await client.create_export(ExportCreate(resource_type="orders"))

        attributes = bodies[0]["data"]["attributes"]
        assert "includes" not in attributes
        assert "filters" not in attributes


class TestRetrieveExport:
    """Tests for retrieve_export."""

    async def test_parses_export(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/api/exports/abc123"
            return httpx.Response(
                200,
                json={
                    "data": make_export_resource(
                        "abc123",
                        status="completed",
                        records_count=42,
                        attachment_url="https://files.example.com/abc123.json.gz",
                    )
                },
            )

        async with make_client(handler) as client:
            export = await client.retrieve_export("abc123")

        assert export.is_terminal
        assert export.records_count == 42
        assert export.attachment_url == "https://files.example.com/abc123.json.gz"

    async def test_configure_swaps_bearer(self) -> None:
        tokens: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            tokens.append(request.headers["Authorization"])
            return httpx.Response(200, json={"data": make_export_resource()})

        async with make_client(handler) as client:
            await client.retrieve_export("yzkWXfgHQS")
            client.configure("token-2")
            await client.retrieve_export("yzkWXfgHQS")

        assert tokens == ["Bearer token-1", "Bearer token-2"]


class TestListExports:
    """Tests for list_exports."""

    async def test_query_parameters(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=make_list_document([], record_count=0, page_count=0))

        async with make_client(handler) as client:
            await client.list_exports(
                page_number=3,
                page_size=10,
                filters={"resource_type_eq": "skus", "status_eq": "completed"},
            )

        params = seen[0].url.params
        assert params["page[number]"] == "3"
        assert params["page[size]"] == "10"
        assert params["sort"] == "-started_at"
        assert params["filter[q][resource_type_eq]"] == "skus"
        assert params["filter[q][status_eq]"] == "completed"

    async def test_parses_page(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json=make_list_document(
                    [make_export_resource("a"), make_export_resource("b")],
                    record_count=52,
                    page_count=3,
                ),
            )

        async with make_client(handler) as client:
            page = await client.list_exports(page_number=1, page_size=25)

        assert [e.id for e in page.items] == ["a", "b"]
        assert page.meta.current_page == 1
        assert page.meta.page_count == 3
        assert page.meta.record_count == 52
        assert page.meta.has_next


class TestDownload:
    """Tests for attachment download."""

    async def test_download_without_bearer(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, content=b"payload")

        async with make_client(handler) as client:
            data = await client.download("https://files.example.com/abc.json.gz")

        assert data == b"payload"
        assert seen[0].url.host == "files.example.com"
        assert "Authorization" not in seen[0].headers


# -----------------------------------------------------------------------------
# Test: Error Handling
# -----------------------------------------------------------------------------
class TestErrorHandling:
    """Tests for HTTP error mapping."""

    @pytest.mark.parametrize(
        ("status", "expected"),
        [
            (401, AuthenticationError),
            (404, NotFoundError),
            (429, RateLimitedError),
            (422, ApiError),
            (500, ApiError),
        ],
    )
    async def test_status_mapping(self, status: int, expected: type[Exception]) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status, json={"errors": [{"title": "x", "detail": "went wrong"}]})

        async with make_client(handler) as client:
            with pytest.raises(expected):
                await client.retrieve_export("abc")

    async def test_api_error_carries_detail(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                422,
                json={"errors": [{"detail": "resource_type is not included in the list"}]},
            )

        async with make_client(handler) as client:
            with pytest.raises(ApiError) as exc_info:
                await client.create_export(ExportCreate(resource_type="skus"))

        assert exc_info.value.status_code == 422
        assert "not included in the list" in str(exc_info.value)

    async def test_rate_limited_retry_after(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(429, headers={"Retry-After": "12"}, json={"errors": []})

        async with make_client(handler) as client:
            with pytest.raises(RateLimitedError) as exc_info:
                await client.list_exports()

        assert exc_info.value.retry_after == 12.0

    async def test_transport_error_wrapped(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with make_client(handler) as client:
            with pytest.raises(CommerceLayerError) as exc_info:
                await client.retrieve_export("abc")

        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
