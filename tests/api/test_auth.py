"""Tests for the token endpoint client and JWT decoding."""

import base64
import json

import httpx
import pytest

from cl_exports.api.auth import AuthClient, check_application, decode_access_token
from cl_exports.api.exceptions import AuthenticationError, CommerceLayerError
from cl_exports.exceptions import ValidationError
from cl_exports.schemas import Credentials, TokenClaims
from tests.conftest import NOW_EPOCH
from tests.factories import make_jwt

CREDENTIALS = Credentials(
    client_id="client-id",
    client_secret="client-secret",
    organization="the-blue-brand",
)


class TestDecodeAccessToken:
    """Tests for decode_access_token."""

    def test_decodes_claims(self) -> None:
        claims = decode_access_token(make_jwt(exp=NOW_EPOCH + 7200, kind="cli"))

        assert claims.exp == NOW_EPOCH + 7200
        assert claims.application_kind == "cli"
        assert claims.organization_slug == "the-blue-brand"

    def test_missing_application(self) -> None:
        claims = decode_access_token(make_jwt(kind=None, slug=None))

        assert claims.application_kind is None
        assert claims.organization_slug is None

    @pytest.mark.parametrize("token", ["not-a-jwt", "a.b", "a.!!!.c"])
    def test_malformed_token(self, token: str) -> None:
        with pytest.raises(AuthenticationError):
            decode_access_token(token)

    def test_missing_expiry(self) -> None:
        token = make_jwt()
        header, _payload, signature = token.split(".")
        token = f"{header}.e30.{signature}"  # "{}"

        with pytest.raises(AuthenticationError, match="expiry"):
            decode_access_token(token)

    @pytest.mark.parametrize(
        "payload",
        [[1, 2], 42, "claims", {"exp": NOW_EPOCH, "organization": "the-blue-brand"}],
    )
    def test_payload_must_be_json_object(self, payload: object) -> None:
        header, _payload, signature = make_jwt().split(".")
        encoded = base64.urlsafe_b64encode(json.dumps(payload).encode()).rstrip(b"=").decode()

        with pytest.raises(AuthenticationError, match="Malformed"):
            decode_access_token(f"{header}.{encoded}.{signature}")


class TestCheckApplication:
    """Tests for check_application."""

    @pytest.mark.parametrize("kind", ["integration", "cli"])
    def test_allowed_kinds(self, kind: str) -> None:
        check_application(TokenClaims(exp=NOW_EPOCH, application_kind=kind))

    def test_sales_channel_rejected(self) -> None:
        with pytest.raises(ValidationError, match="sales_channel"):
            check_application(TokenClaims(exp=NOW_EPOCH, application_kind="sales_channel"))


class TestGetAccessToken:
    """Tests for AuthClient.get_access_token."""

    async def test_client_credentials_grant(self) -> None:
        seen: list[httpx.Request] = []
        jwt = make_jwt(exp=NOW_EPOCH + 14400)

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"access_token": jwt, "token_type": "bearer"})

        async with AuthClient(transport=httpx.MockTransport(handler)) as auth:
            token = await auth.get_access_token(CREDENTIALS)

        assert str(seen[0].url) == "https://auth.commercelayer.io/oauth/token"
        assert json.loads(seen[0].content) == {
            "grant_type": "client_credentials",
            "client_id": "client-id",
            "client_secret": "client-secret",
        }
        assert token.value == jwt
        assert token.claims.exp == NOW_EPOCH + 14400

    async def test_rejected_credentials(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"error": "invalid_client"})

        async with AuthClient(transport=httpx.MockTransport(handler)) as auth:
            with pytest.raises(AuthenticationError):
                await auth.get_access_token(CREDENTIALS)

    async def test_server_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503)

        async with AuthClient(transport=httpx.MockTransport(handler)) as auth:
            with pytest.raises(CommerceLayerError):
                await auth.get_access_token(CREDENTIALS)

    async def test_requires_client_id(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:  # pragma: no cover
            raise AssertionError("no request expected")

        async with AuthClient(transport=httpx.MockTransport(handler)) as auth:
            with pytest.raises(AuthenticationError, match="Client ID"):
                await auth.get_access_token(Credentials())

    async def test_organization_mismatch(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"access_token": make_jwt(slug="other-brand")})

        async with AuthClient(transport=httpx.MockTransport(handler)) as auth:
            with pytest.raises(AuthenticationError, match="other-brand"):
                await auth.get_access_token(CREDENTIALS)
