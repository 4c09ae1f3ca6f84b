"""Commerce Layer OAuth2 token endpoint and JWT claim decoding."""

from __future__ import annotations

import base64
import json
from collections.abc import Iterable
from typing import Any

import httpx
from pydantic import ValidationError as SchemaValidationError

from cl_exports.exceptions import ValidationError
from cl_exports.logging import get_logger
from cl_exports.schemas import AccessToken, Credentials, TokenClaims

from .exceptions import AuthenticationError, CommerceLayerError

logger = get_logger(__name__)

EXPORT_APPLICATION_KINDS = ("integration", "cli")


def auth_base_url(domain: str) -> str:
    """Base URL of the authentication server for a domain."""
    return f"https://auth.{domain}"


def decode_access_token(token: str) -> TokenClaims:
    """Decode the claims of a JWT access token.

    The signature is not verified: the client only reads the expiry and
    the issuing application, and the API validates the token on every call.

    Raises:
        AuthenticationError: If the token is not a well-formed JWT
    """
    try:
        _header, payload, _signature = token.split(".")
        padded = payload + "=" * (-len(payload) % 4)
        data: Any = json.loads(base64.urlsafe_b64decode(padded))
    except ValueError as e:
        raise AuthenticationError(f"Malformed access token: {e}") from e
    if not isinstance(data, dict):
        raise AuthenticationError("Malformed access token: payload is not a JSON object")

    organization = _claim_object(data, "organization")
    application = _claim_object(data, "application")
    try:
        return TokenClaims(
            exp=data["exp"],
            organization_slug=organization.get("slug"),
            application_kind=application.get("kind"),
        )
    except (KeyError, SchemaValidationError) as e:
        raise AuthenticationError(f"Access token has no valid expiry: {e}") from e


def _claim_object(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise AuthenticationError(f"Malformed access token: {key} claim is not an object")
    return value


def check_application(
    claims: TokenClaims, kinds: Iterable[str] = EXPORT_APPLICATION_KINDS
) -> None:
    """Ensure the token was issued to an application allowed to export.

    Raises:
        ValidationError: If the application kind is not one of ``kinds``
    """
    allowed = tuple(kinds)
    if claims.application_kind not in allowed:
        raise ValidationError(
            f"Invalid application kind: {claims.application_kind or 'unknown'}. "
            f"Application kind must be one of the following: {', '.join(allowed)}"
        )


class AuthClient:
    """Client for the Commerce Layer token endpoint.

    Usage:
        async with AuthClient() as auth:
            token = await auth.get_access_token(credentials)
    """

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._http = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def get_access_token(self, credentials: Credentials) -> AccessToken:
        """Request a new access token with the client credentials grant.

        Args:
            credentials: Client id/secret, organization slug and domain

        Returns:
            AccessToken with decoded claims

        Raises:
            AuthenticationError: If the credentials are rejected
            CommerceLayerError: For transport failures or other errors
        """
        if not credentials.client_id:
            raise AuthenticationError(
                "Client ID required to get an access token. Set CL_CLIENT_ID."
            )

        body: dict[str, str] = {
            "grant_type": "client_credentials",
            "client_id": credentials.client_id,
        }
        if credentials.client_secret:
            body["client_secret"] = credentials.client_secret

        url = f"{auth_base_url(credentials.domain)}/oauth/token"
        try:
            response = await self._http.post(
                url,
                json=body,
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as e:
            raise CommerceLayerError(f"Token request failed: {e}") from e

        if response.status_code in (400, 401):
            raise AuthenticationError(f"Invalid client credentials ({response.status_code})")
        if response.is_error:
            raise CommerceLayerError(f"Token request failed with status {response.status_code}")

        value = response.json().get("access_token")
        if not value:
            raise AuthenticationError("Token endpoint returned no access token")

        token = AccessToken(value=value, claims=decode_access_token(value))
        slug = token.claims.organization_slug
        if credentials.organization and slug and slug != credentials.organization:
            raise AuthenticationError(
                f"Access token was issued for organization {slug}, not {credentials.organization}"
            )
        logger.debug("Obtained access token for {}", token.claims.organization_slug)
        return token

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._http.aclose()

    async def __aenter__(self) -> AuthClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        await self.close()
