"""Schemas for access tokens and application credentials."""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field


class Credentials(BaseModel):
    """Application credentials used to obtain access tokens.

    Opaque to the token refresher; passed through to the auth endpoint.
    """

    model_config = ConfigDict(frozen=True)

    client_id: str = ""
    client_secret: str = ""
    organization: str = ""
    domain: str = "commercelayer.io"


class TokenClaims(BaseModel):
    """Decoded JWT claims the client relies on."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    exp: int = Field(description="Expiry in epoch seconds")
    organization_slug: str | None = None
    application_kind: str | None = None

    @property
    def expires_at(self) -> datetime:
        """Expiry as an aware UTC datetime."""
        return datetime.fromtimestamp(self.exp, tz=UTC)


class AccessToken(BaseModel):
    """Bearer token together with its decoded claims."""

    model_config = ConfigDict(frozen=True)

    value: str = Field(repr=False)
    claims: TokenClaims
