"""Factory functions for creating test data.

Design principles:
- Factories provide sensible defaults that can be overridden
- Resource factories return JSON:API dicts as the API sends them
- Model factories return validated pydantic instances
"""

from __future__ import annotations

import base64
import json
from typing import Any

from cl_exports.schemas import AccessToken, Export, TokenClaims
from tests.conftest import NOW_EPOCH, STARTED_AT_ISO


# -----------------------------------------------------------------------------
# Exports
# -----------------------------------------------------------------------------
def make_export_resource(
    export_id: str = "yzkWXfgHQS",
    *,
    resource_type: str = "skus",
    status: str = "pending",
    records_count: int | None = 120,
    export_format: str = "json",
    started_at: str | None = STARTED_AT_ISO,
    **attributes: Any,
) -> dict[str, Any]:
    """Create a JSON:API export resource object."""
    attrs: dict[str, Any] = {
        "resource_type": resource_type,
        "format": export_format,
        "status": status,
        "records_count": records_count,
        "dry_data": False,
        "includes": [],
        "filters": {},
        "started_at": started_at,
        "completed_at": None,
        "interrupted_at": None,
        "attachment_url": None,
        "errors_count": None,
        "warnings_count": None,
        "created_at": started_at,
    }
    attrs.update(attributes)
    return {"id": export_id, "type": "exports", "attributes": attrs}


def make_export(export_id: str = "yzkWXfgHQS", **overrides: Any) -> Export:
    """Create a validated Export model."""
    return Export.from_resource(make_export_resource(export_id, **overrides))


def make_list_document(
    resources: list[dict[str, Any]],
    *,
    record_count: int,
    page_count: int,
) -> dict[str, Any]:
    """Create a JSON:API list response document."""
    return {
        "data": resources,
        "meta": {"record_count": record_count, "page_count": page_count},
    }


# -----------------------------------------------------------------------------
# Tokens
# -----------------------------------------------------------------------------
def _b64(data: dict[str, Any]) -> str:
    raw = json.dumps(data).encode()
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


def make_jwt(
    *,
    exp: int = NOW_EPOCH + 3600,
    kind: str | None = "integration",
    slug: str | None = "the-blue-brand",
) -> str:
    """Create an unsigned JWT carrying Commerce Layer style claims."""
    payload: dict[str, Any] = {"exp": exp}
    if slug:
        payload["organization"] = {"id": "wRPpE", "slug": slug}
    if kind:
        payload["application"] = {"id": "bVkmL", "kind": kind, "public": False}
    return f"{_b64({'alg': 'RS512', 'typ': 'JWT'})}.{_b64(payload)}.c2lnbmF0dXJl"


def make_access_token(*, exp: int = NOW_EPOCH + 3600, value: str | None = None) -> AccessToken:
    """Create an AccessToken expiring at ``exp``."""
    return AccessToken(
        value=value or f"token-{exp}",
        claims=TokenClaims(exp=exp, organization_slug="the-blue-brand", application_kind="integration"),
    )
