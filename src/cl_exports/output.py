"""Saving export attachments to disk."""

from __future__ import annotations

import gzip
import json
from pathlib import Path
from typing import TYPE_CHECKING

from cl_exports.exceptions import ExportsError
from cl_exports.logging import get_logger
from cl_exports.schemas import Export, ExportFormat

if TYPE_CHECKING:
    from cl_exports.api.client import CommerceLayerClient

logger = get_logger(__name__)

_GZIP_MAGIC = b"\x1f\x8b"


def decode_attachment(data: bytes) -> bytes:
    """Gunzip attachment bytes when they are gzip compressed."""
    if data[:2] == _GZIP_MAGIC:
        return gzip.decompress(data)
    return data


def render_attachment(data: bytes, export_format: ExportFormat, *, pretty: bool = False) -> str:
    """Turn decoded attachment bytes into the text written to disk."""
    text = data.decode("utf-8")
    if export_format == ExportFormat.JSON and pretty:
        return json.dumps(json.loads(text), indent=4, ensure_ascii=False)
    return text


async def save_export(
    client: CommerceLayerClient,
    export: Export,
    path: Path,
    *,
    pretty: bool = False,
    create_dirs: bool = False,
) -> Path:
    """Download a completed export's attachment and write it to ``path``.

    Args:
        client: API client used for the download
        export: Completed export with an attachment URL
        path: Destination file
        pretty: Re-indent JSON output
        create_dirs: Create missing parent directories

    Returns:
        The resolved path written

    Raises:
        ExportsError: If the export has no attachment or the directory is missing
    """
    if not export.attachment_url:
        raise ExportsError(f"Export {export.id} has no attachment to save")

    target = path.expanduser()
    if create_dirs:
        target.parent.mkdir(parents=True, exist_ok=True)
    elif not target.parent.exists():
        raise ExportsError(f"Path not found: {target.parent}")

    data = decode_attachment(await client.download(export.attachment_url))
    target.write_text(render_attachment(data, export.format, pretty=pretty), encoding="utf-8")
    logger.info("Saved export {} to {}", export.id, target)
    return target.resolve()
