"""
Serves a DownloadUnit as a save-as-file response.
"""

import logging
import tempfile
from typing import Iterator, Optional
from urllib.parse import quote

from fastapi import Response
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from core.config import settings
from utils.file_utils import format_size
from .models import DownloadUnit

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


def content_disposition(filename: str) -> str:
    """Attachment header value; non-ASCII names use RFC 5987 encoding."""
    quoted = quote(filename)
    if quoted != filename:
        return f"attachment; filename*=utf-8''{quoted}"
    return f'attachment; filename="{filename}"'


class DownloadTrigger:
    """
    Writes the unit to a spooled temporary file and streams it back.
    The spool is closed once the response has been sent.
    """

    def __init__(self, spool_max_size: Optional[int] = None):
        self.spool_max_size = spool_max_size or settings.DOWNLOAD_SPOOL_MAX_SIZE

    def trigger(self, unit: Optional[DownloadUnit]) -> Response:
        if unit is None:
            return Response(status_code=204)

        spool = tempfile.SpooledTemporaryFile(max_size=self.spool_max_size)
        spool.write(unit.payload)
        spool.seek(0)

        logger.info(f"Sending download {unit.filename} ({format_size(len(unit.payload))})")
        return StreamingResponse(
            _iter_chunks(spool),
            media_type=unit.media_type,
            headers={
                "Content-Disposition": content_disposition(unit.filename),
                "Content-Length": str(len(unit.payload))
            },
            background=BackgroundTask(spool.close)
        )


def _iter_chunks(handle) -> Iterator[bytes]:
    while True:
        chunk = handle.read(CHUNK_SIZE)
        if not chunk:
            break
        yield chunk
