"""
PDF size reduction using pikepdf.

The document is re-serialized with object streams generated and streams
compressed. Page content is not touched and no pages are added.
"""

import asyncio
import io
import logging

import pikepdf

from utils.error_handlers import ReductionError
from .models import PDF_MEDIA_TYPE, ReducedPayload

logger = logging.getLogger(__name__)


class PdfReducer:
    """Structural PDF rewrite that consolidates objects into object streams."""

    def __init__(self, compress_streams: bool = True):
        self.compress_streams = compress_streams

    def reduce(self, data: bytes) -> ReducedPayload:
        """
        Rewrite a PDF document.

        Args:
            data: Full PDF file bytes

        Returns:
            ReducedPayload tagged application/pdf

        Raises:
            ReductionError: If the document cannot be parsed or written
        """
        output = io.BytesIO()
        try:
            with pikepdf.open(io.BytesIO(data)) as pdf:
                page_count = len(pdf.pages)
                pdf.save(
                    output,
                    object_stream_mode=pikepdf.ObjectStreamMode.generate,
                    compress_streams=self.compress_streams
                )
        except pikepdf.PasswordError as e:
            raise ReductionError(
                "PDF is encrypted",
                details={"error_type": type(e).__name__}
            ) from e
        except Exception as e:
            raise ReductionError(
                f"Could not rewrite PDF: {e}",
                details={"error_type": type(e).__name__}
            ) from e

        reduced = output.getvalue()
        logger.info(f"Rewrote PDF ({page_count} pages): {len(data)} -> {len(reduced)} bytes")
        return ReducedPayload(data=reduced, media_type=PDF_MEDIA_TYPE)

    async def reduce_async(self, data: bytes) -> ReducedPayload:
        """Run reduce() in the default executor so the event loop stays free."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.reduce, data)
