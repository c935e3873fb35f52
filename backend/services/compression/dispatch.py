"""
Routes one input file to the reducer for its declared media type.
"""

import logging
from typing import Optional

from core.config import settings
from utils.error_handlers import log_error
from .image_reducer import ImageReducer
from .models import (
    IMAGE_MEDIA_PREFIX,
    PDF_MEDIA_TYPE,
    Failed,
    InputFile,
    Reduced,
    ReductionOutcome,
    Skipped,
)
from .pdf_reducer import PdfReducer

logger = logging.getLogger(__name__)


class SizeReducerDispatch:
    """
    Picks the image or PDF reducer for a file and wraps the result in a
    ReductionOutcome. Never raises for per-file problems.
    """

    def __init__(
        self,
        image_reducer: Optional[ImageReducer] = None,
        pdf_reducer: Optional[PdfReducer] = None,
        max_upload_size: Optional[int] = None
    ):
        self.image_reducer = image_reducer or ImageReducer()
        self.pdf_reducer = pdf_reducer or PdfReducer()
        self.max_upload_size = max_upload_size or settings.MAX_UPLOAD_SIZE

    async def reduce(self, file: InputFile) -> ReductionOutcome:
        """
        Reduce a single file.

        Returns:
            Reduced with the new payload, Skipped for unsupported or oversized
            files, Failed when the reducer raised
        """
        media_type = (file.media_type or "").lower()
        is_image = media_type.startswith(IMAGE_MEDIA_PREFIX)
        is_pdf = media_type == PDF_MEDIA_TYPE

        if not (is_image or is_pdf):
            logger.warning(f"Skipping unsupported file: {file.name}")
            return Skipped(reason=f"Unsupported file type: {file.media_type or 'unknown'}")

        if file.size > self.max_upload_size:
            reason = (
                f"File size {file.size} exceeds maximum allowed size of "
                f"{self.max_upload_size / (1024 * 1024):.0f}MB"
            )
            logger.warning(f"Skipping oversized file: {file.name}")
            return Skipped(reason=reason)

        try:
            if is_image:
                payload = await self.image_reducer.reduce_async(file.payload)
            else:
                payload = await self.pdf_reducer.reduce_async(file.payload)
        except Exception as e:
            logger.error(f"Compression failed for {file.name}: {e}")
            log_error(e, context={"filename": file.name, "media_type": file.media_type})
            return Failed(cause=e)

        return Reduced(payload=payload)
