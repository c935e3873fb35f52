"""
Turns a batch's results into a single downloadable unit.
"""

import io
import logging
import zipfile
from typing import Optional, Sequence

from core.config import settings
from .models import ZIP_MEDIA_TYPE, DownloadUnit, ResultPair

logger = logging.getLogger(__name__)


class ResultPackager:
    """One result is offered as-is; several are bundled into a ZIP archive."""

    def __init__(
        self,
        prefix: Optional[str] = None,
        archive_filename: Optional[str] = None
    ):
        self.prefix = settings.DOWNLOAD_PREFIX if prefix is None else prefix
        self.archive_filename = archive_filename or settings.ARCHIVE_FILENAME

    def package(self, results: Sequence[ResultPair]) -> Optional[DownloadUnit]:
        """
        Package results for download.

        Returns:
            None when there is nothing to download, otherwise a DownloadUnit
        """
        if not results:
            return None

        if len(results) == 1:
            pair = results[0]
            return DownloadUnit(
                filename=self.entry_name(pair),
                payload=pair.reduced.data,
                media_type=pair.reduced.media_type
            )

        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
            for pair in results:
                # Same-named originals produce duplicate entries; readers see the last one
                archive.writestr(self.entry_name(pair), pair.reduced.data)

        payload = buffer.getvalue()
        logger.info(f"Packaged {len(results)} files into {self.archive_filename} ({len(payload)} bytes)")
        return DownloadUnit(
            filename=self.archive_filename,
            payload=payload,
            media_type=ZIP_MEDIA_TYPE
        )

    def entry_name(self, pair: ResultPair) -> str:
        return f"{self.prefix}{pair.original.name}"
