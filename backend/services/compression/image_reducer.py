"""
Image size reduction using Pillow.

Images are bounded to a maximum edge length and re-encoded in their source
format, stepping quality (lossy formats) and then dimensions down until the
encoded size fits the target or the iteration budget runs out.
"""

import asyncio
import io
import logging
from typing import Optional, Tuple

from PIL import Image, ImageOps

from core.config import settings
from utils.error_handlers import ReductionError
from .models import ReducedPayload

logger = logging.getLogger(__name__)

LOSSY_FORMATS = {"JPEG", "WEBP"}
INITIAL_QUALITY = 90
MIN_QUALITY = 30
QUALITY_STEP = 10
SCALE_STEP = 0.9


class ImageReducer:
    """
    Shrinks an encoded image to fit a byte budget and a maximum edge length.
    """

    def __init__(
        self,
        max_size_bytes: Optional[int] = None,
        max_width_or_height: Optional[int] = None,
        max_iterations: Optional[int] = None
    ):
        """
        Initialize image reducer.

        Args:
            max_size_bytes: Target size of the encoded output
            max_width_or_height: Upper bound for the longer edge in pixels
            max_iterations: Re-encode attempts allowed after the first encode
        """
        self.max_size_bytes = max_size_bytes or settings.image_max_size_bytes
        self.max_width_or_height = max_width_or_height or settings.IMAGE_MAX_WIDTH_OR_HEIGHT
        self.max_iterations = (
            max_iterations if max_iterations is not None else settings.IMAGE_MAX_ITERATIONS
        )

    def reduce(self, data: bytes) -> ReducedPayload:
        """
        Reduce an encoded image.

        Args:
            data: Encoded image bytes

        Returns:
            ReducedPayload in the source format

        Raises:
            ReductionError: If the image cannot be decoded or re-encoded
        """
        try:
            return self._reduce(data)
        except ReductionError:
            raise
        except Exception as e:
            raise ReductionError(
                f"Could not reduce image: {e}",
                details={"error_type": type(e).__name__}
            ) from e

    async def reduce_async(self, data: bytes) -> ReducedPayload:
        """Run reduce() in the default executor so the event loop stays free."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.reduce, data)

    def _reduce(self, data: bytes) -> ReducedPayload:
        image, image_format = self._load(data)
        media_type = Image.MIME.get(image_format, f"image/{image_format.lower()}")

        current = self._fit_within(image)
        was_resized = current.size != image.size
        lossy = image_format in LOSSY_FORMATS
        quality = INITIAL_QUALITY

        encoded = self._encode(current, image_format, quality)
        iterations = 0
        while len(encoded) > self.max_size_bytes and iterations < self.max_iterations:
            iterations += 1
            if lossy and quality > MIN_QUALITY:
                quality = max(MIN_QUALITY, quality - QUALITY_STEP)
            else:
                current = self._scale(current, SCALE_STEP)
                was_resized = True
            encoded = self._encode(current, image_format, quality)

        if not was_resized and len(encoded) >= len(data):
            # Re-encoding gained nothing on an image that needed no resize
            encoded = data

        logger.info(
            f"Reduced {image_format} {image.size[0]}x{image.size[1]} -> "
            f"{current.size[0]}x{current.size[1]}: {len(data)} -> {len(encoded)} bytes "
            f"({iterations} extra passes)"
        )
        return ReducedPayload(data=encoded, media_type=media_type)

    def _load(self, data: bytes) -> Tuple[Image.Image, str]:
        """Decode bytes, apply EXIF orientation and report the source format."""
        with Image.open(io.BytesIO(data)) as img:
            image_format = img.format
            img.load()
            image = ImageOps.exif_transpose(img)
        if not image_format:
            raise ReductionError("Unrecognised image format")
        if image_format == "MPO":
            # multi-picture camera JPEGs; keep the primary frame as plain JPEG
            image_format = "JPEG"
        return image, image_format

    def _fit_within(self, image: Image.Image) -> Image.Image:
        width, height = image.size
        longest = max(width, height)
        if longest <= self.max_width_or_height:
            return image
        ratio = self.max_width_or_height / longest
        new_size = (max(1, round(width * ratio)), max(1, round(height * ratio)))
        return image.resize(new_size, Image.Resampling.LANCZOS)

    def _scale(self, image: Image.Image, factor: float) -> Image.Image:
        width, height = image.size
        new_size = (max(1, int(width * factor)), max(1, int(height * factor)))
        if new_size == image.size:
            return image
        return image.resize(new_size, Image.Resampling.LANCZOS)

    def _encode(self, image: Image.Image, image_format: str, quality: int) -> bytes:
        buffer = io.BytesIO()
        if image_format == "JPEG":
            if image.mode not in ("RGB", "L", "CMYK"):
                image = _flatten(image)
            image.save(
                buffer,
                format="JPEG",
                quality=quality,
                optimize=True,
                progressive=True
            )
        elif image_format == "WEBP":
            image.save(buffer, format="WEBP", quality=quality, method=6)
        elif image_format == "PNG":
            image.save(buffer, format="PNG", optimize=True)
        else:
            image.save(buffer, format=image_format)
        return buffer.getvalue()


def _flatten(image: Image.Image) -> Image.Image:
    """Composite transparent images onto white for formats without alpha."""
    if image.mode in ("RGBA", "LA") or (image.mode == "P" and "transparency" in image.info):
        rgba = image.convert("RGBA")
        background = Image.new("RGB", image.size, (255, 255, 255))
        background.paste(rgba, mask=rgba.split()[3])
        return background
    return image.convert("RGB")
