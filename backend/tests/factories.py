"""
Builders for test images and PDFs.
"""

import io

import pikepdf
from PIL import Image


def make_image_bytes(size=(800, 600), fmt="PNG", color=(200, 40, 40), **save_kwargs) -> bytes:
    mode = "RGBA" if fmt == "PNG" and len(color) == 4 else "RGB"
    image = Image.new(mode, size, color=color)
    buffer = io.BytesIO()
    image.save(buffer, format=fmt, **save_kwargs)
    return buffer.getvalue()


def make_noise_jpeg(size=(3000, 2000), quality=95) -> bytes:
    """Photo-like JPEG that is hard to compress, several MB at this size."""
    channels = [Image.effect_noise(size, 80) for _ in range(3)]
    image = Image.merge("RGB", channels)
    buffer = io.BytesIO()
    image.save(buffer, format="JPEG", quality=quality)
    return buffer.getvalue()


def make_pdf_bytes(pages: int = 3) -> bytes:
    pdf = pikepdf.new()
    for _ in range(pages):
        pdf.add_blank_page(page_size=(612, 792))
    buffer = io.BytesIO()
    pdf.save(buffer, object_stream_mode=pikepdf.ObjectStreamMode.disable)
    return buffer.getvalue()
