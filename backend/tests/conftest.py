"""
Shared fixtures for the compressor tests.
"""

import pytest

from factories import make_image_bytes, make_pdf_bytes


@pytest.fixture
def png_bytes():
    return make_image_bytes()


@pytest.fixture
def jpeg_bytes():
    return make_image_bytes(fmt="JPEG", quality=95)


@pytest.fixture
def pdf_bytes():
    return make_pdf_bytes()
