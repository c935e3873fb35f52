"""
File handling utilities
"""

import os


def get_file_extension(filename: str) -> str:
    """Get file extension from filename"""
    return os.path.splitext(filename)[1].lower()


def guess_media_type(filename: str) -> str:
    """Media type for an upload that arrived without a Content-Type"""
    mime_types = {
        ".jpg": "image/jpeg",
        ".jpeg": "image/jpeg",
        ".png": "image/png",
        ".webp": "image/webp",
        ".gif": "image/gif",
        ".bmp": "image/bmp",
        ".tif": "image/tiff",
        ".tiff": "image/tiff",
        ".pdf": "application/pdf"
    }
    return mime_types.get(get_file_extension(filename), "application/octet-stream")


def format_size(num_bytes: int) -> str:
    """Human readable size, e.g. '12.3 KB'"""
    size = float(num_bytes)
    for unit in ["B", "KB", "MB"]:
        if size < 1024.0:
            return f"{size:.1f} {unit}"
        size /= 1024.0
    return f"{size:.1f} GB"
