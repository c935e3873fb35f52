"""
Core module for the compressor backend
"""

from .config import settings
from .middleware import RequestContextMiddleware

__all__ = ["settings", "RequestContextMiddleware"]
