"""
Image and PDF compression pipeline: dispatch, batching, packaging, download.
"""

from .models import (
    BatchStatus,
    DownloadUnit,
    Failed,
    InputFile,
    Reduced,
    ReducedPayload,
    ResultPair,
    Skipped,
)
from .image_reducer import ImageReducer
from .pdf_reducer import PdfReducer
from .dispatch import SizeReducerDispatch
from .batch_processor import BatchProcessor, BatchReport, BatchState
from .packager import ResultPackager
from .download import DownloadTrigger

__all__ = [
    'BatchStatus',
    'DownloadUnit',
    'Failed',
    'InputFile',
    'Reduced',
    'ReducedPayload',
    'ResultPair',
    'Skipped',
    'ImageReducer',
    'PdfReducer',
    'SizeReducerDispatch',
    'BatchProcessor',
    'BatchReport',
    'BatchState',
    'ResultPackager',
    'DownloadTrigger',
]
