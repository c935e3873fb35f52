"""
Data types shared by the compression pipeline.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union


PDF_MEDIA_TYPE = "application/pdf"
ZIP_MEDIA_TYPE = "application/zip"
IMAGE_MEDIA_PREFIX = "image/"


@dataclass(frozen=True)
class InputFile:
    """A user-supplied file as received from the picker or drop target."""
    name: str
    media_type: str
    payload: bytes

    @property
    def size(self) -> int:
        return len(self.payload)


@dataclass(frozen=True)
class ReducedPayload:
    """Size-reduced bytes tagged with the media type they were encoded as."""
    data: bytes
    media_type: str

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class ResultPair:
    original: InputFile
    reduced: ReducedPayload


@dataclass(frozen=True)
class Reduced:
    payload: ReducedPayload


@dataclass(frozen=True)
class Skipped:
    reason: str


@dataclass(frozen=True)
class Failed:
    cause: Exception


ReductionOutcome = Union[Reduced, Skipped, Failed]


class BatchStatus(str, Enum):
    IDLE = "idle"
    PROCESSING = "processing"


@dataclass(frozen=True)
class DownloadUnit:
    """Final payload offered to the user, with its suggested filename."""
    filename: str
    payload: bytes
    media_type: str
