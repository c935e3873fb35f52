"""
Compression-related Pydantic models
"""

from pydantic import BaseModel
from typing import List, Optional, Literal

from services.compression import ResultPair


class CompressedFile(BaseModel):
    """One successfully reduced file"""
    filename: str
    original_size: int
    compressed_size: int
    compressed_size_kb: float
    media_type: str

    @classmethod
    def from_pair(cls, pair: ResultPair) -> "CompressedFile":
        return cls(
            filename=pair.original.name,
            original_size=pair.original.size,
            compressed_size=pair.reduced.size,
            compressed_size_kb=round(pair.reduced.size / 1024, 1),
            media_type=pair.reduced.media_type
        )


class FileError(BaseModel):
    """A file left out of the results"""
    filename: str
    status: Literal["skipped", "failed"]
    error: str


class BatchResponse(BaseModel):
    """Response model for a processed batch"""
    batch_id: str
    status: Literal["idle", "processing"]
    published: bool
    files: List[CompressedFile]
    errors: List[FileError]
    total: int
    successful: int
    download_filename: Optional[str] = None


class BatchStatusResponse(BaseModel):
    """Current processing state"""
    status: Literal["idle", "processing"]
    generation: int
    batch_id: Optional[str] = None
    result_count: int
