"""
Batch compression and download endpoints
"""

from fastapi import APIRouter, Depends, File, Request, UploadFile
from typing import AsyncIterator, List

from core.config import settings
from models.compress import BatchResponse, BatchStatusResponse, CompressedFile, FileError
from services.compression import (
    BatchProcessor,
    DownloadTrigger,
    InputFile,
    ResultPackager,
)
from utils.error_handlers import ValidationError
from utils.file_utils import guess_media_type

router = APIRouter()


def get_batch_processor(request: Request) -> BatchProcessor:
    return request.app.state.batch_processor


def get_packager(request: Request) -> ResultPackager:
    return request.app.state.packager


def get_download_trigger(request: Request) -> DownloadTrigger:
    return request.app.state.download_trigger


async def to_input_file(upload: UploadFile) -> InputFile:
    """Read an uploaded part into an immutable InputFile"""
    name = upload.filename or "unnamed"
    media_type = upload.content_type or guess_media_type(name)
    payload = await upload.read()
    return InputFile(name=name, media_type=media_type, payload=payload)


async def read_uploads(files: List[UploadFile]) -> AsyncIterator[InputFile]:
    """Read uploads one at a time as the batch asks for them"""
    for upload in files:
        yield await to_input_file(upload)


@router.post("/batch", response_model=BatchResponse)
async def compress_batch(
    files: List[UploadFile] = File(...),
    processor: BatchProcessor = Depends(get_batch_processor),
    packager: ResultPackager = Depends(get_packager)
):
    """
    Compress a batch of images and PDFs.

    - Files are processed one after another in upload order
    - Unsupported or broken files are reported in `errors` and left out
    - The results replace those of any previous batch
    """

    if len(files) > settings.MAX_BATCH_FILES:
        raise ValidationError(
            f"Maximum {settings.MAX_BATCH_FILES} files can be compressed at once",
            details={"received": len(files), "max": settings.MAX_BATCH_FILES}
        )

    report = await processor.run(read_uploads(files))

    if len(report.results) == 1:
        download_filename = packager.entry_name(report.results[0])
    elif report.results:
        download_filename = packager.archive_filename
    else:
        download_filename = None

    return BatchResponse(
        batch_id=report.batch_id,
        status=processor.state.status.value,
        published=report.published,
        files=[CompressedFile.from_pair(pair) for pair in report.results],
        errors=[FileError(**error) for error in report.errors],
        total=report.total,
        successful=len(report.results),
        download_filename=download_filename
    )


@router.get("/status", response_model=BatchStatusResponse)
async def get_batch_status(processor: BatchProcessor = Depends(get_batch_processor)):
    """Whether a batch is currently being processed"""
    state = processor.state
    return BatchStatusResponse(
        status=state.status.value,
        generation=state.generation,
        batch_id=state.batch_id,
        result_count=len(state.results)
    )


@router.get("/results", response_model=List[CompressedFile])
async def get_results(processor: BatchProcessor = Depends(get_batch_processor)):
    """Files reduced by the latest published batch"""
    return [CompressedFile.from_pair(pair) for pair in processor.state.results]


@router.get("/download")
async def download_results(
    processor: BatchProcessor = Depends(get_batch_processor),
    packager: ResultPackager = Depends(get_packager),
    trigger: DownloadTrigger = Depends(get_download_trigger)
):
    """
    Download the latest results.

    A single file is returned directly, several are bundled into a ZIP.
    Responds 204 when there is nothing to download.
    """
    unit = packager.package(processor.state.results)
    return trigger.trigger(unit)
