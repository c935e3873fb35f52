"""
File Compressor Backend API
Main FastAPI application entry point
"""

from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from contextlib import asynccontextmanager
import logging

from core.config import settings
from core.middleware import RequestContextMiddleware
from api.router import api_router
from services.compression import (
    BatchProcessor,
    BatchState,
    DownloadTrigger,
    ResultPackager,
    SizeReducerDispatch,
)
from utils.error_handlers import register_exception_handlers

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent / "static"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle startup and shutdown events"""
    logger.info("Starting File Compressor API...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug mode: {settings.DEBUG}")

    # One batch state per application; only the batch processor writes it
    app.state.batch_processor = BatchProcessor(SizeReducerDispatch(), BatchState())
    app.state.packager = ResultPackager()
    app.state.download_trigger = DownloadTrigger()

    yield

    logger.info("Shutting down File Compressor API...")


# Create FastAPI application
app = FastAPI(
    title="File Compressor API",
    description="Shrinks images and PDFs and bundles the results for download",
    version="0.1.0",
    lifespan=lifespan,
    # Keep docs on /api/* so they don't collide with static site at "/"
    docs_url="/api/docs" if settings.DEBUG else None,
    redoc_url="/api/redoc" if settings.DEBUG else None,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition", "X-Request-ID"],
)

app.add_middleware(RequestContextMiddleware)

register_exception_handlers(app)

app.include_router(api_router, prefix=settings.API_V1_PREFIX)


@app.get("/health")
async def health_check():
    """Health check endpoint (kept outside /api so it's easy to probe)"""
    return {
        "status": "healthy",
        "environment": settings.ENVIRONMENT
    }


# Browser page at "/"; mounted after the API routes so /api/* keeps working
app.mount("/", StaticFiles(directory=STATIC_DIR, html=True), name="static")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)
