"""
Video Optimizer - HTTP boundary for the transcode pipeline
"""

import logging
from logging.handlers import RotatingFileHandler
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

import uvicorn
from fastapi import FastAPI, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse, Response

from config import settings
from constants import (
    BITRATE_PRESETS,
    DEFAULT_CONFIG,
    FPS_PRESETS,
    MAX_QUALITY,
    MIN_QUALITY,
    RESOLUTION_PRESETS,
    VALID_CODECS,
    VALID_FORMATS,
    VELOCITY_UI_RANGE,
)
from errors import BinaryNotExecutable, BinaryNotFound, TranscodeError
from handler import check_upload_size, content_disposition, optimize
from models import ErrorResponse
from transcoder import get_executor


def _configure_logging():
    log_level = getattr(logging, settings.log_level)
    fmt = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    root = logging.getLogger()
    root.setLevel(log_level)

    console = logging.StreamHandler()
    console.setFormatter(fmt)
    root.addHandler(console)

    if settings.log_path:
        log_dir = Path(settings.log_path)
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = RotatingFileHandler(
            log_dir / "optimizer.log", maxBytes=10_485_760, backupCount=5
        )
        fh.setFormatter(fmt)
        root.addHandler(fh)


_configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Resolve the encoder up front so misconfiguration shows in the log."""
    executor = get_executor()
    try:
        path = executor.resolver.resolve()
        logger.info(f"Using encoder: {path}")
    except (BinaryNotFound, BinaryNotExecutable) as e:
        logger.warning(f"Encoder unavailable, requests will fail until fixed: {e.detail}")

    logger.info(
        f"Video Optimizer started (max_concurrent={executor.max_concurrent}, "
        f"timeout={executor.timeout}s, work_dir={executor.work_dir})"
    )

    yield

    logger.info("Video Optimizer stopped")


app = FastAPI(
    title="Video Optimizer",
    description="Re-encodes uploaded videos with ffmpeg",
    version="1.0.0",
    lifespan=lifespan,
)


@app.exception_handler(TranscodeError)
async def transcode_error_handler(request: Request, exc: TranscodeError):
    if exc.status_code >= 500:
        logger.error(f"{request.url.path} failed: {exc.kind}: {exc.detail}")
    else:
        logger.warning(f"{request.url.path} rejected: {exc.kind}: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.get("/health")
async def health_check():
    """Health check with encoder availability and concurrency state."""
    executor = get_executor()
    encoder_path = None
    encoder_error = None
    try:
        encoder_path = str(executor.resolver.resolve())
    except (BinaryNotFound, BinaryNotExecutable) as e:
        encoder_error = e.detail

    return {
        "status": "healthy" if encoder_path else "degraded",
        "encoder_path": encoder_path,
        "encoder_error": encoder_error,
        "active_transcodes": executor.active,
        "max_concurrent": executor.max_concurrent,
    }


@app.get("/options")
async def get_options():
    """Valid values and presets for every config field."""
    velocity_min, velocity_max, velocity_step = VELOCITY_UI_RANGE
    return {
        "codecs": VALID_CODECS,
        "formats": VALID_FORMATS,
        "resolutions": RESOLUTION_PRESETS,
        "fps": FPS_PRESETS,
        "bitrates": BITRATE_PRESETS,
        "quality": {"min": MIN_QUALITY, "max": MAX_QUALITY},
        "velocity": {"min": velocity_min, "max": velocity_max, "step": velocity_step},
        "defaults": DEFAULT_CONFIG,
    }


@app.post(
    "/api/optimize-video",
    response_class=Response,
    responses={
        400: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
        504: {"model": ErrorResponse},
    },
)
async def optimize_video(
    video: Optional[UploadFile] = File(None),
    config: Optional[str] = Form(None),
):
    """
    Transcode an uploaded video.

    Multipart form fields:
        video: the file to re-encode
        config: JSON object with resolution, codec, quality, format, fps,
                bitrate and velocity
    """
    data = None
    filename = None
    if video is not None:
        check_upload_size(video.size)
        data = await video.read()
        filename = video.filename

    result = await optimize(data, config, filename=filename, executor=get_executor())

    return Response(
        content=result.content,
        media_type=result.media_type,
        headers={"Content-Disposition": content_disposition(result.filename)},
    )


if __name__ == "__main__":
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)
