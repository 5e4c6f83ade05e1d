"""
Request handling - decode (bytes, config), run the transcode, encode the result

optimize() is the single capability exposed to the UI. The HTTP route in
main.py calls it, and a local bridge can call it in-process.
"""

import json
import logging
from typing import Any, Mapping, Optional, Union
from urllib.parse import quote

from pydantic import ValidationError

from config import settings
from constants import MEDIA_TYPES
from errors import InvalidInput, PayloadTooLarge
from models import OptimizeResult, TranscodeConfig
from transcoder import get_executor
from utils import CommandValidator, clean_filename_stem

logger = logging.getLogger(__name__)

DEFAULT_INPUT_EXTENSION = "bin"


def parse_config(raw: Union[str, bytes, Mapping[str, Any], TranscodeConfig, None]) -> TranscodeConfig:
    """
    Decode and validate a transcode configuration.

    Args:
        raw: JSON text, a mapping, or an already-validated config

    Returns:
        Validated TranscodeConfig

    Raises:
        InvalidInput: Missing, unparseable, or out-of-range config (names the field)
    """
    if isinstance(raw, TranscodeConfig):
        return raw
    if raw is None or (isinstance(raw, (str, bytes)) and not raw.strip()):
        raise InvalidInput("No configuration provided", field="config")

    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise InvalidInput(f"Configuration is not valid JSON: {e}", field="config")

    if not isinstance(raw, Mapping):
        raise InvalidInput("Configuration must be a JSON object", field="config")

    try:
        return TranscodeConfig.model_validate(dict(raw))
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or "config"
        message = first["msg"]
        logger.warning(f"Rejected config field '{field}': {message}")
        raise InvalidInput(f"Invalid value for '{field}': {message}", field=field)


def input_extension(filename: Optional[str]) -> str:
    """Extension of the uploaded file if it is safe to reuse, else 'bin'."""
    if not filename or "." not in filename:
        return DEFAULT_INPUT_EXTENSION
    ext = filename.rsplit(".", 1)[1].lower()
    try:
        return CommandValidator.validate_extension(ext)
    except ValueError:
        return DEFAULT_INPUT_EXTENSION


def output_filename(filename: Optional[str], fmt: str) -> str:
    return f"optimized_{clean_filename_stem(filename)}.{fmt}"


def media_type_for(fmt: str) -> str:
    return MEDIA_TYPES.get(fmt, f"video/{fmt}")


def content_disposition(filename: str) -> str:
    """
    Attachment header value for a download name.

    Header values are latin-1 on the wire, so names outside ASCII get an
    ASCII filename= fallback plus an RFC 5987 filename*= parameter.
    """
    ascii_name = filename.encode("ascii", "ignore").decode("ascii")
    if ascii_name == filename:
        return f'attachment; filename="{filename}"'
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename, safe='')}"


def check_upload_size(size: Optional[int]):
    """Raise PayloadTooLarge when size exceeds MAX_UPLOAD_MB. Unknown sizes pass."""
    if size is None:
        return
    if size > settings.max_upload_mb * 1024 * 1024:
        raise PayloadTooLarge(
            f"Video too large ({size} bytes, max {settings.max_upload_mb}MB)",
            field="video",
        )


async def optimize(
    video: Optional[bytes],
    config: Union[str, bytes, Mapping[str, Any], TranscodeConfig, None],
    filename: Optional[str] = None,
    executor=None,
) -> OptimizeResult:
    """
    Transcode one uploaded video.

    Args:
        video: Raw uploaded bytes
        config: Transcode configuration (JSON text, mapping or model)
        filename: Original upload name, used for the temp suffix and download name
        executor: TranscodeExecutor to run on (process default if None)

    Returns:
        OptimizeResult with the encoded bytes, media type and download filename
    """
    if not video:
        raise InvalidInput("No video file provided", field="video")

    check_upload_size(len(video))

    cfg = parse_config(config)

    if executor is None:
        executor = get_executor()

    logger.info(f"Processing video with config: {cfg.model_dump()}")
    content = await executor.run(video, input_extension(filename), cfg)

    return OptimizeResult(
        content=content,
        media_type=media_type_for(cfg.format),
        filename=output_filename(filename, cfg.format),
    )
