"""
Encoder argument-vector construction
"""

from pathlib import Path
from typing import Optional, Union

from constants import AUDIO_BITRATE, AUDIO_CODEC_BY_FORMAT, DEFAULT_AUDIO_CODEC
from filters import build_filters
from models import FilterSpec, TranscodeConfig

PathLike = Union[str, Path]


def audio_codec_for(fmt: str) -> str:
    """Fixed audio encoder for an output container."""
    return AUDIO_CODEC_BY_FORMAT.get(fmt, DEFAULT_AUDIO_CODEC)


def build_command(
    binary_path: PathLike,
    input_path: PathLike,
    output_path: PathLike,
    config: TranscodeConfig,
    filters: Optional[FilterSpec] = None,
) -> list[str]:
    """
    Assemble the encoder argument vector.

    The result is passed directly to the process-spawn call, never through a
    shell. Config fields are allowlist-validated by TranscodeConfig before
    they get here.

    Args:
        binary_path: Resolved encoder executable
        input_path: Temp file holding the uploaded bytes
        output_path: Temp file the encoder writes
        config: Validated encoding parameters
        filters: Pre-built filters (built from config if omitted)

    Returns:
        List of discrete arguments, executable first
    """
    if filters is None:
        filters = build_filters(config)

    cmd = [
        str(binary_path),
        "-i", str(input_path),
        "-vf", filters.video_filter,
        "-c:v", config.codec,
        "-crf", str(config.quality),
        "-r", str(config.fps),
    ]

    if config.bitrate != "auto":
        cmd.extend(["-b:v", config.bitrate])

    if filters.audio:
        cmd.extend(["-af", filters.audio_filter])

    cmd.extend(["-c:a", audio_codec_for(config.format), "-b:a", AUDIO_BITRATE])

    # Overwrite output
    cmd.extend(["-y", str(output_path)])

    return cmd
