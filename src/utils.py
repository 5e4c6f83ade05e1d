"""
Utility functions and validators for Video Optimizer
"""

import logging
import re
from pathlib import Path
from typing import Optional

from constants import (
    BITRATE_PATTERN,
    EXTENSION_PATTERN,
    MAX_DIMENSION,
    MAX_EXTENSION_LENGTH,
    RESOLUTION_PATTERN,
    VALID_CODECS,
    VALID_FORMATS,
)

logger = logging.getLogger(__name__)


class CommandValidator:
    """Allowlist checks for every value interpolated into the encoder command."""

    @staticmethod
    def validate_codec(codec: str) -> str:
        """
        Validate video encoder name.

        Args:
            codec: Encoder name to validate

        Returns:
            Validated encoder name

        Raises:
            ValueError: If encoder is not in the allowlist
        """
        if codec not in VALID_CODECS:
            raise ValueError(
                f"Invalid codec: {codec}. "
                f"Valid options: {', '.join(VALID_CODECS)}"
            )
        return codec

    @staticmethod
    def validate_format(fmt: str) -> str:
        """
        Validate output container.

        Args:
            fmt: Container/extension name

        Returns:
            Validated container name

        Raises:
            ValueError: If container is not in the allowlist
        """
        if fmt not in VALID_FORMATS:
            raise ValueError(
                f"Invalid format: {fmt}. "
                f"Valid options: {', '.join(VALID_FORMATS)}"
            )
        return fmt

    @staticmethod
    def validate_resolution(resolution: str) -> str:
        """
        Validate a "WxH" resolution string.

        Raises:
            ValueError: If the value is not two positive integers joined by 'x'
        """
        match = re.fullmatch(RESOLUTION_PATTERN, resolution)
        if not match:
            raise ValueError(
                f"Invalid resolution: {resolution}. Expected WxH, e.g. 1920x1080"
            )
        width, height = (int(g) for g in match.groups())
        if width > MAX_DIMENSION or height > MAX_DIMENSION:
            raise ValueError(
                f"Invalid resolution: {resolution}. Max dimension is {MAX_DIMENSION}"
            )
        return resolution

    @staticmethod
    def validate_bitrate(bitrate: str) -> str:
        """
        Validate bitrate: "auto" or a size string such as "500k" / "2M".

        Raises:
            ValueError: If the value does not match the allowed pattern
        """
        if bitrate == "auto":
            return bitrate
        if not re.fullmatch(BITRATE_PATTERN, bitrate):
            raise ValueError(
                f"Invalid bitrate: {bitrate}. Use 'auto' or a size like 500k or 2M"
            )
        return bitrate

    @staticmethod
    def validate_extension(ext: str) -> str:
        """Validate a temp-file extension hint."""
        if len(ext) > MAX_EXTENSION_LENGTH or not re.fullmatch(EXTENSION_PATTERN, ext):
            raise ValueError(f"Invalid file extension: {ext!r}")
        return ext


def parse_resolution(resolution: str) -> tuple[int, int]:
    """Split a validated "WxH" string into (width, height)."""
    width, height = resolution.lower().split("x", 1)
    return int(width), int(height)


def clean_filename_stem(name: Optional[str]) -> str:
    """
    Clean an uploaded file's stem for use in a download filename.

    Args:
        name: Original filename (may include directories and an extension)

    Returns:
        Cleaned stem safe for filesystem and header use
    """
    if not name:
        return "video"

    # Browsers may send full client paths
    stem = Path(name.replace("\\", "/")).name.split(".")[0]

    # Windows: < > : " / \ | ? *  plus control chars, plus ; for header safety
    cleaned = re.sub(r'[<>:"/\\|?*;\x00-\x1f\x7f]', "", stem)
    cleaned = re.sub(r"\s+", " ", cleaned).strip()

    if not cleaned:
        cleaned = "video"

    if len(cleaned) > 200:
        cleaned = cleaned[:200].strip()

    return cleaned
