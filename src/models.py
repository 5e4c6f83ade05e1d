"""
Data models for Video Optimizer
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from constants import (
    MAX_FPS,
    MAX_QUALITY,
    MAX_VELOCITY,
    MIN_FPS,
    MIN_QUALITY,
)
from utils import CommandValidator, parse_resolution


class TranscodeConfig(BaseModel):
    """Encoding parameters for one request, validated against allowlists."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    resolution: str = Field(..., max_length=11)
    codec: str = Field(..., max_length=50)
    quality: int = Field(..., ge=MIN_QUALITY, le=MAX_QUALITY)
    format: str = Field(..., max_length=10)
    fps: int = Field(..., ge=MIN_FPS, le=MAX_FPS)
    bitrate: str = Field("auto", max_length=10)
    velocity: float = Field(1.0, gt=0, le=MAX_VELOCITY, allow_inf_nan=False)

    @field_validator("resolution")
    @classmethod
    def validate_resolution(cls, v: str) -> str:
        return CommandValidator.validate_resolution(v)

    @field_validator("codec")
    @classmethod
    def validate_codec(cls, v: str) -> str:
        return CommandValidator.validate_codec(v)

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        return CommandValidator.validate_format(v)

    @field_validator("bitrate")
    @classmethod
    def validate_bitrate(cls, v: str) -> str:
        return CommandValidator.validate_bitrate(v)

    @property
    def dimensions(self) -> tuple[int, int]:
        return parse_resolution(self.resolution)


class FilterSpec(BaseModel):
    """Ordered video and audio filter expressions for one request."""

    model_config = ConfigDict(frozen=True)

    video: tuple[str, ...]
    audio: tuple[str, ...] = ()

    @property
    def video_filter(self) -> str:
        return ",".join(self.video)

    @property
    def audio_filter(self) -> str:
        return ",".join(self.audio)


class OptimizeResult(BaseModel):
    """Transcoded bytes plus the response metadata derived from the config."""

    content: bytes
    media_type: str
    filename: str


class ErrorResponse(BaseModel):
    """Structured error payload returned by the HTTP boundary."""

    error: str
    detail: str
    field: Optional[str] = None
    details: Optional[str] = None
