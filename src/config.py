"""
Configuration settings for Video Optimizer
"""

from pydantic_settings import BaseSettings
from pydantic import Field, field_validator

from constants import (
    DEFAULT_OUTPUT_BUFFER,
    DEFAULT_TRANSCODE_TIMEOUT,
    MAX_TRANSCODE_TIMEOUT,
)


VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Encoder binary resolution
    ffmpeg_path: str = Field(
        "",
        description="Explicit path to the ffmpeg executable (overrides discovery)"
    )
    ffmpeg_dev_dir: str = Field(
        "",
        description="Project root holding resources/ffmpeg/<platform> in development mode"
    )
    ffmpeg_bundle_dir: str = Field(
        "",
        description="Directory of the packaged application holding resources/ffmpeg"
    )

    # Paths
    work_path: str = Field("", description="Directory for temporary files (system temp if empty)")
    log_path: str = Field("", description="Directory for log files (console only if empty)")

    # Execution limits
    max_output_buffer: int = Field(
        DEFAULT_OUTPUT_BUFFER,
        ge=64 * 1024,
        description="Bytes of encoder output kept per stream"
    )
    transcode_timeout: int = Field(
        DEFAULT_TRANSCODE_TIMEOUT,
        ge=1,
        le=MAX_TRANSCODE_TIMEOUT,
        description="Seconds before a running encoder is killed"
    )
    max_concurrent: int = Field(
        2,
        ge=1,
        le=10,
        description="Max concurrent encoder processes"
    )
    max_upload_mb: int = Field(
        2048,
        ge=1,
        description="Largest accepted upload (MB)"
    )

    # Server
    host: str = Field("127.0.0.1", description="Bind address (local only by default)")
    port: int = Field(3000, ge=1, le=65535, description="Bind port")

    # Logging
    log_level: str = Field("INFO", description="Logging level")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        v_upper = v.upper()
        if v_upper not in VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid log level: {v}. "
                f"Valid options: {', '.join(VALID_LOG_LEVELS)}"
            )
        return v_upper

    class Config:
        env_prefix = ""
        case_sensitive = False


settings = Settings()
