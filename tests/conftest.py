"""
Shared fixtures for Video Optimizer tests.
"""

import os
import stat

import pytest

# Set test environment variables before importing app modules
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("MAX_CONCURRENT", "2")
os.environ.pop("FFMPEG_PATH", None)
os.environ.pop("LOG_PATH", None)


def _write_script(path, body: str):
    path.write_text("#!/bin/sh\n" + body)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


# The output path is always the last argument
_LAST_ARG = 'for last; do :; done\n'


@pytest.fixture
def fake_encoder(tmp_path):
    """Encoder that logs to stderr and writes fixed bytes to the output path."""
    return _write_script(
        tmp_path / "ffmpeg-ok",
        _LAST_ARG
        + 'echo "frame=  10 fps=0.0 q=28.0 size=0kB" >&2\n'
        + 'printf "encoded-video" > "$last"\n',
    )


@pytest.fixture
def failing_encoder(tmp_path):
    """Encoder that exits non-zero after writing a partial output."""
    return _write_script(
        tmp_path / "ffmpeg-fail",
        _LAST_ARG
        + 'printf "partial" > "$last"\n'
        + 'echo "Unknown encoder \'libnothing\'" >&2\n'
        + "exit 1\n",
    )


@pytest.fixture
def silent_encoder(tmp_path):
    """Encoder that exits 0 without writing anything."""
    return _write_script(tmp_path / "ffmpeg-silent", "exit 0\n")


@pytest.fixture
def empty_output_encoder(tmp_path):
    """Encoder that exits 0 but leaves an empty output file."""
    return _write_script(tmp_path / "ffmpeg-empty", _LAST_ARG + ': > "$last"\n')


@pytest.fixture
def hanging_encoder(tmp_path):
    """Encoder that never finishes on its own."""
    return _write_script(tmp_path / "ffmpeg-hang", "exec sleep 30\n")


@pytest.fixture
def noisy_encoder(tmp_path):
    """Encoder that floods stderr before failing."""
    return _write_script(
        tmp_path / "ffmpeg-noisy",
        'i=0\nwhile [ $i -lt 2000 ]; do echo "line $i of verbose encoder output" >&2; i=$((i+1)); done\n'
        'echo "final error line" >&2\n'
        "exit 3\n",
    )


@pytest.fixture
def work_dir(tmp_path):
    d = tmp_path / "work"
    d.mkdir()
    return d


@pytest.fixture
def make_executor(work_dir):
    """Build a TranscodeExecutor pinned to a given encoder script."""
    from binary_resolver import BinaryResolver
    from transcoder import TranscodeExecutor

    def _make(encoder, timeout=30, max_output_buffer=1024 * 1024, max_concurrent=2):
        resolver = BinaryResolver(override=str(encoder), platform="linux")
        return TranscodeExecutor(
            resolver=resolver,
            work_dir=str(work_dir),
            timeout=timeout,
            max_output_buffer=max_output_buffer,
            max_concurrent=max_concurrent,
        )

    return _make


@pytest.fixture
def config_dict():
    return {
        "resolution": "1920x1080",
        "codec": "libx264",
        "quality": 25,
        "format": "mp4",
        "fps": 60,
        "bitrate": "auto",
        "velocity": 1.0,
    }


@pytest.fixture
def transcode_config(config_dict):
    from models import TranscodeConfig

    return TranscodeConfig(**config_dict)


@pytest.fixture
def encoder_script(tmp_path):
    """Write a custom fake encoder; `$last` holds the output path."""
    def _make(name: str, body: str):
        return _write_script(tmp_path / name, _LAST_ARG + body)

    return _make
