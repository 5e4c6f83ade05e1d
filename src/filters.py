"""
Filter graph construction - video scale/speed and audio tempo chains
"""

import math

from constants import MAX_VELOCITY, TEMPO_MAX, TEMPO_MIN
from errors import InvalidInput
from models import FilterSpec, TranscodeConfig


def _check_velocity(velocity: float):
    if not math.isfinite(velocity) or velocity <= 0:
        raise InvalidInput(f"Velocity must be a positive number, got {velocity}", field="velocity")
    if velocity > MAX_VELOCITY:
        raise InvalidInput(
            f"Velocity must be at most {MAX_VELOCITY}, got {velocity}", field="velocity"
        )


def tempo_chain(velocity: float) -> list[float]:
    """
    Decompose a speed multiplier into atempo steps within [0.5, 2.0].

    Whole factors of 2.0 (or 0.5) come first, the remainder last. Only the
    final remainder is rounded, to 2 decimal places; a remainder that rounds
    to 1.0 is dropped.

    Args:
        velocity: Playback-speed multiplier in (0, 8]

    Returns:
        Ordered list of multipliers whose product is velocity
    """
    _check_velocity(velocity)
    if velocity == 1.0:
        return []

    steps: list[float] = []
    remaining = velocity

    while remaining > TEMPO_MAX:
        steps.append(TEMPO_MAX)
        remaining /= TEMPO_MAX

    while remaining < TEMPO_MIN:
        steps.append(TEMPO_MIN)
        remaining /= TEMPO_MIN

    if remaining != 1.0:
        last = round(remaining, 2)
        if last != 1.0:
            steps.append(last)

    return steps


def _audio_terms(velocity: float) -> list[str]:
    return [f"atempo={step}" for step in tempo_chain(velocity)]


def _video_terms(config: TranscodeConfig) -> list[str]:
    _check_velocity(config.velocity)
    width, height = config.dimensions
    terms = [f"scale={width}:{height}"]

    # Rescale frame timing; frames are neither dropped nor duplicated
    if config.velocity != 1.0:
        terms.append(f"setpts={1 / config.velocity:.2f}*PTS")

    return terms


def build_audio_filter(velocity: float) -> str:
    """Comma-joined atempo chain for velocity, empty when unchanged."""
    return ",".join(_audio_terms(velocity))


def build_video_filter(config: TranscodeConfig) -> str:
    """Scale to the configured resolution, then rescale timestamps for speed."""
    return ",".join(_video_terms(config))


def build_filters(config: TranscodeConfig) -> FilterSpec:
    return FilterSpec(
        video=tuple(_video_terms(config)),
        audio=tuple(_audio_terms(config.velocity)),
    )
