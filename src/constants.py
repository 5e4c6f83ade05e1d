"""
Constants for Video Optimizer
"""

# Encoder invocation
ENCODER_NAME = "ffmpeg"
AUDIO_BITRATE = "128k"
DEFAULT_AUDIO_CODEC = "aac"
AUDIO_CODEC_BY_FORMAT = {
    "webm": "libopus",  # WebM only carries Opus/Vorbis audio
}

# Tempo filter (atempo) accepts multipliers within this closed range
TEMPO_MIN = 0.5
TEMPO_MAX = 2.0

# Limits
MAX_VELOCITY = 8.0  # atempo chain stays within 0.02 of the target up to here
MIN_QUALITY = 0
MAX_QUALITY = 51
MIN_FPS = 1
MAX_FPS = 240
MAX_DIMENSION = 16384
MAX_EXTENSION_LENGTH = 10
DEFAULT_OUTPUT_BUFFER = 10 * 1024 * 1024  # 10MB per captured stream
DEFAULT_TRANSCODE_TIMEOUT = 3600  # 1 hour per request
MAX_TRANSCODE_TIMEOUT = 36000  # 10 hours

# Valid video encoders
VALID_CODECS = [
    "libx264",
    "libx265",
    "libvpx-vp9",
    "libaom-av1",
]

# Valid output containers
VALID_FORMATS = [
    "mp4",
    "webm",
    "mkv",
    "avi",
    "mov",
]

MEDIA_TYPES = {
    "mp4": "video/mp4",
    "webm": "video/webm",
    "mkv": "video/x-matroska",
    "avi": "video/x-msvideo",
    "mov": "video/quicktime",
}

# Presets offered by the UI
RESOLUTION_PRESETS = [
    "3840x2160",
    "2560x1440",
    "1920x1080",
    "1280x720",
    "854x480",
    "640x360",
]
FPS_PRESETS = [24, 30, 60, 120]
BITRATE_PRESETS = ["auto", "500k", "1M", "2M", "5M", "10M", "20M"]
VELOCITY_UI_RANGE = (0.25, 4.0, 0.25)  # min, max, step

# Allowlist patterns for values interpolated into the command
RESOLUTION_PATTERN = r"^([1-9][0-9]{0,4})x([1-9][0-9]{0,4})$"
BITRATE_PATTERN = r"^[1-9][0-9]{0,5}[kKM]$"
EXTENSION_PATTERN = r"^[A-Za-z0-9]+$"

DEFAULT_CONFIG = {
    "resolution": "1920x1080",
    "codec": "libx264",
    "quality": 25,
    "format": "mp4",
    "fps": 60,
    "bitrate": "auto",
    "velocity": 1.0,
}
