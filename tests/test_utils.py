"""
Tests for utils.py - CommandValidator and filename helpers.
"""

import pytest

from utils import CommandValidator, clean_filename_stem, parse_resolution


# ─── CommandValidator ────────────────────────────────────────────────────────


class TestCommandValidator:
    """Tests for CommandValidator allowlists."""

    def test_valid_codecs(self):
        for codec in ["libx264", "libx265", "libvpx-vp9", "libaom-av1"]:
            assert CommandValidator.validate_codec(codec) == codec

    def test_invalid_codec(self):
        with pytest.raises(ValueError, match="Invalid codec"):
            CommandValidator.validate_codec("h264_nvenc")

    def test_codec_case_sensitive(self):
        with pytest.raises(ValueError):
            CommandValidator.validate_codec("LIBX264")

    def test_valid_formats(self):
        for fmt in ["mp4", "webm", "mkv", "avi", "mov"]:
            assert CommandValidator.validate_format(fmt) == fmt

    def test_invalid_format(self):
        with pytest.raises(ValueError, match="Invalid format"):
            CommandValidator.validate_format("gif")

    def test_valid_resolution(self):
        assert CommandValidator.validate_resolution("1280x720") == "1280x720"

    def test_resolution_too_large(self):
        with pytest.raises(ValueError, match="Max dimension"):
            CommandValidator.validate_resolution("20000x1080")

    def test_resolution_wrong_separator(self):
        with pytest.raises(ValueError, match="Invalid resolution"):
            CommandValidator.validate_resolution("1280*720")

    def test_auto_bitrate(self):
        assert CommandValidator.validate_bitrate("auto") == "auto"

    def test_size_bitrate(self):
        assert CommandValidator.validate_bitrate("10M") == "10M"

    def test_invalid_bitrate(self):
        with pytest.raises(ValueError, match="Invalid bitrate"):
            CommandValidator.validate_bitrate("fast")

    def test_valid_extension(self):
        assert CommandValidator.validate_extension("mp4") == "mp4"

    @pytest.mark.parametrize("ext", ["", "mp 4", "mp4/..", "a" * 11, "mp4;"])
    def test_invalid_extension(self, ext):
        with pytest.raises(ValueError):
            CommandValidator.validate_extension(ext)


class TestParseResolution:
    def test_split(self):
        assert parse_resolution("854x480") == (854, 480)


# ─── Filename Cleaning ───────────────────────────────────────────────────────


class TestCleanFilenameStem:
    """Tests for clean_filename_stem."""

    def test_normal_name(self):
        assert clean_filename_stem("holiday.mp4") == "holiday"

    def test_stem_stops_at_first_dot(self):
        assert clean_filename_stem("clip.final.mov") == "clip"

    def test_client_path_stripped(self):
        assert clean_filename_stem("C:\\Users\\me\\clip.mp4") == "clip"
        assert clean_filename_stem("/home/me/clip.mp4") == "clip"

    def test_header_unsafe_characters_removed(self):
        result = clean_filename_stem('my "best"; clip<1>.mp4')
        for ch in '";<>':
            assert ch not in result

    def test_empty_becomes_video(self):
        assert clean_filename_stem(None) == "video"
        assert clean_filename_stem("") == "video"
        assert clean_filename_stem(".mp4") == "video"

    def test_control_characters_removed(self):
        assert clean_filename_stem("cl\x01ip\x00.mp4") == "clip"

    def test_long_name_truncated(self):
        assert len(clean_filename_stem("A" * 250 + ".mp4")) <= 200
