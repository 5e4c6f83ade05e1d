"""
Error taxonomy for Video Optimizer

Every failure that reaches the boundary layer is a TranscodeError carrying a
machine-readable kind, an HTTP-equivalent status and a human-readable detail.
"""

from typing import Optional


class TranscodeError(Exception):
    """Base class for request failures."""

    kind = "transcode_error"
    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    def to_dict(self) -> dict:
        return {"error": self.kind, "detail": self.detail}


class InvalidInput(TranscodeError):
    """Missing file, unparseable config, or a field outside its allowed set."""

    kind = "invalid_input"
    status_code = 400

    def __init__(self, detail: str, field: Optional[str] = None):
        super().__init__(detail)
        self.field = field

    def to_dict(self) -> dict:
        data = super().to_dict()
        if self.field:
            data["field"] = self.field
        return data


class PayloadTooLarge(InvalidInput):
    kind = "payload_too_large"
    status_code = 413


class BinaryNotFound(TranscodeError):
    """No encoder candidate exists."""

    kind = "binary_not_found"
    status_code = 503


class BinaryNotExecutable(TranscodeError):
    """The encoder exists but cannot be made executable."""

    kind = "binary_not_executable"
    status_code = 503


class TranscodeFailed(TranscodeError):
    """The encoder could not be spawned or exited non-zero."""

    kind = "transcode_failed"
    status_code = 500

    def __init__(self, detail: str, details: str = "", returncode: Optional[int] = None):
        super().__init__(detail)
        self.details = details
        self.returncode = returncode

    def to_dict(self) -> dict:
        data = super().to_dict()
        if self.details:
            data["details"] = self.details
        return data


class TranscodeTimeout(TranscodeFailed):
    kind = "transcode_timeout"
    status_code = 504


class OutputMissing(TranscodeError):
    """The encoder exited 0 but wrote nothing."""

    kind = "output_missing"
    status_code = 500
