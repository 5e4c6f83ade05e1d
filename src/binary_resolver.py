"""
Encoder binary resolution across system, development and packaged layouts
"""

import logging
import os
import shutil
import stat
import sys
import threading
from pathlib import Path
from typing import Iterable, Optional

from config import settings
from constants import ENCODER_NAME
from errors import BinaryNotExecutable, BinaryNotFound

logger = logging.getLogger(__name__)

# Known install locations per platform, checked before any bundled copy
SYSTEM_PATHS: dict[str, list[str]] = {
    "linux": ["/usr/bin/ffmpeg", "/usr/local/bin/ffmpeg"],
    "darwin": ["/opt/homebrew/bin/ffmpeg", "/usr/local/bin/ffmpeg"],
    "win32": ["C:\\ffmpeg\\bin\\ffmpeg.exe"],
}

PROJECT_ROOT = Path(__file__).resolve().parent.parent


def is_frozen() -> bool:
    """True when running from a packaged (PyInstaller-style) build."""
    return bool(getattr(sys, "frozen", False))


def executable_name(platform: str = sys.platform) -> str:
    return f"{ENCODER_NAME}.exe" if platform == "win32" else ENCODER_NAME


class BinaryResolver:
    """Finds the encoder executable and caches the result for the process."""

    def __init__(
        self,
        override: Optional[str] = None,
        system_paths: Optional[Iterable[str]] = None,
        dev_dir: Optional[str] = None,
        bundle_dir: Optional[str] = None,
        frozen: Optional[bool] = None,
        platform: str = sys.platform,
        use_path_lookup: bool = True,
    ):
        """
        Initialize resolver.

        Args:
            override: Explicit executable path; when set, nothing else is tried
            system_paths: Known install locations (platform defaults if None)
            dev_dir: Project root holding resources/ffmpeg/<platform>
            bundle_dir: Packaged application directory holding resources/ffmpeg
            frozen: Execution mode (detected if None)
            platform: sys.platform-style name
            use_path_lookup: Also search PATH after the known system locations
        """
        self.override = Path(override) if override else None
        self.platform = platform
        self.exe_name = executable_name(platform)
        self.system_paths = [
            Path(p) for p in (
                system_paths if system_paths is not None
                else SYSTEM_PATHS.get(platform, [])
            )
        ]
        self.dev_dir = Path(dev_dir) if dev_dir else PROJECT_ROOT
        self.bundle_dir = Path(bundle_dir) if bundle_dir else None
        self.frozen = is_frozen() if frozen is None else frozen
        self.use_path_lookup = use_path_lookup

        self._lock = threading.Lock()
        self._cached: Optional[Path] = None

    @classmethod
    def from_settings(cls, s=settings) -> "BinaryResolver":
        return cls(
            override=s.ffmpeg_path or None,
            dev_dir=s.ffmpeg_dev_dir or None,
            bundle_dir=s.ffmpeg_bundle_dir or None,
        )

    def _bundle_roots(self) -> list[Path]:
        if self.bundle_dir:
            return [self.bundle_dir]
        if not self.frozen:
            return []
        roots = []
        meipass = getattr(sys, "_MEIPASS", None)
        if meipass:
            roots.append(Path(meipass))
        roots.append(Path(sys.executable).resolve().parent)
        return roots

    def candidates(self) -> list[tuple[str, Path]]:
        """Return (source, path) pairs in probe order."""
        if self.override:
            return [("override", self.override)]

        found = [("system", p) for p in self.system_paths]

        if self.use_path_lookup:
            on_path = shutil.which(self.exe_name)
            if on_path:
                found.append(("system", Path(on_path)))

        if not self.frozen:
            found.append(
                ("development", self.dev_dir / "resources" / ENCODER_NAME / self.platform / self.exe_name)
            )

        for root in self._bundle_roots():
            found.append(("packaged", root / "resources" / ENCODER_NAME / self.exe_name))

        return found

    def _find(self) -> Path:
        tried = []
        for source, path in self.candidates():
            if path.is_file():
                logger.info(f"Encoder resolved from {source}: {path}")
                return path
            tried.append(str(path))

        raise BinaryNotFound(
            f"{self.exe_name} not found. Tried: {', '.join(tried) or 'nothing'}. "
            "Install ffmpeg or set FFMPEG_PATH."
        )

    def _ensure_executable(self, path: Path):
        if self.platform == "win32" or os.name == "nt":
            return
        if os.access(path, os.X_OK):
            return

        logger.info(f"Setting executable bit on {path}")
        try:
            mode = path.stat().st_mode
            os.chmod(path, mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        except OSError as e:
            raise BinaryNotExecutable(f"Cannot make {path} executable: {e}")

        if not os.access(path, os.X_OK):
            raise BinaryNotExecutable(f"{path} is not executable")

    def resolve(self) -> Path:
        """
        Return the encoder path, resolving on first use.

        Raises:
            BinaryNotFound: No candidate exists
            BinaryNotExecutable: The selected candidate cannot be made executable
        """
        cached = self._cached
        if cached is not None and cached.exists():
            return cached

        with self._lock:
            if self._cached is not None:
                if self._cached.exists():
                    return self._cached
                logger.warning(f"Cached encoder path disappeared: {self._cached}")
                self._cached = None

            path = self._find()
            self._ensure_executable(path)
            self._cached = path
            return path

    def invalidate(self):
        """Drop the cached path so the next resolve() probes again."""
        with self._lock:
            self._cached = None

    @property
    def cached_path(self) -> Optional[Path]:
        return self._cached


# Process-wide resolver
resolver = BinaryResolver.from_settings()
