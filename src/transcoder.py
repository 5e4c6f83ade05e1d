"""
Transcode executor - temp-file lifecycle and encoder subprocess handling
"""

import asyncio
import logging
import tempfile
import time
import uuid
from pathlib import Path
from typing import Optional

from binary_resolver import BinaryResolver, resolver as default_resolver
from command import build_command
from config import settings
from errors import OutputMissing, TranscodeFailed, TranscodeTimeout
from filters import build_filters
from models import TranscodeConfig

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 64 * 1024


class TranscodeJob:
    """Request-scoped temp files; each is removed exactly once."""

    def __init__(self, work_dir: Path, input_extension: str, output_format: str):
        token = f"{time.time_ns()}_{uuid.uuid4().hex}"
        self.id = token
        self.input_path = work_dir / f"input_{token}.{input_extension}"
        self.output_path = work_dir / f"output_{token}.{output_format}"
        self.binary_path: Optional[Path] = None
        self.command: list[str] = []
        self._cleaned = False

    def cleanup(self):
        """Best-effort removal of both temp files. Failures are only logged."""
        if self._cleaned:
            return
        self._cleaned = True

        for path in (self.input_path, self.output_path):
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"Failed to remove temp file {path}: {e}")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.cleanup()
        return False


async def _drain(stream: Optional[asyncio.StreamReader], limit: int) -> bytes:
    """Read a stream to EOF, keeping only the last `limit` bytes."""
    if stream is None:
        return b""

    buf = bytearray()
    while True:
        chunk = await stream.read(READ_CHUNK_SIZE)
        if not chunk:
            break
        buf.extend(chunk)
        if len(buf) > limit:
            del buf[:len(buf) - limit]
    return bytes(buf)


class TranscodeExecutor:
    """Runs one encoder process per request with guaranteed cleanup."""

    def __init__(
        self,
        resolver: Optional[BinaryResolver] = None,
        work_dir: Optional[str] = None,
        max_output_buffer: int = settings.max_output_buffer,
        timeout: float = settings.transcode_timeout,
        max_concurrent: int = settings.max_concurrent,
    ):
        self.resolver = resolver or default_resolver
        self.work_dir = Path(work_dir or tempfile.gettempdir())
        self.max_output_buffer = max_output_buffer
        self.timeout = timeout
        self.max_concurrent = max_concurrent
        self._semaphore: Optional[asyncio.Semaphore] = None
        self._semaphore_loop: Optional[asyncio.AbstractEventLoop] = None
        self._active = 0

    @classmethod
    def from_settings(cls, s=settings, resolver: Optional[BinaryResolver] = None) -> "TranscodeExecutor":
        return cls(
            resolver=resolver,
            work_dir=s.work_path or None,
            max_output_buffer=s.max_output_buffer,
            timeout=s.transcode_timeout,
            max_concurrent=s.max_concurrent,
        )

    def _limiter(self) -> asyncio.Semaphore:
        # asyncio primitives bind to one loop; the limit is per running loop
        loop = asyncio.get_running_loop()
        if self._semaphore is None or self._semaphore_loop is not loop:
            self._semaphore = asyncio.Semaphore(self.max_concurrent)
            self._semaphore_loop = loop
        return self._semaphore

    @property
    def active(self) -> int:
        """Encoder processes currently running."""
        return self._active

    async def run(self, input_bytes: bytes, input_extension: str, config: TranscodeConfig) -> bytes:
        """
        Transcode input_bytes according to config.

        Args:
            input_bytes: Raw uploaded video
            input_extension: Validated extension for the input temp file
            config: Validated encoding parameters

        Returns:
            Bytes of the encoded output file

        Raises:
            BinaryNotFound / BinaryNotExecutable: Encoder unavailable
            TranscodeFailed: Spawn failure or non-zero exit
            TranscodeTimeout: Encoder exceeded the timeout and was killed
            OutputMissing: Exit 0 but no (or empty) output
        """
        async with self._limiter():
            self.work_dir.mkdir(parents=True, exist_ok=True)
            with TranscodeJob(self.work_dir, input_extension, config.format) as job:
                await asyncio.to_thread(job.input_path.write_bytes, input_bytes)

                job.binary_path = self.resolver.resolve()
                job.command = build_command(
                    job.binary_path, job.input_path, job.output_path,
                    config, build_filters(config),
                )
                logger.debug(f"Encoder command [{job.id}]: {' '.join(job.command)}")

                self._active += 1
                try:
                    await self._execute(job)
                finally:
                    self._active -= 1

                output = job.output_path
                if not output.exists() or output.stat().st_size == 0:
                    raise OutputMissing(
                        f"Encoder exited successfully but wrote no output ({output.name})"
                    )

                data = await asyncio.to_thread(output.read_bytes)
                logger.info(
                    f"Transcoded [{job.id}]: {len(input_bytes)} -> {len(data)} bytes "
                    f"({config.codec}, {config.resolution}, {config.format})"
                )
                return data

    async def _execute(self, job: TranscodeJob):
        try:
            process = await asyncio.create_subprocess_exec(
                *job.command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.error(f"Failed to start encoder [{job.id}]: {e}")
            raise TranscodeFailed(f"Failed to start encoder: {e}", details=str(e))

        try:
            stdout, stderr = await asyncio.wait_for(
                self._communicate(process), timeout=self.timeout
            )
        except asyncio.TimeoutError:
            logger.error(f"Encoder timed out after {self.timeout}s [{job.id}]")
            raise TranscodeTimeout(
                f"Encoder did not finish within {self.timeout}s",
                details=f"killed after {self.timeout}s",
            )
        finally:
            if process.returncode is None:
                try:
                    process.kill()
                except ProcessLookupError:
                    pass  # exited in the meantime
                await process.wait()

        if process.returncode != 0:
            details = (stderr or stdout).decode("utf-8", errors="replace").strip()
            logger.error(f"Encoder failed with exit code {process.returncode} [{job.id}]: {details}")
            raise TranscodeFailed(
                f"Encoder failed with exit code {process.returncode}",
                details=details,
                returncode=process.returncode,
            )

        logger.debug(f"Encoder output [{job.id}]: {stderr.decode('utf-8', errors='replace')}")

    async def _communicate(self, process) -> tuple[bytes, bytes]:
        stdout, stderr, _ = await asyncio.gather(
            _drain(process.stdout, self.max_output_buffer),
            _drain(process.stderr, self.max_output_buffer),
            process.wait(),
        )
        return stdout, stderr


_default_executor: Optional[TranscodeExecutor] = None


def get_executor() -> TranscodeExecutor:
    """Process-wide executor so the concurrency limit is shared by all callers."""
    global _default_executor
    if _default_executor is None:
        _default_executor = TranscodeExecutor.from_settings()
    return _default_executor
