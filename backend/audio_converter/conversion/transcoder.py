"""ffmpeg wrapper. One subprocess per conversion, awaited without blocking the event loop."""
import asyncio
import logging
import shlex
from pathlib import Path
from typing import Optional, Protocol

from audio_converter.conversion.models import EncodingOptions, TranscodeOutcome

logger = logging.getLogger("converter.transcoder")

STDERR_TAIL_LINES = 5


class Transcoder(Protocol):
    async def run(self, input_path: Path, output_path: Path, options: EncodingOptions) -> TranscodeOutcome:
        ...


def _stderr_tail(stderr: bytes, lines: int = STDERR_TAIL_LINES) -> str:
    text = stderr.decode("utf-8", errors="replace")
    kept = [line.strip() for line in text.splitlines() if line.strip()]
    return "\n".join(kept[-lines:])


class FFmpegTranscoder:
    """Runs ffmpeg with the given encoding options.

    ffmpeg_path: executable name or path.
    timeout: seconds before the process is killed; None or 0 means no limit.
    """

    def __init__(self, ffmpeg_path: str = "ffmpeg", timeout: Optional[float] = None):
        self.ffmpeg_path = ffmpeg_path
        self.timeout = timeout or None

    def build_command(self, input_path: Path, output_path: Path, options: EncodingOptions) -> list[str]:
        cmd = [
            self.ffmpeg_path, "-hide_banner", "-nostdin", "-y",
            "-i", str(input_path),
            "-vn",
            "-acodec", options.audio_codec,
        ]
        if options.audio_bitrate:
            cmd += ["-b:a", options.audio_bitrate]
        cmd += list(options.extra_flags)
        cmd += ["-f", options.container_format, str(output_path)]
        return cmd

    async def run(self, input_path: Path, output_path: Path, options: EncodingOptions) -> TranscodeOutcome:
        cmd = self.build_command(input_path, output_path, options)
        logger.info("ffmpeg started: %s", shlex.join(cmd))
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError:
            logger.error("ffmpeg not found at %r. Install ffmpeg or set FFMPEG_PATH.", self.ffmpeg_path)
            return TranscodeOutcome.failed(f"Conversion failed: ffmpeg executable not found ({self.ffmpeg_path})")
        except OSError as e:
            logger.error("Failed to start ffmpeg: %s", e)
            return TranscodeOutcome.failed(f"Conversion failed: could not start ffmpeg: {e}")

        try:
            _, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            await self._kill(process)
            logger.error("ffmpeg timed out after %ss for %s", self.timeout, input_path.name)
            return TranscodeOutcome.failed(f"Conversion failed: timed out after {self.timeout:g} seconds")
        except asyncio.CancelledError:
            await self._kill(process)
            logger.warning("ffmpeg cancelled for %s", input_path.name)
            raise

        if process.returncode != 0:
            detail = _stderr_tail(stderr or b"") or "no diagnostic output"
            logger.error("ffmpeg exited with code %s: %s", process.returncode, detail)
            return TranscodeOutcome.failed(f"Conversion failed: ffmpeg exited with code {process.returncode}: {detail}")
        logger.info("Conversion finished: %s -> %s", input_path.name, output_path.name)
        return TranscodeOutcome.success()

    @staticmethod
    async def _kill(process: asyncio.subprocess.Process) -> None:
        if process.returncode is None:
            try:
                process.kill()
            except ProcessLookupError:
                pass
        # Reap the process even if the task is cancelled again
        await asyncio.shield(process.wait())
