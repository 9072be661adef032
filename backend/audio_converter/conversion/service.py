"""Audio conversion pipeline: stage upload, run ffmpeg, read result, clean up."""
import logging
from typing import Optional

from audio_converter.config import FFMPEG_PATH, SCRATCH_DIR, TRANSCODE_TIMEOUT_SECONDS
from audio_converter.conversion.errors import TranscodeError
from audio_converter.conversion.formats import map_options
from audio_converter.conversion.models import ConversionRequest, ConversionResult
from audio_converter.conversion.response import build_result
from audio_converter.conversion.scratch import ScratchStorage
from audio_converter.conversion.transcoder import FFmpegTranscoder, Transcoder

logger = logging.getLogger("converter.service")


class ConversionService:
    """Converts validated uploads. Holds no per-request state."""

    def __init__(self, transcoder: Transcoder, scratch: ScratchStorage):
        self.transcoder = transcoder
        self.scratch = scratch

    async def convert(self, request: ConversionRequest) -> ConversionResult:
        """Run one conversion.

        Raises TranscodeError when ffmpeg fails and OSError on scratch I/O
        problems. Scratch files are gone by the time this returns or raises.
        """
        options = map_options(request.requested_format)
        with self.scratch.session() as session:
            source = session.stage(request.file_bytes, request.original_file_name)
            target = session.reserve_output_path(request.requested_format)
            outcome = await self.transcoder.run(source.path, target.path, options)
            if not outcome.ok:
                raise TranscodeError(outcome.message or "Conversion failed. Please try again.")
            output_bytes = session.read_and_release(target)
        logger.info(
            "Converted %s -> %s (%s bytes in, %s bytes out)",
            request.original_file_name,
            request.requested_format.value,
            len(request.file_bytes),
            len(output_bytes),
        )
        return build_result(output_bytes, request.original_file_name, request.requested_format)


# Singleton
_conversion_service: Optional[ConversionService] = None


def get_conversion_service() -> ConversionService:
    global _conversion_service
    if _conversion_service is None:
        _conversion_service = ConversionService(
            FFmpegTranscoder(FFMPEG_PATH, timeout=TRANSCODE_TIMEOUT_SECONDS),
            ScratchStorage(SCRATCH_DIR),
        )
        logger.info("ConversionService initialized (ffmpeg=%s, scratch=%s)", FFMPEG_PATH, SCRATCH_DIR)
    return _conversion_service
