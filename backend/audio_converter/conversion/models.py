"""Conversion request/response models."""
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional


class OutputFormat(str, Enum):
    MP3 = "mp3"
    WAV = "wav"
    AAC = "aac"
    M4A = "m4a"
    OGG = "ogg"
    FLAC = "flac"


@dataclass(frozen=True)
class ConversionRequest:
    """One upload to convert. Built after validation, never mutated."""

    file_bytes: bytes
    original_file_name: str
    declared_mime_type: str
    requested_format: OutputFormat


@dataclass
class TempFileHandle:
    """A scratch file owned by a single conversion."""

    path: Path
    released: bool = False

    @property
    def exists(self) -> bool:
        return not self.released and self.path.exists()


@dataclass(frozen=True)
class EncodingOptions:
    container_format: str
    audio_codec: str
    audio_bitrate: Optional[str] = None
    extra_flags: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class TranscodeOutcome:
    ok: bool
    message: str = ""

    @classmethod
    def success(cls) -> "TranscodeOutcome":
        return cls(ok=True)

    @classmethod
    def failed(cls, message: str) -> "TranscodeOutcome":
        return cls(ok=False, message=message)


@dataclass(frozen=True)
class ConversionResult:
    output_bytes: bytes
    content_type: str
    download_file_name: str
