"""Upload checks: output format, size ceiling, input type allow-lists. No side effects."""
from pathlib import PurePath
from typing import Optional

from audio_converter.config import (
    DEFAULT_OUTPUT_FORMAT,
    INPUT_EXTENSIONS,
    INPUT_MIME_TYPES,
    MAX_UPLOAD_SIZE_BYTES,
)
from audio_converter.conversion.errors import (
    TooLargeError,
    UnsupportedFormatError,
    UnsupportedInputTypeError,
)
from audio_converter.conversion.models import OutputFormat


def parse_output_format(raw: Optional[str]) -> OutputFormat:
    """Empty or missing means the default (mp3). Values are matched exactly."""
    value = (raw or "").strip() or DEFAULT_OUTPUT_FORMAT
    try:
        return OutputFormat(value)
    except ValueError:
        raise UnsupportedFormatError("Unsupported output format") from None


def check_size(size: int, max_bytes: int = MAX_UPLOAD_SIZE_BYTES) -> None:
    if size > max_bytes:
        max_mb = max_bytes // (1024 * 1024)
        raise TooLargeError(f"File is too large. Maximum file size is {max_mb} MB.")


def file_extension(file_name: str) -> str:
    return PurePath(file_name or "").suffix.lower()


def check_input_type(declared_mime_type: Optional[str], file_name: str) -> None:
    mime = (declared_mime_type or "").split(";", 1)[0].strip().lower()
    if mime in INPUT_MIME_TYPES or file_extension(file_name) in INPUT_EXTENSIONS:
        return
    raise UnsupportedInputTypeError(
        "Unsupported file type. Please upload a valid video or audio file."
    )


def validate(
    file_bytes: bytes,
    declared_mime_type: Optional[str],
    file_name: str,
    requested_format: Optional[str],
    max_bytes: int = MAX_UPLOAD_SIZE_BYTES,
) -> OutputFormat:
    """Check an upload and return the output format to produce.

    Raises a ValidationError subclass on the first failing check, in the order
    format, size, input type.
    """
    fmt = parse_output_format(requested_format)
    check_size(len(file_bytes), max_bytes)
    check_input_type(declared_mime_type, file_name)
    return fmt
