"""Build the download payload for a finished conversion."""
from pathlib import PurePath
from urllib.parse import quote

from audio_converter.conversion.formats import content_type_for
from audio_converter.conversion.models import ConversionResult, OutputFormat


def download_file_name(original_file_name: str, fmt: OutputFormat) -> str:
    """Swap the last extension for the output format: clip.final.mov -> clip.final.mp3."""
    name = PurePath(original_file_name or "").name
    stem = name.rsplit(".", 1)[0] if "." in name else name
    return f"{stem or 'converted'}.{OutputFormat(fmt).value}"


def content_disposition(file_name: str) -> str:
    """attachment header; non-ASCII names get an ASCII fallback plus an RFC 5987 filename*."""
    fallback = "".join(c if 32 <= ord(c) < 127 and c not in '"\\' else "_" for c in file_name)
    header = f'attachment; filename="{fallback}"'
    if fallback != file_name:
        header += f"; filename*=UTF-8''{quote(file_name)}"
    return header


def build_result(output_bytes: bytes, original_file_name: str, fmt: OutputFormat) -> ConversionResult:
    return ConversionResult(
        output_bytes=output_bytes,
        content_type=content_type_for(fmt),
        download_file_name=download_file_name(original_file_name, fmt),
    )
