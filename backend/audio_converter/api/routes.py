"""API routes for upload and conversion."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import JSONResponse, Response

from audio_converter.config import (
    DEFAULT_OUTPUT_FORMAT,
    INPUT_EXTENSIONS,
    INPUT_MIME_TYPES,
    MAX_UPLOAD_SIZE_BYTES,
    OUTPUT_FORMATS,
    UPLOAD_CHUNK_BYTES,
)
from audio_converter.conversion.errors import ConversionError, MissingFileError
from audio_converter.conversion.formats import content_type_for
from audio_converter.conversion.models import ConversionRequest
from audio_converter.conversion.response import content_disposition
from audio_converter.conversion.service import ConversionService, get_conversion_service
from audio_converter.conversion.validation import check_size, parse_output_format, validate

logger = logging.getLogger("converter.api")
router = APIRouter(prefix="/api", tags=["converter"])


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


async def _read_upload(file: UploadFile, max_bytes: int) -> bytes:
    """Read the upload in chunks, stopping as soon as it crosses max_bytes."""
    if file.size is not None:
        check_size(file.size, max_bytes)
    data = bytearray()
    while chunk := await file.read(UPLOAD_CHUNK_BYTES):
        check_size(len(data) + len(chunk), max_bytes)
        data.extend(chunk)
    return bytes(data)


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/limits")
def get_limits():
    """Return upload limits for the client."""
    return {
        "max_file_size_mb": MAX_UPLOAD_SIZE_BYTES // (1024 * 1024),
        "max_file_size_bytes": MAX_UPLOAD_SIZE_BYTES,
    }


@router.get("/formats")
def get_formats():
    return {
        "input_extensions": sorted(INPUT_EXTENSIONS),
        "input_mime_types": sorted(INPUT_MIME_TYPES),
        "output": {fmt: content_type_for(fmt) for fmt in OUTPUT_FORMATS},
        "default_output": DEFAULT_OUTPUT_FORMAT,
    }


@router.post("/convert")
async def convert(
    file: Optional[UploadFile] = File(None),
    output_format: Optional[str] = Form(None, alias="format"),
    svc: ConversionService = Depends(get_conversion_service),
):
    """Convert one uploaded video/audio file to the requested audio format and return it."""
    try:
        if file is None or not file.filename:
            raise MissingFileError("No file provided")
        # Reject a bad format before reading the body
        parse_output_format(output_format)
        data = await _read_upload(file, MAX_UPLOAD_SIZE_BYTES)
        fmt = validate(data, file.content_type, file.filename, output_format, max_bytes=MAX_UPLOAD_SIZE_BYTES)
        request = ConversionRequest(
            file_bytes=data,
            original_file_name=file.filename,
            declared_mime_type=file.content_type or "",
            requested_format=fmt,
        )
        result = await svc.convert(request)
    except ConversionError as e:
        if e.status_code >= 500:
            logger.error("Conversion failed for %s: %s", file.filename if file else None, e.message)
        else:
            logger.info("Rejected upload %s: %s", file.filename if file else None, e.message)
        return error_response(e.status_code, e.message)
    except Exception as e:
        logger.exception("Conversion error: %s", e)
        return error_response(500, str(e) or "Conversion failed. Please try again.")

    return Response(
        content=result.output_bytes,
        media_type=result.content_type,
        headers={"Content-Disposition": content_disposition(result.download_file_name)},
    )
