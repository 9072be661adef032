"""FastAPI application entry point."""
import logging
import shutil
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from audio_converter.api.routes import error_response, router
from audio_converter.config import CORS_ORIGINS, FFMPEG_PATH, logger as config_logger
from audio_converter.conversion.errors import ConversionError

logging.getLogger("uvicorn").setLevel(logging.INFO)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if shutil.which(FFMPEG_PATH) is None:
        config_logger.warning("ffmpeg not found at %r; conversions will fail until it is installed", FFMPEG_PATH)
    config_logger.info("Audio converter API started")
    yield
    config_logger.info("Audio converter API shutting down")


app = FastAPI(
    title="Audio Converter API",
    description="Convert uploaded video and audio files to mp3, wav, aac, m4a, ogg or flac.",
    version="1.0.0",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS if CORS_ORIGINS else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)


async def conversion_error_handler(request: Request, exc: ConversionError):
    return error_response(exc.status_code, exc.message)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed multipart bodies are client errors; keep the {"error": ...} shape."""
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return error_response(400, f"Invalid request: {message}")


app.add_exception_handler(ConversionError, conversion_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.include_router(router)


if __name__ == "__main__":
    import uvicorn
    from audio_converter.config import HOST, PORT
    uvicorn.run("audio_converter.main:app", host=HOST, port=PORT, reload=True)
