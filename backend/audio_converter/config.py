"""Application configuration. Loads from environment and .env file."""
import logging
import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent
# Load .env from cwd, then backend/.env, then project root .env
load_dotenv()
load_dotenv(BASE_DIR / ".env")
load_dotenv(BASE_DIR.parent / ".env")

# Scratch storage for in-flight conversions (created on demand, emptied per request)
SCRATCH_DIR = Path(os.getenv("SCRATCH_DIR", str(BASE_DIR / "tmp")))

# External transcoder. Leave unset to resolve "ffmpeg" from PATH.
FFMPEG_PATH = os.getenv("FFMPEG_PATH", "").strip() or "ffmpeg"
# Ceiling for a single ffmpeg run in seconds; 0 disables the limit
TRANSCODE_TIMEOUT_SECONDS = float(os.getenv("TRANSCODE_TIMEOUT_SECONDS", "300"))

# Supported inputs (either the declared MIME type or the extension must match)
VIDEO_EXTENSIONS = {".mp4", ".mov", ".mkv", ".avi", ".webm"}
AUDIO_EXTENSIONS = {".wav", ".mp3", ".aac", ".ogg", ".flac", ".m4a"}
INPUT_EXTENSIONS = VIDEO_EXTENSIONS | AUDIO_EXTENSIONS
INPUT_MIME_TYPES = {
    "video/mp4",
    "video/quicktime",
    "video/x-matroska",
    "video/x-msvideo",
    "video/webm",
    "audio/wav",
    "audio/mpeg",
    "audio/aac",
    "audio/ogg",
    "audio/flac",
    "audio/x-wav",
    "audio/x-m4a",
}

# Outputs
OUTPUT_FORMATS = ["mp3", "wav", "aac", "m4a", "ogg", "flac"]
DEFAULT_OUTPUT_FORMAT = "mp3"

# Limits (env)
MAX_UPLOAD_SIZE_MB = int(os.getenv("MAX_UPLOAD_SIZE_MB", "100"))
MAX_UPLOAD_SIZE_BYTES = MAX_UPLOAD_SIZE_MB * 1024 * 1024
UPLOAD_CHUNK_BYTES = 1024 * 1024

# Server (for uvicorn)
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))
# CORS: comma-separated origins, e.g. "http://localhost:3000,http://127.0.0.1:3000"
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000").split(",") if o.strip()]

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("converter")
