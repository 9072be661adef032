"""Scratch files for in-flight conversions.

Every path is unique per call (nanosecond timestamp plus a random token), so
concurrent requests share the directory without coordination. Files are only
ever removed through ``release``, and ``session()`` guarantees that happens
once per handle on every exit path.
"""
import logging
import re
import time
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from audio_converter.conversion.models import OutputFormat, TempFileHandle

logger = logging.getLogger("converter.scratch")

MAX_NAME_LENGTH = 100
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9.-]")


def sanitize_file_name(name: str, max_length: int = MAX_NAME_LENGTH) -> str:
    """Replace anything but ASCII letters, digits, '.' and '-' with '_' and truncate."""
    return _UNSAFE_CHARS.sub("_", name or "")[:max_length]


def _unique_token() -> str:
    return f"{time.time_ns()}_{uuid.uuid4().hex[:8]}"


class ScratchStorage:
    def __init__(self, root: Path):
        self.root = Path(root)

    def _ensure_root(self) -> None:
        self.root.mkdir(parents=True, exist_ok=True)

    def _path_for(self, name: str) -> Path:
        path = self.root / name
        # Sanitized names carry no separators; this guards against future changes to that rule.
        if path.resolve().parent != self.root.resolve():
            raise ValueError(f"Refusing scratch path outside {self.root}: {name}")
        return path

    def stage(self, file_bytes: bytes, file_name: str) -> TempFileHandle:
        """Write uploaded bytes to a new input file."""
        self._ensure_root()
        handle = TempFileHandle(self._path_for(f"input_{_unique_token()}_{sanitize_file_name(file_name)}"))
        try:
            handle.path.write_bytes(file_bytes)
        except BaseException:
            self.release(handle)
            raise
        logger.debug("Staged %s (%s bytes)", handle.path.name, len(file_bytes))
        return handle

    def reserve_output_path(self, requested_format: OutputFormat) -> TempFileHandle:
        """Pick an output path for ffmpeg to write to. Nothing is created."""
        self._ensure_root()
        return TempFileHandle(self._path_for(f"output_{_unique_token()}.{OutputFormat(requested_format).value}"))

    def read_and_release(self, handle: TempFileHandle) -> bytes:
        try:
            return handle.path.read_bytes()
        finally:
            self.release(handle)

    def release(self, handle: TempFileHandle) -> None:
        """Delete the file behind a handle. Safe to call twice; never raises OSError."""
        if handle.released:
            return
        handle.released = True
        try:
            handle.path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Could not remove scratch file %s: %s", handle.path, e)

    @contextmanager
    def session(self) -> Iterator["ScratchSession"]:
        """Scope for one conversion; all handles it hands out are released on exit."""
        session = ScratchSession(self)
        try:
            yield session
        finally:
            session.close()


class ScratchSession:
    def __init__(self, storage: ScratchStorage):
        self._storage = storage
        self.handles: list[TempFileHandle] = []

    def stage(self, file_bytes: bytes, file_name: str) -> TempFileHandle:
        handle = self._storage.stage(file_bytes, file_name)
        self.handles.append(handle)
        return handle

    def reserve_output_path(self, requested_format: OutputFormat) -> TempFileHandle:
        handle = self._storage.reserve_output_path(requested_format)
        self.handles.append(handle)
        return handle

    def read_and_release(self, handle: TempFileHandle) -> bytes:
        return self._storage.read_and_release(handle)

    def close(self) -> None:
        for handle in self.handles:
            self._storage.release(handle)
