import io
import wave
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from audio_converter.conversion.models import TranscodeOutcome
from audio_converter.conversion.scratch import ScratchStorage
from audio_converter.conversion.service import ConversionService, get_conversion_service
from audio_converter.main import app


class FakeTranscoder:
    """Stands in for ffmpeg: records calls and writes canned output bytes."""

    def __init__(self, output: bytes = b"ID3\x04fake-encoded-audio", fail_message=None, write_output=True):
        self.output = output
        self.fail_message = fail_message
        self.write_output = write_output
        self.calls = []
        self.input_existed = []

    async def run(self, input_path: Path, output_path: Path, options):
        self.calls.append((input_path, output_path, options))
        self.input_existed.append(input_path.exists())
        if self.fail_message is not None:
            return TranscodeOutcome.failed(self.fail_message)
        if self.write_output:
            output_path.write_bytes(self.output)
        return TranscodeOutcome.success()


def make_wav(size_bytes: int = 1024 * 1024) -> bytes:
    """Silent 16-bit mono PCM of roughly the requested size."""
    buf = io.BytesIO()
    with wave.open(buf, "wb") as w:
        w.setnchannels(1)
        w.setsampwidth(2)
        w.setframerate(44100)
        w.writeframes(b"\x00\x00" * (size_bytes // 2))
    return buf.getvalue()


@pytest.fixture
def scratch_dir(tmp_path):
    return tmp_path / "scratch"


@pytest.fixture
def scratch(scratch_dir):
    return ScratchStorage(scratch_dir)


@pytest.fixture
def transcoder():
    return FakeTranscoder()


@pytest.fixture
def service(transcoder, scratch):
    return ConversionService(transcoder, scratch)


@pytest.fixture
def client(service):
    app.dependency_overrides[get_conversion_service] = lambda: service
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def scratch_files(scratch_dir: Path) -> list[Path]:
    if not scratch_dir.exists():
        return []
    return sorted(scratch_dir.iterdir())
