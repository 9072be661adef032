"""Tests for the ffmpeg wrapper.

Shell scripts stand in for ffmpeg so the subprocess handling is exercised
without a real encoder; the last test runs real ffmpeg when it is installed.
"""
import asyncio
import shutil
import subprocess
import sys
from pathlib import Path

import pytest

from audio_converter.conversion.formats import map_options
from audio_converter.conversion.models import EncodingOptions, OutputFormat
from audio_converter.conversion.transcoder import FFmpegTranscoder

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="fake ffmpeg is a POSIX shell script")


def fake_ffmpeg(tmp_path: Path, body: str) -> str:
    script = tmp_path / "fake-ffmpeg"
    script.write_text("#!/bin/sh\n" + body + "\n")
    script.chmod(0o755)
    return str(script)


WRITES_LAST_ARG = 'for last; do :; done\nprintf "encoded" > "$last"'


def test_command_for_mp3():
    cmd = FFmpegTranscoder("/opt/ffmpeg/bin/ffmpeg").build_command(
        Path("in.wav"), Path("out.mp3"), map_options(OutputFormat.MP3)
    )
    assert cmd == [
        "/opt/ffmpeg/bin/ffmpeg", "-hide_banner", "-nostdin", "-y",
        "-i", "in.wav",
        "-vn",
        "-acodec", "libmp3lame",
        "-b:a", "192k",
        "-f", "mp3", "out.mp3",
    ]


def test_command_without_bitrate():
    cmd = FFmpegTranscoder().build_command(Path("in.mp4"), Path("out.wav"), map_options(OutputFormat.WAV))
    assert "-b:a" not in cmd
    assert cmd[0] == "ffmpeg"
    assert cmd[-3:] == ["-f", "wav", "out.wav"]


def test_command_places_extra_flags_before_output():
    cmd = FFmpegTranscoder().build_command(Path("in.mov"), Path("out.m4a"), map_options(OutputFormat.M4A))
    assert cmd[-5:] == ["-strict", "experimental", "-f", "ipod", "out.m4a"]


def test_zero_timeout_means_unlimited():
    assert FFmpegTranscoder(timeout=0).timeout is None
    assert FFmpegTranscoder(timeout=12.5).timeout == 12.5


@posix_only
def test_success_writes_output(tmp_path):
    transcoder = FFmpegTranscoder(fake_ffmpeg(tmp_path, WRITES_LAST_ARG))
    out = tmp_path / "out.mp3"
    outcome = asyncio.run(transcoder.run(tmp_path / "in.wav", out, map_options(OutputFormat.MP3)))
    assert outcome.ok
    assert out.read_bytes() == b"encoded"


@posix_only
def test_non_zero_exit_carries_stderr(tmp_path):
    body = 'echo "banner line" >&2\necho "in.wav: Invalid data found when processing input" >&2\nexit 1'
    transcoder = FFmpegTranscoder(fake_ffmpeg(tmp_path, body))
    outcome = asyncio.run(transcoder.run(tmp_path / "in.wav", tmp_path / "out.mp3", map_options(OutputFormat.MP3)))
    assert not outcome.ok
    assert "exited with code 1" in outcome.message
    assert "Invalid data found when processing input" in outcome.message


@posix_only
def test_failure_without_stderr_still_has_message(tmp_path):
    transcoder = FFmpegTranscoder(fake_ffmpeg(tmp_path, "exit 3"))
    outcome = asyncio.run(transcoder.run(tmp_path / "in.wav", tmp_path / "out.ogg", map_options(OutputFormat.OGG)))
    assert not outcome.ok
    assert "code 3" in outcome.message


def test_missing_executable_is_a_failed_outcome(tmp_path):
    transcoder = FFmpegTranscoder(str(tmp_path / "no-such-ffmpeg"))
    outcome = asyncio.run(transcoder.run(tmp_path / "in.wav", tmp_path / "out.mp3", map_options(OutputFormat.MP3)))
    assert not outcome.ok
    assert "not found" in outcome.message


@posix_only
def test_timeout_kills_process(tmp_path):
    transcoder = FFmpegTranscoder(fake_ffmpeg(tmp_path, "exec sleep 30"), timeout=0.3)
    outcome = asyncio.run(transcoder.run(tmp_path / "in.wav", tmp_path / "out.mp3", map_options(OutputFormat.MP3)))
    assert not outcome.ok
    assert "timed out" in outcome.message


@posix_only
def test_cancellation_propagates(tmp_path):
    transcoder = FFmpegTranscoder(fake_ffmpeg(tmp_path, "exec sleep 30"))

    async def scenario():
        task = asyncio.create_task(
            transcoder.run(tmp_path / "in.wav", tmp_path / "out.mp3", map_options(OutputFormat.MP3))
        )
        await asyncio.sleep(0.3)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await asyncio.wait_for(task, timeout=5)

    asyncio.run(scenario())


@pytest.mark.skipif(shutil.which("ffmpeg") is None, reason="ffmpeg not installed")
@pytest.mark.parametrize("fmt", list(OutputFormat))
def test_real_ffmpeg_converts_wav(tmp_path, fmt):
    source = tmp_path / "tone.wav"
    subprocess.run(
        ["ffmpeg", "-y", "-f", "lavfi", "-i", "sine=frequency=440:duration=1", str(source)],
        check=True,
        capture_output=True,
    )
    out = tmp_path / f"tone.{fmt.value}"
    outcome = asyncio.run(FFmpegTranscoder("ffmpeg", timeout=60).run(source, out, map_options(fmt)))
    if not outcome.ok and "Unknown encoder" in outcome.message:
        pytest.skip(f"ffmpeg build lacks encoder for {fmt.value}")
    assert outcome.ok, outcome.message
    assert out.stat().st_size > 0


def test_options_are_plain_values():
    options = EncodingOptions("mp3", "libmp3lame", "192k")
    assert options.extra_flags == ()
