"""Output format -> ffmpeg encoding parameters and response content types."""
from audio_converter.conversion.models import EncodingOptions, OutputFormat

# The native aac encoder sits behind "-strict experimental" on older ffmpeg builds
_EXPERIMENTAL = ("-strict", "experimental")

ENCODING_OPTIONS: dict[OutputFormat, EncodingOptions] = {
    OutputFormat.MP3: EncodingOptions("mp3", "libmp3lame", "192k"),
    OutputFormat.WAV: EncodingOptions("wav", "pcm_s16le"),
    # Raw AAC stream with ADTS headers
    OutputFormat.AAC: EncodingOptions("adts", "aac", "192k", _EXPERIMENTAL),
    # MP4 container flavoured for audio
    OutputFormat.M4A: EncodingOptions("ipod", "aac", "192k", _EXPERIMENTAL),
    OutputFormat.OGG: EncodingOptions("ogg", "libvorbis", "192k"),
    OutputFormat.FLAC: EncodingOptions("flac", "flac"),
}

CONTENT_TYPES: dict[OutputFormat, str] = {
    OutputFormat.MP3: "audio/mpeg",
    OutputFormat.WAV: "audio/wav",
    OutputFormat.AAC: "audio/aac",
    OutputFormat.M4A: "audio/mp4",
    OutputFormat.OGG: "audio/ogg",
    OutputFormat.FLAC: "audio/flac",
}


def map_options(fmt: OutputFormat) -> EncodingOptions:
    return ENCODING_OPTIONS[OutputFormat(fmt)]


def content_type_for(fmt: OutputFormat) -> str:
    return CONTENT_TYPES[OutputFormat(fmt)]
