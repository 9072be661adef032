"""Conversion errors. Each carries the HTTP status it maps to."""


class ConversionError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ConversionError):
    """Client-fixable problem with the request; raised before any file is written."""

    status_code = 400


class MissingFileError(ValidationError):
    status_code = 400


class UnsupportedFormatError(ValidationError):
    status_code = 400


class TooLargeError(ValidationError):
    status_code = 413


class UnsupportedInputTypeError(ValidationError):
    status_code = 415


class TranscodeError(ConversionError):
    """ffmpeg did not produce an output file."""

    status_code = 500
