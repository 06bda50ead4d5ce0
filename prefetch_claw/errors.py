"""
Prefetch Decode Errors
======================

Closed set of failures the prefetch decoder can report. Every error carries
an ErrorKind so callers can branch on the failure category instead of
inspecting message text.

Author: Ghassan Elsman
Version: 1.0
"""

import enum
from typing import Optional


class ErrorKind(enum.Enum):
    """Failure categories of a prefetch decode."""
    UNSUPPORTED_VERSION = "unsupported_version"
    MALFORMED_SIGNATURE = "malformed_signature"
    TRUNCATED = "truncated"
    IO_ERROR = "io_error"
    INVALID_TIMESTAMP = "invalid_timestamp"
    INVALID_STRING_ENCODING = "invalid_string_encoding"


class PrefetchError(Exception):
    """Base exception for prefetch decode errors."""

    kind = ErrorKind.IO_ERROR

    def __init__(self, message: str, details: Optional[str] = None,
                 offset: Optional[int] = None):
        """
        Initialize prefetch error.

        Args:
            message: Short description of the failure
            details: Technical details for logging
            offset: Byte position in the source where the failure was detected
        """
        super().__init__(message)
        self.message = message
        self.offset = offset

        if details is None:
            details = message
            if offset is not None:
                details = f"{message} (at offset 0x{offset:X})"
        self.details = details


class UnsupportedVersionError(PrefetchError):
    """Version code is unknown, or known but not decodable (compressed Windows 10)."""
    kind = ErrorKind.UNSUPPORTED_VERSION

    def __init__(self, message: str, version_code: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.version_code = version_code


class MalformedSignatureError(PrefetchError):
    kind = ErrorKind.MALFORMED_SIGNATURE


class TruncatedError(PrefetchError):
    """Short read or seek beyond the end of the source."""
    kind = ErrorKind.TRUNCATED


class PrefetchIOError(PrefetchError):
    """Underlying stream failure."""
    kind = ErrorKind.IO_ERROR

    def __init__(self, message: str, original_error: Optional[Exception] = None, **kwargs):
        if original_error is not None and 'details' not in kwargs:
            kwargs['details'] = f"{message}\nOriginal error: {original_error}"
        super().__init__(message, **kwargs)
        self.original_error = original_error


class InvalidTimestampError(PrefetchError):
    """FILETIME value outside the representable datetime range."""
    kind = ErrorKind.INVALID_TIMESTAMP

    def __init__(self, message: str, raw_value: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.raw_value = raw_value


class InvalidStringEncodingError(PrefetchError):
    kind = ErrorKind.INVALID_STRING_ENCODING
