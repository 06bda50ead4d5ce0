"""
Windows Prefetch (.pf) decoder for forensic timeline work.
Includes the decoder, error types, reporting helpers and a batch SQLite collector.
"""

from .errors import (ErrorKind, PrefetchError, UnsupportedVersionError, MalformedSignatureError,
                     TruncatedError, PrefetchIOError, InvalidTimestampError, InvalidStringEncodingError)
from .versions import Version, ExecutionLayout, LAYOUTS
from .byte_source import ByteSource, StreamSource
from .structures import Header, ExecutionInfo, VolumeInfo
from .prefetch import Prefetch, PrefetchDecoder, DecodeState

__version__ = "1.0.0"

__all__ = [
    'ErrorKind',
    'PrefetchError',
    'UnsupportedVersionError',
    'MalformedSignatureError',
    'TruncatedError',
    'PrefetchIOError',
    'InvalidTimestampError',
    'InvalidStringEncodingError',
    'Version',
    'ExecutionLayout',
    'LAYOUTS',
    'ByteSource',
    'StreamSource',
    'Header',
    'ExecutionInfo',
    'VolumeInfo',
    'Prefetch',
    'PrefetchDecoder',
    'DecodeState',
]
