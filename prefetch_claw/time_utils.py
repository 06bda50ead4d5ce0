"""
Time format conversion utilities for forensic analysis.

This module converts between Windows FILETIME values and UTC datetime objects.
FILETIME counts 100-nanosecond intervals since 1601-01-01 UTC; Python datetimes
carry microseconds, so the last decimal digit of a FILETIME is dropped.
"""

import datetime

from .errors import InvalidTimestampError

# Windows FILETIME epoch (January 1, 1601)
WINDOWS_EPOCH = datetime.datetime(1601, 1, 1, 0, 0, 0, tzinfo=datetime.timezone.utc)

# Constants for time conversions
HUNDRED_NANOSECONDS = 10000000  # 10^7 (100ns per second)
TICKS_PER_MICROSECOND = 10

MAX_FILETIME = 0xFFFFFFFFFFFFFFFF


def filetime_to_datetime(filetime: int) -> datetime.datetime:
    """
    Convert Windows FILETIME (64-bit) to UTC datetime.

    A value of 0 is the FILETIME epoch itself and decodes to 1601-01-01 UTC.

    Args:
        filetime: Windows FILETIME as 64-bit integer (100-nanosecond intervals since 1601-01-01)

    Returns:
        datetime: UTC datetime object

    Raises:
        InvalidTimestampError: If the value is negative, wider than 64 bits, or
            falls after datetime.MAXYEAR
    """
    if filetime < 0 or filetime > MAX_FILETIME:
        raise InvalidTimestampError(f"FILETIME out of 64-bit range: {filetime}", raw_value=filetime)

    try:
        return WINDOWS_EPOCH + datetime.timedelta(microseconds=filetime // TICKS_PER_MICROSECOND)
    except OverflowError as e:
        raise InvalidTimestampError(
            f"FILETIME 0x{filetime:016X} is outside the representable date range",
            raw_value=filetime,
        ) from e


def datetime_to_filetime(dt: datetime.datetime) -> int:
    """
    Convert UTC datetime to Windows FILETIME (64-bit).

    Args:
        dt: datetime object (naive values are assumed to be UTC)

    Returns:
        int: Windows FILETIME as 64-bit integer
    """
    if not dt.tzinfo:
        dt = dt.replace(tzinfo=datetime.timezone.utc)

    delta = dt - WINDOWS_EPOCH
    return (delta.days * 86400 + delta.seconds) * HUNDRED_NANOSECONDS + delta.microseconds * TICKS_PER_MICROSECOND
