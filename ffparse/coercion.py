"""
Numeric and duration coercion for ffmpeg text fields.

Two families of helpers live here:

- parse_int / parse_long / parse_float: tolerant "parse or None" helpers
  for optional fields. They accept surrounding whitespace, a leading or
  trailing sign, parenthesised negatives, thousands separators and an
  exponent, using the separators of the configured NumberFormat.
- parse_invariant_float / parse_large_duration: fixed period-decimal
  parsing, without exponents, for values ffmpeg prints the same way on
  every host.

None of these raise on bad text. Failure is None, or (False, zero) for
the duration parser.
"""

import math
import re
from datetime import timedelta
from decimal import Decimal, InvalidOperation
from typing import Optional

from .settings import INVARIANT_NUMBER_FORMAT, NumberFormat, get_settings


INT32_MIN, INT32_MAX = -(2 ** 31), 2 ** 31 - 1
INT64_MIN, INT64_MAX = -(2 ** 63), 2 ** 63 - 1

# Digits with an optional fraction and exponent, separators already normalised
_PLAIN_NUMBER = re.compile(r'^(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?$')

# Same, without an exponent: how ffmpeg writes seconds and frame rates
_FIXED_POINT_NUMBER = re.compile(r'^(?:[0-9]+\.?[0-9]*|\.[0-9]+)$')

# Whole number with optional leading sign, as used for hours and minutes
_PLAIN_INTEGER = re.compile(r'^\s*[+-]?[0-9]+\s*$')


def _parse_decimal(
    text: Optional[str],
    number_format: NumberFormat,
    pattern: "re.Pattern[str]" = _PLAIN_NUMBER,
) -> Optional[Decimal]:
    """
    Normalise a numeric string and convert it to Decimal.

    Returns:
        Decimal value, or None if the text is not a number
    """
    if text is None:
        return None

    s = text.strip()
    if not s:
        return None

    negative = False

    if s.startswith("(") and s.endswith(")"):
        negative = True
        s = s[1:-1].strip()
    elif s[0] in "+-":
        negative = s[0] == "-"
        s = s[1:].lstrip()
    elif s[-1] in "+-":
        negative = s[-1] == "-"
        s = s[:-1].rstrip()

    if not s:
        return None

    integral, point, fraction = s.partition(number_format.decimal_point)
    if number_format.thousands_sep:
        # Group separators are only meaningful before the decimal point
        if integral.startswith(number_format.thousands_sep):
            return None
        integral = integral.replace(number_format.thousands_sep, "")
    s = integral + ("." if point else "") + fraction

    if not pattern.match(s):
        return None

    try:
        value = Decimal(s)
    except InvalidOperation:
        return None

    return -value if negative else value


def _to_integer(value: Optional[Decimal], low: int, high: int) -> Optional[int]:
    if value is None:
        return None
    if value != value.to_integral_value():
        return None
    result = int(value)
    if result < low or result > high:
        return None
    return result


def _to_float(value: Optional[Decimal]) -> Optional[float]:
    if value is None:
        return None
    result = float(value)
    if not math.isfinite(result):
        return None
    return result


def parse_int(text: Optional[str], number_format: Optional[NumberFormat] = None) -> Optional[int]:
    """
    Parse a 32-bit integer, or return None.

    A decimal point is accepted only when the fraction is zero.
    """
    number_format = number_format or get_settings().number_format
    return _to_integer(_parse_decimal(text, number_format), INT32_MIN, INT32_MAX)


def parse_long(text: Optional[str], number_format: Optional[NumberFormat] = None) -> Optional[int]:
    """Parse a 64-bit integer, or return None."""
    number_format = number_format or get_settings().number_format
    return _to_integer(_parse_decimal(text, number_format), INT64_MIN, INT64_MAX)


def parse_float(text: Optional[str], number_format: Optional[NumberFormat] = None) -> Optional[float]:
    """Parse a finite real number, or return None."""
    number_format = number_format or get_settings().number_format
    return _to_float(_parse_decimal(text, number_format))


def parse_invariant_float(text: Optional[str]) -> Optional[float]:
    """
    Parse a period-decimal real number, or return None.

    Ignores the configured number locale and rejects exponents.
    """
    return _to_float(_parse_decimal(text, INVARIANT_NUMBER_FORMAT, _FIXED_POINT_NUMBER))


def _parse_invariant_int(text: str) -> Optional[int]:
    if not _PLAIN_INTEGER.match(text):
        return None
    value = int(text.strip())
    if value < INT32_MIN or value > INT32_MAX:
        return None
    return value


def parse_large_duration(text: Optional[str]) -> tuple[bool, timedelta]:
    """
    Parse an ffmpeg duration of the form H:MM:SS.ss.

    There is no day component and hours may exceed 23. Seconds are
    period-decimal regardless of host locale. The result is rounded to
    the nearest millisecond.

    Args:
        text: Duration text, e.g. "01:02:03.45" or "25:00:00.00"

    Returns:
        Tuple of (success, duration); duration is zero on failure
    """
    zero = timedelta(0)

    if text is None:
        return False, zero

    hours_text, sep, rest = text.partition(":")
    if not sep:
        return False, zero
    hours = _parse_invariant_int(hours_text)
    if hours is None:
        return False, zero

    minutes_text, sep, seconds_text = rest.partition(":")
    if not sep:
        return False, zero
    minutes = _parse_invariant_int(minutes_text)
    if minutes is None:
        return False, zero

    seconds = parse_invariant_float(seconds_text)
    if seconds is None:
        return False, zero

    try:
        duration = timedelta(
            hours=hours,
            minutes=minutes,
            milliseconds=round(seconds * 1000.0),
        )
    except OverflowError:
        return False, zero

    return True, duration
