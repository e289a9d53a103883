"""Text rendering helpers shared by the value model and the config facade.

JSON strings are written compactly with HTML escaping disabled, floats are
rendered in shortest round-trip scientific notation for their precision, and
durations use the familiar ``1h2m3.5s`` unit-abbreviation form.
"""

import json
import math
from typing import Any

import numpy as np

_NANOS_PER_MICRO = 1_000
_NANOS_PER_MILLI = 1_000_000
_NANOS_PER_SECOND = 1_000_000_000


def json_marshal(obj: Any) -> str:
    """Encode an object as compact JSON text.

    ``&``, ``<`` and ``>`` are emitted literally and non-ASCII text is kept
    as-is; only the line and paragraph separators are escaped, since they
    are not valid inside JavaScript string literals.

    Args:
        obj: JSON-compatible Python object

    Returns:
        JSON text without insignificant whitespace

    Example:
        >>> json_marshal('a "quoted" <tag> & more')
        '"a \\\\"quoted\\\\" <tag> & more"'
    """
    text = json.dumps(obj, ensure_ascii=False, separators=(",", ":"))
    return text.replace("\u2028", "\\u2028").replace("\u2029", "\\u2029")


def canonical_json(json_text: str) -> str:
    """Re-encode JSON text with sorted keys and no whitespace.

    Args:
        json_text: Valid JSON text

    Returns:
        Canonical JSON text
    """
    data = json.loads(json_text)
    text = json.dumps(data, ensure_ascii=False, separators=(",", ":"), sort_keys=True)
    return text.replace("\u2028", "\\u2028").replace("\u2029", "\\u2029")


def format_float(value: float, bits: int = 64) -> str:
    """Render a float in scientific notation with the fewest round-trip digits.

    Args:
        value: Floating point magnitude
        bits: Precision to round-trip at, 32 or 64

    Returns:
        Text such as ``2.4e+00`` or ``1e+02``
    """
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    scalar = np.float32(value) if bits == 32 else np.float64(value)
    return np.format_float_scientific(scalar, unique=True, trim="-", exp_digits=2)


def _split_fraction(value: int, precision: int) -> tuple[int, str]:
    scale = 10**precision
    whole, fraction = divmod(value, scale)
    digits = f"{fraction:0{precision}d}".rstrip("0")
    return whole, f".{digits}" if digits else ""


def format_duration(nanoseconds: int) -> str:
    """Render a nanosecond span using unit abbreviations.

    Spans under a second use the largest of ``ns``, ``µs`` and ``ms`` that
    keeps a leading non-zero digit; longer spans are written as hours,
    minutes and fractional seconds with leading zero units omitted.

    Example:
        >>> format_duration(5_000_000_000)
        '5s'
        >>> format_duration(3_600_000_000_000)
        '1h0m0s'
        >>> format_duration(1_500_000)
        '1.5ms'
    """
    if nanoseconds == 0:
        return "0s"
    sign = "-" if nanoseconds < 0 else ""
    magnitude = abs(nanoseconds)

    if magnitude < _NANOS_PER_MICRO:
        return f"{sign}{magnitude}ns"
    if magnitude < _NANOS_PER_MILLI:
        whole, fraction = _split_fraction(magnitude, 3)
        return f"{sign}{whole}{fraction}\u00b5s"
    if magnitude < _NANOS_PER_SECOND:
        whole, fraction = _split_fraction(magnitude, 6)
        return f"{sign}{whole}{fraction}ms"

    total_seconds, fraction = _split_fraction(magnitude, 9)
    total_minutes, seconds = divmod(total_seconds, 60)
    hours, minutes = divmod(total_minutes, 60)

    text = f"{seconds}{fraction}s"
    if total_minutes:
        text = f"{minutes}m{text}"
    if hours:
        text = f"{hours}h{text}"
    return sign + text


def duration_milliseconds(nanoseconds: int) -> int:
    """Whole milliseconds in a nanosecond span, truncated toward zero."""
    millis = abs(nanoseconds) // _NANOS_PER_MILLI
    return -millis if nanoseconds < 0 else millis


__all__ = [
    "json_marshal",
    "canonical_json",
    "format_float",
    "format_duration",
    "duration_milliseconds",
]
