"""Loose conversion of values to floats and small list helpers."""

from __future__ import annotations

import math
from collections.abc import Iterable


def _parse_float_text(text: str) -> float:
    if text != text.strip() or "_" in text:
        raise ValueError(f"invalid float: {text!r}")
    try:
        number = float(text)
    except ValueError:
        lowered = text.lower().lstrip("+-")
        if lowered.startswith("0x") and "p" in lowered:
            number = float.fromhex(text)
        else:
            raise
    if math.isinf(number) and "inf" not in text.lower():
        raise ValueError(f"float out of range: {text!r}")
    return number


def to_float(value) -> float:
    """Convert a number, a numeric string or bytes to a float.

    Raises ValueError for text that is not a number and TypeError for
    values that cannot be converted at all.
    """
    if isinstance(value, bool):
        raise TypeError(f"Can't convert {type(value).__name__} to float64")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        return _parse_float_text(value)
    if isinstance(value, (bytes, bytearray)):
        return _parse_float_text(bytes(value).decode("utf-8", errors="replace"))
    if hasattr(value, "__float__"):
        return float(value)
    raise TypeError(f"Can't convert {type(value).__name__} to float64")


def to_float_numeric(value) -> float:
    """Convert only genuine numbers to a float; anything else raises TypeError."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"Can't convert {type(value).__name__} to float64")
    return float(value)


def missing_items(current: Iterable, old: Iterable) -> list:
    """Return the items of ``old`` that are not in ``current``, in order."""
    present = list(current)
    return [item for item in old if item not in present]