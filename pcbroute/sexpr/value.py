"""Scalar leaf values of the S-expression tree.

A value is one of ``None``, ``int``, ``float`` or ``str``. Tokens are
disambiguated in that order of preference: integer first, then float,
then string. An empty bare token has no value at all; a quoted ``""`` is
the empty string.
"""

import math
import re
from typing import Union

Value = Union[None, int, float, str]

_INT_RE = re.compile(r"[+-]?\d+\Z")
_FLOAT_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?\Z")

# Characters that force a string to be quoted when rendered
_NEEDS_QUOTES = re.compile(r'[\s()"\\]')


def turn_to_value(token: str, quoted: bool = False) -> Value:
    """Convert a raw token into a typed value.

    Surrounding whitespace is stripped from bare tokens. Quoted tokens keep
    their content verbatim, so ``""`` is the empty string rather than no
    value. Literals that overflow to infinity stay strings.

    Args:
        token: Raw token text (already unquoted)
        quoted: True if the token came from a string literal

    Returns:
        ``int``, ``float``, ``str``, or ``None`` for an empty bare token
    """
    trimmed = token if quoted else token.strip()

    if _INT_RE.match(trimmed):
        return int(trimmed)

    if _FLOAT_RE.match(trimmed):
        number = float(trimmed)
        if math.isfinite(number):
            return number
        return trimmed

    if trimmed or quoted:
        return trimmed

    return None


def value_as_string(value: Value) -> str:
    """Plain rendered form of a value (no quoting)."""
    if value is None:
        return ""
    if isinstance(value, float):
        return repr(value)
    return str(value)


def render_value(value: Value) -> str:
    """Render a value so that tokenizing it again yields the same value.

    Empty strings, and strings containing whitespace, parentheses, quotes
    or backslashes, are quoted and escaped. Numbers render with ``repr`` so floats keep their
    fractional part and integers stay integers.
    """
    text = value_as_string(value)
    if isinstance(value, str) and (not text or _NEEDS_QUOTES.search(text)):
        escaped = text.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return text


def same_value(a: Value, b: Value) -> bool:
    """Type-strict equality: ``1`` and ``1.0`` are different values."""
    return type(a) is type(b) and a == b


def as_number(value: Value):
    """Return value as float if it is numeric, else None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    return None
