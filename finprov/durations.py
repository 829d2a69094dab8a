"""Parsing and formatting of durations such as ``1m30s`` or ``1.5h``."""

from __future__ import annotations

import re
from datetime import timedelta

_NANOSECOND = 1
_MICROSECOND = 1000 * _NANOSECOND
_MILLISECOND = 1000 * _MICROSECOND
_SECOND = 1000 * _MILLISECOND
_MINUTE = 60 * _SECOND
_HOUR = 60 * _MINUTE

_UNITS = {
    "ns": _NANOSECOND,
    "us": _MICROSECOND,
    "\u00b5s": _MICROSECOND,
    "\u03bcs": _MICROSECOND,
    "ms": _MILLISECOND,
    "s": _SECOND,
    "m": _MINUTE,
    "h": _HOUR,
}

_NUMBER = re.compile(r"(\d*)(?:\.(\d*))?")
_UNIT = re.compile(r"[^0-9.]*")
_MAX_NANOS = (1 << 63) - 1


def _to_nanos(delta: timedelta) -> int:
    return (delta.days * 86400 + delta.seconds) * _SECOND + delta.microseconds * _MICROSECOND


def parse_duration(text: str) -> timedelta:
    """Parse a signed sequence of decimal numbers, each with a unit suffix."""
    rest = text
    negative = False
    if rest[:1] in ("-", "+"):
        negative = rest[0] == "-"
        rest = rest[1:]
    if rest == "0":
        return timedelta(0)
    if not rest:
        raise ValueError(f'invalid duration "{text}"')

    total = 0
    position = 0
    while position < len(rest):
        number = _NUMBER.match(rest, position)
        whole, fraction = number.group(1), number.group(2)
        if not whole and not fraction:
            raise ValueError(f'invalid duration "{text}"')
        position = number.end()

        unit_match = _UNIT.match(rest, position)
        unit = unit_match.group()
        position = unit_match.end()
        if not unit:
            raise ValueError(f'missing unit in duration "{text}"')
        try:
            scale = _UNITS[unit]
        except KeyError:
            raise ValueError(f'unknown unit "{unit}" in duration "{text}"') from None

        value = int(whole or "0") * scale
        if fraction:
            value += int(fraction) * scale // 10 ** len(fraction)
        total += value

    limit = _MAX_NANOS + 1 if negative else _MAX_NANOS
    if total > limit:
        raise ValueError(f'invalid duration "{text}"')

    micros = total // _MICROSECOND
    return timedelta(microseconds=-micros if negative else micros)


def _with_fraction(value: int, unit: int) -> str:
    whole, fraction = divmod(value, unit)
    if not fraction:
        return str(whole)
    digits = len(str(unit)) - 1
    return f"{whole}.{str(fraction).zfill(digits).rstrip('0')}"


def format_duration(delta: timedelta) -> str:
    """Format ``delta`` in the ``72h3m0.5s`` style accepted by parse_duration."""
    nanos = _to_nanos(delta)
    if nanos == 0:
        return "0s"
    sign = "-" if nanos < 0 else ""
    nanos = abs(nanos)

    if nanos < _SECOND:
        if nanos < _MICROSECOND:
            return f"{sign}{nanos}ns"
        if nanos < _MILLISECOND:
            return f"{sign}{_with_fraction(nanos, _MICROSECOND)}\u00b5s"
        return f"{sign}{_with_fraction(nanos, _MILLISECOND)}ms"

    hours, remainder = divmod(nanos, _HOUR)
    minutes, remainder = divmod(remainder, _MINUTE)
    seconds = f"{_with_fraction(remainder, _SECOND)}s"
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}"
    if minutes:
        return f"{sign}{minutes}m{seconds}"
    return f"{sign}{seconds}"