#!/usr/bin/env python3
"""
FNPROTECT DURATIONS
-------------------
Parses Go-style duration strings ("300ms", "1h15m", "-1.5h") for the
cacheTTL input, and renders durations the way protobuf JSON does ("60s").

Author: FnProtect Team
Date: 2026-10-18
"""

import re
from datetime import timedelta
from decimal import Decimal

# Unit -> nanoseconds
UNITS = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,   # U+00B5 micro sign
    "μs": 1_000,   # U+03BC greek mu
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 60 * 60 * 1_000_000_000,
}

MAX_NANOSECONDS = 2 ** 63 - 1

# Group 1: decimal number, Group 2: unit
_COMPONENT = re.compile(r'([0-9]*(?:\.[0-9]*)?)([^0-9.]*)')


def parse_duration(text: str) -> timedelta:
    """
    Parses a duration string the way Go's time.ParseDuration does.

    Raises:
        ValueError: with Go's error text, e.g.
            time: unknown unit "x" in duration "5x"
    """
    original = text
    negative = False
    if text and text[0] in "+-":
        negative = text[0] == "-"
        text = text[1:]

    if text == "0":
        return timedelta(0)
    if not text:
        raise ValueError(f'time: invalid duration "{original}"')

    total = Decimal(0)
    while text:
        match = _COMPONENT.match(text)
        number, unit = match.group(1), match.group(2)
        if number in ("", "."):
            raise ValueError(f'time: invalid duration "{original}"')
        if not unit:
            raise ValueError(f'time: missing unit in duration "{original}"')
        if unit not in UNITS:
            raise ValueError(f'time: unknown unit "{unit}" in duration "{original}"')

        total += Decimal(number) * UNITS[unit]
        if total > MAX_NANOSECONDS:
            raise ValueError(f'time: invalid duration "{original}"')
        text = text[match.end():]

    microseconds = int(total) // 1000
    return timedelta(microseconds=-microseconds if negative else microseconds)


def format_duration(value: timedelta) -> str:
    """Renders a duration as protobuf JSON text: 60s, 0.500s, 1.000001s."""
    total_us = value // timedelta(microseconds=1)
    sign = "-" if total_us < 0 else ""
    seconds, micros = divmod(abs(total_us), 1_000_000)
    if micros == 0:
        return f"{sign}{seconds}s"
    if micros % 1000 == 0:
        return f"{sign}{seconds}.{micros // 1000:03d}s"
    return f"{sign}{seconds}.{micros:06d}s"
