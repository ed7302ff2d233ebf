#!/usr/bin/env python3
"""
binary_clock.py: wall-clock time as binary-coded-decimal digit pairs.

Idea (summary):
- Each of hours/minutes/seconds is split into a tens digit and a units digit
  (BCD split), e.g. 14 -> (1, 4).
- Tens digits are encoded on 3 bits (hours tens never exceed 2, minutes and
  seconds tens never exceed 5), units digits on 4 bits (0..9).
  The widths are fixed: the JSON wire format depends on them.
- The six digits plus the capture timestamp form an immutable ClockState that
  any number of renderers can consume (see display_registry.py).

Failures are raised as BinaryClockError subclasses (see bc_model.py), so a
legitimate zero is never confused with an error.

CLI:
  python3 binary_clock.py --display=binary
  python3 binary_clock.py --display=json --time 14:30:45
"""

from __future__ import annotations

import time
from typing import Protocol

from bc_model import (
    MAX_BIT_COUNT,
    MAX_HOURS,
    MAX_MINUTES,
    MAX_SECONDS,
    MIN_BIT_COUNT,
    TENS_BITS,
    UNITS_BITS,
    BinaryDigit,
    ClockState,
    InvalidBitCountError,
    InvalidTimeError,
    MissingInputError,
    SystemTimeError,
    TimeComponents,
)

__version__ = "1.0.0"


def get_version() -> str:
    return __version__


# --- Clock source -----------------------------------------------------------


class ClockSource(Protocol):
    """Where the current time comes from.

    Core functions depend on this interface rather than calling the time
    module directly, so tests can inject a fixed or failing clock.
    """

    def current_time(self) -> TimeComponents:
        """Return local hours/minutes/seconds; raise SystemTimeError on failure."""

    def timestamp(self) -> int:
        """Return Unix seconds; raise SystemTimeError on failure."""


class SystemClock:
    """Production clock backed by time.time() and time.localtime()."""

    def current_time(self) -> TimeComponents:
        try:
            tm = time.localtime(time.time())
        except (OSError, OverflowError, ValueError) as e:
            raise SystemTimeError(f"System time retrieval failed: {e}") from e
        return TimeComponents(hours=tm.tm_hour, minutes=tm.tm_min, seconds=tm.tm_sec)

    def timestamp(self) -> int:
        try:
            return int(time.time())
        except (OSError, OverflowError, ValueError) as e:
            raise SystemTimeError(f"System time retrieval failed: {e}") from e


SYSTEM_CLOCK = SystemClock()


# --- Binary conversion ------------------------------------------------------


def convert_to_binary(value: int, bit_count: int) -> BinaryDigit:
    """Encode value on bit_count bits, MSB first.

    Values that do not fit are truncated to the low bit_count bits
    (silent wraparound, not an error): convert_to_binary(10, 3) encodes 2.
    """
    if not (MIN_BIT_COUNT <= bit_count <= MAX_BIT_COUNT):
        raise InvalidBitCountError(f"bit_count={bit_count} out of range [{MIN_BIT_COUNT}..{MAX_BIT_COUNT}]")

    mask = (1 << bit_count) - 1
    v = int(value) & mask
    bits = tuple(bool((v >> (bit_count - 1 - i)) & 1) for i in range(bit_count))
    return BinaryDigit(bit_count=bit_count, bits=bits, decimal_value=v)


def convert_from_binary(digit: BinaryDigit | None) -> int:
    """Decode a BinaryDigit back to its integer value."""
    if digit is None:
        raise MissingInputError("convert_from_binary: digit is None")

    out = 0
    for i in range(digit.bit_count):
        if digit.bits[i]:
            out |= 1 << (digit.bit_count - 1 - i)
    return out


# --- Decomposition ----------------------------------------------------------


def _check_field(name: str, value: object, max_value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidTimeError(f"{name} must be an int, got {type(value).__name__}")
    if not (0 <= value <= max_value):
        raise InvalidTimeError(f"{name}={value} out of range [0..{max_value}]")
    return value


def _split(value: int) -> tuple[BinaryDigit, BinaryDigit]:
    return convert_to_binary(value // 10, TENS_BITS), convert_to_binary(value % 10, UNITS_BITS)


def decompose_time(time_components: TimeComponents | None, *, clock: ClockSource | None = None) -> ClockState:
    """
    Split hours/minutes/seconds into BCD digit pairs.

    The timestamp is read from `clock` when the conversion runs: for an
    arbitrary caller-supplied time it records *when* the conversion happened,
    not the time encoded in the digits.
    """
    if time_components is None:
        raise MissingInputError("decompose_time: time_components is None")

    h = _check_field("hours", time_components.hours, MAX_HOURS)
    m = _check_field("minutes", time_components.minutes, MAX_MINUTES)
    s = _check_field("seconds", time_components.seconds, MAX_SECONDS)

    src = SYSTEM_CLOCK if clock is None else clock
    h_tens, h_units = _split(h)
    m_tens, m_units = _split(m)
    s_tens, s_units = _split(s)

    return ClockState(
        hours_tens=h_tens,
        hours_units=h_units,
        minutes_tens=m_tens,
        minutes_units=m_units,
        seconds_tens=s_tens,
        seconds_units=s_units,
        timestamp=src.timestamp(),
    )


def get_current_time(*, clock: ClockSource | None = None) -> TimeComponents:
    src = SYSTEM_CLOCK if clock is None else clock
    return src.current_time()


def get_current_state(*, clock: ClockSource | None = None) -> ClockState:
    """Current time as a ClockState. Raises SystemTimeError if the clock fails."""
    src = SYSTEM_CLOCK if clock is None else clock
    tc = get_current_time(clock=src)
    return decompose_time(tc, clock=src)


__all__ = [
    "__version__",
    "get_version",
    "ClockSource",
    "SystemClock",
    "SYSTEM_CLOCK",
    "convert_to_binary",
    "convert_from_binary",
    "decompose_time",
    "get_current_time",
    "get_current_state",
]


if __name__ == "__main__":
    from cli import main

    raise SystemExit(main())
