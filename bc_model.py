"""Binary clock core data model (renderer-agnostic).

This module contains only the value types shared by the decomposer, the
display registry and the renderers, plus the error types they raise.
No I/O lives here.
"""

from __future__ import annotations

from dataclasses import dataclass

# bit widths are part of the JSON wire format
MIN_BIT_COUNT = 1
MAX_BIT_COUNT = 6
TENS_BITS = 3
UNITS_BITS = 4

MAX_HOURS = 23
MAX_MINUTES = 59
MAX_SECONDS = 59

# error codes
ERR_INVALID_TIME = 1
ERR_INVALID_BIT_COUNT = 2
ERR_MISSING_INPUT = 3
ERR_SYSTEM_TIME = 4
ERR_REGISTRY_FULL = 5
ERR_INVALID_RENDERER = 6
ERR_UNKNOWN_REGISTRATION = 7

_ERROR_MESSAGES: dict[int, str] = {
    ERR_INVALID_TIME: "Invalid time components provided",
    ERR_INVALID_BIT_COUNT: f"Bit count out of valid range ({MIN_BIT_COUNT}-{MAX_BIT_COUNT})",
    ERR_MISSING_INPUT: "Missing input where a value is required",
    ERR_SYSTEM_TIME: "System time retrieval failed",
    ERR_REGISTRY_FULL: "Display registry is full",
    ERR_INVALID_RENDERER: "Renderer must be callable or expose render()",
    ERR_UNKNOWN_REGISTRATION: "No active display registration with that id",
}


class BinaryClockError(ValueError):
    code = 0

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or error_string(self.code))


class InvalidTimeError(BinaryClockError):
    code = ERR_INVALID_TIME


class InvalidBitCountError(BinaryClockError):
    code = ERR_INVALID_BIT_COUNT


class MissingInputError(BinaryClockError):
    code = ERR_MISSING_INPUT


class SystemTimeError(BinaryClockError):
    code = ERR_SYSTEM_TIME


class RegistryFullError(BinaryClockError):
    code = ERR_REGISTRY_FULL


class InvalidRendererError(BinaryClockError):
    code = ERR_INVALID_RENDERER


class UnknownRegistrationError(BinaryClockError):
    code = ERR_UNKNOWN_REGISTRATION


def error_string(code: int) -> str:
    """Human-readable message for an error code ("Unknown error" if unmapped)."""
    return _ERROR_MESSAGES.get(code, "Unknown error")


@dataclass(frozen=True)
class BinaryDigit:
    """One BCD digit as a fixed-width bit array.

    bits are MSB first and len(bits) == bit_count.
    decimal_value is the value actually encoded (after truncation).
    """

    bit_count: int
    bits: tuple[bool, ...]
    decimal_value: int

    def __post_init__(self) -> None:
        if not (MIN_BIT_COUNT <= self.bit_count <= MAX_BIT_COUNT):
            raise ValueError(f"bit_count must be in [{MIN_BIT_COUNT}..{MAX_BIT_COUNT}]")
        if len(self.bits) != self.bit_count:
            raise ValueError("len(bits) must equal bit_count")
        v = 0
        for b in self.bits:
            v = (v << 1) | int(bool(b))
        if v != self.decimal_value:
            raise ValueError(f"decimal_value={self.decimal_value} does not match bits (={v})")

    def as_ints(self) -> list[int]:
        return [1 if b else 0 for b in self.bits]

    def __str__(self) -> str:
        return "".join("1" if b else "0" for b in self.bits)


@dataclass(frozen=True)
class TimeComponents:
    """Hours/minutes/seconds triple. Range is checked by decompose_time()."""

    hours: int
    minutes: int
    seconds: int

    @classmethod
    def parse(cls, text: str) -> TimeComponents:
        """Parse "HH:MM:SS" (or "H:M:S")."""
        parts = text.strip().split(":")
        if len(parts) != 3:
            raise ValueError(f"expected HH:MM:SS, got {text!r}")
        if not all(p.isascii() and p.isdigit() for p in parts):
            raise ValueError(f"non-numeric time field in {text!r}")
        h, m, s = (int(p) for p in parts)
        return cls(hours=h, minutes=m, seconds=s)


@dataclass(frozen=True)
class ClockState:
    """Immutable snapshot of the six BCD digits plus capture time.

    timestamp is the Unix time at which the conversion ran, which is not
    necessarily the time encoded in the digits.
    """

    hours_tens: BinaryDigit
    hours_units: BinaryDigit
    minutes_tens: BinaryDigit
    minutes_units: BinaryDigit
    seconds_tens: BinaryDigit
    seconds_units: BinaryDigit
    timestamp: int

    @property
    def hours(self) -> int:
        return self.hours_tens.decimal_value * 10 + self.hours_units.decimal_value

    @property
    def minutes(self) -> int:
        return self.minutes_tens.decimal_value * 10 + self.minutes_units.decimal_value

    @property
    def seconds(self) -> int:
        return self.seconds_tens.decimal_value * 10 + self.seconds_units.decimal_value

    def time_string(self) -> str:
        return f"{self.hours:02d}:{self.minutes:02d}:{self.seconds:02d}"

    def components(self) -> TimeComponents:
        return TimeComponents(hours=self.hours, minutes=self.minutes, seconds=self.seconds)

    def digits(self) -> list[tuple[str, BinaryDigit]]:
        """The six digits in display order (hours, minutes, seconds; tens, units)."""
        return [
            ("hours_tens", self.hours_tens),
            ("hours_units", self.hours_units),
            ("minutes_tens", self.minutes_tens),
            ("minutes_units", self.minutes_units),
            ("seconds_tens", self.seconds_tens),
            ("seconds_units", self.seconds_units),
        ]


__all__ = [
    "MIN_BIT_COUNT",
    "MAX_BIT_COUNT",
    "TENS_BITS",
    "UNITS_BITS",
    "MAX_HOURS",
    "MAX_MINUTES",
    "MAX_SECONDS",
    "BinaryClockError",
    "InvalidTimeError",
    "InvalidBitCountError",
    "MissingInputError",
    "SystemTimeError",
    "RegistryFullError",
    "InvalidRendererError",
    "UnknownRegistrationError",
    "error_string",
    "BinaryDigit",
    "TimeComponents",
    "ClockState",
]
