"""Console renderers for binary clock states.

Every renderer holds its output stream (stdout if None, resolved at render
time) and exposes render(state), so it can be handed straight to
DisplayRegistry.register().

Formats:
  emoji   - moon glyphs, one row per hours/minutes/seconds
  binary  - same layout with 0/1
  compact - "HH:MM:SS [001 0100 : 011 0000 : 100 0101]"
  raw     - field-by-field dump of the state
  json    - pretty JSON (see bc_json.py)
  jsonl   - one compact JSON object per line
"""

from __future__ import annotations

import sys
from collections.abc import Callable
from typing import TextIO

from bc_json import JsonRenderer
from bc_model import BinaryDigit, ClockState, MissingInputError

ON = "🌝"
OFF = "🌚"

_ROWS = (("Hours", "hours"), ("Minutes", "minutes"), ("Seconds", "seconds"))


def digit_to_string(digit: BinaryDigit | None, fmt: str = "0") -> str:
    """Format one digit: "0"/"1" bits, "e" emoji, "d" decimal."""
    if digit is None:
        raise MissingInputError("digit_to_string: digit is None")
    if fmt in ("0", "1"):
        return str(digit)
    if fmt == "e":
        return "".join(ON if b else OFF for b in digit.bits)
    if fmt == "d":
        return str(digit.decimal_value)
    raise ValueError(f"unknown digit format: {fmt!r}")


class _ConsoleRenderer:
    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream

    def _write(self, text: str) -> None:
        out = self.stream if self.stream is not None else sys.stdout
        out.write(text)
        out.flush()

    def render(self, state: ClockState) -> None:
        self._write(self.format(state))

    def format(self, state: ClockState) -> str:
        raise NotImplementedError


class _RowsRenderer(_ConsoleRenderer):
    header = ""
    fmt = "0"

    def format(self, state: ClockState) -> str:
        lines = [self.header, f"Time: {state.time_string()}", ""]
        for label, field in _ROWS:
            tens = digit_to_string(getattr(state, f"{field}_tens"), self.fmt)
            units = digit_to_string(getattr(state, f"{field}_units"), self.fmt)
            lines.append(f"{label:<8}: {tens} {units}")
        return "\n".join(lines) + "\n"


class EmojiRenderer(_RowsRenderer):
    header = f"{ON} Binary Clock {OFF}"
    fmt = "e"


class AsciiRenderer(_RowsRenderer):
    header = "Binary Clock (ASCII)"
    fmt = "0"


class CompactRenderer(_ConsoleRenderer):
    """One line per state, handy for logs."""

    def format(self, state: ClockState) -> str:
        groups = []
        for _, field in _ROWS:
            groups.append(f"{getattr(state, f'{field}_tens')} {getattr(state, f'{field}_units')}")
        return f"{state.time_string()} [{' : '.join(groups)}]\n"


class RawRenderer(_ConsoleRenderer):
    def format(self, state: ClockState) -> str:
        lines = [
            "Binary Clock API Raw Data",
            "=========================",
            f"Timestamp: {state.timestamp}",
            "",
        ]
        for name, d in state.digits():
            label = name.replace("_", " ").title() + ":"
            bits = ",".join(str(b) for b in d.as_ints())
            lines.append(f"{label:<14}bit_count={d.bit_count}, decimal_value={d.decimal_value}, bits=[{bits}]")
        return "\n".join(lines) + "\n"


RENDERERS: dict[str, Callable[[TextIO | None], object]] = {
    "emoji": EmojiRenderer,
    "binary": AsciiRenderer,
    "compact": CompactRenderer,
    "raw": RawRenderer,
    "json": lambda stream: JsonRenderer(stream),
    "jsonl": lambda stream: JsonRenderer(stream, compact=True),
}

JSON_MODES = frozenset({"json", "jsonl"})


def make_renderer(mode: str, stream: TextIO | None = None) -> object:
    factory = RENDERERS.get(mode)
    if factory is None:
        raise ValueError(f"Unknown display mode: {mode!r} (valid: {', '.join(RENDERERS)})")
    return factory(stream)


__all__ = [
    "ON",
    "OFF",
    "digit_to_string",
    "EmojiRenderer",
    "AsciiRenderer",
    "CompactRenderer",
    "RawRenderer",
    "RENDERERS",
    "JSON_MODES",
    "make_renderer",
]
