"""JSON backend for binary clock states.

Wire format (v1), one object per state:
  {"timestamp": <int>,
   "time": "HH:MM:SS",
   "binary": {"hours":   {"tens": [b,b,b], "units": [b,b,b,b]},
              "minutes": {"tens": [...],   "units": [...]},
              "seconds": {"tens": [...],   "units": [...]}}}

Arrays are MSB first, 3 bits for tens and 4 bits for units.
The pretty layout (two-space indent, inline arrays) matches what downstream
tools already parse; the compact layout is one line per state (JSON-lines).

This module is intentionally independent from the console renderers.
"""

from __future__ import annotations

import json
import sys
from typing import TextIO

from bc_model import (
    MAX_HOURS,
    MAX_MINUTES,
    MAX_SECONDS,
    TENS_BITS,
    UNITS_BITS,
    BinaryDigit,
    ClockState,
)

_FIELDS = ("hours", "minutes", "seconds")
_MAX_BY_FIELD = {"hours": MAX_HOURS, "minutes": MAX_MINUTES, "seconds": MAX_SECONDS}


def _pair(state: ClockState, field: str) -> tuple[BinaryDigit, BinaryDigit]:
    return getattr(state, f"{field}_tens"), getattr(state, f"{field}_units")


def state_to_obj(state: ClockState) -> dict[str, object]:
    """ClockState -> JSON-ready dict in canonical key order."""
    binary: dict[str, object] = {}
    for field in _FIELDS:
        tens, units = _pair(state, field)
        binary[field] = {"tens": tens.as_ints(), "units": units.as_ints()}
    return {"timestamp": int(state.timestamp), "time": state.time_string(), "binary": binary}


def _inline(bits: list[int]) -> str:
    return "[" + ",".join(str(b) for b in bits) + "]"


def dumps_state(state: ClockState, *, compact: bool = False) -> str:
    """Serialize a state. No trailing newline."""
    if compact:
        return json.dumps(state_to_obj(state), separators=(",", ":"), ensure_ascii=False)

    lines = [
        "{",
        f'  "timestamp": {int(state.timestamp)},',
        f'  "time": {json.dumps(state.time_string())},',
        '  "binary": {',
    ]
    for i, field in enumerate(_FIELDS):
        tens, units = _pair(state, field)
        closing = "    }," if i < len(_FIELDS) - 1 else "    }"
        lines += [
            f'    "{field}": {{',
            f'      "tens": {_inline(tens.as_ints())},',
            f'      "units": {_inline(units.as_ints())}',
            closing,
        ]
    lines += ["  }", "}"]
    return "\n".join(lines)


def _validate_bits(where: str, obj: object, width: int) -> BinaryDigit:
    if not isinstance(obj, list):
        raise ValueError(f"{where}: expected a list of bits")
    if len(obj) != width:
        raise ValueError(f"{where}: expected {width} bits, got {len(obj)}")
    v = 0
    for b in obj:
        if isinstance(b, bool) or not isinstance(b, int) or b not in (0, 1):
            raise ValueError(f"{where}: bits must be 0 or 1, got {b!r}")
        v = (v << 1) | b
    return BinaryDigit(bit_count=width, bits=tuple(b == 1 for b in obj), decimal_value=v)


def _validate_field(field: str, obj: object) -> tuple[BinaryDigit, BinaryDigit]:
    if not isinstance(obj, dict):
        raise ValueError(f"binary.{field}: expected JSON object")
    extra = set(obj.keys()) - {"tens", "units"}
    if extra:
        raise ValueError(f"binary.{field}: keys not allowed: {sorted(extra)}")
    if "tens" not in obj or "units" not in obj:
        raise ValueError(f"binary.{field}: required fields: tens, units")

    tens = _validate_bits(f"binary.{field}.tens", obj["tens"], TENS_BITS)
    units = _validate_bits(f"binary.{field}.units", obj["units"], UNITS_BITS)
    if units.decimal_value > 9:
        raise ValueError(f"binary.{field}.units: {units.decimal_value} is not a decimal digit")
    if tens.decimal_value * 10 + units.decimal_value > _MAX_BY_FIELD[field]:
        raise ValueError(f"binary.{field}: value out of range [0..{_MAX_BY_FIELD[field]}]")
    return tens, units


def obj_to_state(obj: object) -> ClockState:
    """Validate a decoded JSON object and rebuild the ClockState."""
    if not isinstance(obj, dict):
        raise ValueError("expected JSON object")
    allowed = {"timestamp", "time", "binary"}
    extra = set(obj.keys()) - allowed
    if extra:
        raise ValueError(f"keys not allowed: {sorted(extra)}")
    missing = allowed - set(obj.keys())
    if missing:
        raise ValueError(f"missing required keys: {sorted(missing)}")

    ts = obj["timestamp"]
    if isinstance(ts, bool) or not isinstance(ts, int):
        raise ValueError("timestamp must be an int")

    binary = obj["binary"]
    if not isinstance(binary, dict):
        raise ValueError("binary: expected JSON object")
    extra = set(binary.keys()) - set(_FIELDS)
    if extra:
        raise ValueError(f"binary: keys not allowed: {sorted(extra)}")
    missing = set(_FIELDS) - set(binary.keys())
    if missing:
        raise ValueError(f"binary: missing required keys: {sorted(missing)}")

    h_tens, h_units = _validate_field("hours", binary["hours"])
    m_tens, m_units = _validate_field("minutes", binary["minutes"])
    s_tens, s_units = _validate_field("seconds", binary["seconds"])
    state = ClockState(
        hours_tens=h_tens,
        hours_units=h_units,
        minutes_tens=m_tens,
        minutes_units=m_units,
        seconds_tens=s_tens,
        seconds_units=s_units,
        timestamp=ts,
    )

    if obj["time"] != state.time_string():
        raise ValueError(f"time {obj['time']!r} does not match binary digits ({state.time_string()})")
    return state


def loads_state(text: str) -> ClockState:
    """Parse one state (pretty or compact form)."""
    try:
        obj = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"invalid JSON: {e}") from e
    return obj_to_state(obj)


class JsonRenderer:
    """Write each state as JSON to `stream` (stdout if None)."""

    def __init__(self, stream: TextIO | None = None, *, compact: bool = False) -> None:
        self.stream = stream
        self.compact = compact

    def render(self, state: ClockState) -> None:
        out = self.stream if self.stream is not None else sys.stdout
        out.write(dumps_state(state, compact=self.compact) + "\n")
        out.flush()


__all__ = ["state_to_obj", "dumps_state", "obj_to_state", "loads_state", "JsonRenderer"]
