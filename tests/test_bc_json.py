from __future__ import annotations

import io
import json

import pytest

from bc_json import JsonRenderer, dumps_state, loads_state, state_to_obj
from bc_model import TimeComponents
from binary_clock import decompose_time
from tests._helpers import FixedClock

PRETTY_14_30_45 = """{
  "timestamp": 1700000000,
  "time": "14:30:45",
  "binary": {
    "hours": {
      "tens": [0,0,1],
      "units": [0,1,0,0]
    },
    "minutes": {
      "tens": [0,1,1],
      "units": [0,0,0,0]
    },
    "seconds": {
      "tens": [1,0,0],
      "units": [0,1,0,1]
    }
  }
}"""


def _state(h: int = 14, m: int = 30, s: int = 45):
    return decompose_time(TimeComponents(hours=h, minutes=m, seconds=s), clock=FixedClock(ts=1_700_000_000))


def test_json_contract_for_14_30_45():
    obj = json.loads(dumps_state(_state()))
    obj.pop("timestamp")
    assert obj == {
        "time": "14:30:45",
        "binary": {
            "hours": {"tens": [0, 0, 1], "units": [0, 1, 0, 0]},
            "minutes": {"tens": [0, 1, 1], "units": [0, 0, 0, 0]},
            "seconds": {"tens": [1, 0, 0], "units": [0, 1, 0, 1]},
        },
    }


def test_pretty_layout_is_byte_exact():
    assert dumps_state(_state()) == PRETTY_14_30_45


def test_compact_is_single_line_with_key_order():
    line = dumps_state(_state(), compact=True)
    assert "\n" not in line
    assert line.startswith('{"timestamp":1700000000,"time":"14:30:45","binary":{"hours":{"tens":[0,0,1]')
    assert list(state_to_obj(_state()).keys()) == ["timestamp", "time", "binary"]


def test_loads_both_layouts():
    st = _state(23, 59, 59)
    assert loads_state(dumps_state(st)) == st
    assert loads_state(dumps_state(st, compact=True)) == st


def _obj() -> dict:
    return json.loads(dumps_state(_state()))


@pytest.mark.parametrize(
    "mutate",
    [
        lambda o: o.update(extra=1),
        lambda o: o.pop("time"),
        lambda o: o.update(timestamp="now"),
        lambda o: o.update(timestamp=True),
        lambda o: o.update(time="14:30:46"),
        lambda o: o["binary"].pop("seconds"),
        lambda o: o["binary"]["hours"].update(tens=[0, 1]),
        lambda o: o["binary"]["hours"].update(tens=[0, 0, 2]),
        lambda o: o["binary"]["hours"].update(tens=[0, 0, True]),
        lambda o: o["binary"]["hours"].update(units=[1, 1, 1, 1]),
        lambda o: o["binary"]["hours"].update(tens=[0, 1, 1]),
        lambda o: o["binary"]["minutes"].update(tens=[1, 1, 0]),
        lambda o: o["binary"]["minutes"].update(colour="red"),
    ],
)
def test_loads_rejects_malformed(mutate):
    obj = _obj()
    mutate(obj)
    with pytest.raises(ValueError):
        loads_state(json.dumps(obj))


def test_loads_rejects_non_json_and_non_object():
    with pytest.raises(ValueError):
        loads_state("{not json")
    with pytest.raises(ValueError):
        loads_state("[1, 2, 3]")


def test_json_renderer_writes_to_stream():
    buf = io.StringIO()
    JsonRenderer(buf).render(_state())
    JsonRenderer(buf, compact=True).render(_state(0, 0, 0))
    text = buf.getvalue()
    assert text.startswith(PRETTY_14_30_45 + "\n")
    assert text.endswith('"seconds":{"tens":[0,0,0],"units":[0,0,0,0]}}}\n')
