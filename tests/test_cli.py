from __future__ import annotations

import io
import json

import pytest

import cli
from bc_json import loads_state
from bc_model import InvalidTimeError, SystemTimeError, TimeComponents
from cli import CLEAR_SCREEN, RunConfig, resolve_run_config
from tests._helpers import FailingClock, FixedClock, TickingClock


def test_defaults_without_flags_or_env():
    cfg = resolve_run_config(display=None, loop=False, interval=None, count=None, env={})
    assert cfg == RunConfig(display="emoji", loop=False, interval=1.0, count=None)


def test_env_supplies_defaults():
    env = {"BINARY_CLOCK_DISPLAY": "JSON", "BINARY_CLOCK_INTERVAL": "0.25"}
    cfg = resolve_run_config(display=None, loop=True, interval=None, count=None, env=env)
    assert cfg.display == "json"
    assert cfg.interval == 0.25


def test_flags_win_over_env():
    env = {"BINARY_CLOCK_DISPLAY": "json", "BINARY_CLOCK_INTERVAL": "5"}
    cfg = resolve_run_config(display="raw", loop=True, interval=2.0, count=3, env=env)
    assert (cfg.display, cfg.interval, cfg.count) == ("raw", 2.0, 3)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"display": "hologram"},
        {"interval": 0.0, "loop": True},
        {"interval": -1.0, "loop": True},
        {"count": 0, "loop": True},
        {"count": 3, "loop": False},
        {"interval": 2.0, "loop": False},
    ],
)
def test_invalid_config_rejected(kwargs):
    base = {"display": None, "loop": False, "interval": None, "count": None, "env": {}}
    base.update(kwargs)
    with pytest.raises(ValueError):
        resolve_run_config(**base)


def test_bad_env_interval_rejected():
    with pytest.raises(ValueError):
        resolve_run_config(display=None, loop=True, interval=None, count=None, env={"BINARY_CLOCK_INTERVAL": "soon"})


def test_run_single_with_fixed_clock():
    out = io.StringIO()
    cfg = RunConfig(display="compact", loop=False, interval=1.0, count=None)
    assert cli.run(cfg, clock=FixedClock(), out=out) == 0
    assert out.getvalue() == "14:30:45 [001 0100 : 011 0000 : 100 0101]\n"


def test_run_single_arbitrary_time():
    out = io.StringIO()
    cfg = RunConfig(display="json", loop=False, interval=1.0, count=None)
    tc = TimeComponents(hours=0, minutes=0, seconds=0)
    assert cli.run(cfg, time_components=tc, clock=FixedClock(ts=7), out=out) == 0
    st = loads_state(out.getvalue())
    assert st.time_string() == "00:00:00"
    assert st.timestamp == 7


def test_run_single_invalid_time_raises():
    cfg = RunConfig(display="json", loop=False, interval=1.0, count=None)
    with pytest.raises(InvalidTimeError):
        cli.run(cfg, time_components=TimeComponents(hours=24, minutes=0, seconds=0), out=io.StringIO())


def test_run_loop_jsonl_counts_frames_and_sleeps_between():
    out = io.StringIO()
    sleeps: list[float] = []
    cfg = RunConfig(display="jsonl", loop=True, interval=0.5, count=3)

    assert cli.run(cfg, clock=TickingClock(), sleep=sleeps.append, out=out) == 0

    lines = out.getvalue().splitlines()
    assert [json.loads(x)["time"] for x in lines] == ["14:30:45", "14:30:46", "14:30:47"]
    assert sleeps == [0.5, 0.5]
    assert CLEAR_SCREEN not in out.getvalue()


def test_run_loop_console_prints_banner_and_clears():
    out = io.StringIO()
    cfg = RunConfig(display="binary", loop=True, interval=1.0, count=2)
    assert cli.run(cfg, clock=FixedClock(), sleep=lambda s: None, out=out) == 0
    text = out.getvalue()
    assert "Binary Clock v1.0.0" in text
    assert text.count(CLEAR_SCREEN) == 1
    assert text.count("Binary Clock (ASCII)") == 2


def test_run_loop_ctrl_c_stops_cleanly():
    out = io.StringIO()
    cfg = RunConfig(display="compact", loop=True, interval=1.0, count=None)

    def interrupt(_: float) -> None:
        raise KeyboardInterrupt

    assert cli.run(cfg, clock=FixedClock(), sleep=interrupt, out=out) == 0
    assert out.getvalue().endswith("Binary clock stopped.\n")


def test_run_propagates_clock_failure():
    cfg = RunConfig(display="compact", loop=False, interval=1.0, count=None)
    with pytest.raises(SystemTimeError):
        cli.run(cfg, clock=FailingClock(), out=io.StringIO())


def test_main_time_flag_json(capsys):
    assert cli.main(["--display=json", "--time", "14:30:45"]) == 0
    obj = json.loads(capsys.readouterr().out)
    assert obj["time"] == "14:30:45"
    assert obj["binary"]["seconds"]["units"] == [0, 1, 0, 1]


def test_main_unknown_display_exits_1(capsys):
    assert cli.main(["--display=hologram"]) == 1
    assert "Unknown display mode" in capsys.readouterr().err


def test_main_out_of_range_time_exits_1(capsys):
    assert cli.main(["--time", "24:00:00"]) == 1
    assert "[error]" in capsys.readouterr().err


def test_main_time_with_loop_rejected(capsys):
    assert cli.main(["--loop", "--time", "01:02:03"]) == 1


def test_main_interval_without_loop_rejected(capsys):
    assert cli.main(["--interval", "2"]) == 1
    assert "--interval requires --loop" in capsys.readouterr().err


def test_env_interval_without_loop_is_ignored():
    cfg = resolve_run_config(display=None, loop=False, interval=None, count=None, env={"BINARY_CLOCK_INTERVAL": "3"})
    assert cfg.interval == 3.0


def test_main_unknown_option_exits_1():
    with pytest.raises(SystemExit) as ei:
        cli.main(["--bogus"])
    assert ei.value.code == 1


def test_main_clock_failure_message(monkeypatch, capsys):
    def broken(*, clock=None):
        raise SystemTimeError()

    monkeypatch.setattr(cli, "get_current_state", broken)
    assert cli.main(["--display=compact"]) == 1
    assert "Error: Failed to get current time" in capsys.readouterr().err


def test_main_version(capsys):
    with pytest.raises(SystemExit) as ei:
        cli.main(["--version"])
    assert ei.value.code == 0
    assert "1.0.0" in capsys.readouterr().out
