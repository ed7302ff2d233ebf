#!/usr/bin/env python3
"""CLI for the binary clock.

Usage examples:
  - Show the current time once (moon emoji):
      python3 cli.py

  - Continuous 0/1 display, refreshed every second:
      python3 cli.py --display=binary --loop

  - Convert an arbitrary time to the JSON wire format:
      python3 cli.py --display=json --time 14:30:45

  - Stream JSON lines, 10 frames, half a second apart:
      python3 cli.py --display=jsonl --loop --interval 0.5 --count 10

Environment defaults (explicit flags always win):
  BINARY_CLOCK_DISPLAY   display mode
  BINARY_CLOCK_INTERVAL  loop interval in seconds
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import TextIO

from bc_display import JSON_MODES, RENDERERS, make_renderer
from bc_model import BinaryClockError, SystemTimeError, TimeComponents
from binary_clock import ClockSource, decompose_time, get_current_state, get_version
from display_registry import DisplayRegistry

log = logging.getLogger(__name__)

DEFAULT_DISPLAY = "emoji"
DEFAULT_INTERVAL = 1.0
ENV_DISPLAY = "BINARY_CLOCK_DISPLAY"
ENV_INTERVAL = "BINARY_CLOCK_INTERVAL"

CLEAR_SCREEN = "\033[2J\033[H"


@dataclass(frozen=True)
class RunConfig:
    display: str
    loop: bool
    interval: float
    count: int | None


def resolve_run_config(
    *,
    display: str | None,
    loop: bool,
    interval: float | None,
    count: int | None,
    env: Mapping[str, str] | None = None,
) -> RunConfig:
    """Resolve flags + environment defaults into a RunConfig."""
    env = os.environ if env is None else env

    disp = display if display is not None else env.get(ENV_DISPLAY, DEFAULT_DISPLAY)
    disp = disp.strip().lower()
    if disp not in RENDERERS:
        raise ValueError(f"Unknown display mode {disp!r} (valid: {', '.join(RENDERERS)})")

    if interval is not None and not loop:
        raise ValueError("--interval requires --loop")
    if interval is None:
        raw = env.get(ENV_INTERVAL)
        if raw is None or not raw.strip():
            interval = DEFAULT_INTERVAL
        else:
            try:
                interval = float(raw)
            except ValueError as e:
                raise ValueError(f"{ENV_INTERVAL}={raw!r} is not a number") from e
    if not interval > 0:
        raise ValueError("interval must be > 0")

    if count is not None:
        if not loop:
            raise ValueError("--count requires --loop")
        if count <= 0:
            raise ValueError("count must be positive")

    return RunConfig(display=disp, loop=bool(loop), interval=float(interval), count=count)


class _ArgumentParser(argparse.ArgumentParser):
    # usage errors exit with 1, like every other failure of this tool
    def error(self, message: str) -> None:  # type: ignore[override]
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_argparser() -> argparse.ArgumentParser:
    ap = _ArgumentParser(prog="binary-clock", description="Binary clock: time as BCD bits.")
    ap.add_argument(
        "--display",
        metavar="MODE",
        default=None,
        help=(
            "Display mode: emoji (moon glyphs, default), binary (0s and 1s), json, "
            "jsonl (one JSON object per line), raw (field dump), compact (one line)."
        ),
    )
    ap.add_argument("--loop", action="store_true", help="Run continuously (default: single output).")
    ap.add_argument(
        "--interval",
        type=float,
        default=None,
        help=f"Seconds between frames in --loop mode (default {DEFAULT_INTERVAL:g}).",
    )
    ap.add_argument("--count", type=int, default=None, help="Stop after N frames in --loop mode.")
    ap.add_argument("--time", metavar="HH:MM:SS", default=None, help="Convert this time instead of now.")
    ap.add_argument("--version", action="version", version=f"%(prog)s {get_version()}")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr.")
    return ap


def run(
    cfg: RunConfig,
    *,
    time_components: TimeComponents | None = None,
    clock: ClockSource | None = None,
    sleep: Callable[[float], None] = time.sleep,
    out: TextIO | None = None,
) -> int:
    out = sys.stdout if out is None else out
    registry = DisplayRegistry()
    reg_id = registry.register(make_renderer(cfg.display, out))
    log.debug("registered %s renderer id=%d", cfg.display, reg_id)

    try:
        if not cfg.loop:
            if time_components is not None:
                state = decompose_time(time_components, clock=clock)
            else:
                state = get_current_state(clock=clock)
            registry.dispatch(state)
            return 0

        clear = cfg.display not in JSON_MODES
        if clear:
            print(f"🌚🌝 Binary Clock v{get_version()} 🌝🌚", file=out)
            print("Press Ctrl+C to exit\n", file=out)

        frames = 0
        try:
            while cfg.count is None or frames < cfg.count:
                if frames:
                    sleep(cfg.interval)
                    if clear:
                        out.write(CLEAR_SCREEN)
                registry.dispatch_current(clock=clock)
                frames += 1
        except KeyboardInterrupt:
            print("\n\nBinary clock stopped.", file=out)
        log.debug("loop finished after %d frame(s)", frames)
        return 0
    finally:
        registry.unregister(reg_id)


def main(argv: list[str] | None = None) -> int:
    ap = build_argparser()
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        cfg = resolve_run_config(display=args.display, loop=args.loop, interval=args.interval, count=args.count)
        tc = TimeComponents.parse(args.time) if args.time is not None else None
        if tc is not None and cfg.loop:
            raise ValueError("--time cannot be combined with --loop")
    except ValueError as e:
        print(f"[error] {e}", file=sys.stderr)
        return 1

    log.debug("config: %s", cfg)
    try:
        return run(cfg, time_components=tc)
    except SystemTimeError as e:
        log.debug("clock failure: %s", e)
        print("Error: Failed to get current time", file=sys.stderr)
        return 1
    except BinaryClockError as e:
        print(f"[error] {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
