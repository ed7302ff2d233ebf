"""Display registry: fan one ClockState out to many renderers (in-process)."""

from __future__ import annotations

import inspect
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, NewType, Protocol, runtime_checkable

from bc_model import (
    ClockState,
    InvalidRendererError,
    RegistryFullError,
    UnknownRegistrationError,
)
from binary_clock import ClockSource, get_current_state

DEFAULT_CAPACITY = 16

RegistrationId = NewType("RegistrationId", int)


@runtime_checkable
class Renderer(Protocol):
    """Consumes a ClockState. Must treat the state as read-only."""

    def render(self, state: ClockState) -> None: ...


@dataclass(frozen=True)
class _Entry:
    reg_id: RegistrationId
    call: Callable[[ClockState], Any]


def _accepts(fn: Callable[..., Any], nargs: int) -> bool:
    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError):
        # no introspectable signature (some builtins): trust the caller
        return True
    try:
        sig.bind(*([None] * nargs))
    except TypeError:
        return False
    return True


def _bind(renderer: Any, context: Any) -> Callable[[ClockState], Any]:
    """Resolve a renderer to a one-argument call, checked at registration.

    fn(state) when no context is given and fn takes one argument;
    fn(state, context) otherwise (context may be None). A renderer that
    cannot take the arguments it would be called with is rejected here,
    never at dispatch time.
    """
    if renderer is None:
        raise InvalidRendererError("renderer must not be None")
    fn = getattr(renderer, "render", None)
    if not callable(fn):
        if not callable(renderer):
            raise InvalidRendererError(f"renderer {renderer!r} is not callable and has no render()")
        fn = renderer

    if context is None and _accepts(fn, 1):
        return fn
    if _accepts(fn, 2):
        return lambda state: fn(state, context)
    if context is None:
        raise InvalidRendererError(f"renderer {renderer!r} must accept (state) or (state, context)")
    raise InvalidRendererError(f"renderer {renderer!r} does not accept a context argument")


class DisplayRegistry:
    """Assign a monotonic RegistrationId to each renderer and dispatch to all.

    Ids are never reused, even after unregister(). At most `capacity`
    renderers are active at once. Dispatch order is ascending id
    (registration order); renderers must not depend on it.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self._capacity = int(capacity)
        self._entries: dict[RegistrationId, _Entry] = {}
        self._next_id = 0
        self._lock = threading.RLock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def register(self, renderer: Renderer | Callable[..., Any], context: Any = None) -> RegistrationId:
        """Register a renderer; with a context it is called as fn(state, context).

        Raises InvalidRendererError (nothing stored) if the renderer's
        signature cannot take those arguments.
        """
        call = _bind(renderer, context)
        with self._lock:
            if len(self._entries) >= self._capacity:
                raise RegistryFullError(f"display registry is full (capacity={self._capacity})")
            reg_id = RegistrationId(self._next_id)
            self._next_id += 1
            self._entries[reg_id] = _Entry(reg_id=reg_id, call=call)
            return reg_id

    def unregister(self, reg_id: int) -> None:
        with self._lock:
            if reg_id < 0 or reg_id not in self._entries:
                raise UnknownRegistrationError(f"no active registration with id={reg_id}")
            del self._entries[RegistrationId(reg_id)]

    def dispatch(self, state: ClockState | None) -> int:
        """Invoke every active renderer once with `state`.

        Returns the number of renderers invoked. None is a silent no-op.
        """
        if state is None:
            return 0
        with self._lock:
            entries = [self._entries[i] for i in sorted(self._entries)]
        for e in entries:
            e.call(state)
        return len(entries)

    def dispatch_current(self, *, clock: ClockSource | None = None) -> int:
        """get_current_state() followed by dispatch(). SystemTimeError propagates."""
        return self.dispatch(get_current_state(clock=clock))

    def active_ids(self) -> list[RegistrationId]:
        with self._lock:
            return sorted(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, reg_id: object) -> bool:
        with self._lock:
            return reg_id in self._entries


__all__ = ["DEFAULT_CAPACITY", "RegistrationId", "Renderer", "DisplayRegistry"]
