"""Trailing-edge debouncing for control changes."""

from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple

logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())


@dataclass
class _PendingCall:
    args: Tuple[Any, ...]
    kwargs: dict[str, Any]


class Debouncer:
    """Collapse bursts of calls into one call after a quiet interval.

    Every call cancels the pending timer and schedules a new one, so the
    callback runs once, ``wait_ms`` after the *last* call of a burst, with
    that call's arguments. At most one call is pending at any time.

    Parameters
    ----------
    callback:
        Callable to execute once the burst settles.
    wait_ms:
        Quiet interval in milliseconds.

    Notes
    -----
    Inside a running asyncio loop (e.g. a Jupyter kernel) the timer is a
    ``loop.call_later`` handle; otherwise a daemon ``threading.Timer``.
    Callback failures are logged and do not affect later calls.
    """

    def __init__(self, callback: Callable[..., Any], *, wait_ms: int) -> None:
        if wait_ms <= 0:
            raise ValueError("wait_ms must be > 0")
        self._callback = callback
        self._wait_s = wait_ms / 1000.0

        self._pending: Optional[_PendingCall] = None
        self._lock = threading.Lock()
        self._timer: Optional[Any] = None

    @property
    def wait_ms(self) -> int:
        return int(round(self._wait_s * 1000))

    @property
    def pending(self) -> bool:
        """Whether a call is scheduled and has not fired yet."""
        with self._lock:
            return self._timer is not None

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        with self._lock:
            self._pending = _PendingCall(args=args, kwargs=dict(kwargs))
            self._cancel_timer_locked()
            self._schedule_locked()

    def cancel(self) -> None:
        """Drop the pending call, if any."""
        with self._lock:
            self._pending = None
            self._cancel_timer_locked()

    def _cancel_timer_locked(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _schedule_locked(self) -> None:
        token = object()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            timer = threading.Timer(self._wait_s, self._fire, args=(token,))
            timer.daemon = True
            self._timer = _ScheduledTimer(timer, token)
            timer.start()
            return

        handle = loop.call_later(self._wait_s, self._fire, token)
        self._timer = _ScheduledTimer(handle, token)

    def _fire(self, token: object) -> None:
        with self._lock:
            timer = self._timer
            if timer is None or timer.token is not token:
                return
            self._timer = None
            call, self._pending = self._pending, None

        if call is None:
            return
        try:
            self._callback(*call.args, **call.kwargs)
        except Exception:
            logger.exception("Debouncer callback failed")


@dataclass
class _ScheduledTimer:
    """Timer or ``call_later`` handle tagged so a superseded firing is ignored."""

    handle: Any
    token: object

    def cancel(self) -> None:
        self.handle.cancel()


__all__ = ["Debouncer"]
