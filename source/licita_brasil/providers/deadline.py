"""This module provides scoped deadlines and cancellation tokens for upstream calls.

A `Deadline` is created per upstream call and tells the HTTP provider how
much time is left before the call must be abandoned. A `CancellationToken`
is shared by every call issued on behalf of one incoming request, so that
aborting the request aborts all of its in-flight calls.
"""

import threading
import time
from collections.abc import Callable
from contextlib import suppress


class CancellationToken:
    """A thread-safe flag signalling that the owning request was abandoned.

    Callers blocked on I/O register a callback with `add_callback`; it runs
    on the thread that calls `cancel`, once, and must not block.
    """

    _event: threading.Event
    _callbacks: list[Callable[[], None]]

    def __init__(self) -> None:
        """Initializes an unset token."""
        self._event = threading.Event()
        self._callbacks = []
        self._lock = threading.Lock()

    def cancel(self) -> None:
        """Marks the token as cancelled and runs the registered callbacks.

        Calling it more than once is harmless.
        """
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()

    def add_callback(self, callback: Callable[[], None]) -> None:
        """Registers `callback` to run on cancellation.

        If the token is already cancelled the callback runs immediately.

        Args:
            callback: A function taking no arguments.
        """
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return
        callback()

    def remove_callback(self, callback: Callable[[], None]) -> None:
        """Unregisters `callback` if it has not run yet."""
        with self._lock:
            with suppress(ValueError):
                self._callbacks.remove(callback)

    @property
    def cancelled(self) -> bool:
        """Whether `cancel` has been called."""
        return self._event.is_set()


class Deadline:
    """A point in time after which an upstream call must be abandoned.

    The deadline is measured on the monotonic clock, starting when the
    object is created.

    Attributes:
        seconds: The total budget, in seconds, granted to the call.
    """

    seconds: float
    _expires_at: float

    def __init__(self, seconds: float) -> None:
        """Starts the deadline clock.

        Args:
            seconds: The total time budget for the call.
        """
        self.seconds = seconds
        self._expires_at = time.monotonic() + seconds

    def remaining(self) -> float:
        """Returns the seconds left before expiry, never less than zero."""
        return max(0.0, self._expires_at - time.monotonic())

    @property
    def expired(self) -> bool:
        """Whether the time budget has been used up."""
        return self.remaining() <= 0.0
