"""Minimal observer signals and a background repeating timer."""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any


class Signal:
    """A list of callables that are all invoked on emit, in connection order."""

    def __init__(self) -> None:
        self._slots: list[Callable[..., Any]] = []
        self._lock = threading.Lock()

    def connect(self, slot: Callable[..., Any]) -> None:
        """Register a callable to run on every emit."""
        with self._lock:
            self._slots.append(slot)

    def disconnect(self, slot: Callable[..., Any]) -> None:
        """Remove a previously connected callable; ValueError if it is not connected."""
        with self._lock:
            try:
                self._slots.remove(slot)
            except ValueError:
                raise ValueError(f"{slot!r} is not connected") from None

    def emit(self, *args: Any) -> None:
        """Call every connected slot with the given arguments."""
        with self._lock:
            slots = list(self._slots)
        for slot in slots:
            slot(*args)

    def __len__(self) -> int:
        with self._lock:
            return len(self._slots)


class RepeatingTimer:
    """Emits ``timeout`` from a background thread every interval until stopped."""

    def __init__(self) -> None:
        self.timeout = Signal()
        self._lock = threading.Lock()
        self._stop_event: threading.Event | None = None
        self._thread: threading.Thread | None = None

    def start(self, interval_ms: int) -> None:
        """Start, or restart, firing every ``interval_ms`` milliseconds."""
        if interval_ms < 0:
            raise ValueError("interval must not be negative")
        self.stop()
        stop_event = threading.Event()
        thread = threading.Thread(
            target=self._run,
            args=(interval_ms / 1000.0, stop_event),
            name="RepeatingTimer",
            daemon=True,
        )
        with self._lock:
            self._stop_event = stop_event
            self._thread = thread
        thread.start()

    def stop(self) -> None:
        """Stop firing; does nothing if the timer is not running."""
        with self._lock:
            stop_event, thread = self._stop_event, self._thread
            self._stop_event = None
            self._thread = None
        if stop_event is not None:
            stop_event.set()
        if thread is not None and thread is not threading.current_thread():
            thread.join()

    def is_active(self) -> bool:
        """True while the timer is running."""
        with self._lock:
            return self._stop_event is not None

    def _run(self, interval: float, stop_event: threading.Event) -> None:
        while not stop_event.wait(interval):
            self.timeout.emit()