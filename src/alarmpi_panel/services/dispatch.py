from __future__ import annotations

import logging
import queue
import threading
from typing import Any, Callable, Tuple

from alarmpi_panel.io.http import InternalError, RequestResult, guarded

log = logging.getLogger(__name__)

Completion = Callable[[RequestResult], None]


def run_request(fn: Callable[..., Any], *args: Any) -> RequestResult:
    """Always yields a result: unexpected exceptions become an `InternalError` failure."""
    try:
        return guarded(fn, *args)
    except Exception as e:
        log.exception("request %s failed unexpectedly", getattr(fn, "__name__", fn))
        err = InternalError(f"{type(e).__name__}: {e}")
        err.__cause__ = e
        return RequestResult.failure(err)


class ImmediateDispatcher:
    """Runs the request inline and completes right away (tests, headless use)."""

    def submit(self, fn: Callable[..., Any], *args: Any, on_done: Completion) -> None:
        on_done(run_request(fn, *args))


class ThreadDispatcher:
    """Runs each request on its own daemon thread and never touches Tkinter.

    Completions are parked in `self.completions`; the UI thread calls
    `drain()` (from a Tk `after` loop) so callbacks mutate state on the UI
    thread only. Requests are independent: no ordering, no cancellation.
    """

    def __init__(self) -> None:
        self.completions: "queue.Queue[Tuple[Completion, RequestResult]]" = queue.Queue()
        self._seq = 0

    def submit(self, fn: Callable[..., Any], *args: Any, on_done: Completion) -> None:
        self._seq += 1

        def _run() -> None:
            self.completions.put((on_done, run_request(fn, *args)))

        threading.Thread(target=_run, name=f"AlarmPiRequest-{self._seq}", daemon=True).start()

    def drain(self) -> int:
        n = 0
        while True:
            try:
                on_done, result = self.completions.get_nowait()
            except queue.Empty:
                return n
            n += 1
            on_done(result)
