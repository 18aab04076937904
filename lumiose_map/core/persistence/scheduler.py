"""
Debounced task scheduling.

A :class:`DebouncedTask` collapses bursts of requests into one call after a
quiet interval. Drags fire many intermediate updates; only the last one
should reach storage.
"""

import logging
import threading
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class DebouncedTask:
    """
    Runs a callback once after ``delay`` seconds without new requests.

    :meth:`schedule` is the only way to request a delayed run: it cancels any
    pending run and starts the quiet interval again with the new arguments.

    Runs never overlap. :meth:`cancel` and :meth:`run_now` also invalidate a
    timer that already fired but has not started its call yet, so a
    superseded payload is never written after a newer one.
    """

    def __init__(
        self,
        callback: Callable[..., Any],
        delay: float = 0.15,
        timer_factory: Callable[..., Any] = threading.Timer,
    ):
        self.callback = callback
        self.delay = delay
        self._timer_factory = timer_factory
        self._timer = None
        self._args: Optional[tuple] = None
        self._generation = 0
        self._lock = threading.Lock()
        self._run_lock = threading.Lock()

    @property
    def pending(self) -> bool:
        return self._args is not None

    def schedule(self, *args):
        """Cancel any pending run and reschedule with ``args``."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._args = args
            self._timer = self._timer_factory(self.delay, self._fire)
            if hasattr(self._timer, "daemon"):
                self._timer.daemon = True
            self._timer.start()

    def cancel(self):
        """Drop the pending run, if any."""
        with self._lock:
            self._drop_pending()

    def flush(self) -> bool:
        """
        Run the pending call now instead of waiting.

        Returns:
            True if a pending call was run
        """
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None
            args, self._args = self._args, None
            generation = self._generation
        if args is None:
            return False
        self._run(args, generation)
        return True

    def run_now(self, *args):
        """
        Drop the pending run and call the callback with ``args`` right away.

        Waits for a run that is already in progress, so this call is the
        last one to reach the callback.
        """
        with self._lock:
            self._drop_pending()
            generation = self._generation
        self._run(args, generation, swallow=False)

    def _drop_pending(self):
        if self._timer is not None:
            self._timer.cancel()
        self._timer = None
        self._args = None
        self._generation += 1

    def _fire(self):
        with self._lock:
            args, self._args = self._args, None
            self._timer = None
            generation = self._generation
        if args is not None:
            self._run(args, generation)

    def _run(self, args: tuple, generation: int, swallow: bool = True):
        with self._run_lock:
            if generation != self._generation:
                logger.debug("Dropping superseded debounced run")
                return
            try:
                self.callback(*args)
            except Exception:
                if not swallow:
                    raise
                # Fire-and-forget: nobody awaits the write, so log and move on
                logger.exception("Debounced task failed")
