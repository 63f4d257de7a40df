"""Cooperative cancellation for suite runs."""

from __future__ import annotations

import logging
import signal
from pathlib import Path
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)


class StopToken:
    """
    Cooperative stop flag checked between target runs.

    It can be tripped explicitly, by SIGINT/SIGTERM when ``enable_signals``
    is set, or by a stop file appearing on disk. A tripped token stays
    tripped until ``reset()``.
    """

    def __init__(
        self,
        stop_file: Optional[Path] = None,
        enable_signals: bool = False,
        on_stop: Optional[Callable[[], None]] = None,
    ) -> None:
        self.stop_file = stop_file
        self._on_stop = on_stop
        self._stop_requested = False
        self._prev_handlers: Dict[int, Callable] = {}
        if enable_signals:
            self._install_signal_handlers()

    def _install_signal_handlers(self) -> None:
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                self._prev_handlers[sig] = signal.getsignal(sig)
                signal.signal(sig, self._handle_signal)  # type: ignore[arg-type]
            except ValueError:
                # Not on the main thread; rely on explicit requests.
                logger.debug("Cannot install handler for %s", sig)

    def _handle_signal(self, signum: int, frame) -> None:  # type: ignore[no-untyped-def]
        self.request_stop()

    def _trip(self) -> None:
        self._stop_requested = True
        if self._on_stop:
            try:
                self._on_stop()
            except Exception as exc:
                logger.debug("Stop callback failed: %s", exc)

    def request_stop(self) -> None:
        """Mark the token as stopped; the callback fires once."""
        if not self._stop_requested:
            self._trip()

    def should_stop(self) -> bool:
        if self._stop_requested:
            return True
        if self.stop_file and self.stop_file.exists():
            self._trip()
            return True
        return False

    def reset(self) -> None:
        """Clear a previous stop request so the token can guard another suite."""
        self._stop_requested = False

    def restore(self) -> None:
        """Restore original signal handlers."""
        for sig, handler in self._prev_handlers.items():
            try:
                signal.signal(sig, handler)  # type: ignore[arg-type]
            except ValueError:
                continue
        self._prev_handlers.clear()

    def __enter__(self) -> "StopToken":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # type: ignore[no-untyped-def]
        self.restore()
