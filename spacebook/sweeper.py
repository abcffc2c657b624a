"""Periodic background release of expired reservations."""
from __future__ import annotations

import logging
import threading

from flask import Flask

from .services import expiry

logger = logging.getLogger(__name__)


class ExpirySweeper:
    def __init__(self, app: Flask, interval: float | None = None) -> None:
        self.app = app
        self.interval = float(
            interval if interval is not None else app.config.get("EXPIRY_SWEEP_INTERVAL_SECONDS", 3600)
        )
        if self.interval <= 0:
            raise ValueError("sweep interval must be positive")
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        with self._lock:
            if self.is_running:
                return
            self._stop.clear()
            self._thread = threading.Thread(
                target=self._run, name="expiry-sweeper", daemon=True
            )
            self._thread.start()
        logger.info("expiry sweeper started, interval %.0fs", self.interval)

    def stop(self, timeout: float | None = 5.0) -> None:
        with self._lock:
            thread = self._thread
            self._stop.set()
            self._thread = None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
            logger.info("expiry sweeper stopped")

    def run_once(self) -> expiry.SweepResult:
        with self.app.app_context():
            result = expiry.sweep_expired()
        if result:
            logger.info(
                "released %d space(s), removed %d expired booking(s)",
                len(result.released_spaces),
                result.removed_bookings,
            )
        else:
            logger.debug("no expired reservations")
        return result

    def _run(self) -> None:
        # First cycle fires after one full interval, not at start-up.
        while not self._stop.wait(self.interval):
            try:
                self.run_once()
            except Exception:  # noqa: BLE001
                logger.exception("expiry sweep failed")
