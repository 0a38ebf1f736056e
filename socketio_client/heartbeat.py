"""Periodic heartbeat sender."""
import threading
import time
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class HeartbeatScheduler:
    """Sends a heartbeat every `interval` seconds on a background thread.

    Deadlines are absolute: each firing schedules the next one at
    previous deadline + interval, so slow sends do not accumulate drift.
    """

    def __init__(self, send_heartbeat: Callable[[], None],
                 clock: Callable[[], float] = time.monotonic,
                 event_factory: Callable[[], threading.Event] = threading.Event):
        self._send_heartbeat = send_heartbeat
        self._clock = clock
        self._event_factory = event_factory
        self._lock = threading.Lock()
        self._active = False
        self._stop_event: Optional[threading.Event] = None
        self._thread: Optional[threading.Thread] = None
        self.interval = 0

    @property
    def active(self) -> bool:
        with self._lock:
            return self._active

    def start(self, interval: int) -> bool:
        """Start sending heartbeats. No-op if already active or interval is 0."""
        with self._lock:
            if self._active or interval <= 0:
                return False
            self.interval = interval
            self._stop_event = self._event_factory()
            self._thread = threading.Thread(
                target=self._run, args=(interval, self._stop_event),
                name="socketio-heartbeat", daemon=True
            )
            self._active = True
            self._thread.start()

        logger.debug(f"Sending heartbeats. Timeout: {interval}")
        return True

    def stop(self) -> None:
        """Cancel the timer. Safe to call repeatedly."""
        with self._lock:
            if not self._active:
                return
            self._active = False
            self._stop_event.set()
            thread, self._thread = self._thread, None

        if thread is not threading.current_thread():
            thread.join()
        logger.debug("Stopped sending heartbeats.")

    def _run(self, interval: int, stop_event: threading.Event) -> None:
        deadline = self._clock() + interval
        while not stop_event.wait(max(0.0, deadline - self._clock())):
            try:
                self._send_heartbeat()
            except Exception as e:
                logger.warning(f"Heartbeat send failed: {e}")
            deadline += interval
