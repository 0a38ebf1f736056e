"""Registry of acknowledgments requested by this process.

When the client sends a packet with a callback, a fresh id is allocated and
the callback is stored under it. The server answers with an ack packet
(`6:::<id>`) and the matching callback runs exactly once.

Ids come from a single counter shared by every client in the process
(`shared_registry`), so two clients never hand out the same id.

#TODO:
- Purge callbacks for acknowledgments the server never sends
"""
import threading
import logging
from typing import Callable, Dict, Optional

from .packet import parse_int_prefix

logger = logging.getLogger(__name__)

AckCallback = Callable[[], None]


class AckRegistry:
    """Thread-safe map of outstanding ack ids to completion callbacks."""

    def __init__(self):
        self._lock = threading.Lock()
        self._last_id = 0
        self._callbacks: Dict[int, AckCallback] = {}

    def next_id(self) -> int:
        """Allocate the next ack id. Never returns 0."""
        with self._lock:
            self._last_id += 1
            return self._last_id

    def register(self, ack_id: int, callback: AckCallback) -> None:
        with self._lock:
            self._callbacks[ack_id] = callback

    def discard(self, ack_id: int) -> None:
        """Forget an id whose request never made it onto the wire."""
        with self._lock:
            self._callbacks.pop(ack_id, None)

    def resolve(self, id_text: str) -> bool:
        """Run and remove the callback for the id in `id_text`.

        Unknown, duplicate or unparseable ids are ignored.
        Returns True if a callback ran.
        """
        ack_id = parse_int_prefix(id_text)
        if ack_id is None:
            logger.debug(f"Ignoring ack with unparseable id: {id_text!r}")
            return False

        with self._lock:
            callback: Optional[AckCallback] = self._callbacks.pop(ack_id, None)
        if callback is None:
            logger.debug(f"Ignoring ack for unknown id {ack_id}")
            return False

        callback()
        return True

    def __len__(self) -> int:
        with self._lock:
            return len(self._callbacks)

    def __contains__(self, ack_id: int) -> bool:
        with self._lock:
            return ack_id in self._callbacks


shared_registry = AckRegistry()
