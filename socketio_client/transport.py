"""Transports carrying Socket.IO text frames.

A transport owns one connection. `run()` blocks on the calling thread for the
lifetime of that connection and reports what happens through the bound
callbacks: `on_open`, `on_message(text)`, `on_close`, and `on_fail` when the
connection could not be established at all.
"""
import threading
import logging
from abc import ABC, abstractmethod
from typing import Callable, Optional

from websockets.exceptions import ConnectionClosed, ConnectionClosedError, WebSocketException
from websockets.sync.client import ClientConnection, connect

logger = logging.getLogger(__name__)


def _noop(*_args) -> None:
    pass


class Transport(ABC):
    """Interface the connection state machine drives."""

    def __init__(self):
        self.on_open: Callable[[], None] = _noop
        self.on_close: Callable[[], None] = _noop
        self.on_fail: Callable[[], None] = _noop
        self.on_message: Callable[[str], None] = _noop

    def bind(self, on_open=None, on_close=None, on_fail=None, on_message=None) -> None:
        """Register lifecycle and message callbacks."""
        self.on_open = on_open or _noop
        self.on_close = on_close or _noop
        self.on_fail = on_fail or _noop
        self.on_message = on_message or _noop

    @abstractmethod
    def run(self, uri: str) -> None:
        ...

    @abstractmethod
    def send(self, text: str) -> None:
        ...

    @abstractmethod
    def close(self, reason: str = "") -> None:
        ...


class WebSocketTransport(Transport):
    """Transport backed by the synchronous `websockets` client."""

    def __init__(self, open_timeout: Optional[float] = 10, close_timeout: Optional[float] = 10):
        super().__init__()
        self.open_timeout = open_timeout
        self.close_timeout = close_timeout
        self._lock = threading.Lock()
        self._ws: Optional[ClientConnection] = None
        self._close_reason: Optional[str] = None

    def run(self, uri: str) -> None:
        logger.info(f"Connecting to websocket at {uri}")
        try:
            ws = connect(uri, open_timeout=self.open_timeout, close_timeout=self.close_timeout)
        except (OSError, WebSocketException) as e:
            logger.error(f"Connection failed: {e}")
            self.on_fail()
            return

        with self._lock:
            self._ws = ws
            close_reason = self._close_reason

        try:
            if close_reason is not None:
                # close() arrived while the websocket was still opening
                ws.close(1000, close_reason)
            else:
                self.on_open()
            for message in ws:
                if isinstance(message, bytes):
                    message = message.decode("utf-8", errors="replace")
                logger.debug(f"Received: {message}")
                self.on_message(message)
        except ConnectionClosedError as e:
            logger.warning(f"Websocket closed with error: {e}")
        finally:
            with self._lock:
                self._ws = None
            # No-op if the connection is already closed
            ws.close()
            self.on_close()

    def send(self, text: str) -> None:
        with self._lock:
            ws = self._ws
        if ws is None:
            logger.warning(f"Dropping frame, websocket is not open: {text}")
            return
        logger.debug(f"Sent: {text}")
        try:
            ws.send(text)
        except ConnectionClosed as e:
            logger.warning(f"Send on closed websocket: {e}")

    def close(self, reason: str = "") -> None:
        with self._lock:
            self._close_reason = reason
            ws = self._ws
        if ws is not None:
            logger.info("Closing websocket transport")
            ws.close(1000, reason)
