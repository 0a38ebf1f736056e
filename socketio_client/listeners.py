"""Callback slots for connection lifecycle and inbound traffic.

Every slot is optional; an unset slot is simply skipped. Message, JSON and
event callbacks receive a `response` argument: a ResponseSink when the peer
asked for an acknowledgment, otherwise None.
"""
from dataclasses import dataclass
from typing import Any, Callable, List, Optional


@dataclass
class ConnectionListener:
    on_open: Optional[Callable[[], None]] = None
    on_close: Optional[Callable[[], None]] = None
    on_fail: Optional[Callable[[], None]] = None

    def opened(self) -> None:
        if self.on_open:
            self.on_open()

    def closed(self) -> None:
        if self.on_close:
            self.on_close()

    def failed(self) -> None:
        if self.on_fail:
            self.on_fail()


@dataclass
class SocketIOListener:
    # (endpoint, data, response)
    on_message: Optional[Callable[[str, str, Any], None]] = None
    # (endpoint, json value, response)
    on_json: Optional[Callable[[str, Any, Any], None]] = None
    # (endpoint, name, args, response)
    on_event: Optional[Callable[[str, str, List[Any], Any], None]] = None
    # (endpoint, reason, advice)
    on_error: Optional[Callable[[str, str, str], None]] = None


# Names accepted by SocketIOClient.on()
SLOTS = {
    "open": ("connection", "on_open"),
    "close": ("connection", "on_close"),
    "fail": ("connection", "on_fail"),
    "message": ("socketio", "on_message"),
    "json": ("socketio", "on_json"),
    "event": ("socketio", "on_event"),
    "error": ("socketio", "on_error"),
}
