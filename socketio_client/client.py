#!/usr/bin/env python3
"""Socket.IO Client

This module implements the application-facing Socket.IO client. It ties the
handshake, the connection state machine, the packet dispatcher and the
acknowledgment registry together behind one object.

Key Features:
- Handshake + websocket connection on a background network thread
- Event, message and JSON message sending with optional ack callbacks
- Listener slots for lifecycle and inbound traffic, settable via `on()`
- Automatic heartbeats while connected
- Namespace (endpoint) connect/disconnect packets

Example:
    client = SocketIOClient()

    @client.on("event")
    def on_event(endpoint, name, args, response):
        if response is not None:
            response.write("thanks")

    client.connect("http://localhost:3000")
    client.emit("hello", ["world"], callback=lambda: print("acked"))
    client.close()
"""
import sys
import json
import time
import logging
import argparse
import threading
from typing import Any, Callable, Optional

from utils.config_loader import ConfigManager, get_config
from utils.log_config import setup_logging

from .ack_registry import AckRegistry, shared_registry
from .connection import Connection, ConnectionState
from .dispatcher import Dispatcher
from .errors import NoActiveSessionError
from .handshake import HandshakeNegotiator, Session
from .listeners import SLOTS, ConnectionListener, SocketIOListener
from .packet import PacketType, dumps, encode, encode_event
from .transport import Transport, WebSocketTransport

logger = logging.getLogger(__name__)


class SocketIOClient:
    def __init__(self,
                 transport_factory: Optional[Callable[[], Transport]] = None,
                 negotiator: Optional[HandshakeNegotiator] = None,
                 ack_registry: Optional[AckRegistry] = None,
                 settings: Optional[ConfigManager] = None):
        self.settings = settings or get_config()

        if transport_factory is None:
            open_timeout = self.settings.get('client', 'open_timeout', default=10)
            close_timeout = self.settings.get('client', 'close_timeout', default=10)
            transport_factory = lambda: WebSocketTransport(open_timeout, close_timeout)
        if negotiator is None:
            negotiator = HandshakeNegotiator(
                transport=self.settings.get('client', 'transport', default='websocket'),
                timeout=self.settings.get('client', 'handshake_timeout'),
            )

        self.connection_listener = ConnectionListener()
        self.listener = SocketIOListener()
        self._acks = ack_registry or shared_registry

        self._connection = Connection(
            transport_factory=transport_factory,
            negotiator=negotiator,
            listener=self.connection_listener,
            close_reason=self.settings.get('client', 'close_reason', default='Ended by user'),
        )
        self._dispatcher = Dispatcher(
            send=self._connection.send,
            close=self._connection.close,
            acks=self._acks,
            listener=self.listener,
        )
        self._connection.set_message_handler(self._dispatcher.dispatch_raw)

    # --- Listener registration ---

    def on(self, kind: str, handler: Optional[Callable] = None):
        """Set the listener for `kind` (open, close, fail, message, json, event, error).

        Works as a plain call or as a decorator.
        """
        if kind not in SLOTS:
            raise ValueError(f"Unknown listener kind: {kind}")
        owner_name, attribute = SLOTS[kind]
        owner = self.connection_listener if owner_name == "connection" else self.listener

        def set_handler(fn):
            setattr(owner, attribute, fn)
            return fn

        if handler is None:
            return set_handler
        return set_handler(handler)

    # --- Lifecycle ---

    def connect(self, url: Optional[str] = None, resource: Optional[str] = None) -> bool:
        """Handshake with the server and open the websocket in the background.

        Failures are logged and reported through the `fail` listener.
        """
        url = url or self.settings.get('client', 'url')
        resource = resource or self.settings.get('client', 'resource', default='/socket.io')
        return self._connection.connect(url, resource)

    def close(self) -> None:
        """Disconnect; returns once all background activity has stopped."""
        self._connection.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    @property
    def state(self) -> ConnectionState:
        return self._connection.state

    @property
    def connected(self) -> bool:
        return self._connection.connected

    @property
    def session(self) -> Optional[Session]:
        return self._connection.session

    @property
    def sid(self) -> Optional[str]:
        session = self.session
        return session.session_id if session else None

    @property
    def resource(self) -> Optional[str]:
        session = self.session
        return session.resource_path if session else None

    # --- Sending ---

    def send(self, text: str) -> bool:
        """Send a pre-formatted frame as is. Returns False without a session."""
        try:
            self._connection.send(text)
            return True
        except NoActiveSessionError as e:
            logger.error(f"Error: {e}")
            return False

    def send_packet(self, packet_type: PacketType, endpoint: str = "",
                    data: Optional[str] = None, msg_id: int = 0) -> bool:
        return self.send(encode(packet_type, msg_id, endpoint, data))

    def connect_endpoint(self, endpoint: str) -> bool:
        return self.send_packet(PacketType.CONNECT, endpoint)

    def disconnect_endpoint(self, endpoint: str) -> bool:
        return self.send_packet(PacketType.DISCONNECT, endpoint)

    def emit(self, name: str, args: Any = None, endpoint: str = "",
             callback: Optional[Callable[[], None]] = None) -> bool:
        """Emit event `name`; a non-list `args` is sent as a single argument."""
        if args is None:
            args = []
        elif not isinstance(args, (list, tuple)):
            args = [args]
        return self._send_with_ack(PacketType.EVENT, endpoint, encode_event(name, args), callback)

    def message(self, text: str, endpoint: str = "",
                callback: Optional[Callable[[], None]] = None) -> bool:
        return self._send_with_ack(PacketType.MESSAGE, endpoint, text, callback)

    def json_message(self, value: Any, endpoint: str = "",
                     callback: Optional[Callable[[], None]] = None) -> bool:
        return self._send_with_ack(PacketType.JSON, endpoint, dumps(value), callback)

    def _send_with_ack(self, packet_type: PacketType, endpoint: str, data: str,
                       callback: Optional[Callable[[], None]]) -> bool:
        if callback is None:
            return self.send_packet(packet_type, endpoint, data)
        if not self.connected:
            logger.error("Error: No active session")
            return False

        ack_id = self._acks.next_id()
        self._acks.register(ack_id, callback)
        if not self.send_packet(packet_type, endpoint, data, ack_id):
            self._acks.discard(ack_id)
            return False
        return True


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description='Socket.IO client')
    parser.add_argument('--url', help='Server URL, e.g. http://localhost:3000')
    parser.add_argument('--resource', help='Socket.IO resource path (default /socket.io)')
    parser.add_argument('--event', help='Emit this event once connected')
    parser.add_argument('--data', help='JSON arguments for --event')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    args = parser.parse_args()
    config_manager = get_config()

    level = 'DEBUG' if args.debug else config_manager.get('logging', 'level', default='INFO')
    log = setup_logging(level, config_manager.get('logging', 'log_to_file', default=False),
                        config_manager.get('logging', 'format'))

    try:
        event_args = json.loads(args.data) if args.data else None
    except ValueError as e:
        log.error(f"--data is not valid JSON: {e}")
        return 1

    client = SocketIOClient()
    opened = threading.Event()
    finished = threading.Event()
    client.on('open', opened.set)
    client.on('close', finished.set)
    client.on('fail', finished.set)
    client.on('message', lambda endpoint, data, response: log.info(f"[{endpoint}] message: {data}"))
    client.on('json', lambda endpoint, data, response: log.info(f"[{endpoint}] json: {data}"))
    client.on('event', lambda endpoint, name, event_args, response: log.info(f"[{endpoint}] event {name}: {event_args}"))
    client.on('error', lambda endpoint, reason, advice: log.error(f"[{endpoint}] error: {reason} {advice}"))

    if not client.connect(args.url, args.resource):
        return 1

    try:
        open_timeout = config_manager.get('client', 'open_timeout', default=10)
        if args.event and opened.wait(open_timeout):
            client.emit(args.event, event_args, callback=lambda: log.info(f"{args.event} acknowledged"))
        # Keep the main thread running, listening for events/messages
        while not finished.is_set():
            time.sleep(0.5)
    except KeyboardInterrupt:
        log.info("Shutdown requested by user")
    finally:
        client.close()

    return 0


if __name__ == '__main__':
    sys.exit(main())
