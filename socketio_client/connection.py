"""Connection lifecycle for the Socket.IO client.

The Connection owns the negotiated Session, the transport and the background
network thread. Its state moves through

    DISCONNECTED -> CONNECTING -> CONNECTED -> (CLOSING) -> DISCONNECTED

`connect()` performs the handshake on the caller's thread and then starts the
network thread, which runs the transport and delivers every inbound frame.
Transport callbacks arrive on that thread; `send()` and `close()` may be
called from any thread.

Key Features:
- Handshake failures reported through the listener, never raised to the caller
- Heartbeats started on open and stopped on close or failure
- Sends serialized through a single lock, refused outside CONNECTED
- `close()` returns only after the network thread has exited
"""
import enum
import threading
import logging
from typing import Callable, Optional

from .errors import HandshakeError, NoActiveSessionError
from .handshake import DEFAULT_RESOURCE, HandshakeNegotiator, Session
from .heartbeat import HeartbeatScheduler
from .listeners import ConnectionListener
from .packet import PacketType, encode
from .transport import Transport, WebSocketTransport

logger = logging.getLogger(__name__)

DEFAULT_CLOSE_REASON = "Ended by user"


class ConnectionState(enum.Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    CLOSING = "closing"


class Connection:
    """State machine around one transport connection at a time."""

    def __init__(self,
                 transport_factory: Callable[[], Transport] = WebSocketTransport,
                 negotiator: Optional[HandshakeNegotiator] = None,
                 listener: Optional[ConnectionListener] = None,
                 close_reason: str = DEFAULT_CLOSE_REASON):
        self._transport_factory = transport_factory
        self._negotiator = negotiator or HandshakeNegotiator()
        self.listener = listener or ConnectionListener()
        self.close_reason = close_reason

        self._lock = threading.RLock()
        self._send_lock = threading.Lock()
        self._state = ConnectionState.DISCONNECTED
        self._session: Optional[Session] = None
        self._transport: Optional[Transport] = None
        self._thread: Optional[threading.Thread] = None
        self._message_handler: Callable[[str], None] = lambda text: None

        self.heartbeat = HeartbeatScheduler(self._send_heartbeat)

    # --- Accessors ---

    @property
    def state(self) -> ConnectionState:
        with self._lock:
            return self._state

    @property
    def session(self) -> Optional[Session]:
        with self._lock:
            return self._session

    @property
    def connected(self) -> bool:
        return self.state is ConnectionState.CONNECTED

    def set_message_handler(self, handler: Callable[[str], None]) -> None:
        """Set the callable that receives every inbound text frame."""
        self._message_handler = handler

    # --- Lifecycle ---

    def connect(self, url: str, resource: str = DEFAULT_RESOURCE) -> bool:
        """Negotiate a session and start the network thread.

        Returns False if the connection was not started; the reason is logged
        and handshake failures are also reported through `listener.on_fail`.
        """
        with self._lock:
            if self._state is not ConnectionState.DISCONNECTED:
                logger.warning(f"connect() ignored, connection is {self._state.value}")
                return False
            self._state = ConnectionState.CONNECTING
            previous, self._thread = self._thread, None

        # A network thread from an earlier connection may still be unwinding
        if previous is not None and previous is not threading.current_thread():
            previous.join()

        try:
            session = self._negotiator.negotiate(url, resource)
        except HandshakeError as e:
            logger.error(f"Handshake failed: {e}")
            with self._lock:
                self._state = ConnectionState.DISCONNECTED
            self._notify(self.listener.failed)
            return False

        transport = self._transport_factory()
        transport.bind(
            on_open=self._on_open,
            on_close=self._on_close,
            on_fail=self._on_fail,
            on_message=self._on_message,
        )
        thread = threading.Thread(
            target=self._run, args=(transport, session.websocket_uri),
            name="socketio-network", daemon=True
        )

        with self._lock:
            if self._state is not ConnectionState.CONNECTING:
                logger.info("Connection attempt cancelled by close()")
                self._state = ConnectionState.DISCONNECTED
                return False
            self._session = session
            self._transport = transport
            self._thread = thread
        thread.start()
        return True

    def close(self) -> None:
        """Disconnect and wait for the network thread to finish."""
        with self._lock:
            state = self._state
            transport = self._transport

        if state is ConnectionState.CONNECTED:
            try:
                self.send(encode(PacketType.DISCONNECT))
            except NoActiveSessionError:
                pass
            with self._lock:
                if self._state is ConnectionState.CONNECTED:
                    self._state = ConnectionState.CLOSING
            self.heartbeat.stop()
            transport.close(self.close_reason)
        elif state is ConnectionState.CONNECTING:
            with self._lock:
                self._state = ConnectionState.CLOSING
            if transport is not None:
                transport.close(self.close_reason)
        else:
            logger.error("Error: No active session")

        with self._lock:
            thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join()
            with self._lock:
                if self._thread is thread:
                    self._thread = None

    def send(self, text: str) -> None:
        """Send one frame.

        Raises:
            NoActiveSessionError: the connection is not CONNECTED
        """
        with self._lock:
            if self._state is not ConnectionState.CONNECTED:
                raise NoActiveSessionError()
            transport = self._transport
        with self._send_lock:
            transport.send(text)

    # --- Network thread ---

    def _run(self, transport: Transport, uri: str) -> None:
        try:
            transport.run(uri)
        except Exception as e:
            logger.error(f"Network loop crashed: {e}", exc_info=True)
            if self.state is not ConnectionState.DISCONNECTED:
                self._on_fail()
        logger.debug("run loop end")

    def _on_open(self) -> None:
        with self._lock:
            if self._state is not ConnectionState.CONNECTING:
                logger.debug(f"Ignoring transport open while {self._state.value}")
                return
            self._state = ConnectionState.CONNECTED
            interval = self._session.heartbeat_timeout

        self.heartbeat.start(interval)
        logger.info("Connected.")
        self._notify(self.listener.opened)

    def _on_close(self) -> None:
        self._teardown()
        logger.info("Client Disconnected.")
        self._notify(self.listener.closed)

    def _on_fail(self) -> None:
        self._teardown()
        logger.error("Connection failed.")
        self._notify(self.listener.failed)

    def _on_message(self, text: str) -> None:
        try:
            self._message_handler(text)
        except Exception as e:
            logger.error(f"Message handler failed: {e}", exc_info=True)

    def _teardown(self) -> None:
        self.heartbeat.stop()
        with self._lock:
            self._state = ConnectionState.DISCONNECTED
            self._session = None
            self._transport = None

    def _send_heartbeat(self) -> None:
        try:
            self.send(encode(PacketType.HEARTBEAT))
        except NoActiveSessionError:
            logger.debug("Heartbeat skipped, no active session")
        else:
            logger.debug("Sent Heartbeat.")

    @staticmethod
    def _notify(callback: Callable[[], None]) -> None:
        try:
            callback()
        except Exception as e:
            logger.error(f"Connection listener failed: {e}", exc_info=True)
