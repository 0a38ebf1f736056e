"""Inbound packet dispatch.

Decoded packets are routed by type to the SocketIOListener callbacks. Message,
JSON and event packets that carry a nonzero id are wrapped in the ack-proxy:
the listener gets a ResponseSink, and whatever it writes there is sent back
as an ack packet once the listener returns. With a zero id no sink is offered
and nothing is sent back.

Every packet is handled in isolation; a bad packet or a failing listener is
logged and the next packet is processed normally.
"""
import logging
from typing import Callable, Dict, Optional

from .ack_registry import AckRegistry
from .errors import DecodeError, NoActiveSessionError, NotSocketIOMessage
from .listeners import SocketIOListener
from .packet import Packet, PacketType, decode, encode

logger = logging.getLogger(__name__)


class ResponseSink:
    """Holds the reply to a peer-requested acknowledgment."""

    def __init__(self):
        self.value: Optional[str] = None

    def write(self, text: str) -> None:
        self.value = text

    @property
    def written(self) -> bool:
        return self.value is not None


class Dispatcher:
    """Routes decoded packets to listener callbacks."""

    def __init__(self, send: Callable[[str], None], close: Callable[[], None],
                 acks: AckRegistry, listener: SocketIOListener):
        self._send = send
        self._close = close
        self._acks = acks
        self.listener = listener
        self._handlers: Dict[PacketType, Callable[[Packet], None]] = {
            PacketType.DISCONNECT: self._on_disconnect,
            PacketType.CONNECT: self._on_connect,
            PacketType.HEARTBEAT: self._on_heartbeat,
            PacketType.MESSAGE: self._on_message,
            PacketType.JSON: self._on_json,
            PacketType.EVENT: self._on_event,
            PacketType.ACK: self._on_ack,
            PacketType.ERROR: self._on_error,
            PacketType.NOOP: self._on_noop,
        }

    def dispatch_raw(self, text: str) -> None:
        """Decode one frame from the transport and dispatch it."""
        try:
            packet = decode(text)
        except NotSocketIOMessage as e:
            logger.warning(str(e))
            return
        except DecodeError as e:
            logger.warning(f"Dropping packet {text[:200]!r}: {e}")
            return
        except Exception as e:
            logger.error(f"Dropping undecodable packet {text[:200]!r}: {e}", exc_info=True)
            return
        self.dispatch(packet)

    def dispatch(self, packet: Packet) -> None:
        handler = self._handlers.get(packet.type)
        if handler is None:
            logger.debug(f"Ignoring packet of unknown type: {packet}")
            return
        try:
            handler(packet)
        except Exception as e:
            logger.error(f"Error handling {packet.type.name} packet: {e}", exc_info=True)

    # --- Outbound helpers ---

    def _reply(self, text: str) -> None:
        try:
            self._send(text)
        except NoActiveSessionError:
            logger.warning(f"Reply not sent, no active session: {text}")

    def _with_ack(self, msg_id: int, callback: Optional[Callable], *args) -> None:
        sink = ResponseSink() if msg_id > 0 else None
        if callback is not None:
            callback(*args, sink)
        if sink is not None and sink.written:
            self._reply(encode(PacketType.ACK, msg_id, "", sink.value))

    # --- Per-type handlers ---

    def _on_disconnect(self, packet: Packet) -> None:
        logger.info(f"Received disconnect from server (endpoint {packet.endpoint!r})")
        self._close()

    def _on_connect(self, packet: Packet) -> None:
        logger.info(f"Received connect ack for endpoint {packet.endpoint!r}")

    def _on_heartbeat(self, packet: Packet) -> None:
        logger.debug("Received heartbeat")
        self._reply(encode(PacketType.HEARTBEAT))

    def _on_message(self, packet: Packet) -> None:
        logger.debug(f"Received message on {packet.endpoint!r}: {packet.data}")
        self._with_ack(packet.id, self.listener.on_message, packet.endpoint, packet.payload)

    def _on_json(self, packet: Packet) -> None:
        logger.debug(f"Received JSON message on {packet.endpoint!r}: {packet.data}")
        self._with_ack(packet.id, self.listener.on_json, packet.endpoint, packet.payload)

    def _on_event(self, packet: Packet) -> None:
        logger.debug(f"Received event on {packet.endpoint!r}: {packet.data}")
        name, args = packet.payload
        self._with_ack(packet.id, self.listener.on_event, packet.endpoint, name, args)

    def _on_ack(self, packet: Packet) -> None:
        logger.debug(f"Received ack: {packet.data}")
        self._acks.resolve(packet.data)

    def _on_error(self, packet: Packet) -> None:
        reason, advice = packet.payload
        logger.warning(f"Received error on {packet.endpoint!r}: {reason} ({advice})")
        if self.listener.on_error:
            self.listener.on_error(packet.endpoint, reason, advice)

    def _on_noop(self, packet: Packet) -> None:
        pass
