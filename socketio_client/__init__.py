"""Socket.IO protocol client.

This package implements a client for the Socket.IO (protocol version 1)
real-time messaging protocol over websockets: handshake negotiation, packet
encoding/decoding, the connection lifecycle, heartbeats, acknowledgment
correlation and dispatch of inbound packets to listener callbacks.

Components:
- SocketIOClient: Application-facing client
- Connection: Connection lifecycle state machine and network thread
- Dispatcher: Routes decoded packets to listeners (with ack replies)
- HandshakeNegotiator: HTTP handshake producing a Session
- AckRegistry: Outstanding acknowledgment callbacks
- HeartbeatScheduler: Periodic heartbeat sender
"""

from .ack_registry import AckRegistry, shared_registry
from .client import SocketIOClient
from .connection import Connection, ConnectionState
from .dispatcher import Dispatcher, ResponseSink
from .errors import (
    SocketIOError, HandshakeError, InvalidProtocolError, ServerRejectedError,
    InvalidHandshakeBodyError, UnsupportedTransportError, DecodeError,
    NotSocketIOMessage, JsonDecodeError, MalformedEventError, NoActiveSessionError
)
from .handshake import HandshakeNegotiator, Session
from .heartbeat import HeartbeatScheduler
from .listeners import ConnectionListener, SocketIOListener
from .packet import Packet, PacketType, EventPayload, ErrorPayload, encode, decode
from .transport import Transport, WebSocketTransport

__all__ = [
    'SocketIOClient', 'Connection', 'ConnectionState', 'Dispatcher', 'ResponseSink',
    'HandshakeNegotiator', 'Session', 'AckRegistry', 'shared_registry',
    'HeartbeatScheduler', 'ConnectionListener', 'SocketIOListener',
    'Packet', 'PacketType', 'EventPayload', 'ErrorPayload', 'encode', 'decode',
    'Transport', 'WebSocketTransport',
    'SocketIOError', 'HandshakeError', 'InvalidProtocolError', 'ServerRejectedError',
    'InvalidHandshakeBodyError', 'UnsupportedTransportError', 'DecodeError',
    'NotSocketIOMessage', 'JsonDecodeError', 'MalformedEventError', 'NoActiveSessionError',
]
