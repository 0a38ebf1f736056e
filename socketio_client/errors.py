"""Exception types raised by the Socket.IO client."""


class SocketIOError(Exception):
    """Base class for every error raised by the client."""


# --- Handshake ---

class HandshakeError(SocketIOError):
    """The HTTP handshake did not produce a usable session."""


class InvalidProtocolError(HandshakeError):
    """The handshake response did not start with an HTTP status line."""


class ServerRejectedError(HandshakeError):
    """The server refused the handshake (401 or 503)."""

    def __init__(self, status: int):
        super().__init__(f"Server rejected client connection (status {status})")
        self.status = status


class InvalidHandshakeBodyError(HandshakeError):
    """The handshake body is not `sid:heartbeat:disconnect:transports`."""


class UnsupportedTransportError(HandshakeError):
    """The server does not offer the transport this client speaks."""

    def __init__(self, transport: str, allowed: str):
        super().__init__(f"Server does not support {transport} transport: {allowed}")
        self.transport = transport
        self.allowed = allowed


# --- Packet decoding ---

class DecodeError(SocketIOError):
    """A single inbound packet could not be decoded."""


class NotSocketIOMessage(DecodeError):
    """The text is not shaped like `type:id:...`."""


class JsonDecodeError(DecodeError):
    """The payload of a JSON message or event is not valid JSON."""


class MalformedEventError(DecodeError):
    """An event payload has no string `name` field."""


# --- Sending ---

class NoActiveSessionError(SocketIOError):
    """A send was attempted while the client is not connected."""

    def __init__(self, message: str = "No active session"):
        super().__init__(message)
