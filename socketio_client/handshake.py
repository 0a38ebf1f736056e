"""Socket.IO handshake negotiation.

Before the websocket is opened the client performs a one-shot HTTP exchange
with the server to obtain a session id and the heartbeat/disconnect timeouts.
The request is written byte for byte as the server expects it:

    POST /socket.io/1/ HTTP/1.0
    Host: example.com
    Accept: */*
    Connection: close

and the response body has the form `sid:heartbeat:disconnect:transports`.

Key Features:
- Raw HTTP/1.0 exchange over a plain TCP socket
- Status line and body validation with a typed error for each failure
- Lenient handling of unexpected status codes (logged, not fatal)
- Websocket upgrade URI synthesis from the negotiated session

The negotiator runs synchronously on the caller's thread and keeps no state
shared with a running connection.

#TODO:
- Support wss:// upgrades once the handshake exchange can run over TLS
"""
import socket
import logging
from dataclasses import dataclass
from typing import Callable, FrozenSet, Optional
from urllib.parse import urlsplit

from .errors import (
    HandshakeError, InvalidHandshakeBodyError, InvalidProtocolError,
    ServerRejectedError, UnsupportedTransportError
)

logger = logging.getLogger(__name__)

DEFAULT_RESOURCE = "/socket.io"
PROTOCOL_VERSION = 1

# (host, port, request bytes, timeout) -> raw response bytes
Exchange = Callable[[str, int, bytes, Optional[float]], bytes]


@dataclass(frozen=True)
class Session:
    """Server-negotiated parameters for one connection attempt."""
    session_id: str
    heartbeat_timeout: int
    disconnect_timeout: int
    transports: FrozenSet[str]
    resource_path: str
    host: str
    port: int
    transport: str = "websocket"

    @property
    def websocket_uri(self) -> str:
        """The URI the transport connects to after the handshake."""
        return (f"ws://{self.host}:{self.port}{self.resource_path}"
                f"/{PROTOCOL_VERSION}/{self.transport}/{self.session_id}")


def socket_exchange(host: str, port: int, request: bytes,
                    timeout: Optional[float] = None) -> bytes:
    """Send `request` over a fresh TCP connection and read until the server closes it."""
    chunks = []
    with socket.create_connection((host, port), timeout=timeout) as sock:
        sock.sendall(request)
        while True:
            chunk = sock.recv(4096)
            if not chunk:
                break
            chunks.append(chunk)
    return b"".join(chunks)


def _parse_timeout(value: str) -> int:
    try:
        seconds = int(value.strip())
    except ValueError:
        return 0
    return max(seconds, 0)


class HandshakeNegotiator:
    """Performs the HTTP handshake and builds a Session from the reply."""

    def __init__(self, transport: str = "websocket", timeout: Optional[float] = None,
                 exchange: Exchange = socket_exchange):
        self.transport = transport
        self.timeout = timeout
        self._exchange = exchange

    def negotiate(self, url: str, resource: str = DEFAULT_RESOURCE) -> Session:
        """Run the handshake against `url` and return the negotiated Session.

        Args:
            url: Server address, e.g. `ws://localhost:3000` or `http://host:port`
            resource: Path the Socket.IO server listens on
        Raises:
            HandshakeError: any failure, including socket errors
        """
        host, port = self._resolve(url)
        request = self.build_request(host, resource)

        logger.info(f"Sending handshake to {host}:{port}{resource}")
        try:
            raw = self._exchange(host, port, request.encode("ascii"), self.timeout)
        except OSError as e:
            raise HandshakeError(f"Handshake request to {host}:{port} failed: {e}") from e

        body = self.parse_response(raw.decode("utf-8", errors="replace"))
        session = self.parse_body(body, resource, host, port)

        logger.info(f"Session ID: {session.session_id}")
        logger.debug(f"Heartbeat Timeout: {session.heartbeat_timeout}")
        logger.debug(f"Disconnect Timeout: {session.disconnect_timeout}")
        logger.debug(f"Allowed Transports: {','.join(sorted(session.transports))}")
        return session

    @staticmethod
    def build_request(host: str, resource: str) -> str:
        return (f"POST {resource}/{PROTOCOL_VERSION}/ HTTP/1.0\r\n"
                f"Host: {host}\r\n"
                "Accept: */*\r\n"
                "Connection: close\r\n"
                "\r\n")

    @staticmethod
    def parse_response(response: str) -> str:
        """Validate the status line and return the response body.

        Any status other than 200/401/503 is logged and the body is still used.
        """
        head, sep, body = response.partition("\r\n\r\n")
        if not sep:
            head, _, body = response.partition("\n\n")
        lines = head.splitlines()
        status_line = lines[0] if lines else ""

        parts = status_line.split(None, 2)
        if not parts or not parts[0].startswith("HTTP/"):
            raise InvalidProtocolError(f"Invalid HTTP protocol: {status_line!r}")
        try:
            status = int(parts[1])
        except (IndexError, ValueError):
            raise InvalidProtocolError(f"Invalid HTTP status line: {status_line!r}")

        for header in lines[1:]:
            logger.debug(f"Handshake header: {header}")

        if status == 200:
            logger.debug("Server accepted connection.")
        elif status in (401, 503):
            raise ServerRejectedError(status)
        else:
            logger.warning(f"Server returned unknown status code: {status}")
        return body

    def parse_body(self, body: str, resource: str, host: str, port: int) -> Session:
        fields = body.strip().split(":")
        if len(fields) < 4 or not fields[0]:
            raise InvalidHandshakeBodyError(f"Malformed handshake body: {body!r}")

        transports_csv = fields[3]
        if self.transport not in transports_csv:
            raise UnsupportedTransportError(self.transport, transports_csv)

        return Session(
            session_id=fields[0],
            heartbeat_timeout=_parse_timeout(fields[1]),
            disconnect_timeout=_parse_timeout(fields[2]),
            transports=frozenset(t.strip() for t in transports_csv.split(",") if t.strip()),
            resource_path=resource,
            host=host,
            port=port,
            transport=self.transport,
        )

    @staticmethod
    def _resolve(url: str):
        parts = urlsplit(url)
        if not parts.hostname:
            raise HandshakeError(f"Invalid server URL: {url!r}")
        try:
            port = parts.port
        except ValueError as e:
            raise HandshakeError(f"Invalid server URL: {url!r}") from e
        if port is None:
            port = 443 if parts.scheme in ("https", "wss") else 80
        return parts.hostname, port
