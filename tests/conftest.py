"""Test configuration and fixtures for the Socket.IO client tests."""
import os
import sys
import time
import queue
import pytest

# Add application root to Python path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from socketio_client.ack_registry import AckRegistry
from socketio_client.client import SocketIOClient
from socketio_client.connection import Connection
from socketio_client.handshake import HandshakeNegotiator
from socketio_client.listeners import ConnectionListener
from socketio_client.transport import Transport
from utils.config_loader import ConfigManager

HANDSHAKE_BODY = "abc123:30:60:websocket,xhr-polling"

_CLOSE = object()


class FakeTransport(Transport):
    """In-memory transport: frames pushed with `inject()` reach on_message."""

    def __init__(self, fail_on_connect=False):
        super().__init__()
        self.fail_on_connect = fail_on_connect
        self.uri = None
        self.sent = []
        self.close_reason = None
        self._inbox = queue.Queue()

    def run(self, uri):
        self.uri = uri
        if self.fail_on_connect:
            self.on_fail()
            return
        self.on_open()
        try:
            while True:
                item = self._inbox.get()
                if item is _CLOSE:
                    break
                self.on_message(item)
        finally:
            self.on_close()

    def send(self, text):
        self.sent.append(text)

    def close(self, reason=""):
        self.close_reason = reason
        self._inbox.put(_CLOSE)

    def inject(self, text):
        self._inbox.put(text)

    def drop(self):
        """Simulate the server closing the connection."""
        self._inbox.put(_CLOSE)


def make_response(body=HANDSHAKE_BODY, status="200 OK"):
    return (f"HTTP/1.1 {status}\r\n"
            "Content-Type: text/plain\r\n"
            "Connection: close\r\n"
            "\r\n"
            f"{body}").encode("utf-8")


class FakeExchange:
    """Stands in for the TCP handshake exchange and records requests."""

    def __init__(self, response=None, error=None):
        self.response = response if response is not None else make_response()
        self.error = error
        self.requests = []

    def __call__(self, host, port, request, timeout=None):
        self.requests.append((host, port, request, timeout))
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def wait_for():
    """Poll a predicate until it holds or the timeout expires."""
    def _wait_for(predicate, timeout=2.0):
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if predicate():
                return True
            time.sleep(0.01)
        return predicate()
    return _wait_for


@pytest.fixture
def transports():
    """Every FakeTransport created by `transport_factory`."""
    return []


@pytest.fixture
def transport_factory(transports):
    def _factory():
        transport = FakeTransport()
        transports.append(transport)
        return transport
    return _factory


@pytest.fixture
def exchange():
    return FakeExchange()


@pytest.fixture
def negotiator(exchange):
    return HandshakeNegotiator(exchange=exchange)


@pytest.fixture
def connection(transport_factory, negotiator):
    """Provide a Connection wired to fakes; closed after the test."""
    conn = Connection(transport_factory=transport_factory, negotiator=negotiator,
                      listener=ConnectionListener())
    yield conn
    conn.close()


@pytest.fixture
def test_config(tmp_path):
    """Provide a configuration isolated from files and environment."""
    return ConfigManager(config_dir=str(tmp_path), use_env=False)


@pytest.fixture
def client(transport_factory, negotiator, test_config):
    """Provide a SocketIOClient wired to fakes with a private ack registry."""
    sio = SocketIOClient(transport_factory=transport_factory, negotiator=negotiator,
                         ack_registry=AckRegistry(), settings=test_config)
    yield sio
    sio.close()


@pytest.fixture
def connected_client(client, transports, wait_for):
    """Provide a client whose fake websocket is open."""
    assert client.connect("http://localhost:3000")
    assert wait_for(lambda: client.connected)
    return client, transports[0]
