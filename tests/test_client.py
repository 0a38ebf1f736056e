"""Tests for the application-facing Socket.IO client."""
import threading
from unittest.mock import Mock

import pytest

from socketio_client.ack_registry import AckRegistry
from socketio_client.client import SocketIOClient
from socketio_client.connection import ConnectionState
from socketio_client.packet import PacketType


def test_client_initialization(client):
    """Test client defaults before connecting."""
    assert client.state is ConnectionState.DISCONNECTED
    assert not client.connected
    assert client.sid is None
    assert client.resource is None


def test_send_while_disconnected(client, transports):
    """Test that sends fail without a session and nothing is queued."""
    callback = Mock()
    assert not client.emit("foo", ["bar"], callback=callback)
    assert not client.message("hi")
    assert not client.send("3:::raw")
    assert len(client._acks) == 0
    assert transports == []


def test_session_accessors(connected_client):
    """Test sid and resource once connected."""
    client, _ = connected_client
    assert client.sid == "abc123"
    assert client.resource == "/socket.io"


def test_connect_uses_configured_url(client, transports, wait_for, test_config):
    """Test connect() without arguments falls back to configuration."""
    test_config.set("client", "url", "http://example.com:9000")
    assert client.connect()
    assert wait_for(lambda: client.connected)
    assert transports[0].uri == "ws://example.com:9000/socket.io/1/websocket/abc123"


def test_emit_wire_format(connected_client):
    """Test event, message and JSON packets on the wire."""
    client, transport = connected_client
    assert client.emit("foo", ["bar", 1])
    assert client.emit("single", "value", endpoint="/chat")
    assert client.emit("empty")
    assert client.message("hi")
    assert client.json_message({"a": 1})

    assert transport.sent == [
        '5:::{"name":"foo","args":["bar",1]}',
        '5::/chat:{"name":"single","args":["value"]}',
        '5:::{"name":"empty","args":[]}',
        "3:::hi",
        '4:::{"a":1}',
    ]


def test_endpoint_packets(connected_client):
    """Test namespace connect and disconnect."""
    client, transport = connected_client
    client.connect_endpoint("/chat")
    client.disconnect_endpoint("/chat")
    client.send_packet(PacketType.NOOP)
    assert transport.sent == ["1::/chat", "0::/chat", "8::"]


def test_emit_with_callback(connected_client, wait_for):
    """Test an ack round trip for an emitted event."""
    client, transport = connected_client
    acked = threading.Event()

    assert client.emit("foo", ["bar"], callback=acked.set)
    assert transport.sent == ['5:1::{"name":"foo","args":["bar"]}']

    transport.inject("6:::1")
    assert acked.wait(2)
    assert len(client._acks) == 0


def test_ack_ids_increase(connected_client):
    """Test successive requests get distinct ids."""
    client, transport = connected_client
    client.message("a", callback=Mock())
    client.json_message([1], callback=Mock())
    assert transport.sent == ["3:1::a", "4:2::[1]"]


def test_on_registers_handlers(client):
    """Test listener registration as call and as decorator."""
    on_open = Mock()
    client.on("open", on_open)

    @client.on("event")
    def on_event(endpoint, name, args, response):
        pass

    assert client.connection_listener.on_open is on_open
    assert client.listener.on_event is on_event


def test_on_unknown_kind(client):
    """Test registering an unknown listener kind."""
    with pytest.raises(ValueError):
        client.on("bogus", Mock())


def test_inbound_event_answered(connected_client, wait_for):
    """Test a listener replying to a server event through the ack-proxy."""
    client, transport = connected_client

    @client.on("event")
    def on_event(endpoint, name, args, response):
        if response is not None:
            response.write(f"got {name}")

    transport.inject('5:3::{"name":"ping","args":[]}')
    assert wait_for(lambda: "6:3::got ping" in transport.sent)


def test_server_disconnect(connected_client, wait_for):
    """Test a disconnect packet from the server closes the client."""
    client, transport = connected_client
    closed = threading.Event()
    client.on("close", closed.set)

    transport.inject("0::")

    assert closed.wait(2)
    assert wait_for(lambda: client.state is ConnectionState.DISCONNECTED)
    assert "0::" in transport.sent


def test_close(connected_client):
    """Test close() sends disconnect and waits for teardown."""
    client, transport = connected_client
    client.close()
    assert transport.sent[-1] == "0::"
    assert not client.connected
    assert client.sid is None


def test_context_manager(transport_factory, negotiator, test_config, transports, wait_for):
    """Test that leaving the context closes the client."""
    with SocketIOClient(transport_factory=transport_factory, negotiator=negotiator,
                        ack_registry=AckRegistry(), settings=test_config) as sio:
        sio.connect("http://localhost:3000")
        assert wait_for(lambda: sio.connected)
    assert not sio.connected
    assert transports[0].sent == ["0::"]


def test_handshake_failure(client, exchange):
    """Test that connect() reports a failed handshake through on_fail."""
    exchange.error = ConnectionRefusedError("refused")
    on_fail = Mock()
    client.on("fail", on_fail)

    assert not client.connect("http://localhost:3000")
    on_fail.assert_called_once_with()
    assert client.state is ConnectionState.DISCONNECTED


def test_deeply_nested_event_dropped(connected_client, wait_for):
    """Test a payload nested too deep is dropped and the connection stays up."""
    client, transport = connected_client
    messages = []
    client.on("message", lambda endpoint, data, response: messages.append(data))

    transport.inject("5:::" + "[" * 100000)
    transport.inject("3:::after")

    assert wait_for(lambda: messages == ["after"])
    assert client.connected
