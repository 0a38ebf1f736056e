"""Socket.IO packet codec.

Packets travel as colon-delimited text:

    <type>:<id>:<endpoint>:<data>

The id field is left empty when no acknowledgment is requested and the data
field may itself contain colons, so decoding only splits on the first three.
Encoding and decoding are pure functions; nothing here touches the connection.
"""
import enum
import json
import re
import logging
from dataclasses import dataclass
from typing import Any, List, NamedTuple, Optional, Union

from .errors import JsonDecodeError, MalformedEventError, NotSocketIOMessage

logger = logging.getLogger(__name__)

_LEADING_DIGITS = re.compile(r"\s*(\d+)")


class PacketType(enum.IntEnum):
    """The nine Socket.IO packet kinds, numbered as on the wire."""
    DISCONNECT = 0
    CONNECT = 1
    HEARTBEAT = 2
    MESSAGE = 3
    JSON = 4
    EVENT = 5
    ACK = 6
    ERROR = 7
    NOOP = 8


class EventPayload(NamedTuple):
    name: str
    args: List[Any]


class ErrorPayload(NamedTuple):
    reason: str
    advice: str


@dataclass(frozen=True)
class Packet:
    """A decoded packet.

    `type` is None when the type field is not a known packet kind.
    `data` is the raw payload text; `payload` is its decoded form (the raw
    text, a JSON value, an EventPayload or an ErrorPayload depending on type).
    """
    type: Optional[PacketType]
    id: int = 0
    endpoint: str = ""
    data: str = ""
    payload: Any = None


def parse_int_prefix(text: str) -> Optional[int]:
    """Return the integer formed by the leading digits of `text`, if any."""
    match = _LEADING_DIGITS.match(text)
    if match is None:
        return None
    return int(match.group(1))


def dumps(value: Any) -> str:
    """Serialize a JSON value the way it goes on the wire (compact)."""
    return json.dumps(value, separators=(",", ":"))


def encode(packet_type: Union[PacketType, int], msg_id: int = 0,
           endpoint: str = "", data: Optional[str] = None) -> str:
    """Encode a packet to wire text.

    A zero id renders as an empty field. When `data` is None the payload
    field is omitted entirely (`2::`, `1::/chat`).
    """
    fields = [str(int(packet_type)), str(msg_id) if msg_id > 0 else "", endpoint]
    if data is not None:
        fields.append(data)
    return ":".join(fields)


def encode_event(name: str, args: List[Any]) -> str:
    """Build the JSON payload of an event packet."""
    return dumps({"name": name, "args": list(args)})


def decode(raw: str) -> Packet:
    """Decode wire text into a Packet.

    Raises:
        NotSocketIOMessage: fewer than two colon-delimited fields.
        JsonDecodeError: a JSON message or event carries invalid JSON.
        MalformedEventError: an event payload lacks a string `name`.
    """
    fields = raw.split(":", 3)
    if len(fields) < 2:
        raise NotSocketIOMessage(f"Non-Socket.IO message: {raw!r}")

    packet_type = _parse_type(fields[0])
    msg_id = parse_int_prefix(fields[1]) or 0
    endpoint = fields[2] if len(fields) > 2 else ""
    data = fields[3] if len(fields) > 3 else ""

    if packet_type == PacketType.JSON:
        payload = _loads(data)
    elif packet_type == PacketType.EVENT:
        payload = _decode_event(data)
    elif packet_type == PacketType.ERROR:
        reason, _, advice = data.partition("+")
        payload = ErrorPayload(reason, advice)
    else:
        payload = data

    return Packet(type=packet_type, id=msg_id, endpoint=endpoint, data=data, payload=payload)


def _parse_type(text: str) -> Optional[PacketType]:
    try:
        return PacketType(int(text))
    except ValueError:
        logger.debug(f"Unknown packet type field: {text!r}")
        return None


def _loads(data: str) -> Any:
    try:
        return json.loads(data)
    except (ValueError, RecursionError) as e:
        raise JsonDecodeError(f"Json parse error: {e}") from e


def _decode_event(data: str) -> EventPayload:
    obj = _loads(data)
    if not isinstance(obj, dict) or not isinstance(obj.get("name"), str):
        raise MalformedEventError(f"Event without a name: {data!r}")
    args = obj.get("args", [])
    if args is None:
        args = []
    elif not isinstance(args, list):
        args = [args]
    return EventPayload(obj["name"], args)
