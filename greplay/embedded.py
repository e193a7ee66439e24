"""Functions that rules may call while checking or acting on packets."""

import logging
import os
import re
import socket
from dataclasses import dataclass

from .forward import current_forwarder

_log = logging.getLogger(__name__)

NB_COPIES_ENV = "MMT_5GREPLAY_NB_COPIES"
HTTP2_NB_COPIES_ENV = "MMT_5GREPLAY_HTTP2_NB_COPIES"
DEFAULT_NB_COPIES = 0
DEFAULT_HTTP2_NB_COPIES = 5000

_ULONG_MAX = (1 << 64) - 1
_UINT32_MASK = 0xFFFFFFFF
_UINT64_MASK = (1 << 64) - 1

_UNSIGNED_NUMBER = re.compile(
    r"\s*([+-]?)(0[xX][0-9a-fA-F]+|0[0-7]*|[1-9][0-9]*)"
)


@dataclass(frozen=True)
class TraceElement:
    """One attribute value carried by a message of a rule's trace."""

    proto_id: int
    att_id: int
    data: object = None


@dataclass(frozen=True)
class TraceMessage:
    """A message that took part in validating a rule."""

    elements: tuple = ()

    def __post_init__(self):
        object.__setattr__(self, "elements", tuple(self.elements))


@dataclass(frozen=True)
class ProtoAttribute:
    """A protocol attribute used by a rule."""

    proto: str
    att: str
    proto_id: int
    att_id: int
    data_type: object = None
    dpi_type: object = None


def is_exist(value):
    """Return True when the attribute is present."""
    return value is not None


def is_null(value):
    """Return True when the attribute is absent."""
    return value is None


def is_empty(value):
    """Return True when the attribute is absent or an empty string."""
    if value is None or len(value) == 0:
        return True
    return value[0] in ("\0", 0)


def is_same_ipv4(ip_bytes, ip):
    """Return True when the 4 bytes of ``ip_bytes`` are the IPv4 address ``ip``."""
    if ip_bytes is None:
        return False
    try:
        expected = socket.inet_aton(ip)
    except (OSError, TypeError):
        _log.error("Invalide IP address: %s", ip)
        return False
    return bytes(ip_bytes[:4]) == expected


def get_value_from_trace(proto_id, att_id, event_id, trace):
    """Return the data of ``proto_id.att_id`` in the message of event ``event_id``.

    Returns None when the event or the attribute is not in the trace.
    """
    if event_id < 0 or event_id >= len(trace):
        return None
    message = trace[event_id]
    if message is None:
        return None
    for element in message.elements:
        if element.proto_id == proto_id and element.att_id == att_id:
            return element.data
    return None


def get_numeric_value(proto_id, att_id, event_id, trace):
    """Return the numeric value of an attribute in the trace as an integer, or 0."""
    value = get_value_from_trace(proto_id, att_id, event_id, trace)
    if value is None:
        return 0
    return int(value) & _UINT64_MASK


def forward_packet():
    """Send the current packet; return whether it was sent."""
    forwarder = current_forwarder()
    if forwarder is None:
        return False
    return forwarder.forward()


def drop_packet():
    """Count the current packet as dropped."""
    forwarder = current_forwarder()
    if forwarder is not None:
        forwarder.drop()


def set_numeric_value(proto_id, att_id, value):
    """Rewrite a numeric attribute of the current packet; return whether it was set."""
    forwarder = current_forwarder()
    if forwarder is None:
        return False
    return forwarder.set_number_value(proto_id, att_id, value)


def _require_forwarder():
    forwarder = current_forwarder()
    if forwarder is None:
        raise RuntimeError("no packet forwarder is active")
    return forwarder


def replace_data_at_protocol_id(proto_id, data):
    """Replace the segment of ``proto_id`` in the current packet; return its offset.

    Raises RuntimeError when no forwarder is active, LookupError when the
    protocol is absent and ValueError when the packet would be too large.
    """
    return _require_forwarder().replace_data_at_protocol(proto_id, data)


def update_sctp_param(ppid, flags, stream_no, timetolive):
    """Change the parameters used when forwarding over SCTP.

    Raises RuntimeError when no forwarder is active.
    """
    _require_forwarder().update_sctp_param(ppid, flags, stream_no, timetolive)


def set_number_update(proto_att, value):
    """Rewrite the attribute ``proto_att`` of the current packet with ``value``."""
    return set_numeric_value(
        proto_att.proto_id, proto_att.att_id, int(value) & _UINT64_MASK
    )


def forward_packet_if_satisfied(rule, verdict, timestamp, counter, trace):
    """Default action of a forwarding rule: send the current packet."""
    return forward_packet()


def _strtoul(text):
    match = _UNSIGNED_NUMBER.match(text)
    if match is None:
        return 0
    sign, digits = match.groups()
    if digits[:2] in ("0x", "0X"):
        value = int(digits, 16)
    elif digits.startswith("0"):
        value = int(digits, 8)
    else:
        value = int(digits, 10)
    if value > _ULONG_MAX:
        value = _ULONG_MAX
    elif sign == "-":
        value = (-value) % (1 << 64)
    return value & _UINT32_MASK


def _env_number(name, default):
    text = os.environ.get(name)
    if text is None:
        return default
    return _strtoul(text)


def nb_copies_from_env():
    """Return the number of copies given by the environment, 0 by default."""
    return _env_number(NB_COPIES_ENV, DEFAULT_NB_COPIES)


def http2_nb_copies_from_env():
    """Return the number of HTTP/2 copies given by the environment, 5000 by default."""
    return _env_number(HTTP2_NB_COPIES_ENV, DEFAULT_HTTP2_NB_COPIES)