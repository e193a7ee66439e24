"""Packets decoded by the DPI layer and conversion of their attribute data."""

import enum
import logging
import struct
from dataclasses import dataclass

_log = logging.getLogger(__name__)

_UINT16_MASK = 0xFFFF


class DataType(enum.Enum):
    """Data types of attributes extracted by the DPI layer."""

    UNDEFINED = enum.auto()
    CHAR = enum.auto()
    U8 = enum.auto()
    PORT = enum.auto()
    U16 = enum.auto()
    U32 = enum.auto()
    U64 = enum.auto()
    FLOAT = enum.auto()
    IP6_ADDR = enum.auto()
    MAC_ADDR = enum.auto()
    IP_NET = enum.auto()
    IP_ADDR = enum.auto()
    TIMEVAL = enum.auto()
    BUFFER = enum.auto()
    POINT = enum.auto()
    PORT_RANGE = enum.auto()
    DATE = enum.auto()
    TIMEARG = enum.auto()
    STRING_INDEX = enum.auto()
    LAYERID = enum.auto()
    FILTER_STATE = enum.auto()
    PARENT = enum.auto()
    STATS = enum.auto()
    BINARY = enum.auto()
    BINARY_VAR = enum.auto()
    STRING = enum.auto()
    STRING_LONG = enum.auto()
    HEADER_LINE = enum.auto()
    GENERIC_HEADER_LINE = enum.auto()
    STRING_POINTER = enum.auto()
    PATH = enum.auto()
    POINTER = enum.auto()


class ValueKind(enum.Enum):
    """Kinds of values carried by a rule-engine message element."""

    NUMERIC = enum.auto()
    STRING = enum.auto()
    BINARY = enum.auto()


_NUMERIC_FORMATS = {
    DataType.CHAR: "=b",
    DataType.U8: "=B",
    DataType.PORT: "=H",
    DataType.U16: "=H",
    DataType.U32: "=I",
    DataType.U64: "=Q",
    DataType.FLOAT: "=f",
}

_FIXED_BINARY_SIZES = {
    DataType.IP6_ADDR: 16,
    DataType.MAC_ADDR: 6,
    DataType.IP_NET: 4,
    DataType.IP_ADDR: 4,
    DataType.TIMEVAL: struct.calcsize("@ll"),
}

_VARIABLE_BINARY = {DataType.BINARY, DataType.BINARY_VAR, DataType.PATH}

_LENGTH_STRINGS = {DataType.STRING, DataType.STRING_LONG, DataType.HEADER_LINE}

_NUL_TERMINATED_STRINGS = {DataType.GENERIC_HEADER_LINE, DataType.STRING_POINTER}

_UNSUPPORTED = {
    DataType.BUFFER,
    DataType.POINT,
    DataType.PORT_RANGE,
    DataType.DATE,
    DataType.TIMEARG,
    DataType.STRING_INDEX,
    DataType.LAYERID,
    DataType.FILTER_STATE,
    DataType.PARENT,
    DataType.STATS,
}


def _as_bytes(raw):
    if isinstance(raw, str):
        return raw.encode("utf-8")
    return bytes(raw)


def convert_value(data_type, raw):
    """Convert raw attribute data into a ``(ValueKind, value)`` pair.

    Numbers come back as floats, strings and binary data as bytes.
    Returns None when there is nothing to store: no data, empty data, or a
    type that is not supported.
    """
    data_type = DataType(data_type)
    if raw is None or data_type in (DataType.UNDEFINED, DataType.POINTER):
        return None

    if data_type in _NUMERIC_FORMATS:
        if isinstance(raw, (int, float)):
            return ValueKind.NUMERIC, float(raw)
        fmt = _NUMERIC_FORMATS[data_type]
        data = _as_bytes(raw)
        size = struct.calcsize(fmt)
        if len(data) < size:
            raise ValueError(
                f"{data_type.name} needs {size} bytes, got {len(data)}"
            )
        (number,) = struct.unpack_from(fmt, data)
        return ValueKind.NUMERIC, float(number)

    if data_type in _UNSUPPORTED:
        _log.warning("does not support DPI data type %s", data_type.name)
        return None

    data = _as_bytes(raw)
    if data_type in _FIXED_BINARY_SIZES:
        size = _FIXED_BINARY_SIZES[data_type]
        if len(data) < size:
            raise ValueError(
                f"{data_type.name} needs {size} bytes, got {len(data)}"
            )
        return ValueKind.BINARY, data[:size]

    if data_type in _VARIABLE_BINARY:
        kind, value = ValueKind.BINARY, data
    elif data_type in _LENGTH_STRINGS:
        kind, value = ValueKind.STRING, data
    else:
        kind, value = ValueKind.STRING, data.split(b"\0", 1)[0]
    if not value:
        return None
    return kind, value


@dataclass
class Packet:
    """A captured packet with its protocol hierarchy.

    ``proto_path`` lists the protocol ids from the outermost level, and
    ``header_offsets`` gives, for each level, the number of bytes between the
    start of the previous level and the start of this one.
    """

    proto_path: tuple
    header_offsets: tuple
    data: bytes = b""
    caplen: int = None
    packet_id: int = 0

    def __post_init__(self):
        self.proto_path = tuple(self.proto_path)
        self.header_offsets = tuple(self.header_offsets)
        self.data = bytes(self.data)
        if len(self.proto_path) != len(self.header_offsets):
            raise ValueError("proto_path and header_offsets must have the same length")
        if self.caplen is None:
            self.caplen = len(self.data)

    def _levels(self):
        return list(zip(self.proto_path, self.header_offsets))

    def protocol_index(self, proto_id):
        """Return the position of ``proto_id`` in the hierarchy, or -1."""
        try:
            return self.proto_path.index(proto_id)
        except ValueError:
            return -1

    def offset_at_index(self, index):
        """Return the byte offset at which the protocol at ``index`` starts.

        An index past the last level gives the captured length.
        """
        if index < 0:
            raise IndexError(f"negative protocol index {index}")
        if index >= len(self.proto_path):
            return self.caplen
        return sum(self.header_offsets[1 : index + 1])

    def payload_length(self, proto_id):
        """Return the length of what follows the header of ``proto_id``.

        Returns 0 when the protocol is absent or is the last level.
        """
        levels = self._levels()
        offset = 0
        for position, (pid, header) in enumerate(levels[1:], start=1):
            offset += header
            if pid == proto_id:
                if position + 1 < len(levels):
                    offset += levels[position + 1][1]
                    return (self.caplen - offset) & _UINT16_MASK
                return 0
        return 0

    def data_length(self, proto_id):
        """Return the length of the packet from the start of ``proto_id``, or 0."""
        offset = 0
        for pid, header in self._levels()[1:]:
            offset += header
            if pid == proto_id:
                return (self.caplen - offset) & _UINT16_MASK
        return 0