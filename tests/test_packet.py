import struct

import pytest

from greplay.packet import DataType, Packet, ValueKind, convert_value

META, ETH, IP, UDP, GTP = 1, 99, 178, 376, 500


@pytest.fixture
def packet():
    return Packet(
        proto_path=(META, ETH, IP, UDP, GTP),
        header_offsets=(0, 0, 14, 20, 8),
        data=bytes(100),
        packet_id=7,
    )


def test_caplen_defaults_to_data_length(packet):
    assert packet.caplen == len(packet.data)


def test_mismatched_hierarchy_rejected():
    with pytest.raises(ValueError):
        Packet(proto_path=(1, 2), header_offsets=(0,))


def test_protocol_index(packet):
    assert packet.protocol_index(UDP) == 3
    assert packet.protocol_index(12345) == -1


def test_offset_at_index_is_monotonic_and_ends_at_caplen(packet):
    offsets = [packet.offset_at_index(i) for i in range(len(packet.proto_path))]
    assert offsets == sorted(offsets)
    assert packet.offset_at_index(0) == 0
    assert packet.offset_at_index(len(packet.proto_path)) == packet.caplen


def test_offset_at_negative_index_raises(packet):
    with pytest.raises(IndexError):
        packet.offset_at_index(-1)


@pytest.mark.parametrize("proto", [ETH, IP, UDP, GTP])
def test_data_length_plus_offset_is_caplen(packet, proto):
    index = packet.protocol_index(proto)
    assert packet.data_length(proto) + packet.offset_at_index(index) == packet.caplen


@pytest.mark.parametrize("proto", [ETH, IP, UDP])
def test_payload_is_data_after_next_header(packet, proto):
    index = packet.protocol_index(proto)
    next_header = packet.header_offsets[index + 1]
    assert packet.data_length(proto) - packet.payload_length(proto) == next_header


def test_last_protocol_has_no_payload(packet):
    assert packet.payload_length(GTP) == 0


def test_absent_protocol_lengths_are_zero(packet):
    assert packet.payload_length(4242) == 0
    assert packet.data_length(4242) == 0


@pytest.mark.parametrize(
    "data_type, fmt, number",
    [
        (DataType.U8, "=B", 200),
        (DataType.U16, "=H", 8080),
        (DataType.PORT, "=H", 443),
        (DataType.U32, "=I", 3_000_000_000),
        (DataType.U64, "=Q", 2**40),
        (DataType.CHAR, "=b", -5),
        (DataType.FLOAT, "=f", 1.5),
    ],
)
def test_numeric_round_trip(data_type, fmt, number):
    assert convert_value(data_type, struct.pack(fmt, number)) == (
        ValueKind.NUMERIC,
        float(number),
    )


def test_numeric_from_python_number():
    assert convert_value(DataType.U32, 12) == (ValueKind.NUMERIC, 12.0)


def test_numeric_too_short_raises():
    with pytest.raises(ValueError):
        convert_value(DataType.U32, b"\x01")


def test_fixed_binary_sizes_follow_format():
    raw = bytes(range(20))
    assert convert_value(DataType.IP_ADDR, raw) == (ValueKind.BINARY, raw[:4])
    assert convert_value(DataType.MAC_ADDR, raw) == (ValueKind.BINARY, raw[:6])
    assert convert_value(DataType.IP6_ADDR, raw) == (ValueKind.BINARY, raw[:16])


def test_fixed_binary_too_short_raises():
    with pytest.raises(ValueError):
        convert_value(DataType.IP6_ADDR, bytes(4))


def test_strings():
    assert convert_value(DataType.STRING, b"hello") == (ValueKind.STRING, b"hello")
    assert convert_value(DataType.STRING_POINTER, b"abc\0def") == (
        ValueKind.STRING,
        b"abc",
    )
    assert convert_value(DataType.HEADER_LINE, "host") == (ValueKind.STRING, b"host")


@pytest.mark.parametrize(
    "data_type, raw",
    [
        (DataType.STRING, b""),
        (DataType.GENERIC_HEADER_LINE, b"\0tail"),
        (DataType.UNDEFINED, b"abc"),
        (DataType.STATS, b"abc"),
        (DataType.POINTER, b"abc"),
        (DataType.U16, None),
    ],
)
def test_nothing_to_store(data_type, raw):
    assert convert_value(data_type, raw) is None