import socket

import pytest

from greplay.fwdconfig import ForwardProtocol, TargetConfig
from greplay.inject_udp import UdpInjector


@pytest.fixture
def receiver():
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    sock.bind(("127.0.0.1", 0))
    sock.settimeout(2)
    yield sock
    sock.close()


def _target(port, host="127.0.0.1"):
    return TargetConfig(ForwardProtocol.UDP, host, port)


def test_send_delivers_every_copy(receiver):
    port = receiver.getsockname()[1]
    with UdpInjector(_target(port), 3) as injector:
        assert injector.send(b"payload") == 3
    datagrams = [receiver.recv(2048) for _ in range(3)]
    assert datagrams == [b"payload"] * 3


def test_zero_copies_sends_nothing(receiver):
    port = receiver.getsockname()[1]
    with UdpInjector(_target(port), 0) as injector:
        assert injector.send(b"data") == 0


def test_empty_payload_counts_as_not_sent(receiver):
    port = receiver.getsockname()[1]
    with UdpInjector(_target(port), 2) as injector:
        assert injector.send(b"") == 0


def test_attributes_come_from_target(receiver):
    port = receiver.getsockname()[1]
    with UdpInjector(_target(port), 4) as injector:
        assert (injector.host, injector.port, injector.nb_copies) == ("127.0.0.1", port, 4)


def test_invalid_host_is_rejected():
    with pytest.raises(ValueError):
        UdpInjector(_target(9, host="not-an-address"), 1)


@pytest.mark.parametrize("copies", [-1, 0x10000])
def test_copies_out_of_range(receiver, copies):
    with pytest.raises(ValueError):
        UdpInjector(_target(receiver.getsockname()[1]), copies)


def test_send_after_close_raises(receiver):
    injector = UdpInjector(_target(receiver.getsockname()[1]), 1)
    injector.close()
    injector.close()
    with pytest.raises(ValueError):
        injector.send(b"x")


def test_oversized_packet_is_rejected(receiver):
    with UdpInjector(_target(receiver.getsockname()[1]), 1) as injector:
        with pytest.raises(ValueError):
            injector.send(bytes(0x10000))