import socket
import threading

import pytest

from greplay.fwdconfig import ForwardProtocol, TargetConfig
from greplay.inject_http2 import HTTP2_PREFACE_SETTINGS, SETTINGS_ACK, Http2Injector

SERVER_SETTINGS = b"\x00\x00\x00\x04\x00\x00\x00\x00\x00"


def _recv_exact(conn, size):
    buf = b""
    while len(buf) < size:
        chunk = conn.recv(size - len(buf))
        if not chunk:
            break
        buf += chunk
    return buf


@pytest.fixture
def server():
    listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    listener.bind(("127.0.0.1", 0))
    listener.listen(1)
    listener.settimeout(5)
    received = {}

    def serve():
        conn, _ = listener.accept()
        with conn:
            conn.settimeout(5)
            received["preface"] = _recv_exact(conn, len(HTTP2_PREFACE_SETTINGS))
            conn.sendall(SERVER_SETTINGS)
            received["ack"] = _recv_exact(conn, len(SETTINGS_ACK))
            chunks = []
            while True:
                chunk = conn.recv(4096)
                if not chunk:
                    break
                chunks.append(chunk)
            received["payload"] = b"".join(chunks)

    thread = threading.Thread(target=serve, daemon=True)
    thread.start()
    yield listener.getsockname()[1], received, thread
    thread.join(5)
    listener.close()


def _target(port, host="127.0.0.1"):
    return TargetConfig(ForwardProtocol.HTTP2, host, port)


def test_handshake_sends_preface_and_ack(server):
    port, received, thread = server
    injector = Http2Injector(_target(port), 1)
    assert injector.nb_copies == 1
    assert (injector.total_sent, injector.total_to_send) == (0, 0)
    injector.close()
    thread.join(5)
    assert received["preface"].startswith(b"PRI * HTTP/2.0\r\n\r\nSM\r\n\r\n")
    assert received["preface"] == HTTP2_PREFACE_SETTINGS
    assert received["ack"] == b"\x00\x00\x00\x04\x01\x00\x00\x00\x00"
    assert received["payload"] == b""


def test_only_one_copy_is_sent(server):
    port, received, thread = server
    injector = Http2Injector(_target(port), 5)
    assert injector.nb_copies == 1
    assert injector.send(b"frame-bytes") == 1
    assert (injector.total_sent, injector.total_to_send) == (1, 1)
    injector.close()
    thread.join(5)
    assert received["payload"] == b"frame-bytes"


def test_counters_follow_several_packets(server):
    port, received, thread = server
    with Http2Injector(_target(port), 1) as injector:
        results = [injector.send(chunk) for chunk in (b"a", b"bb", b"ccc")]
        assert results == [1, 1, 1]
        assert injector.total_to_send == 3
    thread.join(5)
    assert received["payload"] == b"abbccc"


def test_send_after_close_raises(server):
    port, _, thread = server
    injector = Http2Injector(_target(port), 1)
    injector.close()
    thread.join(5)
    with pytest.raises(ValueError):
        injector.send(b"x")


def test_invalid_host_is_rejected():
    with pytest.raises(ValueError):
        Http2Injector(_target(80, host="server.invalid"), 1)