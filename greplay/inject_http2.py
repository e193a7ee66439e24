"""Forwarding HTTP/2 payloads over a TCP connection to a remote server."""

import logging
import socket
import time

_log = logging.getLogger(__name__)

HTTP2_PATH_FUZZ = 9
RECONNECT_DELAY = 10
CLEAR_EVERY = 10
MAX_PACKET_SIZE = 0xFFFF

HTTP2_PREFACE_SETTINGS = (
    b"PRI * HTTP/2.0\r\n\r\nSM\r\n\r\n"
    b"\x00\x00\x1e"  # settings length
    b"\x04"  # frame type SETTINGS
    b"\x00\x00\x00\x00\x00"  # flags and stream id
    b"\x00\x03\x00\x00\x00\x64"  # max concurrent streams
    b"\x00\x04\x00\x00\xff\xff"  # initial window size
    b"\x00\x01\x00\x00\x10\x00"  # header table size
    b"\x00\x02\x00\x00\x00\x00"  # enable push
    b"\x00\x06\x00\x00\x07\xd0"  # max header list size
)
SETTINGS_ACK = b"\x00\x00\x00\x04\x01\x00\x00\x00\x00"


def _drain(sock):
    """Discard whatever the peer has sent, without blocking."""
    sock.setblocking(False)
    try:
        while sock.recv(1024):
            pass
    except OSError:
        pass
    finally:
        sock.setblocking(True)


class Http2Injector:
    """Acts as an HTTP/2 client that replays payloads to a server.

    A server rejects duplicated frames on the same stream, so exactly one
    copy of each packet is sent whatever ``nb_copies`` is.
    """

    def __init__(self, target, nb_copies):
        try:
            socket.inet_aton(target.host)
        except OSError:
            raise ValueError(f"invalid IPv4 address: {target.host!r}") from None
        self.host = target.host
        self.port = target.port
        self.nb_copies = 1
        self.total_sent = 0
        self.total_to_send = 0
        self._sock = None
        self._connect()

    def _connect(self):
        while True:
            sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            try:
                sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
            except OSError:
                _log.error("Error setting TCP No Delay option")
            try:
                sock.connect((self.host, self.port))
                break
            except OSError as exc:
                sock.close()
                _log.error(
                    "Cannot connect to %s:%d using TCP: %s. Try to reconnect in %d seconds",
                    self.host, self.port, exc, RECONNECT_DELAY,
                )
                time.sleep(RECONNECT_DELAY)
        _log.info("Connected to %s:%d using TCP", self.host, self.port)
        self._sock = sock
        self._handshake()

    def _handshake(self):
        sock = self._sock
        try:
            sock.sendall(HTTP2_PREFACE_SETTINGS)
        except OSError:
            _log.error("Cannot send HTTP2 SETTINGS FRAME to %s:%d", self.host, self.port)
        try:
            sock.recv(4096)
        except OSError:
            _log.error("Cannot receive HTTP2 ANSWER from %s:%d", self.host, self.port)
        try:
            sock.sendall(SETTINGS_ACK)
        except OSError:
            _log.error("Cannot send HTTP2 SETTINGS_0 frame to %s:%d", self.host, self.port)

    def send(self, data):
        """Send the payload; return the number of copies sent successfully.

        A failed send closes the connection and reconnects.
        """
        if self._sock is None:
            raise ValueError("injector is closed")
        data = bytes(data)
        if len(data) > MAX_PACKET_SIZE:
            raise ValueError(f"packet of {len(data)} bytes is too large")
        _drain(self._sock)
        self.total_to_send += 1
        sent = 0
        for copy in range(1, self.nb_copies + 1):
            try:
                written = self._sock.send(data)
            except OSError as exc:
                _log.error(
                    "Cannot inject %d-th copy of %d-th packet size %d to %s:%d using HTTP2: %s",
                    copy, self.total_to_send, len(data), self.host, self.port, exc,
                )
                self._sock.close()
                self._connect()
                continue
            if written > 0:
                sent += 1
                self.total_sent += 1
                if sent % CLEAR_EVERY == 0:
                    _drain(self._sock)
        return sent

    def close(self):
        """Close the connection; closing twice is harmless."""
        if self._sock is not None:
            self._sock.close()
            self._sock = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False