"""Forwarding UDP payloads to a remote endpoint."""

import logging
import socket

_log = logging.getLogger(__name__)

MAX_PACKET_SIZE = 0xFFFF
MAX_COPIES = 0xFFFF


def _check_arguments(target, nb_copies):
    if not 0 <= nb_copies <= MAX_COPIES:
        raise ValueError(f"nb_copies must be between 0 and {MAX_COPIES}, got {nb_copies}")
    try:
        socket.inet_aton(target.host)
    except OSError:
        raise ValueError(f"invalid IPv4 address: {target.host!r}") from None


def _packet_bytes(data):
    data = bytes(data)
    if len(data) > MAX_PACKET_SIZE:
        raise ValueError(f"packet of {len(data)} bytes is too large")
    return data


class UdpInjector:
    """Sends each packet payload, possibly several times, as UDP datagrams."""

    def __init__(self, target, nb_copies):
        _check_arguments(target, nb_copies)
        self.host = target.host
        self.port = target.port
        self.nb_copies = nb_copies
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            sock.connect((self.host, self.port))
        except OSError:
            sock.close()
            raise
        self._sock = sock

    def _open_socket(self):
        if self._sock is None:
            raise ValueError("injector is closed")
        return self._sock

    def send(self, data):
        """Send ``nb_copies`` copies of ``data``; return how many were sent."""
        sock = self._open_socket()
        data = _packet_bytes(data)
        sent = 0
        for _ in range(self.nb_copies):
            try:
                written = sock.send(data)
            except OSError as exc:
                _log.debug("cannot send UDP datagram to %s:%d: %s", self.host, self.port, exc)
                continue
            if written > 0:
                sent += 1
        return sent

    def close(self):
        """Close the socket; closing twice is harmless."""
        if self._sock is not None:
            self._sock.close()
            self._sock = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False