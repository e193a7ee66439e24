"""Forwarding SCTP payloads over an SCTP association to a remote endpoint."""

import logging
import socket
import struct
import time
from dataclasses import dataclass

_log = logging.getLogger(__name__)

IPPROTO_SCTP = getattr(socket, "IPPROTO_SCTP", 132)
SCTP_NODELAY = 3
SCTP_SNDRCV = 1
NGAP_PPID = 60
RECONNECT_DELAY = 10
CLEAR_EVERY = 10
MAX_PACKET_SIZE = 0xFFFF
MAX_COPIES = 0xFFFF

# struct sctp_sndrcvinfo: stream, ssn, flags, ppid, context, timetolive,
# tsn, cumtsn, assoc_id
_SNDRCVINFO = struct.Struct("@HHHIIIIIi")

_U32 = 0xFFFFFFFF
_U16 = 0xFFFF


def _check_range(name, value, high):
    if not 0 <= value <= high:
        raise ValueError(f"{name} must be between 0 and {high}, got {value}")


@dataclass(frozen=True)
class SctpParams:
    """Parameters given with each SCTP message sent."""

    ppid: int = NGAP_PPID
    flags: int = 0
    stream_no: int = 0
    timetolive: int = 0
    context: int = 0

    def __post_init__(self):
        _check_range("ppid", self.ppid, _U32)
        _check_range("flags", self.flags, _U32)
        _check_range("stream_no", self.stream_no, _U16)
        _check_range("timetolive", self.timetolive, _U32)
        _check_range("context", self.context, _U32)

    def sndrcvinfo(self):
        """Return the send-info ancillary data; the ppid is in network order."""
        return _SNDRCVINFO.pack(
            self.stream_no,
            0,
            self.flags & _U16,
            socket.htonl(self.ppid),
            self.context,
            self.timetolive,
            0,
            0,
            0,
        )


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


class SctpInjector:
    """Acts as an SCTP client that replays payloads to a server."""

    def __init__(self, target, nb_copies):
        _check_range("nb_copies", nb_copies, MAX_COPIES)
        try:
            socket.inet_aton(target.host)
        except OSError:
            raise ValueError(f"invalid IPv4 address: {target.host!r}") from None
        self.host = target.host
        self.port = target.port
        self.nb_copies = nb_copies
        self.total_sent = 0
        self.params = SctpParams()
        self._shown_error = False
        self._sock = None
        self._connect()

    def _connect(self):
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM, IPPROTO_SCTP)
        try:
            sock.setsockopt(IPPROTO_SCTP, SCTP_NODELAY, 1)
        except OSError:
            sock.close()
            raise
        while True:
            try:
                sock.connect((self.host, self.port))
                break
            except OSError as exc:
                _log.error(
                    "Cannot connect to %s:%d using SCTP: %s. Try to reconnect in %d seconds.",
                    self.host, self.port, exc, RECONNECT_DELAY,
                )
                time.sleep(RECONNECT_DELAY)
        self._sock = sock
        self._shown_error = False

    def update_param(self, ppid, flags, stream_no, timetolive, context=0):
        """Change the parameters given with the following messages."""
        self.params = SctpParams(ppid, flags, stream_no, timetolive, context)

    def send(self, data):
        """Send ``nb_copies`` copies of ``data``; return how many were sent.

        A failed send closes the association and reconnects.
        """
        if self._sock is None:
            raise ValueError("injector is closed")
        data = bytes(data)
        if len(data) > MAX_PACKET_SIZE:
            raise ValueError(f"packet of {len(data)} bytes is too large")
        _drain(self._sock)
        ancillary = [(IPPROTO_SCTP, SCTP_SNDRCV, self.params.sndrcvinfo())]
        sent = 0
        for _ in range(self.nb_copies):
            error = None
            try:
                written = self._sock.sendmsg([data], ancillary)
            except OSError as exc:
                written, error = -1, exc
            if written > 0:
                sent += 1
                self.total_sent += 1
                if sent % CLEAR_EVERY == 0:
                    _drain(self._sock)
            elif not self._shown_error:
                self._shown_error = True
                _log.error(
                    "SCTP error when injecting %d-th packet %d: %s (please check sctp parameters)",
                    self.total_sent, written, error,
                )
            if error is not None:
                self._sock.close()
                self._connect()
        return sent

    def close(self):
        """Close the association; closing twice is harmless."""
        if self._sock is not None:
            self._sock.close()
            self._sock = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False