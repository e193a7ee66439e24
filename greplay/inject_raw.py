"""Injecting raw packets into an output network interface."""

import logging
import socket

_log = logging.getLogger(__name__)

AF_PACKET = getattr(socket, "AF_PACKET", 17)
MAX_PACKET_SIZE = 0xFFFF


class RawInjector:
    """Writes whole frames to the output NIC named by the forwarding config."""

    def __init__(self, config):
        conf = config.forward
        if not conf.output_nic:
            raise ValueError("no output NIC is configured for forwarding packets")
        self.output_nic = conf.output_nic
        self.nb_copies = conf.nb_copies
        sock = socket.socket(AF_PACKET, socket.SOCK_RAW, 0)
        try:
            sock.bind((self.output_nic, 0))
        except OSError as exc:
            sock.close()
            raise OSError(
                exc.errno,
                f"Cannot open NIC {self.output_nic} to forward packets: {exc.strerror or exc}",
            ) from exc
        self._sock = sock

    def send(self, data):
        """Write ``nb_copies`` copies of the frame; return how many were written."""
        if self._sock is None:
            raise ValueError("injector is closed")
        data = bytes(data)
        if len(data) > MAX_PACKET_SIZE:
            raise ValueError(f"packet of {len(data)} bytes is too large")
        sent = 0
        for _ in range(self.nb_copies):
            try:
                written = self._sock.send(data)
            except OSError as exc:
                _log.debug("cannot inject packet to %s: %s", self.output_nic, exc)
                continue
            if written > 0:
                sent += 1
        return sent

    def close(self):
        """Release the NIC; closing twice is harmless."""
        if self._sock is not None:
            self._sock.close()
            self._sock = None