"""Forwarding packet payloads over real connections chosen by protocol."""

from .fwdconfig import ForwardProtocol
from .inject_http2 import Http2Injector
from .inject_sctp import SctpInjector
from .inject_udp import UdpInjector

# Protocol ids assigned by the DPI layer.
PROTO_UDP = 376
PROTO_SCTP_DATA = 305
PROTO_HTTP2 = 1035

SCTP_DATA_HEADER_SIZE = 16
UDP_HEADER_SIZE = 8

_FACTORIES = {
    ForwardProtocol.SCTP: ("sctp", SctpInjector),
    ForwardProtocol.UDP: ("udp", UdpInjector),
    ForwardProtocol.HTTP2: ("http2", Http2Injector),
}


def _offset_after(packet, proto_id, header_size):
    index = packet.protocol_index(proto_id)
    if index == -1:
        return -1
    return packet.offset_at_index(index) + header_size


class ProtoInjector:
    """Sends the payload of SCTP, UDP or HTTP/2 packets to configured targets.

    Each protocol has at most one injector; ``sctp``, ``udp`` and ``http2``
    are None when no target of that protocol is configured.
    """

    def __init__(self, config):
        conf = config.forward
        self.sctp = None
        self.udp = None
        self.http2 = None
        try:
            for target in conf.targets:
                if target.protocol not in _FACTORIES:
                    raise ValueError(
                        f"Does not support forwarding using a protocol to {target.host}:{target.port}"
                    )
                name, factory = _FACTORIES[target.protocol]
                previous = getattr(self, name)
                if previous is not None:
                    previous.close()
                setattr(self, name, factory(target, conf.nb_copies))
        except BaseException:
            self.close()
            raise

    def _routes(self):
        return (
            (self.sctp, PROTO_SCTP_DATA, SCTP_DATA_HEADER_SIZE),
            (self.udp, PROTO_UDP, UDP_HEADER_SIZE),
            (self.http2, PROTO_HTTP2, 0),
        )

    def send(self, packet, data):
        """Send the payload of ``data`` over every matching connection.

        Returns the number of copies sent, or None when no protocol of the
        packet could be used.
        """
        data = bytes(data)
        total = 0
        for injector, proto_id, header_size in self._routes():
            if injector is None:
                continue
            offset = _offset_after(packet, proto_id, header_size)
            if offset >= 0:
                total += injector.send(data[offset:])
        return total if total else None

    def close(self):
        """Close every connection."""
        for name in ("sctp", "udp", "http2"):
            injector = getattr(self, name)
            if injector is not None:
                injector.close()
                setattr(self, name, None)