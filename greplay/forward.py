"""Forwarding, dropping and rewriting of packets as rules decide."""

import logging
import time

from .fwdconfig import DefaultAction
from .inject_proto import ProtoInjector
from .inject_raw import RawInjector
from .pcapdump import PcapWriter

_log = logging.getLogger(__name__)

MAX_PACKET_SIZE = 0xFFFF
# Size changes reported by an updater must stay strictly within this bound.
MAX_SIZE_CHANGE = 400

_current = None


def current_forwarder():
    """Return the forwarder that rules act upon, or None."""
    return _current


class PacketForwarder:
    """Holds a copy of the current packet and sends, drops or rewrites it.

    ``updaters`` maps a protocol id to a callable
    ``updater(buffer, size, packet, proto_id, att_id, value)`` that rewrites
    an attribute inside the bytearray ``buffer`` and returns the change in
    packet size, or None when the attribute could not be set.
    """

    def __init__(self, config, raw_injector=None, proto_injector=None, updaters=None):
        global _current
        self.config = config.forward
        if self.config.is_enable:
            if proto_injector is None:
                proto_injector = ProtoInjector(config)
            if raw_injector is None:
                raw_injector = RawInjector(config)
        self.raw_injector = raw_injector
        self.proto_injector = proto_injector
        self.updaters = dict(updaters or {})
        self.nb_forwarded_packets = 0
        self.nb_dropped_packets = 0
        self._packet = None
        self._buffer = bytearray()
        self._size = 0
        self._satisfied = False
        self._stat_packets = 0
        self._stat_bytes = 0
        self._stat_time = int(time.time())
        self._dump = None
        if config.dump_packet.is_enable:
            self._dump = PcapWriter(config.dump_packet.output_file)
        _current = self

    @property
    def packet_data(self):
        """The current, possibly rewritten, packet bytes."""
        return bytes(self._buffer[: self._size])

    @property
    def satisfied(self):
        """Whether a rule has handled the current packet."""
        return self._satisfied

    def _update_stat(self, nb_packets):
        self._stat_packets += nb_packets
        self._stat_bytes += nb_packets * self._size
        now = int(time.time())
        if now != self._stat_time:
            interval = now - self._stat_time
            _log.info(
                "Statistics of forwarded packets %.2f pps (total: %d packets), %.2f bps",
                self._stat_packets / interval,
                self.nb_forwarded_packets,
                self._stat_bytes * 8 / interval,
            )
            self._stat_time = now
            self._stat_packets = 0
            self._stat_bytes = 0

    def _send(self):
        if self._size <= 0:
            return False
        data = self.packet_data
        sent = None
        if self.config.is_enable:
            if self.proto_injector is not None and self._packet is not None:
                sent = self.proto_injector.send(self._packet, data)
            if sent is None and self.raw_injector is not None:
                sent = self.raw_injector.send(data)
            if sent is not None and sent > 0:
                self.nb_forwarded_packets += sent
                self._update_stat(sent)
        if self._dump is not None:
            self._dump.write(data)
        return sent is not None and sent > 0

    def close(self):
        """Release injectors and the dump file."""
        global _current
        _log.info(
            "Number of packets being successfully forwarded: %d, dropped: %d",
            self.nb_forwarded_packets,
            self.nb_dropped_packets,
        )
        if self.raw_injector is not None:
            self.raw_injector.close()
            self.raw_injector = None
        if self.proto_injector is not None:
            self.proto_injector.close()
            self.proto_injector = None
        if self._dump is not None:
            self._dump.close()
            self._dump = None
        if _current is self:
            _current = None

    def mark_satisfied(self):
        """Record that a rule has taken care of the current packet."""
        self._satisfied = True

    def before_rules(self, packet):
        """Take a copy of a newly arrived packet before rules see it."""
        self._packet = packet
        self._buffer = bytearray(packet.data[: min(packet.caplen, MAX_PACKET_SIZE)])
        self._size = len(self._buffer)
        self._satisfied = False

    def after_rules(self, packet):
        """Apply the default action when no rule handled the packet."""
        if self._satisfied:
            return
        if self.config.default_action is DefaultAction.DROP:
            self.nb_dropped_packets += 1
        elif not self._send():
            self.nb_dropped_packets += 1

    def forward(self):
        """Send the current packet; return whether it was sent."""
        return self._send()

    def drop(self):
        """Count the current packet as dropped."""
        self.nb_dropped_packets += 1

    def _packet_id(self):
        return self._packet.packet_id if self._packet is not None else 0

    def set_number_value(self, proto_id, att_id, value):
        """Rewrite a numeric attribute of the current packet.

        Returns True when the protocol's updater accepted the value.
        """
        updater = self.updaters.get(proto_id)
        diff = None
        if updater is not None:
            diff = updater(self._buffer, self._size, self._packet, proto_id, att_id, value)
        if diff is None:
            _log.error(
                "Cannot set new value %d for att %d of proto %d for packet id %d",
                value, att_id, proto_id, self._packet_id(),
            )
            return False
        if diff != 0 and -MAX_SIZE_CHANGE < diff < MAX_SIZE_CHANGE and self._size + diff >= 0:
            self._size += diff
            if len(self._buffer) < self._size:
                self._buffer.extend(bytes(self._size - len(self._buffer)))
        return True

    def replace_data_at_protocol(self, proto_id, data):
        """Replace the whole segment of protocol ``proto_id`` by ``data``.

        Returns the segment's offset from the start of the packet. Raises
        LookupError when the packet has no such protocol and ValueError when
        the result would be too large.
        """
        packet = self._packet
        index = -1 if packet is None else packet.protocol_index(proto_id)
        if index == -1:
            raise LookupError(f"protocol {proto_id} is not in the packet")
        data = bytes(data)
        offset = packet.offset_at_index(index)
        next_offset = max(packet.offset_at_index(index + 1), offset)
        next_offset = min(next_offset, self._size)
        new_size = self._size - (next_offset - offset) + len(data)
        if new_size > MAX_PACKET_SIZE:
            raise ValueError(f"packet of {new_size} bytes would be too large")
        del self._buffer[self._size :]
        self._buffer[offset:next_offset] = data
        self._size = len(self._buffer)
        return offset

    def update_sctp_param(self, ppid, flags, stream_no, timetolive):
        """Change the parameters used when forwarding over SCTP."""
        sctp = getattr(self.proto_injector, "sctp", None)
        if sctp is not None:
            sctp.update_param(ppid, flags, stream_no, timetolive, 0)