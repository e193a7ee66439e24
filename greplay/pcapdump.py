"""Writing packets to a pcap file."""

import struct
import time

PCAP_MAGIC = 0xA1B2C3D4
PCAP_VERSION_MAJOR = 2
PCAP_VERSION_MINOR = 4
PCAP_SNAPLEN = 65355
LINKTYPE_ETHERNET = 1
MAX_PACKET_LENGTH = 0xFFFF

_FILE_HEADER = struct.Struct("=IHHiIII")
_RECORD_HEADER = struct.Struct("=IIII")


class PcapWriter:
    """A pcap file to which packets are appended with the current time."""

    def __init__(self, path):
        self.path = path
        self._file = open(path, "wb")
        self._file.write(
            _FILE_HEADER.pack(
                PCAP_MAGIC,
                PCAP_VERSION_MAJOR,
                PCAP_VERSION_MINOR,
                0,
                0,
                PCAP_SNAPLEN,
                LINKTYPE_ETHERNET,
            )
        )

    def write(self, data):
        """Append one packet stamped with the current time."""
        if self._file is None:
            raise ValueError("pcap file is closed")
        data = bytes(data)
        if len(data) > MAX_PACKET_LENGTH:
            raise ValueError(f"packet of {len(data)} bytes is too large")
        seconds, nanos = divmod(time.time_ns(), 1_000_000_000)
        header = _RECORD_HEADER.pack(
            seconds & 0xFFFFFFFF, nanos // 1000, len(data), len(data)
        )
        self._file.write(header)
        self._file.write(data)

    def close(self):
        """Close the file; closing twice is harmless."""
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False