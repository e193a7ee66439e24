"""Configuration of packet forwarding and packet dumping."""

import enum
from dataclasses import dataclass, field


class ForwardProtocol(enum.Enum):
    """Protocols whose payload can be forwarded over a real connection."""

    SCTP = "sctp"
    UDP = "udp"
    HTTP2 = "http2"


class DefaultAction(enum.Enum):
    """What to do with a packet that no rule handled."""

    FORWARD = "forward"
    DROP = "drop"


def _check_range(name, value, low, high):
    if not low <= value <= high:
        raise ValueError(f"{name} must be between {low} and {high}, got {value}")


def _coerce_enum(enum_type, value):
    if isinstance(value, str) and not isinstance(value, enum_type):
        value = value.lower()
    return enum_type(value)


@dataclass(frozen=True)
class TargetConfig:
    """A remote endpoint that receives the payload of one protocol."""

    protocol: ForwardProtocol
    host: str
    port: int

    def __post_init__(self):
        object.__setattr__(self, "protocol", _coerce_enum(ForwardProtocol, self.protocol))
        if not self.host:
            raise ValueError("target host must not be empty")
        _check_range("port", self.port, 0, 0xFFFF)


@dataclass(frozen=True)
class ForwardConfig:
    """Settings for forwarding packets to an output NIC or to remote targets."""

    is_enable: bool = False
    output_nic: str = ""
    snap_len: int = 0xFFFF
    promisc: bool = False
    nb_copies: int = 1
    default_action: DefaultAction = DefaultAction.FORWARD
    targets: tuple = ()

    def __post_init__(self):
        object.__setattr__(
            self, "default_action", _coerce_enum(DefaultAction, self.default_action)
        )
        object.__setattr__(self, "targets", tuple(self.targets))
        _check_range("nb_copies", self.nb_copies, 0, 0xFFFF)
        _check_range("snap_len", self.snap_len, 0, 0xFFFF)


@dataclass(frozen=True)
class DumpConfig:
    """Settings for writing forwarded packets to a pcap file."""

    is_enable: bool = False
    output_file: str = ""

    def __post_init__(self):
        if self.is_enable and not self.output_file:
            raise ValueError("an output file is required when dumping is enabled")


@dataclass(frozen=True)
class Config:
    """The settings the forwarding machinery reads."""

    forward: ForwardConfig = field(default_factory=ForwardConfig)
    dump_packet: DumpConfig = field(default_factory=DumpConfig)