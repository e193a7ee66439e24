# greplay

Building blocks for replaying captured network traffic towards a 5G core.
A packet is copied in, rules may rewrite, forward or drop it, and whatever
remains is sent either as a raw frame on an output interface or as payload
over a real SCTP, UDP or HTTP/2 connection. Sent packets can also be dumped
to a pcap file.

## Installation

```
pip install .
```

Tests need the `test` extra:

```
pip install ".[test]"
pytest
```

## What is inside

- `greplay.forward.PacketForwarder`: the per-packet forwarding state.
  Call `before_rules(packet)` when a packet arrives and `after_rules(packet)`
  once rules have run; if no rule called `mark_satisfied()`, the configured
  `DefaultAction` is applied (send, or count as dropped). Rules act on the
  packet through `forward()`, `drop()`, `set_number_value(proto_id, att_id,
  value)`, `replace_data_at_protocol(proto_id, data)` and
  `update_sctp_param(...)`. Attribute rewriting is done by caller-supplied
  `updaters`, one callable per protocol id. `current_forwarder()` returns the
  most recently created forwarder that is still open. Counters are kept in
  `nb_forwarded_packets` and `nb_dropped_packets`.
- `greplay.inject_proto.ProtoInjector`: sends the SCTP, UDP or HTTP/2 payload
  of a packet through `greplay.inject_sctp.SctpInjector`,
  `greplay.inject_udp.UdpInjector` or `greplay.inject_http2.Http2Injector`,
  one per configured target. `send` returns None when no configured
  protocol is present in the packet.
- `greplay.inject_raw.RawInjector`: writes whole frames to the output
  interface through a packet socket.
- `greplay.pcapdump.PcapWriter`: writes packets to a classic pcap file,
  usable as a context manager.
- `greplay.fwdconfig`: `Config`, `ForwardConfig`, `TargetConfig`,
  `DumpConfig` and the `ForwardProtocol` / `DefaultAction` enums.
- `greplay.packet`: `Packet` (protocol hierarchy, offsets, payload and data
  lengths), the `DataType` / `ValueKind` enums and `convert_value`, which
  turns raw attribute data into a numeric, string or binary value.
- `greplay.embedded`: helpers available to rules, such as `is_exist`,
  `is_null`, `is_empty`, `is_same_ipv4`, `get_value_from_trace`,
  `get_numeric_value`, `forward_packet`, `drop_packet`,
  `set_numeric_value`, `replace_data_at_protocol_id`, `update_sctp_param`,
  `nb_copies_from_env` (`MMT_5GREPLAY_NB_COPIES`, default 0) and
  `http2_nb_copies_from_env` (`MMT_5GREPLAY_HTTP2_NB_COPIES`, default 5000).
- Utilities: `greplay.ring.SpscRing` (single-producer/single-consumer ring
  raising `RingFull` / `RingEmpty`), `greplay.treemap.TreeMap`,
  `greplay.trie.ByteTrie`, `greplay.lists.LinkedStack` and
  `greplay.lists.DoublyLinkedList`, `greplay.version` (version string and
  numeric version indexes) and `greplay.log` (system log plus stderr).

## Example

```python
from greplay.fwdconfig import Config, DumpConfig
from greplay.forward import PacketForwarder
from greplay.packet import Packet

config = Config(dump_packet=DumpConfig(is_enable=True, output_file="out.pcap"))
forwarder = PacketForwarder(config)

packet = Packet(proto_path=(1, 2), header_offsets=(0, 14), data=b"\x00" * 60)
forwarder.before_rules(packet)
forwarder.after_rules(packet)   # forwarding is disabled, so only dumped
forwarder.close()
```

Sending through the SCTP injector needs a kernel with SCTP support; the raw
injector needs permission to open packet sockets.

## What it does not do

- There is no command-line program: nothing reads pcap files or live
  interfaces, and there is no configuration file loader. Configurations are
  built in code.
- Packets are not decoded here. A `Packet` must be given its protocol path
  and header offsets by the caller, and attribute rewriting needs updaters
  supplied by the caller.
- There is no rule language, rule compiler or rule engine; rules are plain
  Python code calling the functions in `greplay.embedded`.