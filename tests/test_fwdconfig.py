import dataclasses

import pytest

from greplay.fwdconfig import (
    Config,
    DefaultAction,
    DumpConfig,
    ForwardConfig,
    ForwardProtocol,
    TargetConfig,
)


def test_target_protocol_from_string():
    target = TargetConfig("UDP", "127.0.0.1", 9000)
    assert target.protocol is ForwardProtocol.UDP
    assert target.host == "127.0.0.1"
    assert target.port == 9000


def test_target_unknown_protocol_rejected():
    with pytest.raises(ValueError):
        TargetConfig("quic", "127.0.0.1", 9000)


@pytest.mark.parametrize("port", [-1, 70000])
def test_target_port_out_of_range(port):
    with pytest.raises(ValueError):
        TargetConfig(ForwardProtocol.SCTP, "127.0.0.1", port)


def test_target_empty_host_rejected():
    with pytest.raises(ValueError):
        TargetConfig(ForwardProtocol.SCTP, "", 38412)


def test_forward_config_coerces_action_and_targets():
    targets = [TargetConfig("sctp", "10.0.0.1", 38412)]
    conf = ForwardConfig(is_enable=True, default_action="drop", targets=targets)
    assert conf.default_action is DefaultAction.DROP
    assert conf.targets == tuple(targets)


def test_forward_config_nb_copies_range():
    with pytest.raises(ValueError):
        ForwardConfig(nb_copies=-1)


def test_configs_are_frozen():
    conf = ForwardConfig()
    original = conf.nb_copies
    with pytest.raises(dataclasses.FrozenInstanceError):
        conf.nb_copies = original + 3
    assert conf.nb_copies == original
    assert conf == ForwardConfig()


def test_dump_requires_output_file_when_enabled():
    with pytest.raises(ValueError):
        DumpConfig(is_enable=True)
    assert DumpConfig(is_enable=True, output_file="out.pcap").output_file == "out.pcap"


def test_config_defaults_disable_everything():
    conf = Config()
    assert conf.forward.is_enable is False
    assert conf.dump_packet.is_enable is False
    assert conf.forward.targets == ()