from __future__ import annotations

import logging

from pcaphist import AnalysisConfig, DecodedPacket, Mode, TransportProtocol
from pcaphist.config import parse_ip_list, parse_mode, parse_port_list


def test_parse_mode_known_values():
    assert parse_mode(None) is Mode.BYTES
    assert parse_mode("bytes") is Mode.BYTES
    assert parse_mode("PACKETS") is Mode.PACKETS
    assert parse_mode(" Packets ") is Mode.PACKETS


def test_parse_mode_unknown_falls_back_with_warning(caplog):
    with caplog.at_level(logging.WARNING, logger="pcaphist.config"):
        assert parse_mode("frames") is Mode.BYTES

    assert "Unknown mode 'frames'" in caplog.text


def test_parse_port_list_skips_invalid_entries(caplog):
    with caplog.at_level(logging.WARNING, logger="pcaphist.config"):
        ports = parse_port_list(" 80, 443,,abc,70000,-1,443")

    assert ports == frozenset({80, 443})
    assert "abc" in caplog.text
    assert "70000" in caplog.text


def test_parse_port_list_empty():
    assert parse_port_list("") == frozenset()
    assert parse_port_list(None) == frozenset()


def test_parse_ip_list_trims_and_keeps_exact_strings():
    assert parse_ip_list("8.8.8.8, 2001:db8::1 ,,") == frozenset({"8.8.8.8", "2001:db8::1"})
    assert parse_ip_list(None) == frozenset()


def test_config_builds_exclusion_filter():
    config = AnalysisConfig(
        mode=Mode.PACKETS,
        tcp_blacklist=frozenset({80}),
        ip_blacklist=frozenset({"10.0.0.9"}),
    )
    exclusion = config.exclusion_filter()
    packet = DecodedPacket(TransportProtocol.TCP, "10.0.0.1", 1234, 80, 40, 0)

    assert not exclusion.accept(packet)
    assert exclusion.udp_ports == frozenset()
    assert AnalysisConfig().exclusion_filter().is_empty()
