"""Blacklist-based packet exclusion."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import AbstractSet, FrozenSet, Iterable

from .decoded_packet import DecodedPacket


@dataclass(frozen=True)
class ExclusionFilter:
    """Drops packets whose source IP or ports appear in a blacklist.

    IP entries are compared as exact strings; there is no prefix or CIDR
    matching. Port lists only apply to their own protocol.
    """

    tcp_ports: FrozenSet[int] = field(default_factory=frozenset)
    udp_ports: FrozenSet[int] = field(default_factory=frozenset)
    ips: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def from_iterables(
        cls,
        tcp_ports: Iterable[int] = (),
        udp_ports: Iterable[int] = (),
        ips: Iterable[str] = (),
    ) -> "ExclusionFilter":
        return cls(frozenset(tcp_ports), frozenset(udp_ports), frozenset(ips))

    def is_empty(self) -> bool:
        return not (self.tcp_ports or self.udp_ports or self.ips)

    def accept(self, packet: DecodedPacket) -> bool:
        return accept(packet, self.tcp_ports, self.udp_ports, self.ips)


def accept(
    packet: DecodedPacket,
    tcp_blacklist: AbstractSet[int],
    udp_blacklist: AbstractSet[int],
    ip_blacklist: AbstractSet[str],
) -> bool:
    if packet.src_ip in ip_blacklist:
        return False
    if packet.is_tcp and (packet.src_port in tcp_blacklist or packet.dst_port in tcp_blacklist):
        return False
    if packet.is_udp and (packet.src_port in udp_blacklist or packet.dst_port in udp_blacklist):
        return False
    return True


__all__ = ["ExclusionFilter", "accept"]
