"""Semantic view of one decoded TCP/UDP frame."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique

from .utils import IP_PROTO_TCP, IP_PROTO_UDP


@unique
class TransportProtocol(Enum):
    TCP = IP_PROTO_TCP
    UDP = IP_PROTO_UDP

    @property
    def label(self) -> str:
        return self.name

    @classmethod
    def from_number(cls, number: int) -> "TransportProtocol":
        return cls(number)

    @classmethod
    def is_supported(cls, number: int) -> bool:
        return number in (IP_PROTO_TCP, IP_PROTO_UDP)


@dataclass(frozen=True)
class DecodedPacket:
    """Fields extracted from a link-layer frame.

    ``transport_length`` counts the transport header plus payload and never
    includes the network-layer header. ``timestamp`` is in milliseconds.
    """

    protocol: TransportProtocol
    src_ip: str
    src_port: int
    dst_port: int
    transport_length: int
    timestamp: int

    def __post_init__(self) -> None:
        if not 0 <= self.src_port <= 0xFFFF or not 0 <= self.dst_port <= 0xFFFF:
            raise ValueError("ports must fit in 16 bits")
        if self.transport_length < 0:
            raise ValueError("transport_length must be non-negative")

    @property
    def is_tcp(self) -> bool:
        return self.protocol is TransportProtocol.TCP

    @property
    def is_udp(self) -> bool:
        return self.protocol is TransportProtocol.UDP


__all__ = ["TransportProtocol", "DecodedPacket"]
