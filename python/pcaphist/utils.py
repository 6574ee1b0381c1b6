"""Byte-level helpers shared by the header decoder."""

from __future__ import annotations

import struct
from typing import Optional

import dpkt

ETH_HDR_LEN = dpkt.ethernet.ETH_HDR_LEN
ETH_TYPE_OFFSET = 12
ETH_TYPE_IP = dpkt.ethernet.ETH_TYPE_IP
ETH_TYPE_IP6 = dpkt.ethernet.ETH_TYPE_IP6

IP_PROTO_TCP = dpkt.ip.IP_PROTO_TCP
IP_PROTO_UDP = dpkt.ip.IP_PROTO_UDP

IP4_MIN_HDR_LEN = 20
IP6_HDR_LEN = 40
PORTS_LEN = 4

_U16 = struct.Struct("!H")


def read_u16(buf: bytes, offset: int) -> Optional[int]:
    """Big-endian unsigned 16-bit read; ``None`` when it would overrun *buf*."""
    if offset < 0 or offset + 2 > len(buf):
        return None
    return _U16.unpack_from(buf, offset)[0]


def has_bytes(buf: bytes, offset: int, count: int) -> bool:
    return offset >= 0 and len(buf) >= offset + count


def format_ipv4(buf: bytes, offset: int) -> str:
    return ".".join(str(b) for b in buf[offset:offset + 4])


def format_ipv6(buf: bytes, offset: int) -> str:
    """Render eight 16-bit groups as lowercase hex joined by colons.

    No zero-run compression is applied: ``2001:db8::1`` comes out as
    ``2001:db8:0:0:0:0:0:1``. Series keys depend on this exact text.
    """
    groups = struct.unpack_from("!8H", buf, offset)
    return ":".join(format(group, "x") for group in groups)


__all__ = [
    "ETH_HDR_LEN",
    "ETH_TYPE_OFFSET",
    "ETH_TYPE_IP",
    "ETH_TYPE_IP6",
    "IP_PROTO_TCP",
    "IP_PROTO_UDP",
    "IP4_MIN_HDR_LEN",
    "IP6_HDR_LEN",
    "PORTS_LEN",
    "read_u16",
    "has_bytes",
    "format_ipv4",
    "format_ipv6",
]
