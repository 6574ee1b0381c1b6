"""Frame and capture-file builders shared by the tests.

Well-formed frames are built from dpkt packet objects. The ``raw_*`` helpers
pack headers by hand and exist only for malformed frames that dpkt would
repair on serialization (wrong version, bogus total length, short IHL).
"""

from __future__ import annotations

import socket
import struct
from pathlib import Path
from typing import Iterable, Optional, Tuple

import dpkt

ETH_SRC = b"\xaa\xbb\xcc\xdd\xee\xff"
ETH_DST = b"\x11\x22\x33\x44\x55\x66"


def tcp_segment(sport: int, dport: int, payload: bytes = b"") -> dpkt.tcp.TCP:
    return dpkt.tcp.TCP(
        sport=sport,
        dport=dport,
        seq=1,
        flags=dpkt.tcp.TH_PUSH | dpkt.tcp.TH_ACK,
        data=payload,
    )


def udp_datagram(sport: int, dport: int, payload: bytes = b"") -> dpkt.udp.UDP:
    return dpkt.udp.UDP(sport=sport, dport=dport, ulen=dpkt.udp.UDP_HDR_LEN + len(payload), data=payload)


def ethernet(ip, ether_type: int) -> bytes:
    return bytes(dpkt.ethernet.Ethernet(src=ETH_SRC, dst=ETH_DST, type=ether_type, data=ip))


def ipv4_packet(src: str, dst: str, proto: int, transport, *, ihl: int = 5) -> dpkt.ip.IP:
    ip = dpkt.ip.IP(
        src=socket.inet_aton(src),
        dst=socket.inet_aton(dst),
        p=proto,
        ttl=64,
        data=transport,
    )
    if ihl > 5:
        ip.hl = ihl
        ip.opts = b"\x00" * ((ihl - 5) * 4)
    return ip


def ipv6_packet(
    src: str,
    dst: str,
    next_header: int,
    transport,
    *,
    payload_length: Optional[int] = None,
    version: int = 6,
) -> dpkt.ip6.IP6:
    ip6 = dpkt.ip6.IP6(
        src=socket.inet_pton(socket.AF_INET6, src),
        dst=socket.inet_pton(socket.AF_INET6, dst),
        nxt=next_header,
        hlim=64,
        data=transport,
    )
    ip6.plen = len(bytes(transport)) if payload_length is None else payload_length
    ip6.v = version
    return ip6


def raw_ethernet_frame(ether_type: int, payload: bytes) -> bytes:
    return ETH_DST + ETH_SRC + struct.pack("!H", ether_type) + payload


def raw_ipv4_packet(
    src: str,
    dst: str,
    proto: int,
    transport: bytes,
    *,
    ihl: int = 5,
    total_length: Optional[int] = None,
    version: int = 4,
) -> bytes:
    header_len = ihl * 4
    options = b"\x00" * max(header_len - 20, 0)
    if total_length is None:
        total_length = header_len + len(transport)
    header = struct.pack(
        "!BBHHHBBH4s4s",
        (version << 4) | ihl,
        0,
        total_length,
        0,
        0,
        64,
        proto,
        0,
        socket.inet_aton(src),
        socket.inet_aton(dst),
    )
    return header + options + transport


def _ipv4_frame(src_ip: str, proto: int, transport, **kwargs) -> bytes:
    ihl = kwargs.get("ihl", 5)
    if ihl < 5 or set(kwargs) - {"ihl"}:
        return raw_ethernet_frame(
            dpkt.ethernet.ETH_TYPE_IP,
            raw_ipv4_packet(src_ip, "10.0.0.2", proto, bytes(transport), **kwargs),
        )
    return ethernet(ipv4_packet(src_ip, "10.0.0.2", proto, transport, ihl=ihl), dpkt.ethernet.ETH_TYPE_IP)


def ipv4_tcp_frame(
    src_ip: str = "10.0.0.1",
    sport: int = 1234,
    dport: int = 80,
    payload: bytes = b"",
    **kwargs,
) -> bytes:
    return _ipv4_frame(src_ip, dpkt.ip.IP_PROTO_TCP, tcp_segment(sport, dport, payload), **kwargs)


def ipv4_udp_frame(
    src_ip: str = "10.0.0.1",
    sport: int = 5353,
    dport: int = 53,
    payload: bytes = b"",
    **kwargs,
) -> bytes:
    return _ipv4_frame(src_ip, dpkt.ip.IP_PROTO_UDP, udp_datagram(sport, dport, payload), **kwargs)


def ipv6_frame(
    src_ip: str = "2001:db8::1",
    sport: int = 443,
    dport: int = 50000,
    payload: bytes = b"",
    *,
    next_header: int = dpkt.ip.IP_PROTO_TCP,
    **kwargs,
) -> bytes:
    if next_header == dpkt.ip.IP_PROTO_UDP:
        transport = udp_datagram(sport, dport, payload)
    else:
        transport = tcp_segment(sport, dport, payload)
    return ethernet(
        ipv6_packet(src_ip, "2001:db8::2", next_header, transport, **kwargs),
        dpkt.ethernet.ETH_TYPE_IP6,
    )


def write_pcap(path: Path, frames: Iterable[Tuple[bytes, float]], *, nano: bool = False) -> Path:
    with path.open("wb") as fh:
        writer = dpkt.pcap.Writer(fh, nano=nano)
        for frame, ts in frames:
            writer.writepkt(frame, ts=ts)
    return path


def write_pcapng(path: Path, frames: Iterable[Tuple[bytes, float]]) -> Path:
    with path.open("wb") as fh:
        writer = dpkt.pcapng.Writer(fh)
        for frame, ts in frames:
            writer.writepkt(frame, ts=ts)
    return path
