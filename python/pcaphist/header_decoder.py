"""Bounds-checked Ethernet/IP/TCP/UDP header parsing.

Frames are read at a fixed Ethernet offset; VLAN tags, IPv4 options beyond the
header-length skip and IPv6 extension headers are not walked. Anything that
does not parse cleanly is skipped by returning ``None``.
"""

from __future__ import annotations

import logging
from typing import Optional

from .decoded_packet import DecodedPacket, TransportProtocol
from .utils import (
    ETH_HDR_LEN,
    ETH_TYPE_IP,
    ETH_TYPE_IP6,
    ETH_TYPE_OFFSET,
    IP4_MIN_HDR_LEN,
    IP6_HDR_LEN,
    PORTS_LEN,
    format_ipv4,
    format_ipv6,
    has_bytes,
    read_u16,
)

logger = logging.getLogger(__name__)

MILLIS_PER_SECOND = 1_000
MICROS_PER_MILLI = 1_000


def capture_millis(seconds: int, micros: int) -> int:
    return int(seconds) * MILLIS_PER_SECOND + int(micros) // MICROS_PER_MILLI


class HeaderDecoder:
    """Turns raw link-layer frames into :class:`DecodedPacket` values."""

    def __init__(self, ip_offset: int = ETH_HDR_LEN) -> None:
        self.ip_offset = ip_offset

    def decode(self, frame: bytes, seconds: int, micros: int) -> Optional[DecodedPacket]:
        if frame is None or len(frame) < ETH_HDR_LEN:
            return None

        timestamp = capture_millis(seconds, micros)
        ether_type = read_u16(frame, ETH_TYPE_OFFSET)

        if ether_type == ETH_TYPE_IP:
            return self._decode_ipv4(frame, self.ip_offset, timestamp)
        if ether_type == ETH_TYPE_IP6:
            return self._decode_ipv6(frame, self.ip_offset, timestamp)

        logger.debug("Skipping frame with EtherType %s", ether_type)
        return None

    # ------------------------------------------------------------------
    def _decode_ipv4(self, buf: bytes, offset: int, timestamp: int) -> Optional[DecodedPacket]:
        if not has_bytes(buf, offset, IP4_MIN_HDR_LEN):
            return None
        if buf[offset] >> 4 != 4:
            return None

        header_len = (buf[offset] & 0x0F) * 4
        if header_len < IP4_MIN_HDR_LEN or not has_bytes(buf, offset, header_len):
            return None

        total_len = read_u16(buf, offset + 2)
        if total_len is None or total_len < header_len:
            logger.debug("Skipping IPv4 packet with total length %s < IHL %d", total_len, header_len)
            return None

        protocol = buf[offset + 9]
        if not TransportProtocol.is_supported(protocol):
            return None

        src_ip = format_ipv4(buf, offset + 12)
        transport_len = total_len - header_len
        if transport_len <= 0:
            return None

        return self._build_packet(
            buf,
            offset + header_len,
            TransportProtocol.from_number(protocol),
            src_ip,
            transport_len,
            timestamp,
        )

    def _decode_ipv6(self, buf: bytes, offset: int, timestamp: int) -> Optional[DecodedPacket]:
        if not has_bytes(buf, offset, IP6_HDR_LEN):
            return None
        if buf[offset] >> 4 != 6:
            return None

        payload_len = read_u16(buf, offset + 4)
        next_header = buf[offset + 6]
        if not TransportProtocol.is_supported(next_header):
            return None

        src_ip = format_ipv6(buf, offset + 8)
        if not payload_len:
            return None

        return self._build_packet(
            buf,
            offset + IP6_HDR_LEN,
            TransportProtocol.from_number(next_header),
            src_ip,
            payload_len,
            timestamp,
        )

    # ------------------------------------------------------------------
    def _build_packet(
        self,
        buf: bytes,
        transport_offset: int,
        protocol: TransportProtocol,
        src_ip: str,
        transport_len: int,
        timestamp: int,
    ) -> Optional[DecodedPacket]:
        if not has_bytes(buf, transport_offset, PORTS_LEN):
            logger.debug("Skipping %s segment truncated before ports", protocol.label)
            return None

        src_port = read_u16(buf, transport_offset)
        dst_port = read_u16(buf, transport_offset + 2)

        return DecodedPacket(
            protocol=protocol,
            src_ip=src_ip,
            src_port=src_port,
            dst_port=dst_port,
            transport_length=transport_len,
            timestamp=timestamp,
        )


_DEFAULT_DECODER = HeaderDecoder()


def decode(frame: bytes, seconds: int, micros: int) -> Optional[DecodedPacket]:
    """Decode *frame* with the standard Ethernet offset."""
    return _DEFAULT_DECODER.decode(frame, seconds, micros)


__all__ = ["HeaderDecoder", "decode", "capture_millis"]
