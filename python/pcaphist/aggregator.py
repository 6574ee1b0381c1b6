"""Streaming per-key time-series accumulation over six grouping dimensions."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, unique
from typing import Dict, Iterator, List, NamedTuple, Tuple

from .decoded_packet import DecodedPacket

logger = logging.getLogger(__name__)


@unique
class Mode(Enum):
    BYTES = "bytes"
    PACKETS = "packets"

    def value_of(self, packet: DecodedPacket) -> int:
        if self is Mode.BYTES:
            return packet.transport_length
        return 1


@unique
class Dimension(Enum):
    src_port = ("srcPort", "Source Port", "{proto}/{src_port}")
    dst_port = ("dstPort", "Destination Port", "{proto}/{dst_port}")
    src_ip = ("srcIp", "Source IP", "{src_ip}")
    flow = ("flow", "Flow (Source → Destination)", "{proto}/{src_port} -> {dst_port}")
    src_ip_and_port = ("srcIpAndPort", "Source IP & Port", "{src_ip}:{src_port} ({proto})")
    src_ip_and_flow = (
        "srcIpAndFlow",
        "Source IP & Flow",
        "{src_ip} -> {src_port} -> {dst_port} ({proto})",
    )

    def __init__(self, report_name: str, title: str, key_template: str) -> None:
        self.report_name = report_name
        self.title = title
        self.key_template = key_template

    def compose_key(self, packet: DecodedPacket) -> str:
        return self.key_template.format(
            proto=packet.protocol.label,
            src_ip=packet.src_ip,
            src_port=packet.src_port,
            dst_port=packet.dst_port,
        )

    @classmethod
    def from_report_name(cls, name: str) -> "Dimension":
        for dimension in cls:
            if dimension.report_name == name:
                return dimension
        raise KeyError(name)


class Observation(NamedTuple):
    timestamp: int
    value: int


SeriesTable = Dict[str, List[Observation]]


def compose_key(dimension: Dimension, packet: DecodedPacket) -> str:
    return dimension.compose_key(packet)


@dataclass
class AggregationSnapshot:
    """The six series tables built during one pass, plus the value mode."""

    mode: Mode = Mode.BYTES
    tables: Dict[Dimension, SeriesTable] = field(
        default_factory=lambda: {dimension: {} for dimension in Dimension}
    )

    def table(self, dimension: Dimension) -> SeriesTable:
        return self.tables[dimension]

    def items(self) -> Iterator[Tuple[Dimension, SeriesTable]]:
        for dimension in Dimension:
            yield dimension, self.tables[dimension]

    def is_empty(self) -> bool:
        return not self.tables[Dimension.flow]

    def observation_count(self, dimension: Dimension = Dimension.flow) -> int:
        return sum(len(series) for series in self.tables[dimension].values())


def absorb(packet: DecodedPacket, mode: Mode, snapshot: AggregationSnapshot) -> None:
    """Append one observation for *packet* to every dimension of *snapshot*.

    All six series receive the same value and the original capture timestamp.
    Series are append-only, so per-key order is arrival order even when
    capture timestamps go backwards.
    """
    if mode is not snapshot.mode:
        raise ValueError(f"snapshot was created for mode {snapshot.mode.value!r}, got {mode.value!r}")

    observation = Observation(packet.timestamp, mode.value_of(packet))
    for dimension, table in snapshot.items():
        key = dimension.compose_key(packet)
        series = table.get(key)
        if series is None:
            series = []
            table[key] = series
        series.append(observation)


class Aggregator:
    """Single writer of an :class:`AggregationSnapshot` for the length of a run."""

    def __init__(self, mode: Mode = Mode.BYTES) -> None:
        self.mode = mode
        self._init_state()

    def _init_state(self) -> None:
        self.snapshot = AggregationSnapshot(mode=self.mode)
        self.packets_absorbed = 0

    def reset(self) -> None:
        self._init_state()

    def add_packet(self, packet: DecodedPacket) -> None:
        absorb(packet, self.mode, self.snapshot)
        self.packets_absorbed += 1
        if self.packets_absorbed % 100_000 == 0:
            logger.debug(
                "Absorbed %d packets, %d flows tracked",
                self.packets_absorbed,
                len(self.snapshot.table(Dimension.flow)),
            )


__all__ = [
    "Mode",
    "Dimension",
    "Observation",
    "SeriesTable",
    "AggregationSnapshot",
    "compose_key",
    "absorb",
    "Aggregator",
]
