"""Run configuration and parsing of the comma-separated option values."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, Optional

from .aggregator import Mode
from .exclusion_filter import ExclusionFilter

logger = logging.getLogger(__name__)

MAX_PORT = 0xFFFF


@dataclass(frozen=True)
class AnalysisConfig:
    mode: Mode = Mode.BYTES
    tcp_blacklist: FrozenSet[int] = field(default_factory=frozenset)
    udp_blacklist: FrozenSet[int] = field(default_factory=frozenset)
    ip_blacklist: FrozenSet[str] = field(default_factory=frozenset)
    html_path: Optional[Path] = None
    summary_csv_path: Optional[Path] = None

    def exclusion_filter(self) -> ExclusionFilter:
        return ExclusionFilter(
            tcp_ports=self.tcp_blacklist,
            udp_ports=self.udp_blacklist,
            ips=self.ip_blacklist,
        )


def parse_mode(value: Optional[str]) -> Mode:
    """Case-insensitive mode lookup; unknown values fall back to bytes."""
    if value is None:
        return Mode.BYTES
    normalized = value.strip().lower()
    for mode in Mode:
        if mode.value == normalized:
            return mode
    logger.warning("Unknown mode '%s', defaulting to 'bytes'.", value.strip())
    return Mode.BYTES


def parse_port_list(value: Optional[str]) -> FrozenSet[int]:
    ports = set()
    if not value:
        return frozenset()
    for entry in value.split(","):
        entry = entry.strip()
        if not entry:
            continue
        try:
            port = int(entry)
        except ValueError:
            logger.warning("Ignoring invalid port '%s' in blacklist", entry)
            continue
        if not 0 <= port <= MAX_PORT:
            logger.warning("Ignoring out-of-range port %d in blacklist", port)
            continue
        ports.add(port)
    return frozenset(ports)


def parse_ip_list(value: Optional[str]) -> FrozenSet[str]:
    if not value:
        return frozenset()
    return frozenset(entry.strip() for entry in value.split(",") if entry.strip())


__all__ = ["AnalysisConfig", "parse_mode", "parse_port_list", "parse_ip_list"]
