"""Single-pass decode, filter and aggregate driver."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from .aggregator import AggregationSnapshot, Aggregator
from .config import AnalysisConfig
from .exclusion_filter import ExclusionFilter
from .frame_source import CancellationToken, Frame, iter_frames
from .header_decoder import HeaderDecoder

logger = logging.getLogger(__name__)


@dataclass
class PipelineStats:
    frames: int = 0
    decoded: int = 0
    excluded: int = 0
    absorbed: int = 0

    @property
    def skipped(self) -> int:
        return self.frames - self.decoded


@dataclass
class RunResult:
    snapshot: AggregationSnapshot
    stats: PipelineStats = field(default_factory=PipelineStats)
    cancelled: bool = False


class HistogramPipeline:
    """Feeds frames through the decoder, the exclusion filter and the aggregator.

    Frames are handled one at a time in arrival order by a single consumer, so
    the snapshot has exactly one writer and needs no locking.
    """

    def __init__(
        self,
        config: Optional[AnalysisConfig] = None,
        *,
        decoder: Optional[HeaderDecoder] = None,
    ) -> None:
        self.config = config or AnalysisConfig()
        self.decoder = decoder or HeaderDecoder()
        self.exclusion: ExclusionFilter = self.config.exclusion_filter()
        self.aggregator = Aggregator(self.config.mode)
        self.stats = PipelineStats()

    @property
    def snapshot(self) -> AggregationSnapshot:
        return self.aggregator.snapshot

    def process_frame(self, frame: Frame) -> bool:
        self.stats.frames += 1
        packet = self.decoder.decode(frame.data, frame.seconds, frame.micros)
        if packet is None:
            return False
        self.stats.decoded += 1

        if not self.exclusion.accept(packet):
            self.stats.excluded += 1
            return False

        self.aggregator.add_packet(packet)
        self.stats.absorbed += 1
        return True

    def run(
        self,
        frames: Iterable[Frame],
        cancel: Optional[CancellationToken] = None,
    ) -> RunResult:
        for frame in iter_frames(frames, cancel):
            self.process_frame(frame)

        cancelled = cancel is not None and cancel.cancelled
        if cancelled:
            logger.info("Pass cancelled after %d frames", self.stats.frames)
        logger.debug(
            "frames=%d decoded=%d excluded=%d absorbed=%d",
            self.stats.frames,
            self.stats.decoded,
            self.stats.excluded,
            self.stats.absorbed,
        )
        return RunResult(snapshot=self.snapshot, stats=self.stats, cancelled=cancelled)


__all__ = ["PipelineStats", "RunResult", "HistogramPipeline"]
