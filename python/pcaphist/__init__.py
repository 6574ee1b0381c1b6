"""Traffic histograms from pcap/pcapng captures.

Frames are decoded, filtered against port and IP blacklists and folded into
six per-key time series groupings (source port, destination port, source IP,
flow, source IP and port, source IP and flow).
"""

from .decoded_packet import DecodedPacket, TransportProtocol
from .header_decoder import HeaderDecoder, decode
from .exclusion_filter import ExclusionFilter, accept
from .aggregator import (
    AggregationSnapshot,
    Aggregator,
    Dimension,
    Mode,
    Observation,
    SeriesTable,
    absorb,
    compose_key,
)
from .summarizer import SummaryRow, summarize, summarize_snapshot
from .frame_source import CancellationToken, CaptureReader, CaptureReadError, Frame, iter_frames
from .config import AnalysisConfig, parse_ip_list, parse_mode, parse_port_list
from .pipeline import HistogramPipeline, PipelineStats, RunResult
from .report import (
    build_report_payload,
    render_console,
    render_html,
    write_html_report,
    write_summary_csv,
)

__all__ = [
    "DecodedPacket",
    "TransportProtocol",
    "HeaderDecoder",
    "decode",
    "ExclusionFilter",
    "accept",
    "AggregationSnapshot",
    "Aggregator",
    "Dimension",
    "Mode",
    "Observation",
    "SeriesTable",
    "absorb",
    "compose_key",
    "SummaryRow",
    "summarize",
    "summarize_snapshot",
    "CancellationToken",
    "CaptureReader",
    "CaptureReadError",
    "Frame",
    "iter_frames",
    "AnalysisConfig",
    "parse_ip_list",
    "parse_mode",
    "parse_port_list",
    "HistogramPipeline",
    "PipelineStats",
    "RunResult",
    "build_report_payload",
    "render_console",
    "render_html",
    "write_html_report",
    "write_summary_csv",
]
