"""Command-line entry point: capture file in, traffic histograms out."""

from __future__ import annotations

import argparse
import contextlib
import logging
import signal
import sys
import threading
from pathlib import Path
from typing import Iterator, List, Optional

from .config import AnalysisConfig, parse_ip_list, parse_mode, parse_port_list
from .frame_source import CancellationToken, CaptureReader, CaptureReadError
from .pipeline import HistogramPipeline, RunResult
from .report import render_console, write_html_report, write_summary_csv

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_CANCELLED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pcaphist",
        description="Compute per-port, per-IP and per-flow traffic histograms from a pcap/pcapng capture.",
        epilog=(
            "examples:\n"
            "  pcaphist sample.pcapng --html=report.html\n"
            "  pcaphist sample.pcapng --blacklist-tcp-ports=443 --blacklist-ips=8.8.8.8"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "capture_path",
        type=Path,
        help="Path to a .pcap or .pcapng capture file.",
    )
    parser.add_argument(
        "--mode",
        default=None,
        metavar="bytes|packets",
        help="Count transport bytes or packets (default: bytes).",
    )
    parser.add_argument(
        "--html",
        type=Path,
        default=None,
        metavar="PATH",
        help="Write an interactive HTML report to PATH.",
    )
    parser.add_argument(
        "--blacklist-tcp-ports",
        default="",
        metavar="P1,P2",
        help="Comma-separated TCP ports to ignore (source or destination).",
    )
    parser.add_argument(
        "--blacklist-udp-ports",
        default="",
        metavar="P1,P2",
        help="Comma-separated UDP ports to ignore (source or destination).",
    )
    parser.add_argument(
        "--blacklist-ips",
        default="",
        metavar="IP1,IP2",
        help="Comma-separated source IPs to ignore (exact match).",
    )
    parser.add_argument(
        "--summary-csv",
        type=Path,
        default=None,
        metavar="PATH",
        help="Write sorted totals for all six groupings to a CSV file.",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="INFO",
        help="Log level for diagnostic output.",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> AnalysisConfig:
    return AnalysisConfig(
        mode=parse_mode(args.mode),
        tcp_blacklist=parse_port_list(args.blacklist_tcp_ports),
        udp_blacklist=parse_port_list(args.blacklist_udp_ports),
        ip_blacklist=parse_ip_list(args.blacklist_ips),
        html_path=args.html,
        summary_csv_path=args.summary_csv,
    )


@contextlib.contextmanager
def cancel_on_sigint(token: CancellationToken) -> Iterator[CancellationToken]:
    """Route Ctrl+C to *token* instead of interrupting mid-frame."""
    if threading.current_thread() is not threading.main_thread():
        yield token
        return

    def _handler(signum, frame) -> None:
        token.cancel()

    previous = signal.signal(signal.SIGINT, _handler)
    try:
        yield token
    finally:
        # None means the old handler was not installed from Python.
        signal.signal(signal.SIGINT, previous if previous is not None else signal.SIG_DFL)


def analyze_capture(
    capture_path: Path,
    config: AnalysisConfig,
    cancel: Optional[CancellationToken] = None,
) -> RunResult:
    pipeline = HistogramPipeline(config)
    with CaptureReader(capture_path) as reader:
        return pipeline.run(reader, cancel)


def write_outputs(result: RunResult, config: AnalysisConfig) -> None:
    render_console(result.snapshot, sys.stdout)

    if config.html_path is not None:
        target = write_html_report(result.snapshot, config.html_path)
        logger.info("Successfully generated HTML report at: %s", target.resolve())

    if config.summary_csv_path is not None:
        rows = write_summary_csv(result.snapshot, config.summary_csv_path)
        logger.info("Wrote %d summary rows to %s", rows, config.summary_csv_path)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level))

    capture_path: Path = args.capture_path
    if not capture_path.is_file():
        logger.error("File not found: %s", capture_path)
        return EXIT_USAGE

    config = config_from_args(args)
    token = CancellationToken()
    logger.info(
        "Analyzing '%s' in '%s' mode. Press Ctrl+C to stop.",
        capture_path,
        config.mode.value,
    )

    try:
        with cancel_on_sigint(token):
            result = analyze_capture(capture_path, config, token)
    except KeyboardInterrupt:
        logger.warning("Canceled.")
        return EXIT_CANCELLED
    except FileNotFoundError as exc:
        logger.error(str(exc))
        return EXIT_USAGE
    except CaptureReadError as exc:
        logger.error("Error: %s", exc)
        return EXIT_FAILURE
    except Exception:  # pragma: no cover - unexpected runtime failures
        logger.exception("Failed processing %s", capture_path)
        return EXIT_FAILURE

    if result.cancelled:
        logger.warning("Canceled.")
        return EXIT_CANCELLED

    stats = result.stats
    logger.info(
        "Analysis complete: frames=%d, decoded=%d, excluded=%d, absorbed=%d",
        stats.frames,
        stats.decoded,
        stats.excluded,
        stats.absorbed,
    )

    try:
        write_outputs(result, config)
    except OSError as exc:
        logger.error("Error: %s", exc)
        return EXIT_FAILURE

    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
