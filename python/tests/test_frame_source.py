from __future__ import annotations

from decimal import Decimal

import pytest

from pcaphist import (
    AnalysisConfig,
    CancellationToken,
    CaptureReader,
    CaptureReadError,
    Frame,
    HistogramPipeline,
    iter_frames,
)
from pcaphist.aggregator import Dimension, Mode, Observation
from pcaphist.frame_source import split_timestamp

from framing import ipv4_tcp_frame, ipv6_frame, write_pcap, write_pcapng


def _frames():
    return [
        (ipv4_tcp_frame(payload=b"hello"), 1.5),
        (ipv6_frame(payload=b"abc"), 2.25),
    ]


def test_reads_pcap_frames(tmp_path):
    path = write_pcap(tmp_path / "sample.pcap", _frames())

    with CaptureReader(path) as reader:
        frames = list(reader)

    assert not reader.is_pcapng
    assert reader.frame_count == 2
    assert frames[0] == Frame(_frames()[0][0], 1, 500_000)
    assert frames[1].seconds == 2
    assert frames[1].micros == 250_000


def test_reads_pcapng_frames(tmp_path):
    path = write_pcapng(tmp_path / "sample.pcapng", _frames())

    with CaptureReader(str(path)) as reader:
        frames = list(reader)

    assert reader.is_pcapng
    assert [frame.data for frame in frames] == [frame for frame, _ in _frames()]
    assert [(frame.seconds, frame.micros) for frame in frames] == [(1, 500_000), (2, 250_000)]


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        CaptureReader(tmp_path / "missing.pcap")


def test_garbage_file_raises_capture_error(tmp_path):
    path = tmp_path / "garbage.pcap"
    path.write_bytes(b"this is not a capture file at all")

    with pytest.raises(CaptureReadError):
        with CaptureReader(path) as reader:
            list(reader)


def test_split_timestamp():
    assert split_timestamp(0.0) == (0, 0)
    assert split_timestamp(1.5) == (1, 500_000)
    assert split_timestamp(1.9999996) == (1, 999_999)
    assert split_timestamp(1_700_000_001.25) == (1_700_000_001, 250_000)


def test_split_decimal_timestamp_truncates():
    assert split_timestamp(Decimal("1700000001.999999642")) == (1_700_000_001, 999_999)
    assert split_timestamp(Decimal("1700000001.000000999")) == (1_700_000_001, 0)


def test_nanosecond_capture_stays_in_its_millisecond(tmp_path):
    path = write_pcap(
        tmp_path / "nano.pcap",
        [(ipv4_tcp_frame(payload=b"late"), 1_700_000_001.9999996)],
        nano=True,
    )

    with CaptureReader(path) as reader:
        result = HistogramPipeline(AnalysisConfig(mode=Mode.PACKETS)).run(reader)

    assert result.stats.absorbed == 1
    assert result.snapshot.table(Dimension.src_port)["TCP/1234"] == [Observation(1_700_000_001_999, 1)]


def test_iter_frames_stops_once_cancelled():
    frames = [Frame(b"a", 0, 0), Frame(b"b", 0, 1), Frame(b"c", 0, 2)]
    token = CancellationToken()
    consumed = []

    for frame in iter_frames(frames, token):
        consumed.append(frame)
        if len(consumed) == 2:
            token.cancel()

    assert consumed == frames[:2]
    assert token.cancelled


def test_iter_frames_without_token_drains():
    frames = [Frame(b"a", 0, 0), Frame(b"b", 0, 1)]
    assert list(iter_frames(frames)) == frames
    assert list(iter_frames(iter(frames), CancellationToken())) == frames
