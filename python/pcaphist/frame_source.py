"""Capture-file ingestion yielding raw link-layer frames."""

from __future__ import annotations

import logging
import threading
from decimal import Decimal
from pathlib import Path
from typing import IO, Iterable, Iterator, NamedTuple, Optional, Tuple, Union

import dpkt

logger = logging.getLogger(__name__)

MICROS_PER_SECOND = 1_000_000
PCAPNG_MAGIC = dpkt.pcapng.PCAPNG_BT_SHB


class CaptureReadError(RuntimeError):
    """Raised when a capture file cannot be opened or parsed."""


class Frame(NamedTuple):
    data: bytes
    seconds: int
    micros: int


class CancellationToken:
    """Cooperative stop signal checked between frames."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


def split_timestamp(timestamp: Union[float, Decimal]) -> Tuple[int, int]:
    """Split a capture time into whole seconds and microseconds.

    Nanosecond pcap files come back from dpkt as exact ``Decimal`` values and
    are truncated to the microsecond. Float times only carry about a quarter
    of a microsecond of precision at epoch scale, so they are rounded to the
    nearest microsecond instead. Neither path moves a frame into the next
    second.
    """
    seconds = int(timestamp)
    fraction = (timestamp - seconds) * MICROS_PER_SECOND
    if isinstance(timestamp, Decimal):
        micros = int(fraction)
    else:
        micros = int(round(fraction))
    return seconds, min(max(micros, 0), MICROS_PER_SECOND - 1)


def iter_frames(frames: Iterable[Frame], cancel: Optional[CancellationToken] = None) -> Iterator[Frame]:
    """Pull frames lazily, stopping before the next pull once *cancel* is set."""
    iterator = iter(frames)
    while True:
        if cancel is not None and cancel.cancelled:
            return
        try:
            frame = next(iterator)
        except StopIteration:
            return
        yield frame


class CaptureReader:
    """Iterates over the frames of a pcap or pcapng capture."""

    def __init__(self, capture_path: Union[str, Path]) -> None:
        path = Path(capture_path)
        if not path.is_file():
            raise FileNotFoundError(f"Capture file does not exist: {path}")

        self.path = path
        self.is_pcapng = False
        self._file: Optional[IO[bytes]] = None
        self._reader = None
        self._frame_count = 0

    # ------------------------------------------------------------------
    def __enter__(self) -> "CaptureReader":
        self._open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        self.close()

    def close(self) -> None:
        self._reader = None
        if self._file is not None:
            try:
                self._file.close()
            except OSError:
                logger.debug("Failed to close capture file", exc_info=True)
            finally:
                self._file = None

    # ------------------------------------------------------------------
    @property
    def frame_count(self) -> int:
        return self._frame_count

    def __iter__(self) -> Iterator[Frame]:
        self._open()
        assert self._reader is not None
        try:
            for timestamp, buf in self._reader:
                seconds, micros = split_timestamp(timestamp)
                self._frame_count += 1
                yield Frame(bytes(buf), seconds, micros)
        except (dpkt.UnpackError, dpkt.dpkt.NeedData, ValueError) as exc:
            raise CaptureReadError(
                f"Failed reading frame {self._frame_count + 1} from {self.path}"
            ) from exc

    # ------------------------------------------------------------------
    def _open(self) -> None:
        if self._reader is not None:
            return
        try:
            self._file = self.path.open("rb")
            self.is_pcapng = self._sniff_pcapng(self._file)
            if self.is_pcapng:
                self._reader = dpkt.pcapng.Reader(self._file)
            else:
                self._reader = dpkt.pcap.Reader(self._file)
        except (OSError, ValueError, dpkt.UnpackError, dpkt.dpkt.NeedData) as exc:
            self.close()
            raise CaptureReadError(f"Failed to open capture file: {self.path}") from exc

        datalink = self._reader.datalink()
        if datalink != dpkt.pcap.DLT_EN10MB:
            logger.warning(
                "%s uses link type %s; frames are still decoded at the Ethernet offset",
                self.path.name,
                datalink,
            )

    @staticmethod
    def _sniff_pcapng(handle: IO[bytes]) -> bool:
        head = handle.read(4)
        handle.seek(0)
        if len(head) < 4:
            return False
        return int.from_bytes(head, "little") == PCAPNG_MAGIC


__all__ = [
    "CaptureReadError",
    "Frame",
    "CancellationToken",
    "split_timestamp",
    "iter_frames",
    "CaptureReader",
]
