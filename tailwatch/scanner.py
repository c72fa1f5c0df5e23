"""
Chunked scanning of a byte range for the alert marker.
"""

from dataclasses import dataclass
from typing import BinaryIO

from tailwatch.logging_config import get_logger

logger = get_logger(__name__)

# Field name that only appears in structured (JSON) log-level entries.
ALERT_MARKER = b'"logger":'

DEFAULT_CHUNK_SIZE = 64 * 1024


@dataclass
class ScanOutcome:
    """Result of scanning one byte range."""
    matched: bool
    bytes_read: int = 0
    error: OSError | None = None

    @property
    def failed(self) -> bool:
        """True if a seek or read error cut the scan short."""
        return self.error is not None


def contains_marker(data: bytes, marker: bytes = ALERT_MARKER) -> bool:
    """Literal byte containment, no decoding or regex."""
    return marker in data


class ChunkedScanner:
    """
    Reports whether a marker occurs in a byte range of an open file.

    The range is read in fixed-size chunks. The last ``len(marker) - 1``
    bytes of each assembled buffer are carried into the next one so that an
    occurrence split across a chunk boundary is still found.
    """

    def __init__(self, marker: bytes = ALERT_MARKER, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        """
        Initialize the scanner.

        Args:
            marker: Literal byte sequence to look for
            chunk_size: Read buffer size, independent of marker length

        Raises:
            ValueError: If the marker is empty or the chunk size is not positive
        """
        if not marker:
            raise ValueError("Marker must not be empty")
        if chunk_size < 1:
            raise ValueError(f"Chunk size must be positive, got {chunk_size}")

        self.marker = marker
        self.chunk_size = chunk_size
        self.overlap_size = len(marker) - 1

    def scan(self, fh: BinaryIO, begin: int, end: int) -> ScanOutcome:
        """
        Scan bytes ``[begin, end)`` of ``fh`` for the marker.

        Stops at the first match. A short read before ``end`` means the data
        ran out and is not an error. Seek and read errors are reported in the
        outcome instead of being raised.

        Args:
            fh: File opened for binary reading
            begin: First offset to inspect
            end: Offset one past the last byte to inspect

        Returns:
            ScanOutcome with the match flag and the number of bytes read
        """
        if end <= begin:
            return ScanOutcome(matched=False)

        try:
            fh.seek(begin)
        except OSError as e:
            logger.warning("Seek to offset %d failed: %s", begin, e)
            return ScanOutcome(matched=False, error=e)

        overlap = b""
        remaining = end - begin
        bytes_read = 0

        while remaining > 0:
            try:
                chunk = fh.read(min(remaining, self.chunk_size))
            except OSError as e:
                logger.warning("Read failed at offset %d: %s", begin + bytes_read, e)
                return ScanOutcome(matched=False, bytes_read=bytes_read, error=e)

            if not chunk:
                logger.debug(
                    "Data ended at offset %d, %d byte(s) short of %d",
                    begin + bytes_read, remaining, end
                )
                break

            bytes_read += len(chunk)
            remaining -= len(chunk)

            window = overlap + chunk
            if contains_marker(window, self.marker):
                return ScanOutcome(matched=True, bytes_read=bytes_read)

            overlap = window[-self.overlap_size:] if self.overlap_size else b""

        return ScanOutcome(matched=False, bytes_read=bytes_read)

    def scan_range(self, fh: BinaryIO, begin: int, end: int) -> bool:
        """Return True if the marker occurs anywhere in bytes ``[begin, end)``."""
        return self.scan(fh, begin, end).matched
