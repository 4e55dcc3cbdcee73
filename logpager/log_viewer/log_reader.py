"""
Log File Reader Module - Chunked, boundary-aware reads from either end of a file

Handles:
- Opening a log file as a scoped, seekable byte source
- Forward reads that stop after a number of entry starts
- Backward reads that prepend chunks until enough entries are found
- Trimming partial entries at span edges while tracking exact byte offsets
- Reading everything after an offset (tailing)
"""
import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator, List, NamedTuple, Optional

from .log_parser import ENTRY_HEADER_BYTES, HEADER_MAX_LENGTH

DEFAULT_BUFFER_SIZE = 4096


class LogViewerError(Exception):
    """Base class for log viewer errors"""


class SourceUnavailable(LogViewerError):
    """The log file is missing, unreadable or not seekable"""


class Span(NamedTuple):
    """Raw bytes read from a file and the [start, end) range they cover"""
    data: bytes
    start: int
    end: int


@contextmanager
def open_source(file_path) -> Iterator[BinaryIO]:
    """
    Open a log file for binary reading, closing it on every exit path

    Raises:
        SourceUnavailable: if the file is missing, unreadable or not seekable
    """
    path = Path(file_path)
    if not path.is_file():
        raise SourceUnavailable(f"Log file not found: {path}")

    try:
        handle = open(path, 'rb')
    except OSError as e:
        raise SourceUnavailable(f"Cannot open log file {path}: {e}") from e

    with handle:
        if not handle.seekable():
            raise SourceUnavailable(f"Log file is not seekable: {path}")
        yield handle


class ChunkedReader:
    """
    Reads whole log entries from a seekable binary handle in fixed-size chunks

    An entry starts at the beginning of a line carrying an entry header. Every
    read returns a Span whose start and end sit on entry starts (or on the
    file edges), so no entry is ever split between two pages. The buffer size
    only changes how many read calls are made, never the returned span.
    """

    def __init__(self, handle: BinaryIO, buffer_size: int = DEFAULT_BUFFER_SIZE):
        """
        Initialize the chunked reader

        Args:
            handle: Open binary file handle, owned by the caller
            buffer_size: Number of bytes read per call
        """
        if buffer_size <= 0:
            raise ValueError(f"buffer_size must be positive, got {buffer_size}")
        if not handle.seekable():
            raise SourceUnavailable("Log source is not seekable")

        self.handle = handle
        self.buffer_size = buffer_size
        self.logger = logging.getLogger(__name__)
        try:
            self.file_size = handle.seek(0, os.SEEK_END)
        except OSError as e:
            raise SourceUnavailable(f"Cannot seek log source: {e}") from e

    def clamp(self, offset: int) -> int:
        """Clamp an offset to [0, file_size]"""
        return max(0, min(offset, self.file_size))

    def read_at(self, offset: int, size: int) -> bytes:
        """Read up to size bytes at offset, never past the size seen at open"""
        size = min(size, self.file_size - offset)
        if size <= 0:
            return b''
        try:
            self.handle.seek(offset)
            return self.handle.read(size)
        except OSError as e:
            raise SourceUnavailable(f"Cannot read log source at {offset}: {e}") from e

    def starts_line(self, offset: int) -> bool:
        """Peek at the byte before offset to see whether offset begins a line"""
        if offset <= 0:
            return True
        return self.read_at(offset - 1, 1) == b'\n'

    def is_entry_start(self, offset: int) -> bool:
        """Check whether an entry header begins exactly at offset"""
        if offset >= self.file_size or not self.starts_line(offset):
            return False
        return ENTRY_HEADER_BYTES.match(self.read_at(offset, HEADER_MAX_LENGTH)) is not None

    def aligned_end(self, offset: int) -> int:
        """
        Move an offset sitting on the newline that ends an entry just past it,
        so the entry before it counts as complete
        """
        if offset < self.file_size and self.read_at(offset, 1) == b'\n':
            if offset + 1 == self.file_size or self.is_entry_start(offset + 1):
                return offset + 1
        return offset

    def read_forward(self, start: int, min_entries: int) -> Span:
        """
        Read at least min_entries whole entries going forward from start

        Reading stops once min_entries + 1 entry starts are seen (or at EOF);
        the bytes from the extra start onwards are left for the next forward
        read and the span ends there. A partial entry in front of the first
        entry start is skipped.

        Args:
            start: Absolute offset to read from
            min_entries: Number of entries wanted

        Returns:
            Span of whole entries
        """
        start = self.clamp(start)
        if min_entries <= 0:
            return Span(b'', start, start)

        # None until the first newline when start sits in the middle of a line
        cursor: Optional[int] = 0 if self.starts_line(start) else None

        buffer = bytearray()
        starts: List[int] = []
        searched = 0
        reads = 0

        while len(starts) <= min_entries:
            chunk = self.read_at(start + len(buffer), self.buffer_size)
            if not chunk:
                # The last line has no newline but is complete at EOF
                if cursor is not None and cursor < len(buffer) and ENTRY_HEADER_BYTES.match(buffer, cursor):
                    starts.append(start + cursor)
                break
            reads += 1
            buffer += chunk

            while len(starts) <= min_entries:
                newline = buffer.find(b'\n', searched)
                if newline == -1:
                    searched = len(buffer)
                    break
                if cursor is not None and ENTRY_HEADER_BYTES.match(buffer, cursor):
                    starts.append(start + cursor)
                cursor = searched = newline + 1

        self.logger.debug(f"Forward read from {start}: {reads} chunk(s), {len(starts)} entry start(s)")

        if not starts:
            return Span(bytes(buffer), start, start + len(buffer))

        first = starts[0]
        end = starts[min_entries] if len(starts) > min_entries else start + len(buffer)
        return Span(bytes(buffer[first - start:end - start]), first, end)

    def read_backward(self, end: int, min_entries: int) -> Span:
        """
        Read at least min_entries whole entries going backward from end

        Chunks are prepended until min_entries + 1 entry starts are confirmed
        or the start of the file is reached. Surplus entries at the front are
        trimmed and the span start moves forward past them; when the file
        start is reached the span starts at 0, headless fragment included.
        An end on the newline closing an entry counts as that entry's end.
        When end falls inside an entry, that partial entry is dropped and the
        span ends at its start instead.

        Args:
            end: Absolute offset the span must end at (exclusive)
            min_entries: Number of entries wanted

        Returns:
            Span of whole entries; starts at 0 when the file start was reached
        """
        end = self.clamp(end)
        if min_entries <= 0:
            return Span(b'', end, end)

        end = self.aligned_end(end)
        tail_partial = end < self.file_size and not self.is_entry_start(end)
        needed = min_entries + 2 if tail_partial else min_entries + 1

        # Bytes past the span end, for headers cut by an arbitrary end offset
        lookahead = self.read_at(end, HEADER_MAX_LENGTH)

        position = end
        chunks: List[bytes] = []
        starts: List[int] = []

        while position > 0 and len(starts) < needed:
            size = min(position, self.buffer_size)
            position -= size
            chunk = self.read_at(position, size)

            # Headers may run past the chunk into bytes read earlier
            window = chunk + lookahead
            found = []
            if position == 0 and ENTRY_HEADER_BYTES.match(window):
                found.append(0)
            newline = chunk.find(b'\n')
            while newline != -1:
                if position + newline + 1 < end and ENTRY_HEADER_BYTES.match(window, newline + 1):
                    found.append(position + newline + 1)
                newline = chunk.find(b'\n', newline + 1)

            starts = found + starts
            chunks.append(chunk)
            lookahead = window[:HEADER_MAX_LENGTH]

        self.logger.debug(f"Backward read from {end}: {len(chunks)} chunk(s), {len(starts)} entry start(s)")

        data = b''.join(reversed(chunks))

        if tail_partial:
            if not starts:
                return Span(data, position, end)
            end = starts.pop()

        if len(starts) > min_entries:
            first = starts[-min_entries]
        else:
            first = position

        return Span(data[first - position:end - position], first, end)

    def read_to_end(self, start: int) -> Span:
        """Read everything from start to the file size seen at open"""
        start = self.clamp(start)

        chunks = []
        position = start
        while True:
            chunk = self.read_at(position, self.buffer_size)
            if not chunk:
                break
            chunks.append(chunk)
            position += len(chunk)

        data = b''.join(chunks)
        return Span(data, start, start + len(data))
