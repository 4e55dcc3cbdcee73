"""
Log Paginator Module - One page of entries per call, with navigation offsets

A page is requested with a signed seek:
- 0 reads backward from the end of the file (the latest entries)
- a negative seek reads backward from abs(seek) ("next" page, older entries)
- a positive seek reads forward from seek ("previous" page, the entries
  written after the ones currently shown)

Every call opens the file, reads, parses and closes it again; nothing is
kept between calls except the seek values the caller holds on to.
"""
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from .log_parser import LogParser, LogEntry
from .log_reader import ChunkedReader, SourceUnavailable, Span, open_source, DEFAULT_BUFFER_SIZE

DEFAULT_LINE_COUNT = 20


@dataclass(frozen=True)
class PageRequest:
    """Where to read and how many entries to return"""
    seek: int = 0
    line_count: int = DEFAULT_LINE_COUNT
    buffer_size: int = DEFAULT_BUFFER_SIZE

    def __post_init__(self):
        if self.line_count <= 0:
            raise ValueError(f"line_count must be positive, got {self.line_count}")
        if self.buffer_size <= 0:
            raise ValueError(f"buffer_size must be positive, got {self.buffer_size}")


@dataclass(frozen=True)
class PageOffset:
    """Byte range [start, end) covered by the entries of one page"""
    start: int
    end: int


@dataclass
class Page:
    """Entries of one fetch plus what is needed to navigate away from it"""
    entries: List[LogEntry] = field(default_factory=list)
    offset: Optional[PageOffset] = None
    file_size: int = 0
    keyword_active: bool = False

    @property
    def navigable(self) -> bool:
        """Filtered pages do not map to fixed entry counts and cannot be paged"""
        return self.offset is not None and not self.keyword_active

    @property
    def next_seek(self) -> Optional[int]:
        """Seek for the adjacent older page, None when the file start was reached"""
        if not self.navigable or self.offset.start == 0:
            return None
        return -self.offset.start

    @property
    def previous_seek(self) -> Optional[int]:
        """Seek for the adjacent newer page, None when the file end was reached"""
        if not self.navigable or self.offset.end >= self.file_size - 1:
            return None
        return self.offset.end


class LogPaginator:
    """
    Produces pages of parsed entries from a single log file

    Features:
    - Bidirectional paging by byte offset
    - Entries never split across pages
    - Missing or unreadable files yield an empty, non-navigable page
    - Tail reads for polling new entries
    """

    def __init__(self, file_path: Path, parser: Optional[LogParser] = None):
        """
        Initialize the paginator

        Args:
            file_path: Path to the log file
            parser: Parser used to turn raw bytes into entries
        """
        self.file_path = Path(file_path)
        self.parser = parser or LogParser()
        self.logger = logging.getLogger(__name__)

    def read_span(self, reader: ChunkedReader, request: PageRequest) -> Span:
        """Pick the read direction for a request"""
        if request.seek > 0:
            return reader.read_forward(request.seek, request.line_count)
        if request.seek < 0:
            return reader.read_backward(abs(request.seek), request.line_count)
        return reader.read_backward(reader.file_size, request.line_count)

    def fetch_page(self, request: PageRequest) -> Page:
        """
        Fetch one page of entries

        Args:
            request: Seek position, entry count and chunk size

        Returns:
            Page with entries (newest first) and the byte range they came from
        """
        try:
            with open_source(self.file_path) as handle:
                reader = ChunkedReader(handle, request.buffer_size)
                span = self.read_span(reader, request)
                file_size = reader.file_size
        except SourceUnavailable as e:
            self.logger.warning(f"Cannot page {self.file_path}: {e}")
            return Page()

        entries = self.parser.parse(span.data)
        self.logger.debug(
            f"Page seek={request.seek} lines={request.line_count}: "
            f"{len(entries)} entries in [{span.start}, {span.end})"
        )
        return Page(
            entries=entries,
            offset=PageOffset(span.start, span.end),
            file_size=file_size,
        )

    def tail(self, seek: int = 0, buffer_size: int = DEFAULT_BUFFER_SIZE) -> Tuple[int, List[LogEntry]]:
        """
        Read entries written after a position

        Args:
            seek: Position returned by the previous tail call; 0 starts at the
                last byte of the file
            buffer_size: Number of bytes read per call

        Returns:
            Tuple of (position for the next call, new entries newest first)
        """
        try:
            with open_source(self.file_path) as handle:
                reader = ChunkedReader(handle, buffer_size)
                start = reader.file_size - 1 if seek == 0 else abs(seek)
                span = reader.read_to_end(start)
        except SourceUnavailable as e:
            self.logger.warning(f"Cannot tail {self.file_path}: {e}")
            return abs(seek), []

        return span.end, self.parser.parse(span.data)
