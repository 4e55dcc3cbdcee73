"""
Log Viewer Package - Boundary-aware paging through timestamp-delimited log files

This package reads pages of entries from log files of any size without
loading them whole:
- Entry parsing with timestamp, environment and level extraction
- Chunked reads from either end of the file
- Pages that never split a multi-line entry, with byte offsets for navigation
- Keyword filtering that walks further pages until enough matches are found

Package Structure:
- log_parser: Entry parsing (LogParser, LogEntry, LogLevel)
- log_reader: Chunked byte reads (ChunkedReader, Span, SourceUnavailable)
- paginator: Page orchestration (LogPaginator, PageRequest, PageOffset, Page)
- keyword_fetcher: Filtered fetching (KeywordFetcher)
"""

from .log_parser import LogParser, LogEntry, LogLevel, normalize_trace
from .log_reader import ChunkedReader, LogViewerError, SourceUnavailable, Span, open_source
from .paginator import LogPaginator, Page, PageOffset, PageRequest
from .keyword_fetcher import KeywordFetcher

__all__ = [
    # Core components
    'LogParser',
    'ChunkedReader',
    'LogPaginator',
    'KeywordFetcher',
    'open_source',
    'normalize_trace',

    # Data models
    'LogEntry',
    'LogLevel',
    'Span',
    'Page',
    'PageOffset',
    'PageRequest',

    # Errors
    'LogViewerError',
    'SourceUnavailable',
]
