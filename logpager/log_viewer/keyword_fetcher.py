"""
Keyword Fetcher Module - Filtered paging that keeps reading until enough matches

A single page rarely holds enough entries that contain a keyword, so the
fetcher walks further (older) pages with the remaining count until it has
what was asked for or the file start is reached. Filtered results have no
fixed entry count per byte range, so the returned page is marked
keyword_active and offers no navigation.
"""
import logging
from dataclasses import replace
from typing import List, Optional

from .log_parser import LogEntry
from .paginator import LogPaginator, Page, PageOffset, PageRequest

DEFAULT_MAX_PAGES = 1000


class KeywordFetcher:
    """Wraps a LogPaginator with case-sensitive substring filtering"""

    def __init__(self, paginator: LogPaginator, max_pages: int = DEFAULT_MAX_PAGES):
        """
        Initialize the keyword fetcher

        Args:
            paginator: Paginator for the log file to search
            max_pages: Most pages read for a single filtered fetch
        """
        if max_pages <= 0:
            raise ValueError(f"max_pages must be positive, got {max_pages}")
        self.paginator = paginator
        self.max_pages = max_pages
        self.logger = logging.getLogger(__name__)

    @staticmethod
    def matches(entry: LogEntry, keyword: str) -> bool:
        return keyword in entry.text

    def fetch_filtered(self, request: PageRequest, keyword: Optional[str] = None) -> Page:
        """
        Fetch entries, optionally keeping only those containing keyword

        Args:
            request: Where to start and how many entries to return
            keyword: Case-sensitive substring; None or "" disables filtering

        Returns:
            Without a keyword, the paginator's page unchanged. With one, up to
            request.line_count matching entries (fewer when the file runs out)
            in a page with keyword_active set
        """
        if not keyword:
            return self.paginator.fetch_page(request)

        results: List[LogEntry] = []
        first_page: Optional[Page] = None
        page: Optional[Page] = None
        current = request
        pages_read = 0

        while True:
            page = self.paginator.fetch_page(current)
            pages_read += 1
            if first_page is None:
                first_page = page

            results.extend(entry for entry in page.entries if self.matches(entry, keyword))

            if len(results) >= request.line_count or page.next_seek is None:
                break
            if pages_read >= self.max_pages:
                self.logger.warning(
                    f"Keyword search for {keyword!r} stopped after {pages_read} pages "
                    f"with {len(results)} of {request.line_count} matches"
                )
                break

            current = replace(current, seek=page.next_seek, line_count=request.line_count - len(results))

        offset = None
        if first_page.offset is not None and page.offset is not None:
            offset = PageOffset(page.offset.start, first_page.offset.end)

        self.logger.debug(f"Keyword {keyword!r}: {len(results)} matches from {pages_read} page(s)")
        return Page(
            entries=results,
            offset=offset,
            file_size=first_page.file_size,
            keyword_active=True,
        )
