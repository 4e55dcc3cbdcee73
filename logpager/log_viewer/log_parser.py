"""
Log Parser Module - Entry parsing for timestamp-delimited log files

Handles:
- Entry boundary detection ("[YYYY-MM-DD HH:MM:SS] env.LEVEL: message")
- Timestamp, environment and level extraction
- Message / exception trace separation
- Trace path normalisation (application root stripped, forward slashes)
- Newest-first ordering
"""
import re
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Dict, Any, List, Optional

# Years are matched as 20YY only; text such as "[1999-..." stays continuation.
# Name lengths are capped so a header always fits in HEADER_MAX_LENGTH bytes.
HEADER_PATTERN = r'\[(20\d{2}-\d{2}-\d{2} \d{2}:\d{2}:\d{2})\] (\w{1,255})\.(\w{1,64}):'
HEADER_MAX_LENGTH = 512

# Shared by the parser (str) and the chunked reader (bytes) so boundary
# counts always agree with the entries that get parsed.
ENTRY_HEADER_BYTES = re.compile(HEADER_PATTERN.encode('ascii'))
LINE_HEADER = re.compile(r'^' + HEADER_PATTERN, re.ASCII | re.MULTILINE)

EXCEPTION_MARKER = '{"exception"'


class LogLevel(Enum):
    """Log severity levels"""
    EMERGENCY = "EMERGENCY"
    ALERT = "ALERT"
    CRITICAL = "CRITICAL"
    ERROR = "ERROR"
    WARNING = "WARNING"
    NOTICE = "NOTICE"
    INFO = "INFO"
    DEBUG = "DEBUG"
    UNKNOWN = "UNKNOWN"

    @property
    def color(self) -> str:
        """Get color representation for this log level"""
        colors = {
            LogLevel.EMERGENCY: "white on black",
            LogLevel.ALERT: "navy_blue",
            LogLevel.CRITICAL: "dark_red bold",
            LogLevel.ERROR: "red",
            LogLevel.WARNING: "orange1",
            LogLevel.NOTICE: "light_sky_blue1",
            LogLevel.INFO: "blue",
            LogLevel.DEBUG: "grey70",
            LogLevel.UNKNOWN: "white",
        }
        return colors.get(self, "white")

    @classmethod
    def from_string(cls, level_str: Optional[str]) -> "LogLevel":
        if not level_str:
            return cls.UNKNOWN
        try:
            return cls[level_str.strip().upper()]
        except KeyError:
            return cls.UNKNOWN


@dataclass
class LogEntry:
    """Parsed log entry"""
    timestamp: str
    environment: str
    level: str
    message: str
    trace: str = ""

    @property
    def severity(self) -> LogLevel:
        return LogLevel.from_string(self.level)

    @property
    def text(self) -> str:
        """All fields joined by a space, used for keyword matching"""
        return ' '.join((self.timestamp, self.environment, self.level, self.message, self.trace))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for export"""
        return asdict(self)


def normalize_trace(content: str, root_path: Optional[str] = None) -> str:
    """
    Make a trace portable: backslashes become forward slashes and the
    application root prefix is removed wherever it appears.
    """
    content = content.replace('\\\\', '/').replace('\\', '/')
    if not root_path:
        return content

    root = root_path.replace('\\', '/').rstrip('/') + '/'
    return content.replace(root, '')


class LogParser:
    """
    Splits raw log bytes into LogEntry objects.

    An entry starts at the beginning of a line with a header of the form
    "[2024-01-01 00:00:00] production.ERROR:". Everything up to the next
    header belongs to that entry: the rest of the header line is the message
    and any following text (or an inline {"exception": ...} payload) is the
    trace. Bytes before the first header are the tail of an entry cut off by
    a chunked read and are discarded.
    """

    def __init__(self, root_path: Optional[str] = None, encoding: str = 'utf-8'):
        """
        Initialize the log parser

        Args:
            root_path: Application root stripped from traces (None = keep paths)
            encoding: Encoding used to decode raw bytes
        """
        self.root_path = root_path
        self.encoding = encoding

    def parse(self, raw: bytes) -> List[LogEntry]:
        """
        Parse a raw block into entries, newest first

        Args:
            raw: Raw bytes read from a log file

        Returns:
            List of LogEntry objects sorted by descending timestamp; entries
            sharing a timestamp keep reverse file order (later first)
        """
        if not raw:
            return []

        text = raw.decode(self.encoding, errors='replace')
        matches = list(LINE_HEADER.finditer(text))
        if not matches:
            return []

        entries = []
        for index, match in enumerate(matches):
            body_end = matches[index + 1].start() if index + 1 < len(matches) else len(text)
            body = text[match.end():body_end]
            message, trace = self._split_body(body)
            entries.append(LogEntry(
                timestamp=match.group(1),
                environment=match.group(2),
                level=match.group(3),
                message=message,
                trace=trace,
            ))

        # sorted() is stable with reverse=True, so ties keep the reversed order
        return sorted(reversed(entries), key=lambda entry: entry.timestamp, reverse=True)

    def _split_body(self, body: str) -> tuple:
        """Separate the one-line message from any trailing exception detail"""
        first_line, _, rest = body.partition('\n')

        marker = first_line.find(EXCEPTION_MARKER)
        if marker != -1:
            message = first_line[:marker]
            trace = first_line[marker:] + ('\n' + rest if rest else '')
        else:
            message = first_line
            trace = rest

        trace = trace.strip()
        if trace:
            trace = normalize_trace(trace, self.root_path)

        return message.strip(), trace
