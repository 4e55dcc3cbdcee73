import io
import pytest
from datetime import datetime, timedelta

BASE_TIME = datetime(2024, 1, 1, 0, 0, 0)


def timestamp(second: int) -> str:
    return (BASE_TIME + timedelta(seconds=second)).strftime('%Y-%m-%d %H:%M:%S')


def entry_text(second: int, message: str = None, level: str = 'INFO', env: str = 'local', trace: str = None) -> str:
    """One log entry, newline terminated"""
    if message is None:
        message = f"event {second}"
    text = f"[{timestamp(second)}] {env}.{level}: {message}\n"
    if trace:
        text += trace.rstrip('\n') + '\n'
    return text


def build_log(count: int, with_traces: bool = False) -> str:
    parts = []
    for i in range(count):
        trace = None
        if with_traces and i % 3 == 0:
            trace = f"[stacktrace]\n#0 /var/www/app/src/Job{i}.php(12): handle()\n#1 {{main}}"
        parts.append(entry_text(i, trace=trace))
    return ''.join(parts)


class FailingHandle(io.BytesIO):
    """Seekable handle whose reads fail like a disk error"""

    def read(self, *args):
        raise OSError("Input/output error")


@pytest.fixture
def write_log(tmp_path):
    """Factory writing text (or bytes) to a log file and returning its path"""
    def _write(content, name='app.log'):
        path = tmp_path / name
        if isinstance(content, str):
            content = content.encode('utf-8')
        path.write_bytes(content)
        return path
    return _write
