import io
import pytest
from unittest.mock import MagicMock

from logpager.log_viewer.log_reader import ChunkedReader, SourceUnavailable, Span, open_source
from conftest import FailingHandle, build_log, timestamp

BUFFER_SIZES = [1, 3, 7, 64, 4096]


def offsets_of(data: bytes, count: int):
    """Byte offset of each entry's opening bracket"""
    return [data.index(f"[{timestamp(i)}]".encode()) for i in range(count)]


@pytest.fixture
def sample():
    data = build_log(6, with_traces=True).encode()
    return data, offsets_of(data, 6)


def reader_for(data: bytes, buffer_size: int = 4096) -> ChunkedReader:
    return ChunkedReader(io.BytesIO(data), buffer_size)


class TestReadBackward:

    def test_latest_entries_from_eof(self, sample):
        data, offsets = sample

        span = reader_for(data).read_backward(len(data), 2)

        assert span == Span(data[offsets[4]:], offsets[4], len(data))

    def test_from_entry_start(self, sample):
        data, offsets = sample

        span = reader_for(data).read_backward(offsets[4], 3)

        assert span == Span(data[offsets[1]:offsets[4]], offsets[1], offsets[4])

    def test_reaching_file_start_returns_fewer_entries(self, sample):
        data, offsets = sample

        span = reader_for(data).read_backward(offsets[2], 5)

        assert span == Span(data[:offsets[2]], 0, offsets[2])

    def test_partial_entry_at_end_is_dropped(self, sample):
        data, offsets = sample
        inside_fourth = offsets[3] + 10

        span = reader_for(data).read_backward(inside_fourth, 2)

        assert span == Span(data[offsets[1]:offsets[3]], offsets[1], offsets[3])

    def test_end_on_terminating_newline_keeps_entry(self, sample):
        data, offsets = sample
        newline_after_fourth = offsets[4] - 1

        span = reader_for(data).read_backward(newline_after_fourth, 2)

        assert data[newline_after_fourth:newline_after_fourth + 1] == b"\n"
        assert span == Span(data[offsets[2]:offsets[4]], offsets[2], offsets[4])

    def test_end_on_final_newline_reaches_eof(self, sample):
        data, offsets = sample

        span = reader_for(data).read_backward(len(data) - 1, 1)

        assert span == Span(data[offsets[5]:], offsets[5], len(data))

    def test_leading_fragment_is_folded_into_first_page(self):
        data = b"tail of a rotated entry\n" + build_log(2).encode()

        span = reader_for(data).read_backward(len(data), 2)

        assert span == Span(data, 0, len(data))

    def test_marker_free_file(self):
        data = b"plain text\nwithout any entries\n"

        span = reader_for(data).read_backward(len(data), 3)

        assert span == Span(data, 0, len(data))

    def test_offset_past_eof_is_clamped(self, sample):
        data, _ = sample
        reader = reader_for(data)

        assert reader.read_backward(len(data) * 10, 2) == reader.read_backward(len(data), 2)

    @pytest.mark.parametrize("buffer_size", BUFFER_SIZES)
    def test_buffer_size_does_not_change_span(self, sample, buffer_size):
        data, offsets = sample
        expected = reader_for(data).read_backward(offsets[5], 2)

        assert reader_for(data, buffer_size).read_backward(offsets[5], 2) == expected


class TestReadForward:

    def test_from_file_start(self, sample):
        data, offsets = sample

        span = reader_for(data).read_forward(0, 2)

        assert span == Span(data[:offsets[2]], 0, offsets[2])

    def test_from_entry_start(self, sample):
        data, offsets = sample

        span = reader_for(data).read_forward(offsets[2], 3)

        assert span == Span(data[offsets[2]:offsets[5]], offsets[2], offsets[5])

    def test_stops_at_eof(self, sample):
        data, offsets = sample

        span = reader_for(data).read_forward(offsets[4], 10)

        assert span == Span(data[offsets[4]:], offsets[4], len(data))

    def test_partial_entry_at_start_is_skipped(self, sample):
        data, offsets = sample

        span = reader_for(data).read_forward(offsets[1] + 5, 2)

        assert span == Span(data[offsets[2]:offsets[4]], offsets[2], offsets[4])

    def test_start_on_newline_finds_next_entry(self, sample):
        data, offsets = sample

        span = reader_for(data).read_forward(offsets[3] - 1, 1)

        assert span == Span(data[offsets[3]:offsets[4]], offsets[3], offsets[4])

    def test_last_entry_without_trailing_newline(self):
        data = build_log(3).encode().rstrip(b"\n")
        offsets = offsets_of(data, 3)

        span = reader_for(data).read_forward(offsets[1], 5)

        assert span == Span(data[offsets[1]:], offsets[1], len(data))

    @pytest.mark.parametrize("buffer_size", BUFFER_SIZES)
    @pytest.mark.parametrize("count", [1, 2, 4])
    def test_buffer_size_does_not_change_span(self, sample, buffer_size, count):
        data, offsets = sample
        expected = reader_for(data).read_forward(offsets[1], count)

        assert reader_for(data, buffer_size).read_forward(offsets[1], count) == expected


class TestReaderHelpers:

    def test_starts_line_and_is_entry_start(self, sample):
        data, offsets = sample
        reader = reader_for(data)

        assert reader.starts_line(0)
        assert reader.starts_line(offsets[2])
        assert not reader.starts_line(offsets[2] + 1)
        assert reader.is_entry_start(offsets[2])
        assert not reader.is_entry_start(offsets[2] + 1)
        assert not reader.is_entry_start(len(data))

    def test_read_to_end(self, sample):
        data, offsets = sample

        span = reader_for(data, 5).read_to_end(offsets[5])

        assert span == Span(data[offsets[5]:], offsets[5], len(data))

    def test_zero_entries_requested(self, sample):
        data, offsets = sample
        reader = reader_for(data)

        assert reader.read_forward(offsets[1], 0) == Span(b"", offsets[1], offsets[1])
        assert reader.read_backward(offsets[1], 0) == Span(b"", offsets[1], offsets[1])

    def test_invalid_buffer_size(self):
        with pytest.raises(ValueError):
            ChunkedReader(io.BytesIO(b""), 0)

    def test_reads_stop_at_size_seen_at_open(self, write_log):
        path = write_log(build_log(3))
        original = path.read_bytes()

        with open(path, "rb") as handle:
            reader = ChunkedReader(handle, 16)
            with open(path, "ab") as writer:
                writer.write(build_log(5)[len(original):].encode())

            forward = reader.read_forward(0, 10)
            to_end = reader.read_to_end(0)
            backward = reader.read_backward(reader.file_size, 10)

        assert reader.file_size == len(original)
        assert forward == Span(original, 0, len(original))
        assert to_end == Span(original, 0, len(original))
        assert backward == Span(original, 0, len(original))

    def test_read_error_becomes_source_unavailable(self, sample):
        data, offsets = sample
        reader = ChunkedReader(FailingHandle(data))

        with pytest.raises(SourceUnavailable):
            reader.read_backward(len(data), 2)
        with pytest.raises(SourceUnavailable):
            reader.read_forward(0, 2)
        with pytest.raises(SourceUnavailable):
            reader.read_to_end(offsets[1])

    def test_seek_error_at_open_becomes_source_unavailable(self):
        handle = MagicMock()
        handle.seekable.return_value = True
        handle.seek.side_effect = OSError("Input/output error")

        with pytest.raises(SourceUnavailable):
            ChunkedReader(handle)

    def test_unseekable_handle(self):
        handle = MagicMock()
        handle.seekable.return_value = False

        with pytest.raises(SourceUnavailable):
            ChunkedReader(handle)


class TestOpenSource:

    def test_missing_file(self, tmp_path):
        with pytest.raises(SourceUnavailable):
            with open_source(tmp_path / "missing.log"):
                pass

    def test_directory_is_unavailable(self, tmp_path):
        with pytest.raises(SourceUnavailable):
            with open_source(tmp_path):
                pass

    def test_handle_is_closed_on_error(self, write_log):
        path = write_log(build_log(2))

        with pytest.raises(RuntimeError):
            with open_source(path) as handle:
                raise RuntimeError("parse failure")

        assert handle.closed
