"""Tests for content held in a single byte buffer."""

from py_vfs.content.base import SeekWhence
from py_vfs.content.string_based import StringBasedFileContent


class TestStringBasedFileContent:
    """Verify reading, writing, and truncating an in-memory buffer."""

    def test_round_trip(self) -> None:
        """What is written can be read back at the same offset."""
        content = StringBasedFileContent()
        data = b"hello, world"
        content.write(data)
        assert content.read_at(0, len(data)) == data

    def test_size(self) -> None:
        """Size is the buffer length."""
        expected_size = 3
        assert StringBasedFileContent(b"abc").size() == expected_size

    def test_overwrite_in_the_middle(self) -> None:
        """Writing inside the buffer replaces bytes in place."""
        content = StringBasedFileContent(b"foobarbaz")
        content.write_at(b"XYZ", 3, 3)
        assert content.content() == b"fooXYZbaz"

    def test_write_extends(self) -> None:
        """Writing over the end extends the buffer."""
        content = StringBasedFileContent(b"foo")
        content.write_at(b"barbaz", 2, 6)
        assert content.content() == b"fobarbaz"

    def test_write_past_end_collapses_gap(self) -> None:
        """A write beyond the end is appended right after the last byte."""
        content = StringBasedFileContent(b"ab")
        content.write_at(b"z", 4, 1)
        assert content.content() == b"abz"

    def test_truncate_shrinks(self) -> None:
        """Truncating down cuts the tail."""
        content = StringBasedFileContent(b"foobar")
        assert content.truncate(3) is True
        assert content.content() == b"foo"

    def test_truncate_grows_with_nul(self) -> None:
        """Truncating up pads with NUL bytes."""
        content = StringBasedFileContent(b"foo")
        content.truncate(5)
        assert content.content() == b"foo\x00\x00"

    def test_read_at_out_of_range(self) -> None:
        """Reading past the end returns nothing."""
        assert StringBasedFileContent(b"abc").read_at(10, 4) == b""

    def test_cursor_write_then_read(self) -> None:
        """The cursor moves past written data; seeking back reads it."""
        content = StringBasedFileContent()
        content.write(b"abc")
        expected_offset = 3
        assert content.bytes_read() == expected_offset
        content.seek(0, SeekWhence.SET)
        assert content.read(3) == b"abc"
