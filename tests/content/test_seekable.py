"""Tests for the shared cursor and sticky end-of-file flag.

EOF is *sticky*: it becomes true only after a read at or past the end,
and a seek clears it (unless asked not to).
"""

from collections.abc import Callable

import pytest

from py_vfs.content.base import SeekableFileContent, SeekWhence, compute_offset
from py_vfs.content.large import LargeFileContent
from py_vfs.content.string_based import StringBasedFileContent

ContentFactory = Callable[[], SeekableFileContent]


class TestComputeOffset:
    """Verify the three seek origins."""

    def test_origins(self) -> None:
        """SET is absolute, CUR is relative, END counts from the size."""
        current, size = 4, 10
        expected_set, expected_cur, expected_end = 2, 6, 7
        assert compute_offset(current, size, 2, SeekWhence.SET) == expected_set
        assert compute_offset(current, size, 2, SeekWhence.CUR) == expected_cur
        assert compute_offset(current, size, -3, SeekWhence.END) == expected_end


@pytest.mark.parametrize(
    "factory",
    [lambda: StringBasedFileContent(b"abc"), lambda: LargeFileContent(3)],
    ids=["string", "large"],
)
class TestSeekable:
    """Verify cursor behaviour shared by every content strategy."""

    def test_seek_before_start_fails(self, factory: ContentFactory) -> None:
        """A negative target is refused and the cursor stays put."""
        content = factory()
        content.read(1)
        assert content.seek(-5, SeekWhence.SET) is False
        assert content.bytes_read() == 1

    def test_seek_past_end_then_read(self, factory: ContentFactory) -> None:
        """Seeking past the end succeeds; the next read is empty and sets EOF."""
        content = factory()
        assert content.seek(0, SeekWhence.END) is True
        assert content.seek(5, SeekWhence.CUR) is True
        assert content.eof() is False
        assert content.read(1) == b""
        assert content.eof() is True

    def test_full_read_does_not_set_eof(self, factory: ContentFactory) -> None:
        """Reading exactly to the end leaves EOF clear."""
        content = factory()
        assert content.read(3) == content.content()
        assert content.eof() is False

    def test_seek_clears_eof(self, factory: ContentFactory) -> None:
        """A successful seek clears the flag."""
        content = factory()
        content.read(10)
        content.read(1)
        assert content.eof() is True
        content.seek(0, SeekWhence.SET)
        assert content.eof() is False

    def test_seek_can_keep_eof(self, factory: ContentFactory) -> None:
        """``reset_eof=False`` moves the cursor but keeps the flag."""
        content = factory()
        content.read(10)
        content.read(1)
        content.seek(0, SeekWhence.END, reset_eof=False)
        assert content.eof() is True

    def test_read_until_end(self, factory: ContentFactory) -> None:
        """The rest of the content comes back without moving the cursor."""
        content = factory()
        content.read(1)
        assert content.read_until_end() == content.content()[1:]
        assert content.bytes_read() == 1
