"""File content — the bytes behind a file, kept apart from the file node.

A file node never stores bytes itself.  It owns one **content object**
that knows how to read, write, and truncate at arbitrary offsets.
Swapping the content object swaps the storage strategy: a plain byte
buffer for ordinary files, or a sparse map for simulated multi-gigabyte
files that would never fit in memory.

Every content object also carries a **cursor**: an offset plus a
*sticky* end-of-file flag.  The flag is not simply ``offset >= size``.
It becomes true only when a ``read()`` is attempted at or past the end,
and a successful ``seek()`` clears it again::

    content = StringBasedFileContent(b"abc")
    content.read(3)   → b"abc", eof() is still False
    content.read(1)   → b"",    eof() is now True
    content.seek(0, SeekWhence.SET)
                      → eof() is False again

Open handles keep their *own* offsets and talk to the content through
``read_at`` / ``write_at``, so several handles can share one content
object without disturbing each other.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import StrEnum
from typing import Protocol


class SeekWhence(StrEnum):
    """Direction for seek operations.

    - SET — absolute offset from the beginning of the file.
    - CUR — relative offset from the current position.
    - END — relative offset from the end of the file.
    """

    SET = "set"
    CUR = "cur"
    END = "end"


def compute_offset(current: int, size: int, offset: int, whence: SeekWhence) -> int:
    """Return the offset a seek would land on (may be negative)."""
    match whence:
        case SeekWhence.SET:
            return offset
        case SeekWhence.CUR:
            return current + offset
        case SeekWhence.END:
            return size + offset


class FileContent(Protocol):
    """Interface every content strategy must satisfy."""

    def content(self) -> bytes:
        """Return the complete content."""
        ...  # pragma: no cover

    def size(self) -> int:
        """Return the content size in bytes."""
        ...  # pragma: no cover

    def read_at(self, offset: int, count: int) -> bytes:
        """Return up to *count* bytes starting at *offset*."""
        ...  # pragma: no cover

    def write_at(self, data: bytes, offset: int, length: int) -> None:
        """Write *data* at *offset*, replacing *length* existing bytes."""
        ...  # pragma: no cover

    def truncate(self, size: int) -> bool:
        """Grow or shrink the content to *size* bytes."""
        ...  # pragma: no cover

    def read(self, count: int) -> bytes:
        """Read at the cursor and advance it."""
        ...  # pragma: no cover

    def write(self, data: bytes) -> int:
        """Write at the cursor and advance it."""
        ...  # pragma: no cover

    def seek(self, offset: int, whence: SeekWhence, *, reset_eof: bool = True) -> bool:
        """Move the cursor."""
        ...  # pragma: no cover

    def eof(self) -> bool:
        """Return the sticky end-of-file flag."""
        ...  # pragma: no cover

    def bytes_read(self) -> int:
        """Return the cursor offset."""
        ...  # pragma: no cover

    def read_until_end(self) -> bytes:
        """Return everything from the cursor to the end."""
        ...  # pragma: no cover


class SeekableFileContent(ABC):
    """Cursor and sticky-EOF bookkeeping shared by every content strategy.

    Subclasses supply storage through ``read_at``, ``write_at``,
    ``size``, ``content`` and ``truncate``; this base turns those into
    a cursor-driven stream.
    """

    def __init__(self) -> None:
        """Start with the cursor at zero and EOF cleared."""
        self._offset = 0
        self._eof = False

    @abstractmethod
    def content(self) -> bytes:
        """Return the complete content."""

    @abstractmethod
    def size(self) -> int:
        """Return the content size in bytes."""

    @abstractmethod
    def read_at(self, offset: int, count: int) -> bytes:
        """Return up to *count* bytes starting at *offset*."""

    @abstractmethod
    def write_at(self, data: bytes, offset: int, length: int) -> None:
        """Write *data* at *offset*, replacing *length* existing bytes."""

    @abstractmethod
    def truncate(self, size: int) -> bool:
        """Grow or shrink the content to *size* bytes."""

    def read(self, count: int) -> bytes:
        """Read up to *count* bytes at the cursor.

        Reading at or past the end sets the EOF flag and returns ``b""``.
        Otherwise the cursor advances by the number of bytes produced.
        """
        if self._offset >= self.size():
            self._eof = True
            return b""
        data = self.read_at(self._offset, count)
        self._offset += len(data)
        return data

    def seek(self, offset: int, whence: SeekWhence, *, reset_eof: bool = True) -> bool:
        """Move the cursor; return ``False`` if the target would be negative.

        A successful seek clears the EOF flag unless *reset_eof* is
        ``False`` (used when positioning for append).
        """
        new_offset = compute_offset(self._offset, self.size(), offset, whence)
        if new_offset < 0:
            return False
        self._offset = new_offset
        if reset_eof:
            self._eof = False
        return True

    def eof(self) -> bool:
        """Return the sticky end-of-file flag."""
        return self._eof

    def write(self, data: bytes) -> int:
        """Write *data* at the cursor and advance past it."""
        length = len(data)
        self.write_at(data, self._offset, length)
        self._offset += length
        return length

    def bytes_read(self) -> int:
        """Return the cursor offset."""
        return self._offset

    def read_until_end(self) -> bytes:
        """Return the bytes from the cursor to the end, leaving the cursor alone."""
        return self.content()[self._offset :]
