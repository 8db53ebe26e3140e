"""Sparse content for simulating very large files cheaply.

A test that needs "a 2 GiB file" should not allocate 2 GiB.
``LargeFileContent`` stores the size as a plain integer and remembers
only the byte positions that were actually written.  Every position
that was never written reads back as an ASCII space (``b" "``).  A space
rather than NUL keeps "never written" distinguishable from "explicitly
zeroed" when a test inspects the content.
"""

from py_vfs.content.base import SeekableFileContent

_FILLER = ord(" ")
_KILOBYTE = 1024


class LargeFileContent(SeekableFileContent):
    """Content of a declared size backed by a sparse ``{position: byte}`` map."""

    def __init__(self, size: int) -> None:
        """Create content of *size* bytes, all unwritten."""
        super().__init__()
        self._size = size
        self._written: dict[int, int] = {}

    @classmethod
    def with_kilobytes(cls, kilobytes: int) -> "LargeFileContent":
        """Create content of *kilobytes* KiB."""
        return cls(kilobytes * _KILOBYTE)

    @classmethod
    def with_megabytes(cls, megabytes: int) -> "LargeFileContent":
        """Create content of *megabytes* MiB."""
        return cls.with_kilobytes(megabytes * _KILOBYTE)

    @classmethod
    def with_gigabytes(cls, gigabytes: int) -> "LargeFileContent":
        """Create content of *gigabytes* GiB."""
        return cls.with_megabytes(gigabytes * _KILOBYTE)

    def content(self) -> bytes:
        """Materialise the full content (only sensible for small sizes)."""
        return self.read_at(0, self._size)

    def size(self) -> int:
        """Return the declared size."""
        return self._size

    def read_at(self, offset: int, count: int) -> bytes:
        """Return written bytes where present and spaces elsewhere."""
        count = min(count, self._size - offset)
        if count <= 0:
            return b""
        written = self._written
        return bytes(written.get(pos, _FILLER) for pos in range(offset, offset + count))

    def write_at(self, data: bytes, offset: int, length: int) -> None:
        """Record *length* bytes of *data* starting at *offset*.

        A write starting beyond the end lands at the end, so the size
        never grows by more than *length*.
        """
        offset = min(offset, self._size)
        for i in range(length):
            self._written[offset + i] = data[i]
        self._size = max(self._size, offset + length)

    def truncate(self, size: int) -> bool:
        """Set the size, forgetting any written byte at or past it."""
        self._size = size
        for pos in [pos for pos in self._written if pos >= size]:
            del self._written[pos]
        return True
