"""Content held in a single in-memory byte buffer."""

from py_vfs.content.base import SeekableFileContent


class StringBasedFileContent(SeekableFileContent):
    r"""Store the whole file as one ``bytes`` value.

    Writes splice into the buffer, so writing in the middle overwrites
    in place and writing past the end extends it.  A write positioned
    beyond the end lands directly after the last byte; the gap is not
    filled.  Truncating *up* pads with ``\x00``, like ``ftruncate(2)``.
    """

    def __init__(self, content: bytes = b"") -> None:
        """Create content holding *content*."""
        super().__init__()
        self._content = content

    def content(self) -> bytes:
        """Return the complete buffer."""
        return self._content

    def size(self) -> int:
        """Return the buffer length."""
        return len(self._content)

    def read_at(self, offset: int, count: int) -> bytes:
        """Return up to *count* bytes at *offset* (``b""`` when out of range)."""
        return self._content[offset : offset + count]

    def write_at(self, data: bytes, offset: int, length: int) -> None:
        """Replace *length* bytes at *offset* with *data*."""
        existing = self._content
        self._content = existing[:offset] + data + existing[offset + length :]

    def truncate(self, size: int) -> bool:
        """Cut the buffer to *size*, or pad it with NUL bytes up to *size*."""
        current = len(self._content)
        if size > current:
            self._content += b"\x00" * (size - current)
        else:
            self._content = self._content[:size]
        return True
