"""Open handles — independent cursors over shared file content.

Opening a path does not copy anything.  It creates an ``OpenHandle``
that points at the node, at the node's content object, and keeps its
own byte offset.  Two handles on the same file therefore read and
write the *same* bytes but move independently::

    h1 = vfs.open("root/log.txt", "r")
    h2 = vfs.open("root/log.txt", "r")
    vfs.read(h1, 4)   # h1 is at 4, h2 is still at 0

Writes through one handle are visible to reads through the other
immediately; there is no buffering and no synchronisation, because the
filesystem is single-threaded.

The open mode decides the starting point:

- **read** (``r``, ``x``, ``c``) — offset 0.
- **truncate** (``w``) — offset 0, content emptied first.
- **append** (``a``) — offset at the current end.

Directory handles (``DirectoryHandle``) are simpler: a snapshot of the
directory's entries and a position in it.

Handle ids come from a ``HandleTable`` and increase monotonically; an
id is never reused, so a stale id can never alias a newer handle.
"""

from __future__ import annotations

import time
from enum import StrEnum
from itertools import count

from py_vfs.config import VfsConfig
from py_vfs.content.base import SeekWhence, compute_offset
from py_vfs.errors import ErrorKind, VfsError
from py_vfs.fs.node import Node, NodeKind, StatResult
from py_vfs.fs.tree import iter_children


class FileMode(StrEnum):
    """Access mode for an open file.

    - READ  — read-only access.
    - WRITE — write-only access.
    - READ_WRITE — both read and write access.
    """

    READ = "r"
    WRITE = "w"
    READ_WRITE = "rw"


class OpenHandle:
    """One open file: node, shared content, private offset, and mode."""

    def __init__(self, node: Node, mode: FileMode, config: VfsConfig, offset: int = 0) -> None:
        """Open *node* in *mode*, checking permissions against *config*'s user."""
        self.node = node
        self.content = node.content_object()
        self.mode = mode
        self.offset = offset
        self._config = config

    @classmethod
    def for_read(cls, node: Node, mode: FileMode, config: VfsConfig) -> OpenHandle:
        """Open positioned at the start."""
        return cls(node, mode, config)

    @classmethod
    def for_truncate(cls, node: Node, mode: FileMode, config: VfsConfig) -> OpenHandle:
        """Open positioned at the start, after emptying the content."""
        node.open_with_truncate()
        return cls(node, mode, config)

    @classmethod
    def for_append(cls, node: Node, mode: FileMode, config: VfsConfig) -> OpenHandle:
        """Open positioned at the current end of the content."""
        node.open_for_append()
        return cls(node, mode, config, offset=node.content_object().size())

    def _may_read(self) -> bool:
        if self.mode is FileMode.WRITE:
            return False
        return self.node.is_readable(self._config.uid, self._config.gid)

    def _may_write(self) -> bool:
        if self.mode is FileMode.READ:
            return False
        return self.node.is_writable(self._config.uid, self._config.gid)

    def read(self, count: int) -> bytes:
        """Read up to *count* bytes at the handle's offset.

        Returns ``b""`` for write-only handles and unreadable nodes.
        """
        if not self._may_read():
            return b""
        self.node.atime = int(time.time())
        data = self.content.read_at(self.offset, count)
        self.offset += len(data)
        return data

    def write(self, data: bytes) -> int:
        """Write *data* at the handle's offset.

        Returns:
            The number of bytes written; 0 for read-only handles and
            unwritable nodes.

        """
        if not self._may_write():
            return 0
        self.node.mtime = int(time.time())
        length = len(data)
        self.content.write_at(data, self.offset, length)
        self.offset += length
        return length

    def truncate(self, size: int) -> bool:
        """Resize the content; only plain files can be truncated."""
        if not self._may_write():
            return False
        if self.node.kind is not NodeKind.FILE:
            return False
        self.content.truncate(size)
        self.node.mtime = int(time.time())
        return True

    def seek(self, offset: int, whence: SeekWhence = SeekWhence.SET) -> bool:
        """Move the handle's offset; a negative target is refused."""
        new_offset = compute_offset(self.offset, self.content.size(), offset, whence)
        if new_offset < 0:
            return False
        self.offset = new_offset
        return True

    def tell(self) -> int:
        """Return the handle's offset."""
        return self.offset

    def eof(self) -> bool:
        """Return whether the offset is at or past the end of the content."""
        return self.content.size() <= self.offset

    def size(self) -> int:
        """Return the size of the underlying content."""
        return self.content.size()

    def stat(self) -> StatResult:
        """Return the node's metadata."""
        return self.node.stat()


class DirectoryHandle:
    """An open directory: a snapshot of its entry names and a position."""

    def __init__(self, directory: Node, *, dotfiles: bool) -> None:
        """Snapshot the entries of *directory*."""
        self.directory = directory
        self._entries = [child.name for child in iter_children(directory, dotfiles=dotfiles)]
        self._position = 0

    def read(self) -> str | None:
        """Return the next entry name, or ``None`` when exhausted."""
        if self._position >= len(self._entries):
            return None
        name = self._entries[self._position]
        self._position += 1
        return name

    def rewind(self) -> None:
        """Start again from the first entry."""
        self._position = 0

    def names(self) -> list[str]:
        """Return every entry name of the snapshot."""
        return list(self._entries)


class HandleTable:
    """Registry of open file and directory handles, keyed by id.

    Ids start at ``FIRST_ID`` and only ever grow.
    """

    FIRST_ID = 1

    def __init__(self) -> None:
        """Create an empty handle table."""
        self._ids = count(start=self.FIRST_ID)
        self._handles: dict[int, OpenHandle | DirectoryHandle] = {}

    def allocate(self, handle: OpenHandle | DirectoryHandle) -> int:
        """Register *handle* and return its new id."""
        handle_id = next(self._ids)
        self._handles[handle_id] = handle
        return handle_id

    def lookup(self, handle_id: int) -> OpenHandle:
        """Return the open file handle for *handle_id*.

        Raises:
            VfsError: (NOT_FOUND) if the id is not an open file handle.

        """
        handle = self._handles.get(handle_id)
        if not isinstance(handle, OpenHandle):
            msg = f"Bad file handle: {handle_id}"
            raise VfsError(msg, kind=ErrorKind.NOT_FOUND)
        return handle

    def lookup_directory(self, handle_id: int) -> DirectoryHandle:
        """Return the directory handle for *handle_id*.

        Raises:
            VfsError: (NOT_FOUND) if the id is not an open directory handle.

        """
        handle = self._handles.get(handle_id)
        if not isinstance(handle, DirectoryHandle):
            msg = f"Bad directory handle: {handle_id}"
            raise VfsError(msg, kind=ErrorKind.NOT_FOUND)
        return handle

    def close(self, handle_id: int) -> None:
        """Forget *handle_id*.

        Raises:
            VfsError: (NOT_FOUND) if the id is not open.

        """
        if handle_id not in self._handles:
            msg = f"Bad handle: {handle_id}"
            raise VfsError(msg, kind=ErrorKind.NOT_FOUND)
        del self._handles[handle_id]

    def list_handles(self) -> dict[int, OpenHandle | DirectoryHandle]:
        """Return a snapshot of all open handles."""
        return dict(self._handles)

    def clear(self) -> None:
        """Forget every handle (used when the root is replaced)."""
        self._handles.clear()
