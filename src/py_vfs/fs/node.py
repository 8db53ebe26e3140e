"""Nodes — the files, directories, and block devices of the virtual tree.

Every entry in the tree is a ``Node``.  A node is a closed union of
three kinds, tagged by ``NodeKind``:

- **FILE** — owns exactly one content object (see ``py_vfs.content``).
- **BLOCK** — a file with a different type tag.  It reads and writes
  exactly like a file; only ``stat`` and ``unlink`` rules care that it
  is a device.
- **DIRECTORY** — owns an insertion-ordered mapping of child names to
  child nodes.  Adding a child whose name is already taken *replaces*
  the old entry.

All kinds share the same metadata: name, nine permission bits, owner
uid/gid, and the three timestamps.  A node carries its own name, and
its ``parent_path`` is a *recomputed string* rather than a reference to
the parent object.  The tree therefore has no reference cycles: a
parent owns its children, children only remember where they hang.

Lookup by path (``get_child``) walks downward from a directory.  A
directory answers for its own name as a prefix, so ``root.get_child(
"root/a/b")`` and ``root.get_child("a/b")`` find the same node.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import StrEnum
from itertools import count

from py_vfs.content.base import SeekableFileContent, SeekWhence
from py_vfs.content.string_based import StringBasedFileContent
from py_vfs.errors import ErrorKind, VfsError
from py_vfs.paths import url as build_url
from py_vfs.permissions import (
    DEFAULT_DIRECTORY_PERMISSIONS,
    DEFAULT_FILE_PERMISSIONS,
    GROUP_ROOT,
    OWNER_ROOT,
    Access,
    apply_umask,
    check_access,
)


class NodeKind(StrEnum):
    """The kind of entry a node represents."""

    FILE = "file"
    DIRECTORY = "directory"
    BLOCK = "block"

    @property
    def type_bits(self) -> int:
        """Return the ``st_mode`` type bits for this kind."""
        match self:
            case NodeKind.FILE:
                return 0o100000
            case NodeKind.DIRECTORY:
                return 0o040000
            case NodeKind.BLOCK:
                return 0o060000


def _now() -> int:
    return int(time.time())


def _validate_name(name: str) -> None:
    if "/" in name:
        msg = f"Name can not contain /: {name!r}"
        raise VfsError(msg, kind=ErrorKind.INVALID_NAME)


def coerce_content(content: object) -> SeekableFileContent:
    """Turn *content* into a content object.

    ``str`` is UTF-8 encoded, ``bytes`` is wrapped in a
    ``StringBasedFileContent``, and content objects are used as-is.

    Raises:
        VfsError: (UNKNOWN_CONTENT_TYPE) for anything else.

    """
    if isinstance(content, SeekableFileContent):
        return content
    if isinstance(content, str):
        return StringBasedFileContent(content.encode())
    if isinstance(content, bytes | bytearray):
        return StringBasedFileContent(bytes(content))
    msg = f"Content must be str, bytes or a file content object, not {type(content).__name__}"
    raise VfsError(msg, kind=ErrorKind.UNKNOWN_CONTENT_TYPE)


# Module-level inode counter, gives every node a stable stat() number.
_inode_counter = count(start=1)


@dataclass(frozen=True)
class StatResult:
    """Read-only snapshot of a node's metadata (returned by stat)."""

    ino: int
    kind: NodeKind
    mode: int
    uid: int
    gid: int
    size: int
    atime: int
    mtime: int
    ctime: int

    @property
    def permissions(self) -> int:
        """Return only the permission bits of ``mode``."""
        return self.mode & 0o777


@dataclass(eq=False)
class Node:
    """One entry of the virtual tree.

    Nodes compare and hash by identity, so they can key the lock table.
    """

    name: str
    kind: NodeKind
    permissions: int
    uid: int = OWNER_ROOT
    gid: int = GROUP_ROOT
    atime: int = field(default_factory=_now)
    mtime: int = field(default_factory=_now)
    ctime: int = field(default_factory=_now)
    parent_path: str | None = None
    children: dict[str, Node] = field(default_factory=dict)
    file_content: SeekableFileContent | None = None
    ino: int = field(default_factory=lambda: next(_inode_counter))

    def __post_init__(self) -> None:
        """Validate the name and give file kinds an empty content."""
        _validate_name(self.name)
        if self.kind is not NodeKind.DIRECTORY and self.file_content is None:
            self.file_content = StringBasedFileContent()

    # -- kind --------------------------------------------------------------

    def is_file(self) -> bool:
        """Return whether this node holds content (files and block devices)."""
        return self.kind is not NodeKind.DIRECTORY

    def is_directory(self) -> bool:
        """Return whether this node is a directory."""
        return self.kind is NodeKind.DIRECTORY

    def is_dot(self) -> bool:
        """Return whether this is a ``.`` or ``..`` pseudo-directory."""
        return self.is_directory() and self.name in {".", ".."}

    def _require_directory(self) -> None:
        if self.kind is not NodeKind.DIRECTORY:
            msg = f"Not a directory: {self.name}"
            raise NotADirectoryError(msg)

    def _require_file(self) -> SeekableFileContent:
        if self.file_content is None:
            msg = f"Is a directory: {self.name}"
            raise IsADirectoryError(msg)
        return self.file_content

    # -- naming and location -----------------------------------------------

    def rename(self, new_name: str) -> None:
        """Change the node's name.

        A directory's children keep their old ``parent_path`` until the
        directory is attached somewhere again.

        Raises:
            VfsError: (INVALID_NAME) if *new_name* contains ``/``.

        """
        _validate_name(new_name)
        self.name = new_name

    def applies_to(self, name: str) -> bool:
        """Return whether *name* addresses this node or something beneath it.

        Files match their exact name only.  Directories also match any
        path that starts with ``<name>/``.
        """
        if name == self.name:
            return True
        if self.kind is not NodeKind.DIRECTORY:
            return False
        return name.startswith(self.name + "/")

    def set_parent_path(self, parent_path: str) -> None:
        """Record where this node hangs, and recompute it for all descendants."""
        self.parent_path = parent_path
        for child in self.children.values():
            child.set_parent_path(self.path())

    def remove_parent_path(self) -> None:
        """Forget the parent path (the node is detached)."""
        self.parent_path = None

    def path(self) -> str:
        """Return the bare path of this node."""
        if self.parent_path is None:
            return self.name
        return f"{self.parent_path}/{self.name}"

    def url(self) -> str:
        """Return the ``vfs://`` URL of this node."""
        return build_url(self.path())

    def at(self, parent: Node) -> Node:
        """Attach this node to *parent* and return it (for chaining)."""
        parent.add_child(self)
        return self

    # -- timestamps --------------------------------------------------------

    def last_modified(self, mtime: int) -> Node:
        """Set the modification time."""
        self.mtime = mtime
        return self

    def last_accessed(self, atime: int) -> Node:
        """Set the access time."""
        self.atime = atime
        return self

    def last_attribute_modified(self, ctime: int) -> Node:
        """Set the attribute-change time."""
        self.ctime = ctime
        return self

    # -- ownership and permissions -----------------------------------------

    def chmod(self, permissions: int) -> Node:
        """Replace the permission bits."""
        self.permissions = permissions
        self.ctime = _now()
        return self

    def chown(self, uid: int) -> Node:
        """Change the owning user."""
        self.uid = uid
        self.ctime = _now()
        return self

    def chgrp(self, gid: int) -> Node:
        """Change the owning group."""
        self.gid = gid
        self.ctime = _now()
        return self

    def is_owned_by_user(self, uid: int) -> bool:
        """Return whether *uid* owns this node."""
        return self.uid == uid

    def is_owned_by_group(self, gid: int) -> bool:
        """Return whether *gid* owns this node."""
        return self.gid == gid

    def _check(self, uid: int, gid: int, want: Access) -> bool:
        return check_access(
            self.permissions,
            owner_uid=self.uid,
            owner_gid=self.gid,
            uid=uid,
            gid=gid,
            want=want,
        )

    def is_readable(self, uid: int, gid: int) -> bool:
        """Return whether ``(uid, gid)`` may read this node."""
        return self._check(uid, gid, Access.READ)

    def is_writable(self, uid: int, gid: int) -> bool:
        """Return whether ``(uid, gid)`` may write this node."""
        return self._check(uid, gid, Access.WRITE)

    def is_executable(self, uid: int, gid: int) -> bool:
        """Return whether ``(uid, gid)`` may execute this node."""
        return self._check(uid, gid, Access.EXECUTE)

    # -- size and stat -----------------------------------------------------

    def size(self) -> int:
        """Return the content size; directories are always 0."""
        if self.file_content is None:
            return 0
        return self.file_content.size()

    def stat(self) -> StatResult:
        """Return a metadata snapshot."""
        return StatResult(
            ino=self.ino,
            kind=self.kind,
            mode=self.kind.type_bits | self.permissions,
            uid=self.uid,
            gid=self.gid,
            size=self.size(),
            atime=self.atime,
            mtime=self.mtime,
            ctime=self.ctime,
        )

    # -- directory operations ----------------------------------------------

    def _touch_modifications(self) -> None:
        now = _now()
        self.ctime = now
        self.mtime = now

    def add_child(self, child: Node) -> None:
        """Insert *child*, replacing any existing child of the same name."""
        self._require_directory()
        child.set_parent_path(self.path())
        self.children[child.name] = child
        self._touch_modifications()

    def remove_child(self, name: str) -> bool:
        """Detach the first child that ``applies_to`` *name*.

        Returns:
            ``True`` if a child was removed, ``False`` if none matched.

        """
        self._require_directory()
        for key, child in self.children.items():
            if child.applies_to(name):
                child.remove_parent_path()
                del self.children[key]
                self._touch_modifications()
                return True
        return False

    def _real_child_name(self, name: str) -> str:
        if not self.applies_to(name) or name == self.name:
            return name
        return name[len(self.name) + 1 :]

    def get_child(self, name: str) -> Node | None:
        """Return the descendant addressed by *name*, or ``None``.

        *name* may be a nested path and may start with this
        directory's own name.
        """
        self._require_directory()
        child_name = self._real_child_name(name)
        for child in self.children.values():
            if child.name == child_name:
                return child
            if child.kind is not NodeKind.DIRECTORY:
                continue
            if child.applies_to(child_name) and child.has_child(child_name):
                return child.get_child(child_name)
        return None

    def has_child(self, name: str) -> bool:
        """Return whether ``get_child(name)`` would find something."""
        return self.get_child(name) is not None

    def has_children(self) -> bool:
        """Return whether the directory has any children."""
        self._require_directory()
        return len(self.children) > 0

    def get_children(self) -> list[Node]:
        """Return the children in insertion order."""
        self._require_directory()
        return list(self.children.values())

    # -- file content ------------------------------------------------------

    def with_content(self, content: object) -> Node:
        """Replace the content wholesale (see ``coerce_content``)."""
        self._require_file()
        self.file_content = coerce_content(content)
        return self

    def get_content(self) -> bytes:
        """Return the complete content."""
        return self._require_file().content()

    def content_object(self) -> SeekableFileContent:
        """Return the content object itself (shared with open handles)."""
        return self._require_file()

    # -- node-level cursor -------------------------------------------------
    #
    # These drive the content object's own cursor, the single-stream view
    # of a file.  Open handles keep independent offsets instead.

    def open(self) -> None:
        """Rewind the content cursor for reading."""
        self._require_file().seek(0, SeekWhence.SET)
        self.atime = _now()

    def open_for_append(self) -> None:
        """Move the content cursor to the end without clearing EOF."""
        self._require_file().seek(0, SeekWhence.END, reset_eof=False)
        self.atime = _now()

    def open_with_truncate(self) -> None:
        """Rewind and empty the content."""
        self.open()
        self._require_file().truncate(0)
        now = _now()
        self.atime = now
        self.mtime = now

    def read(self, count: int) -> bytes:
        """Read at the content cursor."""
        self.atime = _now()
        return self._require_file().read(count)

    def read_until_end(self) -> bytes:
        """Return everything from the content cursor to the end."""
        self.atime = _now()
        return self._require_file().read_until_end()

    def write(self, data: bytes) -> int:
        """Write at the content cursor."""
        self.mtime = _now()
        return self._require_file().write(data)

    def truncate(self, size: int) -> bool:
        """Resize the content."""
        self._require_file().truncate(size)
        self.mtime = _now()
        return True

    def eof(self) -> bool:
        """Return the content's sticky EOF flag."""
        return self._require_file().eof()

    def bytes_read(self) -> int:
        """Return the content cursor offset."""
        return self._require_file().bytes_read()

    def seek(self, offset: int, whence: SeekWhence) -> bool:
        """Move the content cursor."""
        return self._require_file().seek(offset, whence)


# -- factories -------------------------------------------------------------


def new_file(
    name: str,
    permissions: int | None = None,
    *,
    umask: int = 0,
    uid: int = OWNER_ROOT,
    gid: int = GROUP_ROOT,
) -> Node:
    """Create a detached, empty file.

    Without explicit *permissions* the file gets ``0o666`` minus *umask*.
    """
    if permissions is None:
        permissions = apply_umask(DEFAULT_FILE_PERMISSIONS, umask)
    return Node(name=name, kind=NodeKind.FILE, permissions=permissions, uid=uid, gid=gid)


def new_block(
    name: str,
    permissions: int | None = None,
    *,
    umask: int = 0,
    uid: int = OWNER_ROOT,
    gid: int = GROUP_ROOT,
) -> Node:
    """Create a detached block device node.

    Raises:
        VfsError: (INVALID_NAME) if *name* is empty or contains ``/``.

    """
    if not name:
        msg = "Name of block device was empty"
        raise VfsError(msg, kind=ErrorKind.INVALID_NAME)
    if permissions is None:
        permissions = apply_umask(DEFAULT_FILE_PERMISSIONS, umask)
    return Node(name=name, kind=NodeKind.BLOCK, permissions=permissions, uid=uid, gid=gid)


def new_directory(
    name: str,
    permissions: int | None = None,
    *,
    umask: int = 0,
    uid: int = OWNER_ROOT,
    gid: int = GROUP_ROOT,
) -> Node:
    """Create a detached directory.

    A nested *name* such as ``"a/b/c"`` creates the whole chain and
    returns the top directory ``a``; every level gets the same
    permissions.  A leading ``/`` is ignored.
    """
    name = name.removeprefix("/")
    if permissions is None:
        permissions = apply_umask(DEFAULT_DIRECTORY_PERMISSIONS, umask)
    own_name, _, sub_dirs = name.partition("/")
    directory = Node(
        name=own_name, kind=NodeKind.DIRECTORY, permissions=permissions, uid=uid, gid=gid
    )
    if sub_dirs:
        new_directory(sub_dirs, permissions, uid=uid, gid=gid).at(directory)
    return directory
