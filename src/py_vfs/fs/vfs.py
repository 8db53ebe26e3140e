"""The virtual filesystem — one explicit context object for the whole tree.

``VirtualFileSystem`` is what a host (a test fixture, an I/O shim that
intercepts ``open``) talks to.  It owns:

- the **root** directory node (or ``None`` before setup / after the
  root was removed),
- the **quota** checked on every write and truncate,
- the **config** (umask, dot entries, acting uid/gid),
- the **lock table** and the **handle table**,
- a **logger** recording every refused operation.

Nothing here is global: two ``VirtualFileSystem`` instances are two
completely separate disks.

Paths given to any operation may be bare (``root/a/b.txt``) or URLs
(``vfs://root/a/b.txt``); both are normalised first.

Failure model
-------------
Expected failures (missing path, wrong kind, no permission, quota
exhausted, directory not empty) return ``False`` / ``None`` and leave
the tree untouched.  The reason is logged at WARNING level on
``self.logger``.  Misuse (a bad name, an unknown handle id, building a
structure from an unsupported value) raises ``VfsError``.

Typical use::

    vfs = VirtualFileSystem()
    root = vfs.setup("root", structure={"etc": {"hosts": "127.0.0.1"}})
    handle = vfs.open("vfs://root/etc/hosts", "r")
    vfs.read(handle, 9)          # b"127.0.0.1"
    vfs.close(handle)
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from pathlib import Path

from py_vfs.config import VfsConfig
from py_vfs.content.base import SeekWhence
from py_vfs.errors import ErrorKind, VfsError
from py_vfs.fs.handle import DirectoryHandle, FileMode, HandleTable, OpenHandle
from py_vfs.fs.locks import LockOperation, LockTable
from py_vfs.fs.node import Node, NodeKind, StatResult, new_block, new_directory, new_file
from py_vfs.fs.tree import (
    DEFAULT_MAX_FILE_SIZE,
    copy_from_filesystem,
    create_structure,
    iter_children,
    size_summarized,
)
from py_vfs.logging import Logger
from py_vfs.paths import normalize, split_path
from py_vfs.paths import path as url_to_path
from py_vfs.paths import url as path_to_url
from py_vfs.permissions import DEFAULT_DIRECTORY_PERMISSIONS
from py_vfs.quota import Quota

_OPEN_MODES = frozenset({"r", "w", "a", "x", "c"})


class VirtualFileSystem:
    """An in-memory disk: a tree of nodes plus the state needed to use it."""

    def __init__(self, config: VfsConfig | None = None) -> None:
        """Create an empty filesystem (no root yet, unlimited quota)."""
        self.config = config if config is not None else VfsConfig()
        self.logger = Logger()
        self.locks = LockTable()
        self.handles = HandleTable()
        self._root: Node | None = None
        self._quota = Quota.unlimited()

    # -- helpers -----------------------------------------------------------

    url = staticmethod(path_to_url)
    path = staticmethod(url_to_path)

    def _warn(self, message: str) -> None:
        self.logger.warning(message, uid=self.config.uid)

    def _debug(self, message: str) -> None:
        self.logger.debug(message, uid=self.config.uid)

    def _info(self, message: str) -> None:
        self.logger.info(message, uid=self.config.uid)

    def _writable(self, node: Node) -> bool:
        return node.is_writable(self.config.uid, self.config.gid)

    def _readable(self, node: Node) -> bool:
        return node.is_readable(self.config.uid, self.config.gid)

    # -- root, quota and factories -----------------------------------------

    @property
    def root(self) -> Node | None:
        """Return the root directory, or ``None`` if there is none."""
        return self._root

    def set_root(self, root: Node) -> Node:
        """Replace the whole tree with the one under *root*.

        Handles and locks on the previous tree are dropped with it.

        Raises:
            NotADirectoryError: If *root* is not a directory.

        """
        if not root.is_directory():
            msg = f"Root must be a directory: {root.name}"
            raise NotADirectoryError(msg)
        self._drop_open_state()
        root.remove_parent_path()
        for child in root.children.values():
            child.set_parent_path(root.path())
        self._root = root
        self._info(f"Root set to {root.name}")
        return root

    def _drop_open_state(self) -> None:
        self.handles.clear()
        self.locks.clear()

    def reset(self) -> None:
        """Drop the tree, every open handle and lock, and lift the quota."""
        self._drop_open_state()
        self._root = None
        self._quota = Quota.unlimited()
        self._info("Filesystem reset")

    @property
    def quota(self) -> Quota:
        """Return the quota in force."""
        return self._quota

    def set_quota(self, amount: int) -> None:
        """Limit the whole tree to *amount* bytes (``Quota.UNLIMITED`` lifts it)."""
        self._quota = Quota.with_limit(amount)
        self._info(f"Quota set to {amount}")

    def used_space(self) -> int:
        """Return the number of content bytes in the tree."""
        if self._root is None:
            return 0
        return size_summarized(self._root)

    def new_file(self, name: str, permissions: int | None = None) -> Node:
        """Create a detached file owned by the acting user."""
        return new_file(
            name, permissions, umask=self.config.umask, uid=self.config.uid, gid=self.config.gid
        )

    def new_directory(self, name: str, permissions: int | None = None) -> Node:
        """Create a detached directory (or chain) owned by the acting user."""
        return new_directory(
            name, permissions, umask=self.config.umask, uid=self.config.uid, gid=self.config.gid
        )

    def new_block(self, name: str, permissions: int | None = None) -> Node:
        """Create a detached block device owned by the acting user."""
        return new_block(
            name, permissions, umask=self.config.umask, uid=self.config.uid, gid=self.config.gid
        )

    def setup(
        self,
        root_name: str = "root",
        permissions: int | None = None,
        structure: Mapping[str, object] | None = None,
    ) -> Node:
        """Start over with a fresh root directory, optionally pre-populated.

        The quota is lifted as part of the fresh start.
        """
        self.reset()
        root = self.set_root(self.new_directory(root_name, permissions))
        if structure:
            self.create(structure, root)
        return root

    def _base_dir(self, base_dir: Node | None) -> Node:
        if base_dir is not None:
            return base_dir
        if self._root is None:
            msg = "No base directory given and no root directory set"
            raise VfsError(msg, kind=ErrorKind.NOT_FOUND)
        return self._root

    def create(self, structure: Mapping[str, object], base_dir: Node | None = None) -> Node:
        """Add *structure* below *base_dir* (default: the root).

        Raises:
            VfsError: (NOT_FOUND) if there is neither a base nor a root.

        """
        return create_structure(
            structure,
            self._base_dir(base_dir),
            umask=self.config.umask,
            uid=self.config.uid,
            gid=self.config.gid,
        )

    def copy_from_filesystem(
        self,
        source: str | Path,
        base_dir: Node | None = None,
        max_file_size: int = DEFAULT_MAX_FILE_SIZE,
    ) -> Node:
        """Import a real directory below *base_dir* (default: the root)."""
        return copy_from_filesystem(
            source,
            self._base_dir(base_dir),
            max_file_size,
            uid=self.config.uid,
            gid=self.config.gid,
        )

    # -- lookup ------------------------------------------------------------

    def _get(self, resolved: str) -> Node | None:
        root = self._root
        if root is None:
            return None
        if root.name == resolved:
            return root
        if resolved.startswith(root.name) and root.has_child(resolved):
            return root.get_child(resolved)
        return None

    def get_node(self, raw_path: str) -> Node | None:
        """Return the node at *raw_path* (URL or bare path), or ``None``."""
        return self._get(normalize(raw_path))

    def exists(self, raw_path: str) -> bool:
        """Return whether anything lives at *raw_path*."""
        return self.get_node(raw_path) is not None

    def _get_directory(self, resolved: str) -> Node | None:
        node = self._get(resolved)
        if node is None or not node.is_directory():
            return None
        return node

    # -- tree mutation -----------------------------------------------------

    def mkdir(self, raw_path: str, mode: int | None = None, *, recursive: bool = False) -> bool:
        """Create a directory.

        The umask is applied to *mode* (default ``0o777``).  With
        *recursive*, every missing ancestor is created with the same
        permissions; without it, only the last segment may be missing.
        """
        if mode is None:
            mode = DEFAULT_DIRECTORY_PERMISSIONS
        permissions = self.config.mask(mode)
        resolved = normalize(raw_path)
        if self._get(resolved) is not None:
            self._warn(f"mkdir(): Path {path_to_url(resolved)} exists")
            return False

        if self._root is None:
            self.set_root(self.new_directory(resolved, permissions))
            return True

        max_depth = len(resolved.split("/"))
        dirname, new_dirs = split_path(resolved)
        directory: Node | None = None
        depth = 0
        while directory is None and depth < max_depth:
            directory = self._get(dirname)
            dirname, basename = split_path(dirname)
            if directory is None:
                new_dirs = f"{basename}/{new_dirs}"
            depth += 1

        if directory is None or not directory.is_directory():
            self._warn(f"mkdir(): No parent directory for {resolved}")
            return False
        if not self._writable(directory):
            self._warn(f"mkdir(): Permission denied in {directory.path()}")
            return False
        if "/" in new_dirs and not recursive:
            self._warn(f"mkdir(): {resolved} needs missing parents, use recursive")
            return False

        self.new_directory(new_dirs, permissions).at(directory)
        self._debug(f"mkdir {resolved}")
        return True

    def rmdir(self, raw_path: str) -> bool:
        """Remove an empty directory; removing the root clears it."""
        resolved = normalize(raw_path)
        child = self._get_directory(resolved)
        if child is None:
            self._warn(f"rmdir(): No such directory {resolved}")
            return False
        if child.has_children():
            self._warn(f"rmdir(): Directory not empty {resolved}")
            return False
        if child is self._root:
            self._root = None
            self._info("Root removed")
            return True

        dirname, _ = split_path(resolved)
        parent = self._get_directory(dirname)
        if parent is None or not self._writable(parent):
            self._warn(f"rmdir(): Permission denied in {dirname}")
            return False
        self._debug(f"rmdir {resolved}")
        return parent.remove_child(child.name)

    def unlink(self, raw_path: str) -> bool:
        """Remove a file or block device (never a directory)."""
        resolved = normalize(raw_path)
        node = self._get(resolved)
        if node is None:
            self._warn(f"unlink({raw_path}): No such file or directory")
            return False
        if node.is_directory():
            self._warn(f"unlink({raw_path}): Operation not permitted")
            return False
        return self._detach(node, resolved)

    def _detach(self, node: Node, resolved: str) -> bool:
        if node is self._root:
            self._root = None
            self._info("Root removed")
            return True
        dirname, basename = split_path(resolved)
        parent = self._get(dirname)
        if parent is None or not self._writable(parent):
            self._warn(f"Permission denied removing {resolved}")
            return False
        self._debug(f"unlink {resolved}")
        return parent.remove_child(basename)

    def rename(self, raw_from: str, raw_to: str) -> bool:
        """Move or rename a node.

        - Onto a missing name: the node takes that name in the target's
          parent directory.
        - A file onto an existing directory: the file moves *into* it.
        - Onto any other existing node: the existing entry is replaced.

        Everything is validated before the source is detached, so a
        refused rename never loses the source.
        """
        src_path = normalize(raw_from)
        dst_path = normalize(raw_to)
        source = self._get(src_path)
        if source is None:
            self._warn(f"rename(): No such file or directory {src_path}")
            return False

        target = self._get(dst_path)
        dst_dirname, new_name = split_path(dst_path)
        if target is not None and target.is_directory() and source.is_file():
            parent: Node | None = target
            new_name = source.name
        else:
            parent = self._get(dst_dirname)

        if parent is None:
            self._warn(f"rename(): No such file or directory {dst_dirname}")
            return False
        if not self._writable(parent):
            self._warn(f"rename(): Permission denied in {parent.path()}")
            return False
        if not parent.is_directory():
            self._warn(f"rename(): Target {parent.path()} is not a directory")
            return False
        if parent is source or parent.path().startswith(source.path() + "/"):
            self._warn(f"rename(): Can not move {src_path} into itself")
            return False
        src_parent = self._get(split_path(src_path)[0])
        if src_parent is None or not self._writable(src_parent):
            self._warn(f"rename(): Permission denied removing {src_path}")
            return False

        src_parent.remove_child(source.name)
        source.rename(new_name)
        parent.add_child(source)
        self._debug(f"rename {src_path} -> {source.path()}")
        return True

    # -- file handles ------------------------------------------------------

    def _create_file(self, resolved: str, mode: str | None = None) -> Node | None:
        dirname, basename = split_path(resolved)
        if not dirname:
            self._warn(f"File {basename} does not exist")
            return None
        directory = self._get_directory(dirname)
        if directory is None:
            self._warn(f"Directory {dirname} does not exist")
            return None
        if directory.has_child(basename):
            self._warn(f"Directory {dirname} already contains a directory named {basename}")
            return None
        if mode == "r":
            self._warn(f"Can not open non-existing file {resolved} for reading")
            return None
        if not self._writable(directory):
            self._warn(f"Can not create new file in non-writable path {dirname}")
            return None
        return self.new_file(basename).at(directory)

    def open(self, raw_path: str, mode: str = "r") -> int | None:
        """Open a file and return a handle id, or ``None`` on failure.

        *mode* is one of ``r w a x c`` optionally flavoured with ``t``,
        ``b`` and ``+``.  Missing files are created for every mode but
        ``r``; ``x`` refuses an existing file.
        """
        extended = "+" in mode
        base = mode.replace("t", "").replace("b", "").replace("+", "")
        if base not in _OPEN_MODES:
            self._warn(f"Illegal mode {mode}, use r, w, a, x or c, flavoured with t, b and/or +")
            return None
        if extended:
            file_mode = FileMode.READ_WRITE
        elif base == "r":
            file_mode = FileMode.READ
        else:
            file_mode = FileMode.WRITE

        resolved = normalize(raw_path)
        node = self._get(resolved)
        if node is not None and node.is_file():
            if base == "x":
                self._warn(f"File {resolved} already exists, can not open with mode x")
                return None
            if base in {"w", "a"} and not self._writable(node):
                self._warn(f"Permission denied opening {resolved} for writing")
                return None
            if base == "w":
                handle = OpenHandle.for_truncate(node, file_mode, self.config)
            elif base == "a":
                handle = OpenHandle.for_append(node, file_mode, self.config)
            else:
                if not self._readable(node):
                    self._warn(f"Permission denied opening {resolved}")
                    return None
                node.open()
                handle = OpenHandle.for_read(node, file_mode, self.config)
            return self.handles.allocate(handle)

        created = self._create_file(resolved, base)
        if created is None:
            return None
        return self.handles.allocate(OpenHandle.for_read(created, file_mode, self.config))

    def close(self, handle_id: int) -> None:
        """Close a file handle, releasing any lock it holds."""
        self.handles.lookup(handle_id)
        self.locks.release_all(handle_id)
        self.handles.close(handle_id)

    def read(self, handle_id: int, count: int) -> bytes:
        """Read up to *count* bytes through a handle."""
        return self.handles.lookup(handle_id).read(count)

    def write(self, handle_id: int, data: bytes) -> int:
        """Write through a handle, shortened to whatever the quota allows."""
        handle = self.handles.lookup(handle_id)
        if self._quota.is_limited():
            allowed = self._quota.space_left(self.used_space())
            if allowed < len(data):
                self._warn(f"Only {allowed} of {len(data)} bytes written, out of free space")
                data = data[:allowed]
        return handle.write(data)

    def truncate(self, handle_id: int, size: int) -> bool:
        """Resize a file through a handle, within the quota."""
        handle = self.handles.lookup(handle_id)
        current = handle.size()
        if self._quota.is_limited() and current < size:
            space_left = self._quota.space_left(self.used_space())
            if space_left == 0:
                self._warn(f"Can not grow {handle.node.path()}, quota reached")
                return False
            size = min(size, current + space_left)
        return handle.truncate(size)

    def seek(self, handle_id: int, offset: int, whence: SeekWhence = SeekWhence.SET) -> bool:
        """Move a handle's offset."""
        return self.handles.lookup(handle_id).seek(offset, whence)

    def tell(self, handle_id: int) -> int:
        """Return a handle's offset."""
        return self.handles.lookup(handle_id).tell()

    def eof(self, handle_id: int) -> bool:
        """Return whether a handle is at or past the end of its file."""
        return self.handles.lookup(handle_id).eof()

    def fstat(self, handle_id: int) -> StatResult:
        """Return the metadata of a handle's node."""
        return self.handles.lookup(handle_id).stat()

    def lock(self, handle_id: int, operation: LockOperation | int) -> bool:
        """Apply an advisory lock operation for a handle."""
        handle = self.handles.lookup(handle_id)
        return self.locks.lock(handle.node, handle_id, operation)

    # -- metadata ----------------------------------------------------------

    def stat(self, raw_path: str, *, quiet: bool = False) -> StatResult | None:
        """Return metadata for *raw_path*, or ``None`` if it does not exist."""
        node = self.get_node(raw_path)
        if node is None:
            if not quiet:
                self._warn(f"No such file or directory: {raw_path}")
            return None
        return node.stat()

    def touch(self, raw_path: str, mtime: int | None = None, atime: int | None = None) -> bool:
        """Set the times of a node, creating an empty file if it is missing."""
        resolved = normalize(raw_path)
        node = self._get(resolved)
        if node is None:
            node = self._create_file(resolved)
            if node is None:
                return False
        now = int(time.time())
        node.last_modified(mtime if mtime is not None else now)
        node.last_accessed(atime if atime is not None else now)
        return True

    def _change_permissions(self, raw_path: str) -> Node | None:
        resolved = normalize(raw_path)
        node = self._get(resolved)
        if node is None:
            self._warn(f"No such file or directory: {raw_path}")
            return None
        if not node.is_owned_by_user(self.config.uid):
            self._warn(f"Operation not permitted on {resolved}")
            return None
        if node is not self._root:
            parent = self._get(split_path(resolved)[0])
            if parent is None or not self._writable(parent):
                self._warn(f"Permission denied changing {resolved}")
                return None
        return node

    def chmod(self, raw_path: str, permissions: int) -> bool:
        """Change permission bits (owner only)."""
        node = self._change_permissions(raw_path)
        if node is None:
            return False
        node.chmod(permissions)
        return True

    def chown(self, raw_path: str, uid: int) -> bool:
        """Change the owning user (owner only)."""
        node = self._change_permissions(raw_path)
        if node is None:
            return False
        node.chown(uid)
        return True

    def chgrp(self, raw_path: str, gid: int) -> bool:
        """Change the owning group (owner only)."""
        node = self._change_permissions(raw_path)
        if node is None:
            return False
        node.chgrp(gid)
        return True

    # -- directory listing -------------------------------------------------

    def opendir(self, raw_path: str) -> int | None:
        """Open a directory for listing and return a handle id."""
        resolved = normalize(raw_path)
        directory = self._get_directory(resolved)
        if directory is None:
            self._warn(f"opendir(): No such directory {resolved}")
            return None
        if not self._readable(directory):
            self._warn(f"opendir(): Permission denied {resolved}")
            return None
        return self.handles.allocate(DirectoryHandle(directory, dotfiles=self.config.dotfiles))

    def readdir(self, handle_id: int) -> str | None:
        """Return the next entry name of an open directory, or ``None``."""
        return self.handles.lookup_directory(handle_id).read()

    def rewinddir(self, handle_id: int) -> bool:
        """Restart an open directory listing."""
        self.handles.lookup_directory(handle_id).rewind()
        return True

    def closedir(self, handle_id: int) -> bool:
        """Close an open directory."""
        self.handles.lookup_directory(handle_id)
        self.handles.close(handle_id)
        return True

    def listdir(self, raw_path: str) -> list[str] | None:
        """Return the entry names of a directory in insertion order."""
        directory = self._get_directory(normalize(raw_path))
        if directory is None:
            self._warn(f"No such directory: {raw_path}")
            return None
        return [child.name for child in iter_children(directory, dotfiles=self.config.dotfiles)]

    def size_of(self, raw_path: str) -> int | None:
        """Return the summarised size of a subtree, or ``None`` if missing."""
        node = self.get_node(raw_path)
        if node is None:
            return None
        return size_summarized(node)

    def kind_of(self, raw_path: str) -> NodeKind | None:
        """Return the kind of node at *raw_path*, or ``None`` if missing."""
        node = self.get_node(raw_path)
        return None if node is None else node.kind
