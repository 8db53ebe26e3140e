"""Tree-wide traversals and structure builders.

Operations here look at a whole subtree rather than a single node:

- ``size_summarized`` — total content bytes below a node.  This is what
  the quota is checked against.
- ``walk`` — depth-first iteration over a subtree.
- ``iter_children`` — one directory's listing, optionally led by the
  synthetic ``.`` and ``..`` entries.
- ``create_structure`` — build a subtree from a nested dict, the quick
  way for a test to lay out its fixture files.
- ``copy_from_filesystem`` — import a directory from the real disk.

Each traversal matches on ``NodeKind`` exhaustively; a node whose kind
is not one of the three known kinds is a hard error.
"""

from __future__ import annotations

import re
import stat
from collections.abc import Iterator, Mapping
from pathlib import Path

from py_vfs.content.base import SeekableFileContent
from py_vfs.content.large import LargeFileContent
from py_vfs.errors import ErrorKind, VfsError
from py_vfs.fs.node import Node, NodeKind, new_block, new_directory, new_file
from py_vfs.permissions import GROUP_ROOT, OWNER_ROOT

DEFAULT_MAX_FILE_SIZE = 1024 * 1024
"""Real files larger than this are imported as sparse large content."""

_BLOCK_KEY = re.compile(r"^\[(.*)\]$")


def _unknown_kind(node: Node) -> VfsError:
    msg = f"Unknown node kind {node.kind!r} for {node.name}"
    return VfsError(msg, kind=ErrorKind.UNKNOWN_CONTENT_TYPE)


def size_summarized(node: Node) -> int:
    """Return the total content size of *node* and everything below it."""
    match node.kind:
        case NodeKind.FILE | NodeKind.BLOCK:
            return node.size()
        case NodeKind.DIRECTORY:
            return sum(size_summarized(child) for child in node.children.values())
        case _:
            raise _unknown_kind(node)


def walk(node: Node) -> Iterator[Node]:
    """Yield *node* and then every descendant, depth first, in insertion order."""
    yield node
    match node.kind:
        case NodeKind.FILE | NodeKind.BLOCK:
            return
        case NodeKind.DIRECTORY:
            for child in node.children.values():
                yield from walk(child)
        case _:
            raise _unknown_kind(node)


def iter_children(directory: Node, *, dotfiles: bool) -> Iterator[Node]:
    """Yield the entries of *directory* for a listing.

    With *dotfiles* enabled, empty ``.`` and ``..`` pseudo-directories
    come first.  They are never attached to the tree.
    """
    if dotfiles:
        yield new_directory(".", directory.permissions)
        yield new_directory("..", directory.permissions)
    yield from directory.get_children()


def create_structure(
    structure: Mapping[str, object],
    base_dir: Node,
    *,
    umask: int = 0,
    uid: int = OWNER_ROOT,
    gid: int = GROUP_ROOT,
) -> Node:
    """Populate *base_dir* from a nested mapping and return it.

    Values decide what each key becomes::

        {
            "src": {"main.py": "print('hi')"},   # directory with a file
            "[sda]": "",                         # block device "sda"
            "big.bin": LargeFileContent(4096),   # file with given content
            "ready": new_file("ready"),          # prebuilt node, added as-is
        }

    Raises:
        VfsError: (UNKNOWN_CONTENT_TYPE) for a value of any other type.

    """
    owner = {"umask": umask, "uid": uid, "gid": gid}
    for key, data in structure.items():
        name = str(key)
        if isinstance(data, Mapping):
            create_structure(data, new_directory(name, **owner).at(base_dir), **owner)
        elif isinstance(data, str | bytes):
            block_match = _BLOCK_KEY.match(name)
            if block_match is not None:
                new_block(block_match.group(1), **owner).with_content(data).at(base_dir)
            else:
                new_file(name, **owner).with_content(data).at(base_dir)
        elif isinstance(data, SeekableFileContent):
            new_file(name, **owner).with_content(data).at(base_dir)
        elif isinstance(data, Node):
            base_dir.add_child(data)
        else:
            msg = f"Unsupported structure value for {name!r}: {type(data).__name__}"
            raise VfsError(msg, kind=ErrorKind.UNKNOWN_CONTENT_TYPE)
    return base_dir


def copy_from_filesystem(
    source: str | Path,
    base_dir: Node,
    max_file_size: int = DEFAULT_MAX_FILE_SIZE,
    *,
    uid: int = OWNER_ROOT,
    gid: int = GROUP_ROOT,
) -> Node:
    """Copy a real directory tree into *base_dir* and return it.

    Regular files up to *max_file_size* bytes are copied byte for byte;
    larger ones become ``LargeFileContent`` of the same size, so the
    import never reads huge files.  Permissions are carried over.
    Block devices become empty block nodes.  Symlinks, sockets and
    other special files are skipped.

    Raises:
        VfsError: (NOT_FOUND) if *source* is not a directory.

    """
    root = Path(source)
    if not root.is_dir():
        msg = f"Not a directory: {source}"
        raise VfsError(msg, kind=ErrorKind.NOT_FOUND)

    for entry in sorted(root.iterdir()):
        info = entry.lstat()
        permissions = stat.S_IMODE(info.st_mode)
        if stat.S_ISREG(info.st_mode):
            content: object
            if info.st_size <= max_file_size:
                content = entry.read_bytes()
            else:
                content = LargeFileContent(info.st_size)
            new_file(entry.name, permissions, uid=uid, gid=gid).with_content(content).at(base_dir)
        elif stat.S_ISDIR(info.st_mode):
            copy_from_filesystem(
                entry,
                new_directory(entry.name, permissions, uid=uid, gid=gid).at(base_dir),
                max_file_size,
                uid=uid,
                gid=gid,
            )
        elif stat.S_ISBLK(info.st_mode):
            new_block(entry.name, permissions, uid=uid, gid=gid).at(base_dir)
    return base_dir
