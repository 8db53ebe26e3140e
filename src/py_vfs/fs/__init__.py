"""Filesystem core — nodes, handles, locks, and the filesystem context.

Re-exports public symbols so callers can write::

    from py_vfs.fs import VirtualFileSystem, SchemeRegistry
"""

from py_vfs.fs.handle import DirectoryHandle, FileMode, HandleTable, OpenHandle
from py_vfs.fs.locks import LockOperation, LockTable
from py_vfs.fs.node import (
    Node,
    NodeKind,
    StatResult,
    coerce_content,
    new_block,
    new_directory,
    new_file,
)
from py_vfs.fs.registry import SchemeRegistry
from py_vfs.fs.tree import (
    DEFAULT_MAX_FILE_SIZE,
    copy_from_filesystem,
    create_structure,
    iter_children,
    size_summarized,
    walk,
)
from py_vfs.fs.vfs import VirtualFileSystem

__all__ = [
    "DEFAULT_MAX_FILE_SIZE",
    "DirectoryHandle",
    "FileMode",
    "HandleTable",
    "LockOperation",
    "LockTable",
    "Node",
    "NodeKind",
    "OpenHandle",
    "SchemeRegistry",
    "StatResult",
    "VirtualFileSystem",
    "coerce_content",
    "copy_from_filesystem",
    "create_structure",
    "iter_children",
    "new_block",
    "new_directory",
    "new_file",
    "size_summarized",
    "walk",
]
