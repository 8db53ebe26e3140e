"""Content strategies — where a file's bytes actually live.

Re-exports public symbols so callers can write::

    from py_vfs.content import LargeFileContent, StringBasedFileContent
"""

from py_vfs.content.base import FileContent, SeekableFileContent, SeekWhence
from py_vfs.content.large import LargeFileContent
from py_vfs.content.string_based import StringBasedFileContent

__all__ = [
    "FileContent",
    "LargeFileContent",
    "SeekWhence",
    "SeekableFileContent",
    "StringBasedFileContent",
]
