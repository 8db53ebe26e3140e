"""Hard errors raised by the virtual filesystem.

The filesystem distinguishes two kinds of failure:

- **Status failures** — permission denied, missing path, wrong node
  kind, quota exhausted.  These are *expected* at runtime, so the
  operation returns ``False`` / ``None`` / ``b""`` and leaves the tree
  unchanged.  Nothing is raised.

- **Hard errors** — a node name containing ``/``, registering a second
  filesystem for a scheme that is already taken, asking a traversal to
  handle a kind of content it does not know.  These point at a bug in
  the calling code, so they raise ``VfsError``.

Every ``VfsError`` carries a ``kind`` tag so callers (and tests) can
branch on *what* went wrong without parsing the message.
"""

from enum import StrEnum


class ErrorKind(StrEnum):
    """Tag describing why a hard error was raised."""

    INVALID_NAME = "invalid_name"
    ALREADY_REGISTERED = "already_registered"
    UNKNOWN_CONTENT_TYPE = "unknown_content_type"
    NOT_FOUND = "not_found"


class VfsError(Exception):
    """Raise when the filesystem is used in a way that can never succeed."""

    def __init__(self, message: str, *, kind: ErrorKind) -> None:
        """Create an error with a human-readable message and a kind tag."""
        super().__init__(message)
        self.kind = kind
