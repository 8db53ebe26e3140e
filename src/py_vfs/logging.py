"""The filesystem's audit log.

Most ``VirtualFileSystem`` calls report failure by returning ``False`` or
``None``.  The reason goes here, so a test can ask why ``mkdir``
refused without installing a warnings filter::

    assert vfs.mkdir("root/a/b") is False
    vfs.logger.last_warning()   # "mkdir(): root/a/b needs missing parents, use recursive"

Every filesystem owns one ``Logger`` stamped with its source name
(``"vfs"`` by default).  Each entry also records the
uid the filesystem was acting as, because the same call can succeed for
the owner and be refused for anyone else.

Levels are used as follows:

- DEBUG: a tree mutation succeeded (``mkdir root/a``, ``unlink ...``).
- INFO: the root or the quota changed.
- WARNING: a call was refused and the tree was left as it was.
"""

from dataclasses import dataclass
from enum import IntEnum

DEFAULT_SOURCE = "vfs"


class LogLevel(IntEnum):
    """How much an entry matters; higher is worse."""

    DEBUG = 0
    INFO = 1
    WARNING = 2


@dataclass(frozen=True)
class LogEntry:
    """One thing the filesystem did or refused to do.

    Attributes:
        level: DEBUG, INFO or WARNING.
        message: What happened, naming the path involved.
        source: The filesystem that logged it.
        uid: The user the filesystem was acting as.

    """

    level: LogLevel
    message: str
    source: str = DEFAULT_SOURCE
    uid: int = 0

    def __str__(self) -> str:
        """Format as ``[LEVEL] source (uid N): message``."""
        return f"[{self.level.name}] {self.source} (uid {self.uid}): {self.message}"


class Logger:
    """Append-only record of one filesystem's activity."""

    def __init__(self, source: str = DEFAULT_SOURCE) -> None:
        """Create an empty log whose entries default to *source*."""
        self.source = source
        self._entries: list[LogEntry] = []

    def __len__(self) -> int:
        """Return the number of entries."""
        return len(self._entries)

    @property
    def entries(self) -> list[LogEntry]:
        """Return a copy of every entry, oldest first."""
        return list(self._entries)

    def log(
        self, level: LogLevel, message: str, *, uid: int = 0, source: str | None = None
    ) -> None:
        """Append an entry, stamped with this log's source unless *source* is given."""
        entry = LogEntry(level, message, source or self.source, uid)
        self._entries.append(entry)

    def debug(self, message: str, *, uid: int = 0) -> None:
        """Record a successful mutation."""
        self.log(LogLevel.DEBUG, message, uid=uid)

    def info(self, message: str, *, uid: int = 0) -> None:
        """Record a change to the root or the quota."""
        self.log(LogLevel.INFO, message, uid=uid)

    def warning(self, message: str, *, uid: int = 0) -> None:
        """Record a refused call."""
        self.log(LogLevel.WARNING, message, uid=uid)

    def filter(
        self,
        *,
        min_level: LogLevel | None = None,
        source: str | None = None,
        uid: int | None = None,
    ) -> list[LogEntry]:
        """Return the entries matching every criterion given.

        Args:
            min_level: Keep entries at or above this level.
            source: Keep entries from this source only.
            uid: Keep entries logged while acting as this user only.

        """
        return [
            e
            for e in self._entries
            if (min_level is None or e.level >= min_level)
            and (source is None or e.source == source)
            and (uid is None or e.uid == uid)
        ]

    def warnings(self) -> list[str]:
        """Return the message of every refused call, oldest first."""
        return [e.message for e in self.filter(min_level=LogLevel.WARNING)]

    def last_warning(self) -> str | None:
        """Return the most recent refusal, or ``None`` if nothing was refused."""
        refused = self.warnings()
        return refused[-1] if refused else None

    def clear(self) -> None:
        """Forget every entry."""
        self._entries.clear()
