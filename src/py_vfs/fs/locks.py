"""Advisory locks — ``flock(2)``-style bookkeeping per node.

Locks here are *advisory*: holding or failing to get one never stops a
read or write.  They only change what later lock calls and queries
report, which is exactly what code under test expects from ``flock``.

For each node the table tracks:

- at most one **exclusive** holder, and
- any number of **shared** holders,

never both at once.  A holder is an open handle's id.  Every lock
request first releases whatever the same holder already had on that
node, so re-locking converts a lock instead of stacking a second one.

State machine per (node, holder)::

    UNLOCK     → drop the holder from both slots, always succeeds
    EXCLUSIVE  → fails if any *other* holder has shared or exclusive
    SHARED     → fails if a *different* holder has exclusive
    anything else → refused, nothing changes

The ``NON_BLOCKING`` bit is accepted and ignored: nothing here ever
blocks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntFlag
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from py_vfs.fs.node import Node


class LockOperation(IntFlag):
    """Lock request, numbered like the ``LOCK_*`` constants of ``flock(2)``."""

    SHARED = 1
    EXCLUSIVE = 2
    UNLOCK = 3
    NON_BLOCKING = 4


_REQUESTS = frozenset({LockOperation.SHARED, LockOperation.EXCLUSIVE, LockOperation.UNLOCK})


@dataclass
class _NodeLocks:
    """Lock state of a single node."""

    exclusive: int | None = None
    shared: set[int] = field(default_factory=set)  # pyright: ignore[reportUnknownVariableType]

    def is_empty(self) -> bool:
        return self.exclusive is None and not self.shared


class LockTable:
    """All advisory locks of one filesystem, keyed by node and holder id."""

    def __init__(self) -> None:
        """Create an empty lock table."""
        self._locks: dict[Node, _NodeLocks] = {}

    def lock(self, node: Node, holder: int, operation: LockOperation | int) -> bool:
        """Apply *operation* for *holder* on *node*.

        Returns:
            ``True`` if the lock was granted (or released), ``False`` if it
            is held elsewhere or *operation* is not a lock request.

        """
        operation = int(operation) & ~LockOperation.NON_BLOCKING.value
        if operation not in _REQUESTS:
            return False
        self.unlock(node, holder)
        if operation == LockOperation.UNLOCK:
            return True
        state = self._locks.setdefault(node, _NodeLocks())
        if operation == LockOperation.EXCLUSIVE:
            if state.exclusive is not None or state.shared:
                return False
            state.exclusive = holder
        elif operation == LockOperation.SHARED:
            if state.exclusive is not None:
                return False
            state.shared.add(holder)
        return True

    def unlock(self, node: Node, holder: int) -> None:
        """Release whatever *holder* holds on *node*."""
        state = self._locks.get(node)
        if state is None:
            return
        if state.exclusive == holder:
            state.exclusive = None
        state.shared.discard(holder)
        if state.is_empty():
            del self._locks[node]

    def release_all(self, holder: int) -> None:
        """Release every lock *holder* has on any node (used on close)."""
        for node in list(self._locks):
            self.unlock(node, holder)

    def clear(self) -> None:
        """Drop every lock (used when the root is replaced)."""
        self._locks.clear()

    def __len__(self) -> int:
        """Return the number of nodes with at least one lock."""
        return len(self._locks)

    def has_exclusive_lock(self, node: Node, holder: int | None = None) -> bool:
        """Return whether *holder* (or anyone, when ``None``) holds it exclusively."""
        state = self._locks.get(node)
        if state is None:
            return False
        if holder is None:
            return state.exclusive is not None
        return state.exclusive == holder

    def has_shared_lock(self, node: Node, holder: int | None = None) -> bool:
        """Return whether *holder* (or anyone, when ``None``) holds a shared lock."""
        state = self._locks.get(node)
        if state is None:
            return False
        if holder is None:
            return bool(state.shared)
        return holder in state.shared

    def is_locked(self, node: Node, holder: int | None = None) -> bool:
        """Return whether *holder* (or anyone) holds any lock on *node*."""
        return self.has_shared_lock(node, holder) or self.has_exclusive_lock(node, holder)
