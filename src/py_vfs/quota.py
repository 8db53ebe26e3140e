"""Quota — a global ceiling on how many bytes the tree may hold.

The quota never rejects a write outright.  Instead the filesystem asks
how much space is left and *shortens* the write to fit, the way a disk
that is almost full accepts a partial write.  Only when nothing at all
is left does an operation fail.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Quota:
    """A byte limit, or ``UNLIMITED``."""

    UNLIMITED = -1

    amount: int

    @classmethod
    def unlimited(cls) -> "Quota":
        """Return a quota that never runs out."""
        return cls(cls.UNLIMITED)

    @classmethod
    def with_limit(cls, amount: int) -> "Quota":
        """Return a quota of *amount* bytes."""
        return cls(amount)

    def is_limited(self) -> bool:
        """Return whether a real limit is in force."""
        return self.amount > self.UNLIMITED

    def space_left(self, used: int) -> int:
        """Return how many more bytes fit, given *used* bytes in the tree.

        An unlimited quota echoes *used* back; callers only consult
        ``space_left`` after checking ``is_limited``.
        """
        if self.amount == self.UNLIMITED:
            return used
        return max(self.amount - used, 0)
