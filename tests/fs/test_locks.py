"""Tests for advisory locks."""

from py_vfs.fs.locks import LockOperation, LockTable
from py_vfs.fs.node import new_file

HANDLE_A = 1
HANDLE_B = 2


class TestLockTable:
    """Verify the exclusive/shared state machine."""

    def test_exclusive_blocks_others(self) -> None:
        """While A holds an exclusive lock, B gets nothing."""
        node = new_file("a")
        locks = LockTable()
        assert locks.lock(node, HANDLE_A, LockOperation.EXCLUSIVE)
        assert not locks.lock(node, HANDLE_B, LockOperation.EXCLUSIVE)
        assert not locks.lock(node, HANDLE_B, LockOperation.SHARED)
        assert locks.lock(node, HANDLE_A, LockOperation.UNLOCK)
        assert locks.lock(node, HANDLE_B, LockOperation.EXCLUSIVE)
        assert locks.has_exclusive_lock(node, HANDLE_B)

    def test_shared_locks_coexist(self) -> None:
        """Any number of shared holders is fine."""
        node = new_file("a")
        locks = LockTable()
        assert locks.lock(node, HANDLE_A, LockOperation.SHARED)
        assert locks.lock(node, HANDLE_B, LockOperation.SHARED)
        assert locks.has_shared_lock(node)
        assert not locks.has_exclusive_lock(node)

    def test_shared_blocks_exclusive(self) -> None:
        """An exclusive lock needs every shared holder gone."""
        node = new_file("a")
        locks = LockTable()
        locks.lock(node, HANDLE_A, LockOperation.SHARED)
        assert not locks.lock(node, HANDLE_B, LockOperation.EXCLUSIVE)

    def test_relock_converts(self) -> None:
        """A sole shared holder can upgrade to exclusive."""
        node = new_file("a")
        locks = LockTable()
        locks.lock(node, HANDLE_A, LockOperation.SHARED)
        assert locks.lock(node, HANDLE_A, LockOperation.EXCLUSIVE)
        assert not locks.has_shared_lock(node, HANDLE_A)
        assert locks.has_exclusive_lock(node, HANDLE_A)

    def test_non_blocking_bit_is_ignored(self) -> None:
        """``NON_BLOCKING`` combined with a request behaves like the request."""
        node = new_file("a")
        locks = LockTable()
        assert locks.lock(node, HANDLE_A, LockOperation.EXCLUSIVE | LockOperation.NON_BLOCKING)
        assert locks.has_exclusive_lock(node, HANDLE_A)

    def test_locks_are_per_node(self) -> None:
        """Locking one node leaves another free."""
        first, second = new_file("a"), new_file("b")
        locks = LockTable()
        locks.lock(first, HANDLE_A, LockOperation.EXCLUSIVE)
        assert locks.lock(second, HANDLE_B, LockOperation.EXCLUSIVE)

    def test_release_all(self) -> None:
        """Releasing a holder frees every node it locked."""
        first, second = new_file("a"), new_file("b")
        locks = LockTable()
        locks.lock(first, HANDLE_A, LockOperation.EXCLUSIVE)
        locks.lock(second, HANDLE_A, LockOperation.SHARED)
        locks.release_all(HANDLE_A)
        assert not locks.is_locked(first)
        assert not locks.is_locked(second)
        assert len(locks) == 0

    def test_unlock_without_lock_leaves_no_entry(self) -> None:
        """Unlocking a node nobody locked succeeds and records nothing."""
        node = new_file("a")
        locks = LockTable()
        assert locks.lock(node, HANDLE_A, LockOperation.UNLOCK)
        assert not locks.is_locked(node)
        assert len(locks) == 0

    def test_unknown_operation_is_refused(self) -> None:
        """A request that is neither shared, exclusive nor unlock fails."""
        node = new_file("a")
        locks = LockTable()
        locks.lock(node, HANDLE_A, LockOperation.SHARED)
        assert not locks.lock(node, HANDLE_A, 0)
        assert not locks.lock(node, HANDLE_B, LockOperation.NON_BLOCKING)
        assert locks.has_shared_lock(node, HANDLE_A)
        assert len(locks) == 1

    def test_clear_drops_everything(self) -> None:
        """Clearing the table frees every node for every holder."""
        first, second = new_file("a"), new_file("b")
        locks = LockTable()
        locks.lock(first, HANDLE_A, LockOperation.EXCLUSIVE)
        locks.lock(second, HANDLE_B, LockOperation.SHARED)
        locks.clear()
        assert not locks.is_locked(first)
        assert locks.lock(second, HANDLE_A, LockOperation.EXCLUSIVE)
