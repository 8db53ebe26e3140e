"""Tests for the filesystem's in-memory log.

The logger is the audit trail of a ``VirtualFileSystem``: every refused
operation leaves a WARNING behind, so a test can ask why a call failed.
"""

from py_vfs.fs.vfs import VirtualFileSystem
from py_vfs.logging import DEFAULT_SOURCE, LogEntry, Logger, LogLevel

ACTING_UID = 7


class TestLogLevel:
    """Verify log level ordering."""

    def test_levels_are_ordered(self) -> None:
        """DEBUG < INFO < WARNING."""
        assert LogLevel.DEBUG < LogLevel.INFO < LogLevel.WARNING


class TestLogEntry:
    """Verify log entry structure."""

    def test_entry_str(self) -> None:
        """String form shows level, source, acting user and message."""
        entry = LogEntry(LogLevel.WARNING, "disk full", uid=1)
        assert str(entry) == "[WARNING] vfs (uid 1): disk full"


class TestLogger:
    """Verify appending, filtering, and clearing."""

    def test_shorthands_stamp_level_and_source(self) -> None:
        """``debug``/``info``/``warning`` use the logger's own source."""
        logger = Logger("scratch")
        logger.debug("made")
        logger.info("moved")
        logger.warning("refused")
        assert [e.level for e in logger.entries] == [
            LogLevel.DEBUG,
            LogLevel.INFO,
            LogLevel.WARNING,
        ]
        assert {e.source for e in logger.entries} == {"scratch"}

    def test_default_source(self) -> None:
        """Without a source the log speaks for the filesystem."""
        logger = Logger()
        logger.info("hello")
        assert logger.entries[0].source == DEFAULT_SOURCE

    def test_entries_is_a_copy(self) -> None:
        """Mutating the returned list does not touch the log."""
        logger = Logger()
        logger.info("kept")
        logger.entries.clear()
        assert len(logger) == 1

    def test_filter_by_level(self) -> None:
        """Only entries at or above the minimum level are returned."""
        logger = Logger()
        logger.debug("noise")
        logger.info("root set")
        logger.warning("refused")
        assert [e.message for e in logger.filter(min_level=LogLevel.INFO)] == [
            "root set",
            "refused",
        ]

    def test_filter_by_source(self) -> None:
        """An explicit source overrides the logger's own."""
        logger = Logger()
        logger.info("a")
        logger.log(LogLevel.INFO, "b", source="host")
        assert [e.message for e in logger.filter(source="host")] == ["b"]

    def test_filter_by_uid(self) -> None:
        """Entries can be narrowed to one acting user."""
        logger = Logger()
        logger.warning("as root")
        logger.warning("as someone", uid=ACTING_UID)
        assert [e.message for e in logger.filter(uid=ACTING_UID)] == ["as someone"]

    def test_warnings_and_last_warning(self) -> None:
        """Refusals are listed oldest first; the latest is one call away."""
        logger = Logger()
        assert logger.last_warning() is None
        logger.info("fine")
        logger.warning("first")
        logger.warning("second")
        assert logger.warnings() == ["first", "second"]
        assert logger.last_warning() == "second"

    def test_clear(self) -> None:
        """Clearing empties the log."""
        logger = Logger()
        logger.warning("gone")
        logger.clear()
        assert logger.entries == []


class TestFilesystemLogging:
    """Verify what the filesystem writes to its log."""

    def test_refused_operation_logs_warning(self) -> None:
        """A failed mkdir leaves a warning naming the path."""
        vfs = VirtualFileSystem()
        vfs.setup()
        assert vfs.mkdir("root/a/b") is False
        expected = "mkdir(): root/a/b needs missing parents, use recursive"
        assert vfs.logger.last_warning() == expected

    def test_successful_mutation_logs_debug(self) -> None:
        """A successful mkdir is recorded at DEBUG level."""
        vfs = VirtualFileSystem()
        vfs.setup()
        vfs.mkdir("root/a")
        debug = [e for e in vfs.logger.entries if e.level is LogLevel.DEBUG]
        assert [e.message for e in debug] == ["mkdir root/a"]
        assert vfs.logger.warnings() == []

    def test_entries_carry_acting_uid(self) -> None:
        """Entries record which user the filesystem acted as."""
        vfs = VirtualFileSystem()
        vfs.setup()
        vfs.config.switch_user(ACTING_UID)
        vfs.unlink("root/missing")
        refused = vfs.logger.filter(min_level=LogLevel.WARNING, uid=ACTING_UID)
        assert len(refused) == 1
        assert refused[0].source == DEFAULT_SOURCE

    def test_quota_change_logs_info(self) -> None:
        """Setting a quota is recorded at INFO level."""
        vfs = VirtualFileSystem()
        vfs.set_quota(10)
        assert vfs.logger.entries[-1].level is LogLevel.INFO
