"""Tests for path handling — splitting, resolving, and URL conversion.

Every operation of the filesystem funnels its argument through
``normalize()``, so a bug here would make perfectly valid paths miss
their nodes.  The properties that matter most:

- resolving is idempotent (resolving twice changes nothing),
- ``..`` can never climb above the root directory,
- URLs and bare paths reach the same place.
"""

import pytest

from py_vfs.paths import SCHEME_PREFIX, normalize, path, resolve_path, split_path, url

SAMPLE_PATHS = [
    "root",
    "root/a/b",
    "root/./a/./b",
    "root/a/../b",
    "root/../../etc",
    "root/a/b/../../c/./d",
    "root/..",
    "",
]


class TestSplitPath:
    """Verify splitting a path into dirname and basename."""

    def test_nested_path(self) -> None:
        """The split happens at the last separator."""
        assert split_path("root/a/b.txt") == ("root/a", "b.txt")

    def test_single_segment(self) -> None:
        """A path without a separator has an empty dirname."""
        assert split_path("root") == ("", "root")

    def test_trailing_separator(self) -> None:
        """A trailing separator yields an empty basename."""
        assert split_path("root/a/") == ("root/a", "")


class TestResolvePath:
    """Verify collapsing of ``.`` and ``..`` segments."""

    def test_current_directory_segments_vanish(self) -> None:
        """``.`` segments are dropped."""
        assert resolve_path("root/./a/./b") == "root/a/b"

    def test_parent_segment_pops(self) -> None:
        """``..`` removes the previous segment."""
        assert resolve_path("root/a/../b") == "root/b"

    def test_cannot_climb_above_root(self) -> None:
        """``..`` never removes the first segment."""
        assert resolve_path("root/../../etc") == "root/etc"
        assert resolve_path("root/..") == "root"

    @pytest.mark.parametrize("raw", SAMPLE_PATHS)
    def test_resolving_is_idempotent(self, raw: str) -> None:
        """Resolving an already resolved path changes nothing."""
        once = resolve_path(raw)
        assert resolve_path(once) == once


class TestUrlConversion:
    """Verify converting between URLs and bare paths."""

    def test_url_adds_scheme(self) -> None:
        """``url()`` prefixes the scheme."""
        assert url("root/a") == SCHEME_PREFIX + "root/a"

    def test_url_normalises_backslashes(self) -> None:
        """Backslashes become forward slashes."""
        assert url("root\\a\\b") == "vfs://root/a/b"

    def test_url_escapes_segments(self) -> None:
        """Characters unsafe in a URL are percent-encoded per segment."""
        assert url("root/my file#1") == "vfs://root/my%20file%231"

    def test_path_strips_scheme(self) -> None:
        """``path()`` removes the scheme prefix."""
        assert path("vfs://root/a") == "root/a"

    def test_path_collapses_double_slashes(self) -> None:
        """Doubled separators collapse into one."""
        assert path("vfs://root//a") == "root/a"

    def test_path_trims_whitespace_and_separators(self) -> None:
        """Surrounding whitespace and separators are trimmed."""
        assert path("  vfs://root/a/  ") == "root/a"

    def test_path_normalises_backslashes(self) -> None:
        """Backslashes in a URL become forward slashes."""
        assert path("vfs://root\\a\\b") == "root/a/b"

    def test_path_decodes_escapes(self) -> None:
        """Percent-escapes are decoded."""
        assert path(url("root/my file")) == "root/my file"

    def test_bare_path_passes_through(self) -> None:
        """A path without a scheme is only normalised."""
        assert path("root/a") == "root/a"


class TestNormalize:
    """Verify the combined URL-to-lookup-path step."""

    def test_url_and_bare_path_agree(self) -> None:
        """Both spellings resolve to the same lookup path."""
        assert normalize("vfs://root/a/../b") == normalize("root/a/../b") == "root/b"
