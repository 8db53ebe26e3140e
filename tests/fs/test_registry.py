"""Tests for the scheme registry."""

import pytest

from py_vfs.errors import ErrorKind, VfsError
from py_vfs.fs.registry import SchemeRegistry
from py_vfs.fs.vfs import VirtualFileSystem


class TestSchemeRegistry:
    """Verify registering, looking up, and releasing schemes."""

    def test_lookup_returns_filesystem_and_path(self) -> None:
        """A URL resolves to its filesystem and a bare path."""
        registry = SchemeRegistry()
        vfs = VirtualFileSystem()
        registry.register(vfs)
        assert registry.lookup("vfs://root/a/../b") == (vfs, "root/b")

    def test_reregistering_resets(self) -> None:
        """Registering the same filesystem again starts it over."""
        registry = SchemeRegistry()
        vfs = VirtualFileSystem()
        registry.register(vfs)
        vfs.setup("root")
        vfs.set_quota(5)
        registry.register(vfs)
        assert vfs.root is None
        assert vfs.quota.is_limited() is False

    def test_taken_scheme_raises(self) -> None:
        """A second filesystem cannot claim a taken scheme."""
        registry = SchemeRegistry()
        registry.register(VirtualFileSystem())
        with pytest.raises(VfsError, match="already registered") as info:
            registry.register(VirtualFileSystem())
        assert info.value.kind is ErrorKind.ALREADY_REGISTERED

    def test_custom_scheme(self) -> None:
        """Filesystems can serve other schemes side by side."""
        registry = SchemeRegistry()
        default, memory = VirtualFileSystem(), VirtualFileSystem()
        registry.register(default)
        registry.register(memory, "mem")
        assert registry.lookup("mem://root/x")[0] is memory
        assert registry.is_registered("mem")

    def test_unregister(self) -> None:
        """An unregistered scheme no longer resolves."""
        registry = SchemeRegistry()
        registry.register(VirtualFileSystem())
        registry.unregister()
        assert not registry.is_registered()
        with pytest.raises(VfsError, match="No filesystem registered") as info:
            registry.lookup("vfs://root")
        assert info.value.kind is ErrorKind.NOT_FOUND

    def test_unregister_unknown_raises(self) -> None:
        """Releasing a scheme nobody holds is an error."""
        with pytest.raises(VfsError, match="not registered"):
            SchemeRegistry().unregister("nope")

    def test_lookup_without_scheme_raises(self) -> None:
        """A bare path is not a URL."""
        registry = SchemeRegistry()
        registry.register(VirtualFileSystem())
        with pytest.raises(VfsError, match="No filesystem registered"):
            registry.lookup("root/a")
