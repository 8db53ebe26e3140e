"""Scheme registry — which filesystem answers for which URL scheme.

A host that intercepts file calls sees URLs such as
``vfs://root/app/config.ini``.  It asks the registry which
``VirtualFileSystem`` owns the ``vfs`` scheme and which path inside it
is meant::

    registry = SchemeRegistry()
    registry.register(vfs)
    fs, path = registry.lookup("vfs://root/app/config.ini")
    # fs is vfs, path == "root/app/config.ini"

Registering the same filesystem again is how a test starts over: the
tree and the quota are reset.  Claiming a scheme that another
filesystem already owns is an error.
"""

from py_vfs.errors import ErrorKind, VfsError
from py_vfs.fs.vfs import VirtualFileSystem
from py_vfs.paths import SCHEME, normalize


class SchemeRegistry:
    """Maps URL schemes to the filesystems serving them."""

    def __init__(self) -> None:
        """Create an empty registry."""
        self._filesystems: dict[str, VirtualFileSystem] = {}

    def register(self, vfs: VirtualFileSystem, scheme: str = SCHEME) -> None:
        """Let *vfs* serve *scheme*.

        Raises:
            VfsError: (ALREADY_REGISTERED) if another filesystem owns *scheme*.

        """
        current = self._filesystems.get(scheme)
        if current is not None and current is not vfs:
            msg = f"Scheme {scheme!r} is already registered"
            raise VfsError(msg, kind=ErrorKind.ALREADY_REGISTERED)
        vfs.reset()
        self._filesystems[scheme] = vfs

    def unregister(self, scheme: str = SCHEME) -> None:
        """Release *scheme*.

        Raises:
            VfsError: (NOT_FOUND) if nothing is registered for *scheme*.

        """
        if scheme not in self._filesystems:
            msg = f"Scheme {scheme!r} is not registered"
            raise VfsError(msg, kind=ErrorKind.NOT_FOUND)
        del self._filesystems[scheme]

    def is_registered(self, scheme: str = SCHEME) -> bool:
        """Return whether a filesystem serves *scheme*."""
        return scheme in self._filesystems

    def lookup(self, url: str) -> tuple[VirtualFileSystem, str]:
        """Return the filesystem and the resolved path for *url*.

        Raises:
            VfsError: (NOT_FOUND) if *url* has no scheme or an unknown one.

        """
        scheme, separator, rest = url.partition("://")
        vfs = self._filesystems.get(scheme) if separator else None
        if vfs is None:
            msg = f"No filesystem registered for {url!r}"
            raise VfsError(msg, kind=ErrorKind.NOT_FOUND)
        return vfs, normalize(rest)
