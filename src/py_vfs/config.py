"""Filesystem configuration — umask, dot entries, and the acting user.

These live on a ``VfsConfig`` owned by each ``VirtualFileSystem``, so
two filesystems in one test run never see each other's settings.

- **umask** — bits cleared from the default permissions of new nodes
  (and from the mode passed to ``mkdir``).
- **dotfiles** — when enabled, directory listings start with synthetic
  ``.`` and ``..`` entries.
- **uid / gid** — the identity every permission check is made for.
  Switching them is how a test simulates "another user".
"""

from collections.abc import Mapping
from dataclasses import dataclass, replace

from py_vfs.permissions import (
    DEFAULT_DIRECTORY_PERMISSIONS,
    DEFAULT_FILE_PERMISSIONS,
    GROUP_ROOT,
    OWNER_ROOT,
    apply_umask,
)

_TRUE_WORDS = frozenset({"1", "true", "yes", "on"})


@dataclass
class VfsConfig:
    """Mutable settings shared by every operation of one filesystem."""

    umask: int = 0o000
    dotfiles: bool = True
    uid: int = OWNER_ROOT
    gid: int = GROUP_ROOT

    @classmethod
    def from_env(cls, env: Mapping[str, str]) -> "VfsConfig":
        """Build a config from ``VFS_*`` variables in *env*.

        Recognised keys: ``VFS_UMASK`` (octal), ``VFS_DOTFILES``
        (``1``/``true``/``yes``/``on`` enable), ``VFS_UID``, ``VFS_GID``.
        Missing keys keep their defaults.

        Raises:
            ValueError: If a numeric variable is not a valid number.

        """
        config = cls()
        if "VFS_UMASK" in env:
            config.umask = int(env["VFS_UMASK"], 8)
        if "VFS_DOTFILES" in env:
            config.dotfiles = env["VFS_DOTFILES"].strip().lower() in _TRUE_WORDS
        if "VFS_UID" in env:
            config.uid = int(env["VFS_UID"])
        if "VFS_GID" in env:
            config.gid = int(env["VFS_GID"])
        return config

    def set_umask(self, umask: int | None = None) -> int:
        """Return the current umask, replacing it when *umask* is given."""
        old = self.umask
        if umask is not None:
            self.umask = umask
        return old

    def mask(self, permissions: int) -> int:
        """Apply the current umask to *permissions*."""
        return apply_umask(permissions, self.umask)

    def default_permissions(self, *, directory: bool = False) -> int:
        """Return the permissions a new node gets under the current umask."""
        if directory:
            return self.mask(DEFAULT_DIRECTORY_PERMISSIONS)
        return self.mask(DEFAULT_FILE_PERMISSIONS)

    def enable_dotfiles(self) -> None:
        """List ``.`` and ``..`` in every directory."""
        self.dotfiles = True

    def disable_dotfiles(self) -> None:
        """Hide ``.`` and ``..`` from directory listings."""
        self.dotfiles = False

    def switch_user(self, uid: int, gid: int | None = None) -> None:
        """Act as *uid* (and *gid*, when given) from now on."""
        self.uid = uid
        if gid is not None:
            self.gid = gid

    def copy(self) -> "VfsConfig":
        """Return an independent copy of this config."""
        return replace(self)
