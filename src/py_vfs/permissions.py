"""Permissions — who may read, write, or execute a node.

Every node carries nine permission bits, the familiar ``rwxrwxrwx``:
three for the owning user, three for the owning group, three for
everyone else.  A request comes from a ``(uid, gid)`` pair, and exactly
one triplet is consulted:

1. If the requester's uid is the owner's uid → the **user** triplet.
2. Else if the requester's gid is the owner's gid → the **group** triplet.
3. Otherwise → the **other** triplet.

There is no blending between triplets: an owner whose own triplet is
``---`` is denied even if "other" grants access.  There is also no
superuser bypass here; uid 0 is simply another identity.  That is the
behaviour tests written against the filesystem expect, because it lets
them model "file I cannot read" without switching users.
"""

from enum import IntEnum

OWNER_ROOT = 0
OWNER_USER_1 = 1
OWNER_USER_2 = 2

GROUP_ROOT = 0
GROUP_USER_1 = 1
GROUP_USER_2 = 2

DEFAULT_FILE_PERMISSIONS = 0o666
DEFAULT_DIRECTORY_PERMISSIONS = 0o777

PERMISSION_MASK = 0o777

_USER_SHIFT = 6
_GROUP_SHIFT = 3
_OTHER_SHIFT = 0


class Access(IntEnum):
    """The kind of access being requested, as an ``rwx`` bit."""

    READ = 4
    WRITE = 2
    EXECUTE = 1


def check_access(
    permissions: int,
    *,
    owner_uid: int,
    owner_gid: int,
    uid: int,
    gid: int,
    want: Access,
) -> bool:
    """Return whether ``(uid, gid)`` is granted *want* on a node.

    Args:
        permissions: The node's permission bits (only the low 9 matter).
        owner_uid: The uid owning the node.
        owner_gid: The gid owning the node.
        uid: The requesting uid.
        gid: The requesting gid.
        want: Which access is being requested.

    """
    if uid == owner_uid:
        shift = _USER_SHIFT
    elif gid == owner_gid:
        shift = _GROUP_SHIFT
    else:
        shift = _OTHER_SHIFT
    return bool(permissions & (int(want) << shift))


def apply_umask(permissions: int, umask: int) -> int:
    """Clear the bits set in *umask* from *permissions*."""
    if umask > 0:
        return permissions & ~umask
    return permissions


def format_mode(permissions: int) -> str:
    """Render permission bits as ``ls -l`` style text, e.g. ``rwxr-x---``."""
    chars = []
    for shift in (_USER_SHIFT, _GROUP_SHIFT, _OTHER_SHIFT):
        triplet = (permissions >> shift) & 0o7
        chars.append("r" if triplet & Access.READ else "-")
        chars.append("w" if triplet & Access.WRITE else "-")
        chars.append("x" if triplet & Access.EXECUTE else "-")
    return "".join(chars)
