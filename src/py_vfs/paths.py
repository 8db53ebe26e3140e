"""Path handling — splitting, normalising, and URL conversion.

Paths inside the virtual filesystem are *relative to nothing*: the
first segment is the root directory's own name.  ``root/a/b.txt``
means "the child ``a`` of the root directory named ``root``, then its
child ``b.txt``".  There is no leading slash.

Outside callers usually hold URLs instead (``vfs://root/a/b.txt``).
``path()`` turns a URL into a bare path and ``url()`` goes the other
way, so both spellings reach the same node.

``resolve_path()`` collapses ``.`` and ``..`` segments.  A ``..`` never
removes the very first segment, so no amount of ``..`` can climb out
of the root directory::

    resolve_path("root/a/../b")     → "root/b"
    resolve_path("root/../../etc")  → "root/etc"

"""

from urllib.parse import quote, unquote

SCHEME = "vfs"
SCHEME_PREFIX = f"{SCHEME}://"

_TRIM_CHARS = " \t\r\n\0\x0b/\\"


def split_path(path: str) -> tuple[str, str]:
    """Split a path into (dirname, basename) at the last ``/``.

    Examples::

        "root/a/b.txt" → ("root/a", "b.txt")
        "root"         → ("", "root")

    """
    last_slash = path.rfind("/")
    if last_slash == -1:
        return ("", path)
    return (path[:last_slash], path[last_slash + 1 :])


def resolve_path(path: str) -> str:
    """Collapse ``.`` and ``..`` segments without climbing above the root."""
    parts: list[str] = []
    for part in path.split("/"):
        if part == ".":
            continue
        if part != "..":
            parts.append(part)
        elif len(parts) > 1:
            parts.pop()
    return "/".join(parts)


def url(path: str) -> str:
    """Return the ``vfs://`` URL for a bare path.

    Backslashes become forward slashes and each segment is
    percent-encoded, so names with spaces or ``#`` survive the trip.
    """
    segments = path.replace("\\", "/").split("/")
    return SCHEME_PREFIX + "/".join(quote(segment, safe="") for segment in segments)


def path(vfs_url: str) -> str:
    """Return the bare path for a ``vfs://`` URL.

    Surrounding whitespace and separators are trimmed, backslashes are
    normalised, doubled slashes collapse to one, and percent-escapes
    are decoded.  A string without the scheme is returned normalised
    but otherwise unchanged.
    """
    result = vfs_url.strip(_TRIM_CHARS)
    if result.startswith(SCHEME_PREFIX):
        result = result[len(SCHEME_PREFIX) :]
    result = result.replace("\\", "/").replace("//", "/")
    return unquote(result)


def normalize(raw: str) -> str:
    """Turn a URL or bare path into the resolved bare path used for lookups."""
    return resolve_path(path(raw))
