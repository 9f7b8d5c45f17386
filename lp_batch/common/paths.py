from __future__ import annotations

from typing import Final

# Both separators are honoured so manifests written on Windows still resolve.
SEPARATORS: Final[str] = "/\\"


def is_absolute(path: str) -> bool:
    if not path:
        return False
    if path[0] in SEPARATORS:
        return True
    return len(path) > 1 and path[0].isalpha() and path[1] == ":"


def join(base: str, leaf: str) -> str:
    if not base:
        return leaf
    if not leaf:
        return base
    if base[-1] in SEPARATORS:
        return base + leaf
    return f"{base}/{leaf}"


def _last_separator(path: str) -> int:
    return max(path.rfind("/"), path.rfind("\\"))


def directory_of(path: str) -> str:
    """Directory part of `path`, or '.' when it has no separator."""
    slash = _last_separator(path)
    if slash == -1:
        return "."
    return path[:slash]


def instance_name(path: str) -> str:
    """Final path component cut at its first dot, e.g. 'afiro.mps.gz' -> 'afiro'."""
    base = path[_last_separator(path) + 1 :]
    return base.split(".", 1)[0]
