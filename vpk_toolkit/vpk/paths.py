"""Path helpers for archive-internal paths."""

from typing import Iterable


def normalize_path(path: str) -> str:
    """Forward slashes, no leading or trailing separator."""
    return path.replace("\\", "/").strip("/")


def is_under(path: str, prefix: str) -> bool:
    """True if ``path`` is ``prefix`` itself or lies inside the ``prefix`` directory.

    ``panorama/images/econ/stickers`` matches ``.../stickers/a.png`` but not
    ``.../stickers_old/a.png``.
    """
    prefix = normalize_path(prefix)
    if not prefix:
        return True
    return path == prefix or path.startswith(prefix + "/")


def is_under_any(path: str, prefixes: Iterable[str]) -> bool:
    return any(is_under(path, prefix) for prefix in prefixes)
