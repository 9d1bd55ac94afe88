"""Container URL helpers.

URLs look like ``scheme://path``; container URLs end with ``/``.
"""

from __future__ import annotations

import re

URL_RE = re.compile(r"^([A-Za-z][A-Za-z0-9+.-]*://)(.*)$")


def parse_url(url: str) -> tuple[str | None, str | None]:
    """Split ``url`` into ``(scheme, path)``; both ``None`` when unparseable."""
    match = URL_RE.match(url)
    if match is None:
        return None, None
    return match.group(1), match.group(2)


def addslash(path: str) -> str:
    return path if path.endswith("/") else path + "/"


def join_url(container_url: str, name: str) -> str:
    """Return the URL of child ``name`` inside ``container_url``."""
    return addslash(container_url) + name


def parent_url(url: str) -> tuple[str, str | None]:
    """Return ``(parent_container_url, child_name)`` for ``url``.

    The root of a scheme is its own parent and has no child name.
    """
    scheme, path = parse_url(url)
    if scheme is None or path is None:
        return url, None
    stripped = path.rstrip("/")
    if not stripped:
        return scheme + path, None
    head, sep, tail = stripped.rpartition("/")
    if not sep:
        return scheme, tail
    return scheme + head + "/", tail


def split_entry_url(url: str) -> tuple[str, str]:
    """Split a child URL into ``(container_url, name)``."""
    container, name = parent_url(url)
    if name is None:
        raise ValueError(f"url has no entry name: {url!r}")
    return container, name
