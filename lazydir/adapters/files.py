"""Local filesystem ``file://`` adapter.

Listing uses ``os.scandir`` and yields rows in chunks so large directories
render progressively. Stat failures degrade to rows without metadata.
"""

from __future__ import annotations

import os
import shutil
import stat as stat_mod
from collections.abc import Iterator, Sequence
from pathlib import Path

from ..errors import AdapterError
from ..model.types import (
    ACTION_CHANGE,
    ACTION_COPY,
    ACTION_CREATE,
    ACTION_DELETE,
    ACTION_MOVE,
    ENTRY_DIRECTORY,
    ENTRY_FILE,
    ENTRY_LINK,
    ENTRY_SOCKET,
    Action,
    ColumnSpec,
    Entry,
    ListedEntry,
)
from ..model.url import addslash, parse_url
from .base import Adapter, ListingChunk, ListingStream

FILES_SCHEME = "file://"
DEFAULT_CHUNK_SIZE = 200
PREVIEW_MAX_BYTES = 64 * 1024


def url_for_path(path: Path, is_dir: bool = True) -> str:
    """Return the ``file://`` URL for ``path`` (container URLs end in ``/``)."""
    text = str(path.resolve())
    return FILES_SCHEME + (addslash(text) if is_dir else text)


def path_for_url(url: str) -> Path:
    scheme, path = parse_url(url)
    if scheme != FILES_SCHEME or not path:
        raise AdapterError(f"Not a {FILES_SCHEME} url: {url!r}")
    return Path(path)


def entry_type_for_mode(mode: int) -> str:
    if stat_mod.S_ISDIR(mode):
        return ENTRY_DIRECTORY
    if stat_mod.S_ISLNK(mode):
        return ENTRY_LINK
    if stat_mod.S_ISSOCK(mode):
        return ENTRY_SOCKET
    return ENTRY_FILE


def listed_entry_for(child: os.DirEntry[str]) -> ListedEntry:
    """Build one listing row with stat and link metadata."""
    metadata: dict[str, object] = {}
    try:
        st = child.stat(follow_symlinks=False)
    except OSError:
        entry_type = ENTRY_DIRECTORY if child.is_dir(follow_symlinks=False) else ENTRY_FILE
        return ListedEntry(name=child.name, type=entry_type, metadata=metadata)

    entry_type = entry_type_for_mode(st.st_mode)
    metadata["size"] = int(st.st_size)
    metadata["mtime"] = float(st.st_mtime)
    metadata["mode"] = int(st.st_mode)
    if entry_type == ENTRY_LINK:
        try:
            metadata["link"] = os.readlink(child.path)
        except OSError:
            pass
        try:
            metadata["link_type"] = entry_type_for_mode(os.stat(child.path).st_mode)
        except OSError:
            pass
    return ListedEntry(name=child.name, type=entry_type, metadata=metadata)


class FilesAdapter(Adapter):
    """Adapter over the local filesystem."""

    name = "files"
    scheme = FILES_SCHEME
    supported_columns = ("type", "permissions", "size", "mtime")
    preserves_undo = True

    def __init__(self, *, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        self.chunk_size = chunk_size

    def list(self, url: str, column_defs: Sequence[ColumnSpec]) -> ListingStream:
        return ListingStream(self._iter_chunks(path_for_url(url)))

    def _iter_chunks(self, directory: Path) -> Iterator[ListingChunk]:
        pending: list[ListedEntry] = []
        try:
            with os.scandir(directory) as entries:
                for child in entries:
                    pending.append(listed_entry_for(child))
                    if len(pending) >= self.chunk_size:
                        yield ListingChunk(entries=tuple(pending), has_more=True)
                        pending = []
        except OSError as exc:
            raise AdapterError(f"{directory}: {exc.strerror or exc}") from exc
        yield ListingChunk(entries=tuple(pending), has_more=False)

    def is_modifiable(self, surface: object) -> bool:
        url = getattr(surface, "url", "")
        try:
            directory = path_for_url(url)
        except AdapterError:
            return False
        return os.access(directory, os.W_OK)

    def display_path(self, url: str) -> str:
        _scheme, path = parse_url(url)
        if not path:
            return url
        home = str(Path.home())
        if path == home or path.startswith(home + "/"):
            return "~" + path[len(home):]
        return path

    def perform_action(self, action: Action) -> None:
        try:
            self._perform(action)
        except OSError as exc:
            raise AdapterError(f"{action.type} failed: {exc}") from exc

    def _perform(self, action: Action) -> None:
        if action.type == ACTION_CREATE:
            path = path_for_url(action.primary_url)
            if path.exists() or path.is_symlink():
                raise AdapterError(f"Already exists: {path}")
            if action.entry_type == ENTRY_DIRECTORY:
                path.mkdir(parents=True)
            elif action.entry_type == ENTRY_LINK:
                if not action.link:
                    raise AdapterError(f"No link target for {path}")
                path.parent.mkdir(parents=True, exist_ok=True)
                os.symlink(action.link, path)
            else:
                path.parent.mkdir(parents=True, exist_ok=True)
                path.touch(exist_ok=False)
        elif action.type == ACTION_DELETE:
            path = path_for_url(action.primary_url)
            if path.is_dir() and not path.is_symlink():
                shutil.rmtree(path)
            else:
                path.unlink()
        elif action.type in (ACTION_MOVE, ACTION_COPY):
            src = path_for_url(action.src_url or "")
            dest = path_for_url(action.dest_url or "")
            if dest.exists() or dest.is_symlink():
                raise AdapterError(f"Already exists: {dest}")
            dest.parent.mkdir(parents=True, exist_ok=True)
            if action.type == ACTION_MOVE:
                shutil.move(str(src), str(dest))
            elif src.is_dir() and not src.is_symlink():
                shutil.copytree(src, dest, symlinks=True)
            else:
                shutil.copy2(src, dest, follow_symlinks=False)
        elif action.type == ACTION_CHANGE:
            path = path_for_url(action.primary_url)
            if action.column != "permissions":
                raise AdapterError(f"Column {action.column!r} cannot be changed")
            value = action.value
            mode = int(value, 8) if isinstance(value, str) else int(value)
            os.chmod(path, stat_mod.S_IMODE(mode))
        else:
            raise AdapterError(f"Bad action type: {action.type!r}")

    def preview_lines(self, url: str, entry: Entry, max_lines: int = 200) -> list[str]:
        """Return the leading text lines of a regular file."""
        path = path_for_url(url)
        try:
            with path.open("rb") as handle:
                data = handle.read(PREVIEW_MAX_BYTES)
        except OSError as exc:
            return [f"Error: {exc.strerror or exc}"]
        if b"\x00" in data:
            return ["<binary>"]
        return data.decode("utf-8", errors="replace").splitlines()[:max_lines]
