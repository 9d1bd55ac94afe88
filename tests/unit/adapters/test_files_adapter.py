"""Tests for the filesystem adapter."""

from __future__ import annotations

import os
import stat
import tempfile
import unittest
from pathlib import Path

from lazydir.adapters import FilesAdapter, url_for_path
from lazydir.errors import AdapterError
from lazydir.model import (
    ACTION_CHANGE,
    ACTION_COPY,
    ACTION_CREATE,
    ACTION_DELETE,
    ACTION_MOVE,
    ENTRY_DIRECTORY,
    ENTRY_FILE,
    ENTRY_LINK,
    Action,
)


def _listing(adapter: FilesAdapter, root: Path) -> dict:
    return {row.name: row for chunk in adapter.list(url_for_path(root), []) for row in chunk.entries}


class FilesAdapterTests(unittest.TestCase):
    def test_lists_types_and_metadata(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "sub").mkdir()
            (root / "file.txt").write_text("hello", encoding="utf-8")
            os.symlink("sub", root / "link")

            rows = _listing(FilesAdapter(), root)

        self.assertEqual(rows["sub"].type, ENTRY_DIRECTORY)
        self.assertEqual(rows["file.txt"].type, ENTRY_FILE)
        self.assertEqual(rows["file.txt"].metadata["size"], 5)
        self.assertEqual(rows["link"].type, ENTRY_LINK)
        self.assertEqual(rows["link"].metadata["link"], "sub")
        self.assertEqual(rows["link"].metadata["link_type"], ENTRY_DIRECTORY)

    def test_listing_is_chunked(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            for index in range(5):
                (root / f"f{index}").touch()
            chunks = list(FilesAdapter(chunk_size=2).list(url_for_path(root), []))

        self.assertEqual(sum(len(chunk.entries) for chunk in chunks), 5)
        self.assertFalse(chunks[-1].has_more)
        self.assertTrue(all(chunk.has_more for chunk in chunks[:-1]))

    def test_missing_directory_raises_adapter_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            stream = FilesAdapter().list(url_for_path(Path(tmp) / "missing"), [])
            with self.assertRaises(AdapterError):
                next(stream)

    def test_actions_touch_the_filesystem(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            adapter = FilesAdapter()
            base = url_for_path(root)

            adapter.perform_action(Action(type=ACTION_CREATE, entry_type=ENTRY_DIRECTORY, url=base + "dir"))
            adapter.perform_action(Action(type=ACTION_CREATE, url=base + "dir/a.txt"))
            adapter.perform_action(Action(type=ACTION_COPY, src_url=base + "dir/a.txt", dest_url=base + "b.txt"))
            adapter.perform_action(Action(type=ACTION_MOVE, src_url=base + "b.txt", dest_url=base + "c.txt"))
            adapter.perform_action(Action(type=ACTION_CHANGE, url=base + "c.txt", column="permissions", value="600"))
            adapter.perform_action(Action(type=ACTION_DELETE, entry_type=ENTRY_DIRECTORY, url=base + "dir"))

            self.assertEqual(sorted(os.listdir(root)), ["c.txt"])
            self.assertEqual(stat.S_IMODE((root / "c.txt").stat().st_mode), 0o600)

    def test_create_existing_raises(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / "x").touch()
            with self.assertRaises(AdapterError):
                FilesAdapter().perform_action(Action(type=ACTION_CREATE, url=url_for_path(root) + "x"))

    def test_display_path_abbreviates_home(self) -> None:
        home = str(Path.home())
        adapter = FilesAdapter()
        self.assertEqual(adapter.display_path("file://" + home + "/notes/"), "~/notes/")
        self.assertEqual(adapter.display_path("file:///elsewhere/x"), "/elsewhere/x")

    def test_preview_lines_marks_binary_files(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp).resolve()
            (root / "text").write_text("a\nb\n", encoding="utf-8")
            (root / "bin").write_bytes(b"\x00\x01")
            adapter = FilesAdapter()

            self.assertEqual(adapter.preview_lines(url_for_path(root / "text", is_dir=False), None), ["a", "b"])
            self.assertEqual(adapter.preview_lines(url_for_path(root / "bin", is_dir=False), None), ["<binary>"])


if __name__ == "__main__":
    unittest.main()
