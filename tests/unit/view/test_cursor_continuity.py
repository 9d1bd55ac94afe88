"""Tests for cursor relocation onto remembered entries and column clamping."""

from __future__ import annotations

import unittest

from lazydir.adapters import AdapterRegistry, MemoryAdapter
from lazydir.model import ENTRY_DIRECTORY, ENTRY_FILE
from lazydir.runtime.event_loop import EventLoop, ManualClock
from lazydir.view.controller import ViewController
from lazydir.view.cursor import CursorMemory, clamp_cursor_column, entry_column, identity_prefix_width
from lazydir.view.surface import Workspace


class CursorHelperTests(unittest.TestCase):
    def test_identity_prefix_width_counts_separator(self) -> None:
        self.assertEqual(identity_prefix_width("/12 - name"), 4)
        self.assertEqual(identity_prefix_width("/12"), 3)
        self.assertIsNone(identity_prefix_width("no id here"))

    def test_entry_column_skips_identity_token(self) -> None:
        self.assertEqual(entry_column("/12 - 1", "1"), 6)
        self.assertEqual(entry_column("/3 d sub/", "missing"), 3)

    def test_memory_is_per_container(self) -> None:
        memory = CursorMemory()
        memory.remember("mem://a/", "x")
        memory.remember("mem://b/", "y")
        memory.remember("mem://a/", None)

        self.assertIsNone(memory.recall("mem://a/"))
        self.assertEqual(memory.recall("mem://b/"), "y")


class CursorContinuityTests(unittest.TestCase):
    def setUp(self) -> None:
        self.loop = EventLoop(monotonic=ManualClock().monotonic)
        self.adapter = MemoryAdapter()
        for name in ("alpha", "beta", "gamma"):
            self.adapter.add(f"mem://a/{name}", ENTRY_FILE)
        self.adapter.add("mem://a/sub/", ENTRY_DIRECTORY)
        self.adapter.add("mem://a/sub/inner", ENTRY_FILE)
        self.workspace = Workspace()
        self.controller = ViewController(self.workspace, loop=self.loop, adapters=AdapterRegistry([self.adapter]))
        self.surface = self.workspace.create_surface("mem://a/")
        self.window = self.workspace.open_window(self.surface)

    def test_remembered_entry_receives_cursor_once(self) -> None:
        self.controller.cursor_memory.remember("mem://a/", "gamma")
        self.controller.initialize(self.surface)
        self.loop.run_ready()

        row, col = self.window.cursor
        self.assertEqual(self.controller.get_entry_on_line(self.surface, row).name, "gamma")
        self.assertEqual(self.surface.lines[row][col:], "gamma")
        self.assertIsNone(self.controller.cursor_memory.recall("mem://a/"))

        self.workspace.set_cursor(self.window, 0, 0)
        self.controller.render_surface_async(self.surface, refetch=False)
        self.loop.run_ready()
        self.assertEqual(self.window.cursor[0], 0)

    def test_missing_name_stays_remembered(self) -> None:
        self.controller.cursor_memory.remember("mem://a/", "nope")
        self.controller.initialize(self.surface)
        self.loop.run_ready()

        self.assertEqual(self.controller.cursor_memory.recall("mem://a/"), "nope")

    def test_open_parent_lands_on_child_just_left(self) -> None:
        self.controller.initialize(self.surface)
        self.loop.run_ready()
        self.controller.open(self.window, "mem://a/sub/")
        self.loop.run_ready()
        self.assertEqual(self.window.surface.lines[0][-5:], "inner")

        self.controller.open_parent(self.window)
        self.loop.run_ready()

        self.assertIs(self.window.surface, self.surface)
        entry = self.controller.get_cursor_entry(self.window)
        self.assertEqual(entry.name, "sub")

    def test_cursor_is_kept_right_of_identity_prefix(self) -> None:
        self.controller.initialize(self.surface)
        self.loop.run_ready()

        self.workspace.set_cursor(self.window, 1, 0)
        self.assertEqual(self.window.cursor, (1, identity_prefix_width(self.surface.lines[1])))
        self.assertFalse(clamp_cursor_column(self.workspace, self.window))


if __name__ == "__main__":
    unittest.main()
