"""Tests for surface registration, garbage collection, locking, and global re-renders."""

from __future__ import annotations

import unittest

from lazydir.adapters import AdapterRegistry, MemoryAdapter
from lazydir.errors import SurfaceLockedError
from lazydir.model import ENTRY_FILE
from lazydir.runtime.event_loop import EventLoop, ManualClock
from lazydir.view.controller import ENTER_EVENT, ViewController
from lazydir.view.surface import Workspace


class SessionLifecycleTests(unittest.TestCase):
    def setUp(self) -> None:
        self.loop = EventLoop(monotonic=ManualClock().monotonic)
        self.adapter = MemoryAdapter()
        self.adapter.add("mem://a/one", ENTRY_FILE, {"size": 1})
        self.adapter.add("mem://b/two", ENTRY_FILE, {"size": 2})
        self.workspace = Workspace()
        self.controller = ViewController(self.workspace, loop=self.loop, adapters=AdapterRegistry([self.adapter]))

    def _open(self, url: str):
        surface = self.workspace.create_surface(url)
        window = self.workspace.open_window(surface)
        self.controller.initialize(surface)
        self.loop.run_ready()
        return surface, window

    def test_initialize_registers_and_announces_surface(self) -> None:
        announced: list[object] = []
        self.workspace.subscribe("user", lambda pattern, surface: announced.append((pattern, surface)))

        surface, _window = self._open("mem://a/")

        self.assertIn(surface, self.controller.registry)
        self.assertEqual(announced, [(ENTER_EVENT, surface)])

    def test_failed_initialize_logs_error(self) -> None:
        with self.assertLogs("lazydir", "ERROR") as logs:
            surface, _window = self._open("mem://missing/")

        self.assertIn("mem://missing/", logs.output[0])
        self.assertTrue(surface.lines[0].startswith("Error: "))

    def test_hidden_surfaces_are_collected_after_grace_period(self) -> None:
        surface, window = self._open("mem://a/")
        self.assertGreater(len(self.controller.cache), 0)

        self.workspace.close_window(window)
        self.loop.advance(0.01)
        self.loop.advance(1.9)
        self.assertTrue(surface.valid)

        self.loop.advance(0.2)
        self.assertFalse(surface.valid)
        self.assertNotIn(surface, self.controller.registry)
        self.assertEqual(len(self.controller.cache), 0)

    def test_modification_during_grace_period_blocks_collection(self) -> None:
        first, first_window = self._open("mem://a/")
        second, second_window = self._open("mem://b/")

        self.workspace.close_window(first_window)
        self.workspace.close_window(second_window)
        self.loop.advance(0.01)
        second.edit(["/2 - renamed"])
        self.loop.advance(3.0)

        self.assertTrue(first.valid)
        self.assertTrue(second.valid)
        self.assertGreater(len(self.controller.cache), 0)

    def test_reshown_surface_survives_grace_period(self) -> None:
        surface, window = self._open("mem://a/")

        self.workspace.close_window(window)
        self.loop.advance(0.02)
        self.workspace.open_window(surface)
        self.loop.advance(3.0)

        self.assertTrue(surface.valid)
        self.assertIn(surface, self.controller.registry)
        self.assertGreater(len(self.controller.cache), 0)

    def test_enter_event_fires_when_first_render_is_overtaken(self) -> None:
        self.adapter.chunk_size = 1
        self.adapter.add("mem://a/two", ENTRY_FILE, {"size": 2})
        self.adapter.add("mem://a/three", ENTRY_FILE, {"size": 3})
        announced: list[str] = []
        self.workspace.subscribe("user", lambda pattern, surface: announced.append(pattern))
        surface = self.workspace.create_surface("mem://a/")
        self.workspace.open_window(surface)

        self.controller.initialize(surface)
        # Runs after the first chunk has been pumped.
        self.loop.call_soon(self.controller.set_columns, ["type", "size"])
        self.loop.run_ready()

        self.assertEqual(announced, [ENTER_EVENT])
        self.assertEqual(len(surface.lines), 3)
        self.assertTrue(all("B" in line for line in surface.lines))

    def test_visible_surface_blocks_collection(self) -> None:
        first, _first_window = self._open("mem://a/")
        second, second_window = self._open("mem://b/")

        self.workspace.close_window(second_window)
        self.loop.advance(3.0)

        self.assertTrue(first.valid)
        self.assertTrue(second.valid)

    def test_lock_all_and_unlock_all(self) -> None:
        surface, _window = self._open("mem://a/")

        self.controller.lock_all()
        self.assertFalse(surface.modifiable)
        with self.assertRaises(SurfaceLockedError):
            surface.edit(["x"])

        self.controller.unlock_all()
        self.assertTrue(surface.modifiable)

    def test_unlock_keeps_read_only_adapters_locked(self) -> None:
        self.adapter.writable = False
        surface, _window = self._open("mem://a/")
        self.assertFalse(surface.modifiable)

        self.controller.lock_all()
        self.controller.unlock_all()
        self.assertFalse(surface.modifiable)

    def test_render_finished_while_locked_stays_read_only(self) -> None:
        surface, _window = self._open("mem://a/")
        self.controller.lock_all()

        self.controller.render_surface_async(surface)
        self.loop.run_ready()

        self.assertFalse(surface.modifiable)

    def test_global_changes_refused_with_unsaved_edits(self) -> None:
        surface, _window = self._open("mem://a/")
        surface.edit(["edited"])

        with self.assertLogs("lazydir", "WARNING") as logs:
            self.assertFalse(self.controller.toggle_hidden())
            self.assertFalse(self.controller.set_columns(["type", "size"]))
            self.assertFalse(self.controller.set_is_hidden_file(lambda _name, _surface: False))

        self.assertIn("Cannot toggle hidden files when you have unsaved changes", logs.output[0])
        self.assertEqual(len(logs.output), 3)
        self.assertFalse(self.controller.config.view_options.show_hidden)
        self.assertEqual(self.controller.config.columns, ["type"])
        self.assertEqual(surface.lines, ["edited"])

    def test_hidden_surfaces_rerender_when_entered(self) -> None:
        first, window = self._open("mem://a/")
        second = self.workspace.create_surface("mem://b/")
        self.workspace.set_window_surface(window, second)
        self.controller.initialize(second)
        self.loop.run_ready()
        self.workspace.set_window_surface(window, first)

        self.assertTrue(self.controller.set_columns(["type", "size"]))
        self.loop.run_ready()

        self.assertEqual(second.pending_render, {"refetch": True, "preserve_undo": False})
        self.assertIn("1B", first.lines[0])
        self.assertNotIn("2B", second.lines[0])

        self.workspace.set_window_surface(window, second)
        self.loop.run_ready()

        self.assertIsNone(second.pending_render)
        self.assertIn("2B", second.lines[0])

    def test_close_detaches_from_workspace(self) -> None:
        surface, window = self._open("mem://a/")
        self.controller.close()

        self.workspace.close_window(window)
        self.loop.advance(5.0)

        self.assertTrue(surface.valid)
        self.assertFalse(self.loop.has_pending())


if __name__ == "__main__":
    unittest.main()
