"""Tests for chunked surface population, interim renders, and error paths."""

from __future__ import annotations

import unittest
from unittest import mock

from lazydir.adapters import AdapterRegistry, MemoryAdapter
from lazydir.errors import AdapterError, UrlResolutionError
from lazydir.model import ENTRY_DIRECTORY, ENTRY_FILE
from lazydir.runtime.event_loop import EventLoop, ManualClock
from lazydir.view.controller import ViewController
from lazydir.view.surface import NO_UNDO, Workspace


class StreamingPopulatorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = ManualClock()
        self.loop = EventLoop(monotonic=self.clock.monotonic)
        self.adapter = MemoryAdapter(chunk_size=1)
        self.adapter.add("mem://a/one", ENTRY_FILE)
        self.adapter.add("mem://a/two", ENTRY_FILE)
        self.adapter.add("mem://a/sub/", ENTRY_DIRECTORY)
        self.workspace = Workspace()
        self.controller = ViewController(
            self.workspace,
            loop=self.loop,
            adapters=AdapterRegistry([self.adapter]),
        )

    def _surface(self, url: str = "mem://a/"):
        surface = self.workspace.create_surface(url)
        self.workspace.open_window(surface)
        self.controller.registry.register(surface)
        return surface

    def test_slow_listing_renders_interim_results(self) -> None:
        self.adapter.before_chunk = lambda _index: self.clock.advance(0.05)
        surface = self._surface()
        results: list[object] = []

        with mock.patch.object(self.controller.renderer, "render", wraps=self.controller.renderer.render) as render:
            self.controller.render_surface_async(surface, callback=results.append)
            self.loop.run_ready()

        self.assertEqual(
            [call.kwargs for call in render.call_args_list],
            [
                {"jump": True, "jump_first": True},
                {"jump": True, "jump_first": False},
                {"jump": True},
            ],
        )
        self.assertEqual(results, [None])
        self.assertEqual(len(surface.lines), 3)

    def test_fast_listing_renders_once(self) -> None:
        surface = self._surface()

        with mock.patch.object(self.controller.renderer, "render", wraps=self.controller.renderer.render) as render:
            self.controller.render_surface_async(surface)
            self.loop.run_ready()

        self.assertEqual(render.call_count, 1)
        self.assertTrue(surface.modifiable)
        self.assertFalse(surface.loading)

    def test_surface_is_read_only_while_listing(self) -> None:
        surface = self._surface()
        self.controller.render_surface_async(surface)

        self.assertFalse(surface.modifiable)
        self.assertTrue(surface.loading)
        self.loop.run_ready()
        self.assertTrue(surface.modifiable)

    def test_loading_placeholder_drawn_after_delay(self) -> None:
        surface = self._surface()
        self.controller.loading.set_loading(surface, True)

        self.loop.advance(0.1)
        self.assertEqual(surface.lines, [""])
        self.loop.advance(0.15)
        self.assertEqual(surface.lines[0], "Loading")
        self.assertTrue(surface.lines[1].startswith("["))

        self.controller.loading.set_loading(surface, False)
        surface.lines = ["done"]
        self.loop.advance(1.0)
        self.assertEqual(surface.lines, ["done"])
        self.assertFalse(surface.loading)

    def test_listing_error_renders_into_surface_and_reports(self) -> None:
        surface = self._surface("mem://missing/")
        results: list[object] = []

        self.controller.render_surface_async(surface, callback=results.append)
        self.loop.run_ready()

        self.assertEqual(len(results), 1)
        self.assertIsInstance(results[0], AdapterError)
        self.assertEqual(surface.lines, ["Error: No such container: mem://missing/"])
        self.assertEqual(surface.undo_levels, self.controller.config.undo_levels)

    def test_listing_error_without_callback_propagates(self) -> None:
        surface = self._surface("mem://missing/")
        self.controller.render_surface_async(surface)

        with self.assertRaises(AdapterError):
            self.loop.run_ready()

    def test_unresolvable_url_reports_resolution_error(self) -> None:
        surface = self._surface("not-a-url")
        results: list[object] = []

        self.controller.render_surface_async(surface, callback=results.append)
        self.loop.run_ready()

        self.assertIsInstance(results[0], UrlResolutionError)
        self.assertEqual(surface.lines, ["Error: Could not parse url 'not-a-url'"])

    def test_unknown_scheme_reports_resolution_error(self) -> None:
        surface = self._surface("ftp://host/")
        results: list[object] = []

        self.controller.render_surface_async(surface, callback=results.append)
        self.loop.run_ready()

        self.assertIsInstance(results[0], UrlResolutionError)
        self.assertTrue(surface.lines[0].startswith("Error: "))

    def test_render_without_refetch_reuses_cache(self) -> None:
        surface = self._surface()
        self.controller.render_surface_async(surface)
        self.loop.run_ready()
        before = list(surface.lines)

        with mock.patch.object(self.adapter, "list", side_effect=AssertionError("listed")):
            self.controller.render_surface_async(surface, refetch=False)
            self.loop.run_ready()

        self.assertEqual(surface.lines, before)

    def test_refetch_keeps_identities(self) -> None:
        surface = self._surface()
        self.controller.render_surface_async(surface)
        self.loop.run_ready()
        before = list(surface.lines)

        self.controller.render_surface_async(surface)
        self.loop.run_ready()

        self.assertEqual(surface.lines, before)

    def test_restarting_a_listing_hands_callbacks_to_the_new_stream(self) -> None:
        surface = self._surface()
        results: list[object] = []
        self.controller.render_surface_async(surface, callback=lambda err: results.append(("first", err)))
        self.controller.render_surface_async(surface, callback=lambda err: results.append(("second", err)))
        self.loop.run_ready()

        self.assertEqual(results, [("first", None), ("second", None)])
        self.assertEqual(len(surface.lines), 3)

    def test_initial_population_leaves_no_undo_history(self) -> None:
        surface = self._surface()
        surface.undo_levels = 10
        self.controller.render_surface_async(surface)
        self.assertEqual(surface.undo_levels, NO_UNDO)
        self.loop.run_ready()

        self.assertEqual(surface.undo_history, [])
        self.assertFalse(surface.undo())
        self.assertEqual(surface.undo_levels, self.controller.config.undo_levels)

        rendered = list(surface.lines)
        surface.edit(rendered[:1])
        self.assertTrue(surface.undo())
        self.assertEqual(surface.lines, rendered)


if __name__ == "__main__":
    unittest.main()
