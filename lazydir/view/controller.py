"""View controller: one self-contained listing session.

Owns the entry cache, session registry, cursor memory, and configuration for
one instance, and wires them to the host workspace's lifecycle events.
Several controllers can coexist (each with its own workspace) since nothing
here lives in module globals.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..adapters import AdapterRegistry, default_registry
from ..errors import LazydirError
from ..loading import LoadingIndicator
from ..model.cache import EntryCache
from ..model.types import Entry
from ..model.url import addslash, join_url, parent_url
from ..runtime.config import LazydirConfig
from ..runtime.event_loop import EventLoop
from ..runtime.notify import Notifier, log_notify
from .cursor import CursorMemory, relocate_cursor
from .preview_sync import PreviewSync
from .rendering import SurfaceRenderer
from .session import LifecycleManager, SessionRegistry
from .streaming import RenderCallback, StreamingPopulator
from .surface import Surface, Window, Workspace

ENTER_EVENT = "LazydirEnter"
PREVIEW_KIND = "preview"


class ViewController:
    """Entry point the host and the batch executor talk to."""

    def __init__(
        self,
        workspace: Workspace,
        *,
        loop: EventLoop,
        adapters: AdapterRegistry | None = None,
        config: LazydirConfig | None = None,
        cache: EntryCache | None = None,
        notify: Notifier = log_notify,
    ) -> None:
        self.workspace = workspace
        self.loop = loop
        self.adapters = adapters if adapters is not None else default_registry()
        self.config = config if config is not None else LazydirConfig()
        self.cache = cache if cache is not None else EntryCache()
        self.notify = notify
        self.cursor_memory = CursorMemory()
        self.registry = SessionRegistry(workspace, self.adapters)
        self.renderer = SurfaceRenderer(
            loop=loop,
            workspace=workspace,
            cache=self.cache,
            adapters=self.adapters,
            cursor_memory=self.cursor_memory,
            config=self.config,
        )
        self.loading = LoadingIndicator(loop, self.renderer.write_text, delay=self.config.loading_delay_seconds)
        self.populator = StreamingPopulator(
            loop=loop,
            cache=self.cache,
            renderer=self.renderer,
            loading=self.loading,
            config=self.config,
            is_locked=lambda: self.registry.locked,
        )
        self.lifecycle = LifecycleManager(
            loop=loop,
            workspace=workspace,
            registry=self.registry,
            cache=self.cache,
            settle_seconds=self.config.gc_settle_seconds,
            grace_seconds=self.config.gc_grace_seconds,
        )
        self.preview_sync = PreviewSync(
            loop=loop,
            workspace=workspace,
            get_cursor_entry=self.get_cursor_entry,
            open_preview=self.preview_entry,
            first_seconds=self.config.preview_debounce_first_seconds,
            repeat_seconds=self.config.preview_debounce_repeat_seconds,
        )
        self._subscriptions = [
            workspace.subscribe("hidden", self._on_hidden_event),
            workspace.subscribe("deleted", self._on_deleted_event),
            workspace.subscribe("entered", self._on_entered_event),
            workspace.subscribe("cursor_moved", self._on_cursor_moved_event),
        ]

    def close(self) -> None:
        """Detach from the workspace and cancel every pending timer."""
        for subscription in self._subscriptions:
            self.workspace.unsubscribe(subscription)
        self._subscriptions = []
        self.lifecycle.cancel_pending()
        self.preview_sync.cancel_all()
        for surface in self.registry.all_loaded():
            self.populator.cancel(surface)

    # -- host hooks ---------------------------------------------------------

    def _on_hidden_event(self, surface: Surface) -> None:
        if surface in self.registry:
            self.on_hidden(surface)
        elif surface.kind == PREVIEW_KIND and surface.valid:
            self.workspace.delete_surface(surface, force=True)

    def _on_deleted_event(self, surface: Surface) -> None:
        if surface in self.registry:
            self.on_deleted(surface)

    def _on_entered_event(self, surface: Surface, window: Window | None = None) -> None:
        if surface in self.registry:
            self.on_entered(surface)

    def _on_cursor_moved_event(self, window: Window) -> None:
        if window.surface in self.registry:
            self.preview_sync.on_cursor_moved(window)

    def on_hidden(self, surface: Surface) -> None:
        self.lifecycle.on_hidden(surface)

    def on_deleted(self, surface: Surface) -> None:
        self.preview_sync.cancel(surface)
        self.populator.cancel(surface)
        self.registry.unregister(surface)

    def on_entered(self, surface: Surface) -> None:
        """Run a re-render deferred while ``surface`` was hidden."""
        pending = surface.pending_render
        if pending is None:
            return
        surface.pending_render = None
        self.render_surface_async(
            surface,
            refetch=bool(pending.get("refetch", True)),
            preserve_undo=bool(pending.get("preserve_undo", False)),
        )

    # -- surfaces -----------------------------------------------------------

    def initialize(self, surface: Surface) -> None:
        """Register ``surface`` and start its first population."""
        if not surface.valid:
            return
        self.registry.register(surface)
        surface.undo_levels = self.config.undo_levels

        def on_rendered(err: LazydirError | None) -> None:
            if err is not None:
                self.notify(f"Error rendering surface {surface.url}: {err}", logging.ERROR)
                return
            self.workspace.emit("user", pattern=ENTER_EVENT, surface=surface)

        self.render_surface_async(surface, callback=on_rendered)

    def render_surface_async(
        self,
        surface: Surface,
        *,
        preserve_undo: bool = False,
        refetch: bool = True,
        callback: RenderCallback | None = None,
    ) -> None:
        self.populator.render_surface_async(
            surface,
            preserve_undo=preserve_undo,
            refetch=refetch,
            callback=callback,
        )

    def get_or_create_surface(self, url: str) -> tuple[Surface, bool]:
        surface = self.workspace.find_surface(url)
        if surface is not None and surface in self.registry:
            return surface, False
        return self.workspace.create_surface(url), True

    def open(self, window: Window, url: str) -> Surface:
        """Show container ``url`` in ``window``."""
        url = addslash(url)
        surface, created = self.get_or_create_surface(url)
        self.workspace.set_window_surface(window, surface)
        if created:
            self.initialize(surface)
        else:
            relocate_cursor(self.workspace, self.cache, self.cursor_memory, window)
        return surface

    def open_parent(self, window: Window) -> Surface:
        """Show the parent container, landing the cursor on the child just left."""
        container, name = parent_url(window.surface.url)
        if name is not None:
            self.cursor_memory.remember(container, name)
        return self.open(window, container)

    def get_entry_on_line(self, surface: Surface, row: int) -> Entry | None:
        parsed = EntryCache.parse_id(surface.line(row))
        if parsed is None:
            return None
        return self.cache.get_entry_by_id(parsed[0])

    def get_cursor_entry(self, window: Window | None = None) -> Entry | None:
        window = window if window is not None else self.workspace.current
        if window is None:
            return None
        return self.get_entry_on_line(window.surface, window.cursor[0])

    def preview_entry(self, window: Window, entry: Entry) -> None:
        """Show ``entry`` (from ``window``'s container) in the preview window."""
        preview = self.workspace.preview_window()
        entry_url = join_url(window.surface.url, entry.name)
        if entry.is_directory():
            surface, created = self.get_or_create_surface(addslash(entry_url))
        else:
            adapter = self.adapters.get_adapter(entry_url)
            surface = self.workspace.create_surface(entry_url, kind=PREVIEW_KIND)
            surface.set_lines(adapter.preview_lines(entry_url, entry) if adapter is not None else [])
            surface.modifiable = False
            created = False
        if preview is None:
            preview = self.workspace.open_window(surface, preview=True, enter=False)
        else:
            self.workspace.set_window_surface(preview, surface)
        preview.preview_entry_id = entry.identity
        if created:
            self.initialize(surface)

    # -- global configuration -------------------------------------------------

    def _refuse_if_modified(self, what: str) -> bool:
        if not self.registry.any_modified():
            return False
        self.notify(f"Cannot {what} when you have unsaved changes", logging.WARNING)
        return True

    def toggle_hidden(self) -> bool:
        if self._refuse_if_modified("toggle hidden files"):
            return False
        options = self.config.view_options
        options.show_hidden = not options.show_hidden
        self.rerender_all(refetch=False)
        return True

    def set_is_hidden_file(self, is_hidden_file: Callable[[str, object | None], bool]) -> bool:
        if self._refuse_if_modified("change is_hidden_file"):
            return False
        self.config.view_options.is_hidden_file = is_hidden_file
        self.rerender_all(refetch=False)
        return True

    def set_columns(self, columns: list[str]) -> bool:
        if self._refuse_if_modified("change columns"):
            return False
        self.config.columns = list(columns)
        self.rerender_all(refetch=True)
        return True

    def rerender_all(self, *, refetch: bool = True, preserve_undo: bool = False) -> None:
        """Re-render every loaded surface, discarding unsaved edits.

        Hidden surfaces are only flagged; they re-render when next entered.
        """
        visible_ids = self.workspace.visible_surface_ids()
        for surface in self.registry.all_loaded():
            if surface.surface_id in visible_ids:
                self.render_surface_async(surface, refetch=refetch, preserve_undo=preserve_undo)
            else:
                surface.pending_render = {"refetch": refetch, "preserve_undo": preserve_undo}
                surface.modified = False

    def lock_all(self) -> None:
        self.registry.lock_all()

    def unlock_all(self) -> None:
        self.registry.unlock_all()
