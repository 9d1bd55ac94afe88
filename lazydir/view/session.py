"""Session registry and lifecycle (garbage collection) for listing surfaces."""

from __future__ import annotations

from collections.abc import Callable

from ..adapters import AdapterRegistry
from ..model.cache import EntryCache
from ..runtime.event_loop import EventLoop, TimerHandle
from .surface import Surface, Workspace


class SessionRegistry:
    """Live set of listing surfaces, in registration order."""

    def __init__(self, workspace: Workspace, adapters: AdapterRegistry) -> None:
        self.workspace = workspace
        self.adapters = adapters
        self._surfaces: dict[int, Surface] = {}
        self.locked = False

    def __contains__(self, surface: object) -> bool:
        return isinstance(surface, Surface) and self._surfaces.get(surface.surface_id) is surface

    def register(self, surface: Surface) -> None:
        self._surfaces.setdefault(surface.surface_id, surface)

    def unregister(self, surface: Surface) -> None:
        self._surfaces.pop(surface.surface_id, None)

    def all_loaded(self) -> list[Surface]:
        return [surface for surface in self._surfaces.values() if surface.valid and surface.loaded]

    def any_modified(self) -> bool:
        return any(surface.modified for surface in self.all_loaded())

    def lock_all(self) -> None:
        """Make every loaded surface read-only until ``unlock_all``."""
        self.locked = True
        for surface in self.all_loaded():
            surface.modifiable = False

    def unlock_all(self) -> None:
        """Restore each surface's editability from its adapter."""
        self.locked = False
        for surface in self.all_loaded():
            adapter = self.adapters.get_adapter(surface.url)
            if adapter is not None:
                surface.modifiable = adapter.is_modifiable(surface)

    def visible_hidden(self) -> tuple[list[Surface], list[Surface]] | None:
        """Split loaded surfaces into ``(visible, hidden)``.

        Returns ``None`` when any surface is modified.
        """
        surfaces = self.all_loaded()
        if any(surface.modified for surface in surfaces):
            return None
        visible_ids = self.workspace.visible_surface_ids()
        visible = [surface for surface in surfaces if surface.surface_id in visible_ids]
        hidden = [surface for surface in surfaces if surface.surface_id not in visible_ids]
        return visible, hidden


class LifecycleManager:
    """Delete hidden, unmodified surfaces once nothing has been visible for a while.

    A hide event waits ``settle_seconds`` for window changes to settle; if no
    surface is visible then, deletion is attempted after ``grace_seconds``.
    Each stage re-checks the registry since other work may have run between.
    """

    def __init__(
        self,
        *,
        loop: EventLoop,
        workspace: Workspace,
        registry: SessionRegistry,
        cache: EntryCache,
        settle_seconds: float,
        grace_seconds: float,
    ) -> None:
        self.loop = loop
        self.workspace = workspace
        self.registry = registry
        self.cache = cache
        self.settle_seconds = settle_seconds
        self.grace_seconds = grace_seconds
        self._handles: list[TimerHandle] = []

    def _schedule(self, delay: float, callback: Callable[[], object]) -> None:
        self._handles = [handle for handle in self._handles if not handle.cancelled]
        self._handles.append(self.loop.call_later(delay, callback))

    def on_hidden(self, surface: Surface) -> None:
        self._schedule(self.settle_seconds, self._after_settle)

    def _after_settle(self) -> None:
        split = self.registry.visible_hidden()
        if split is not None and not split[0]:
            self._schedule(self.grace_seconds, self.delete_hidden_surfaces)

    def delete_hidden_surfaces(self) -> bool:
        """Delete every hidden surface and clear the cache; return whether it ran."""
        split = self.registry.visible_hidden()
        if split is None:
            return False
        visible, hidden = split
        if visible:
            return False
        for surface in hidden:
            self.workspace.delete_surface(surface, force=True)
        self.cache.clear_everything()
        return True

    def cancel_pending(self) -> None:
        for handle in self._handles:
            handle.cancel()
        self._handles = []
