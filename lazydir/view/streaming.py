"""Incremental population of a surface from an adapter listing stream.

The listing is pumped one chunk per loop turn. When a listing runs long,
interim renders show what has arrived so far; the final render always
reflects the complete listing.
"""

from __future__ import annotations

from collections.abc import Callable

from ..adapters.base import ListingChunk, ListingStream
from ..errors import AdapterError, LazydirError, UrlResolutionError
from ..loading import LoadingIndicator
from ..model.cache import EntryCache
from ..runtime.config import LazydirConfig
from ..runtime.event_loop import EventLoop
from .rendering import SurfaceRenderer
from .surface import NO_UNDO, Surface

RenderCallback = Callable[[LazydirError | None], None]


class StreamingPopulator:
    """Drive ``adapter.list`` streams into the cache and the surface."""

    def __init__(
        self,
        *,
        loop: EventLoop,
        cache: EntryCache,
        renderer: SurfaceRenderer,
        loading: LoadingIndicator,
        config: LazydirConfig,
        is_locked: Callable[[], bool],
    ) -> None:
        self.loop = loop
        self.cache = cache
        self.renderer = renderer
        self.loading = loading
        self.config = config
        self.is_locked = is_locked
        self._streams: dict[int, ListingStream] = {}
        # Completion callbacks waiting on the in-flight listing of each surface.
        self._waiting: dict[int, list[RenderCallback]] = {}

    def cancel(self, surface: Surface) -> None:
        """Abandon an in-flight listing for ``surface`` and drop its callbacks."""
        self._waiting.pop(surface.surface_id, None)
        stream = self._streams.pop(surface.surface_id, None)
        if stream is not None:
            stream.close()
            self.cache.abort_update_url(surface.url)
        self.loading.set_loading(surface, False)

    def render_surface_async(
        self,
        surface: Surface,
        *,
        preserve_undo: bool = False,
        refetch: bool = True,
        callback: RenderCallback | None = None,
    ) -> None:
        """Fetch (unless ``refetch`` is false) and render ``surface``.

        ``callback`` receives ``None`` on success or the error. A listing
        overtaken by a newer refetch hands its callbacks to the newer one, so
        every caller hears about the final result. With no callback waiting,
        errors are raised out of the loop turn that reports them.
        """
        callbacks = [callback] if callback is not None else []
        try:
            resolved = self.renderer.resolve(surface)
        except UrlResolutionError as exc:
            preserve = False
            surface.undo_levels = NO_UNDO
            self.loop.call_soon(self._handle_error, surface, exc, preserve, callbacks)
            return

        adapter = resolved.adapter
        preserve = preserve_undo and adapter.preserves_undo
        if not preserve:
            # Suspend history so undo can never return to a blank surface.
            surface.undo_levels = NO_UNDO
        url = surface.url
        if refetch:
            callbacks = self._waiting.pop(surface.surface_id, []) + callbacks
            self.cancel(surface)
        started = self.loop.time()
        seek_found = False
        first = True
        surface.modifiable = False
        self.loading.set_loading(surface, True)

        def finish(done: list[RenderCallback]) -> None:
            if not surface.valid:
                return
            self.loading.set_loading(surface, False)
            self.renderer.render(surface, jump=True)
            if not preserve:
                surface.undo_levels = self.config.undo_levels
            surface.modifiable = not self.is_locked() and adapter.is_modifiable(surface)
            for cb in done:
                cb(None)

        if not refetch:
            self.loop.call_soon(finish, callbacks)
            return

        stream = adapter.list(url, resolved.column_defs)
        self._streams[surface.surface_id] = stream
        self._waiting[surface.surface_id] = callbacks
        self.cache.begin_update_url(url)

        def interim(jump_first: bool) -> None:
            nonlocal seek_found
            if not surface.valid:
                return
            seek_found = self.renderer.render(surface, jump=not seek_found, jump_first=jump_first) or seek_found

        def pump() -> None:
            nonlocal started, first
            if self._streams.get(surface.surface_id) is not stream:
                return
            if not surface.valid:
                self.cancel(surface)
                return
            try:
                chunk: ListingChunk | None = next(stream)
            except StopIteration:
                chunk = None
            except AdapterError as exc:
                self._streams.pop(surface.surface_id, None)
                waiting = self._waiting.pop(surface.surface_id, [])
                self.cache.abort_update_url(url)
                self._handle_error(surface, exc, preserve, waiting)
                return
            self.loading.set_loading(surface, False)
            if chunk is not None:
                self.cache.store_listed(url, chunk.entries)
            if chunk is not None and chunk.has_more:
                now = self.loop.time()
                if now - started > self.config.partial_render_seconds:
                    started = now
                    self.loop.call_soon(interim, first)
                first = False
                self.loop.call_soon(pump)
                return
            self._streams.pop(surface.surface_id, None)
            waiting = self._waiting.pop(surface.surface_id, [])
            self.cache.end_update_url(url)
            finish(waiting)

        self.loop.call_soon(pump)

    def _handle_error(
        self,
        surface: Surface,
        error: LazydirError,
        preserve_undo: bool,
        callbacks: list[RenderCallback],
    ) -> None:
        self.loading.set_loading(surface, False)
        if not preserve_undo:
            surface.undo_levels = self.config.undo_levels
        self.renderer.render_error(surface, str(error))
        if not callbacks:
            raise error
        for cb in callbacks:
            cb(error)
