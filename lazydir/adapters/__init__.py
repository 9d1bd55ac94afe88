"""Adapter registry: resolve backing stores by container-URL scheme."""

from __future__ import annotations

from collections.abc import Iterable

from ..errors import UrlResolutionError
from ..model.types import Action
from ..model.url import parse_url
from .base import Adapter, ListingChunk, ListingStream, chunked
from .files import FILES_SCHEME, FilesAdapter, path_for_url, url_for_path
from .memory import MEMORY_SCHEME, MemoryAdapter


class AdapterRegistry:
    """Scheme → adapter mapping, resolved once per operation."""

    def __init__(self, adapters: Iterable[Adapter] = ()) -> None:
        self._by_scheme: dict[str, Adapter] = {}
        for adapter in adapters:
            self.register(adapter)

    def register(self, adapter: Adapter) -> None:
        self._by_scheme[adapter.scheme] = adapter

    @property
    def schemes(self) -> list[str]:
        return list(self._by_scheme)

    def get_adapter(self, url: str) -> Adapter | None:
        scheme, _path = parse_url(url)
        if scheme is None:
            return None
        return self._by_scheme.get(scheme)

    def get_adapter_for_action(self, action: Action) -> Adapter:
        adapter = self.get_adapter(action.primary_url)
        if adapter is None:
            raise UrlResolutionError(f"no adapter for action target '{action.primary_url}'")
        return adapter


def default_registry() -> AdapterRegistry:
    return AdapterRegistry([FilesAdapter(), MemoryAdapter()])


__all__ = [
    "Adapter",
    "AdapterRegistry",
    "FILES_SCHEME",
    "FilesAdapter",
    "ListingChunk",
    "ListingStream",
    "MEMORY_SCHEME",
    "MemoryAdapter",
    "chunked",
    "default_registry",
    "path_for_url",
    "url_for_path",
]
