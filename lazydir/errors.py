"""Exception hierarchy for lazydir."""

from __future__ import annotations


class LazydirError(Exception):
    """Base class for lazydir failures."""


class UrlResolutionError(LazydirError):
    """Container URL cannot be parsed or no adapter claims its scheme."""


class AdapterError(LazydirError):
    """Backing store reported a listing or action failure."""


class SurfaceLockedError(LazydirError):
    """A write was attempted on a surface that is not modifiable."""


class BatchCancelled(LazydirError):
    """The user cancelled a batch before every action was dispatched."""
