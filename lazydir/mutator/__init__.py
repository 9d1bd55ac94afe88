"""Applying pending actions: progress view and sequential batch executor."""

from __future__ import annotations

from .executor import BatchExecutor
from .progress import ProgressController

__all__ = ["BatchExecutor", "ProgressController"]
