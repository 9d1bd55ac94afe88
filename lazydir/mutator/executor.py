"""Sequential execution of a batch of pending actions with live progress.

Actions run strictly in order, one per loop turn, so a cancel request
between two actions stops dispatch before the next one. An action already
handed to its adapter always runs to completion. The first failure halts
the batch.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from ..errors import BatchCancelled, LazydirError
from ..model.types import Action
from ..view.controller import ViewController
from .progress import ProgressController

BatchCallback = Callable[[LazydirError | None], None]


class BatchExecutor:
    """Run action batches against their adapters through one controller."""

    def __init__(
        self,
        controller: ViewController,
        *,
        progress_factory: Callable[[], ProgressController] | None = None,
    ) -> None:
        self.controller = controller
        self.loop = controller.loop
        self._progress_factory = progress_factory or self._default_progress
        self.running = False

    def _default_progress(self) -> ProgressController:
        controller = self.controller
        return ProgressController(
            loop=controller.loop,
            workspace=controller.workspace,
            adapters=controller.adapters,
            config=controller.config,
        )

    def process_actions(
        self,
        actions: Sequence[Action],
        callback: BatchCallback | None = None,
    ) -> ProgressController | None:
        """Start executing ``actions``; returns the progress view driving it.

        ``callback`` receives ``None`` on success, ``BatchCancelled`` after a
        cancel, or the first action error. Without a callback, failures are
        raised out of the loop turn that detects them.
        """
        if self.running:
            self.controller.notify("Actions are already being processed", logging.WARNING)
            return None
        self.running = True
        controller = self.controller
        controller.lock_all()
        progress = self._progress_factory()
        pending = list(actions)
        total = len(pending)
        index = 0
        finished = False

        def finish(err: LazydirError | None) -> None:
            nonlocal finished
            if finished:
                return
            finished = True
            self.running = False
            progress.close()
            controller.unlock_all()
            controller.rerender_all(refetch=True, preserve_undo=True)
            if err is not None and not isinstance(err, BatchCancelled):
                controller.notify(f"Error applying actions: {err}", logging.ERROR)
            if callback is not None:
                callback(err)
            elif err is not None and not isinstance(err, BatchCancelled):
                raise err

        def cancel() -> None:
            finish(BatchCancelled("Canceled"))

        def next_action() -> None:
            nonlocal index
            if finished:
                return
            if index >= total:
                finish(None)
                return
            action = pending[index]
            index += 1
            try:
                progress.set_action(action, index, total)
                adapter = controller.adapters.get_adapter_for_action(action)
                adapter.perform_action(action)
            except LazydirError as exc:
                finish(exc)
                return
            if finished:
                return
            self.loop.call_soon(next_action)

        progress.show(cancel=cancel)
        self.loop.call_soon(next_action)
        return progress
