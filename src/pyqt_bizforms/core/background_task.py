"""Worker threads for submit handlers and fetches.

Only the newest task started by a manager may deliver its outcome: starting
another task, or closing the owning widget, makes earlier results stale.
A stale task still reports that it finished, so owners can leave their busy
state.
"""

import asyncio
import inspect
import logging
from typing import Any, Callable, List, Optional, Sequence

from PyQt6.QtCore import QThread, pyqtSignal
from PyQt6.QtWidgets import QPushButton

from .fetch_generation import FetchGeneration

logger = logging.getLogger(__name__)

SUPERSEDED_WAIT_MS = 100
SHUTDOWN_WAIT_MS = 200


def call_maybe_async(target: Callable[..., Any], *args, **kwargs) -> Any:
    """Call target; if it returns an awaitable, run it to completion on a fresh loop."""
    result = target(*args, **kwargs)
    if inspect.isawaitable(result):
        async def _await():
            return await result
        return asyncio.run(_await())
    return result


class BackgroundTask(QThread):
    """
    Runs one callable (plain or coroutine function) off the GUI thread.

    Both signals carry the generation token the task was started with, so
    the receiver can drop outcomes that arrive after a newer task started.
    """

    succeeded = pyqtSignal(int, object)
    failed = pyqtSignal(int, Exception)

    def __init__(self, token: int, target: Callable[..., Any], args: Sequence[Any] = (), parent=None):
        super().__init__(parent)
        self.token = token
        self._target = target
        self._args = tuple(args)

    def run(self):
        try:
            result = call_maybe_async(self._target, *self._args)
        except Exception as e:
            self.failed.emit(self.token, e)
            return
        self.succeeded.emit(self.token, result)


class BackgroundTaskManager:
    """
    One-task-at-a-time runner owned by a widget.

    Example:
        self._tasks = BackgroundTaskManager()
        self._tasks.run(self.on_submit, (payload,), on_success=self._saved,
                        on_error=self._failed, button=self.submit_button, busy_text="Submitting...")

        def closeEvent(self, event):
            self._tasks.cleanup()
            super().closeEvent(event)
    """

    def __init__(self):
        self._generation = FetchGeneration()
        self._task: Optional[BackgroundTask] = None
        # Started tasks stay referenced until their thread ends
        self._live: List[BackgroundTask] = []

    @property
    def is_running(self) -> bool:
        return self._task is not None and self._task.isRunning()

    def run(
        self,
        target: Callable[..., Any],
        args: Sequence[Any] = (),
        on_success: Optional[Callable[[Any], None]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
        button: Optional[QPushButton] = None,
        busy_text: Optional[str] = None,
        on_finished: Optional[Callable[[], None]] = None,
    ) -> BackgroundTask:
        """
        Start target(*args) on a worker thread.

        A still-running earlier task is left to finish but its outcome is
        discarded. While the task runs, ``button`` is disabled and shows
        ``busy_text``; it is restored whichever way the task ends, unless a
        newer task is running. ``on_finished`` runs for every outcome,
        stale ones included, before on_success or on_error.
        """
        if self.is_running:
            logger.debug("Superseding running background task")
            self._task.wait(SUPERSEDED_WAIT_MS)
        token = self._generation.begin()

        label = button.text() if button is not None else None
        if button is not None:
            button.setEnabled(False)
            button.setText(busy_text or f"{label}...")

        def deliver(task_token: int, callback: Optional[Callable[[Any], None]], outcome: Any) -> None:
            current = self._generation.is_current(task_token)
            if button is not None and (current or not self.is_running):
                button.setEnabled(True)
                button.setText(label)
            if on_finished is not None:
                on_finished()
            if not current:
                logger.debug(f"Dropped outcome of stale background task {task_token}")
                return
            if callback is not None:
                callback(outcome)

        task = BackgroundTask(token, target, args)
        task.succeeded.connect(lambda task_token, result: deliver(task_token, on_success, result))
        task.failed.connect(lambda task_token, error: deliver(task_token, on_error, error))
        task.finished.connect(lambda: self._forget(task))
        self._task = task
        self._live.append(task)
        task.start()
        return task

    def _forget(self, task: BackgroundTask) -> None:
        if task in self._live:
            self._live.remove(task)

    def cleanup(self) -> None:
        """Invalidate outstanding work and give the worker a moment to stop."""
        self._generation.invalidate()
        if self.is_running:
            self._task.wait(SHUTDOWN_WAIT_MS)
        self._task = None
