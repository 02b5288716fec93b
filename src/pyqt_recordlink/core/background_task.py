"""Background tasks for collaborator calls, with cancellation and cleanup."""

import logging
from typing import Callable, Any, Optional, Tuple, List
from PyQt6.QtCore import QThread, pyqtSignal

logger = logging.getLogger(__name__)

# --- Module-level constants ---
CLEANUP_WAIT_MS = 200     # Wait time per task during teardown


class BackgroundTask(QThread):
    """
    Runs one collaborator call off the GUI thread.

    Usage:
        task = BackgroundTask(target=backend.query, args=(collection, filters, secret, text))
        task.result_ready.connect(on_success)
        task.error_occurred.connect(on_error)  # Receives Exception, not str
        task.start()

        # Later:
        task.cancel()  # Signals won't emit after this
    """

    result_ready = pyqtSignal(object)
    error_occurred = pyqtSignal(Exception)  # Full exception, caller decides

    def __init__(
        self,
        target: Callable[..., Any],
        args: Tuple = (),
        kwargs: dict = None,
        parent=None
    ):
        super().__init__(parent)
        self._target = target
        self._args = args
        self._kwargs = kwargs or {}
        self.cancelled = False

    def run(self):
        """Execute target in background, respecting cancellation."""
        try:
            result = self._target(*self._args, **self._kwargs)
            if not self.cancelled:
                self.result_ready.emit(result)
        except Exception as e:
            if not self.cancelled:
                self.error_occurred.emit(e)  # Full exception object

    def cancel(self):
        """Cancel task; signals won't emit after this."""
        self.cancelled = True


class BackgroundTaskPool:
    """
    Runs any number of overlapping background tasks.

    Unlike a single-slot manager, starting a task never cancels the previous
    one: search replies are allowed to overlap and callers discard stale
    results themselves. The pool only keeps each task referenced until it
    finishes and cancels whatever is still running on cleanup().

    Usage:
        self._tasks = BackgroundTaskPool()

        self._tasks.run(
            target=issuer.issue_search_secret,
            args=(collection,),
            on_success=self._on_secret,
            on_error=self._on_secret_error,
        )

        def teardown(self):
            self._tasks.cleanup()
    """

    def __init__(self):
        self._tasks: List[BackgroundTask] = []

    @property
    def active_count(self) -> int:
        return len(self._tasks)

    def run(
        self,
        target: Callable[..., Any],
        args: Tuple = (),
        kwargs: dict = None,
        on_success: Callable[[Any], None] = None,
        on_error: Callable[[Exception], None] = None,
    ) -> BackgroundTask:
        """
        Start a background task.

        Args:
            target: Function to execute in background
            args: Positional arguments for target
            kwargs: Keyword arguments for target
            on_success: Callback for successful result (GUI thread)
            on_error: Callback for error (receives Exception, not str)

        Returns:
            The started BackgroundTask
        """
        task = BackgroundTask(target=target, args=args, kwargs=kwargs)
        if on_success:
            task.result_ready.connect(on_success)
        if on_error:
            task.error_occurred.connect(on_error)
        task.finished.connect(lambda: self._release(task))

        self._tasks.append(task)
        task.start()
        return task

    def _release(self, task: BackgroundTask) -> None:
        if task in self._tasks:
            self._tasks.remove(task)

    def cleanup(self):
        """Cancel and wait for running tasks. Call on teardown."""
        for task in list(self._tasks):
            task.cancel()
            if task.isRunning():
                task.wait(CLEANUP_WAIT_MS)
        self._tasks.clear()


class InlineTaskRunner:
    """
    Runs the target synchronously and fires the callbacks in the same turn.

    Same call shape as BackgroundTaskPool.run(); for hosts without a Qt event
    loop and for deterministic tests.
    """

    def run(
        self,
        target: Callable[..., Any],
        args: Tuple = (),
        kwargs: dict = None,
        on_success: Callable[[Any], None] = None,
        on_error: Callable[[Exception], None] = None,
    ) -> None:
        try:
            result = target(*args, **(kwargs or {}))
        except Exception as e:
            logger.debug(f"Inline task {getattr(target, '__name__', target)} failed: {e}")
            if on_error:
                on_error(e)
            return
        if on_success:
            on_success(result)

    def cleanup(self):
        pass
