"""Fire-and-forget dispatch of delivery tasks on a bounded worker pool."""

from __future__ import annotations

import concurrent.futures as cf
import threading
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc


class BoundedDispatcher:
    """Run tasks in the background without ever blocking the submitter.

    At most ``max_in_flight`` tasks are pending at once; further submissions
    are refused rather than queued. No result channel is exposed, so callers
    cannot wait on a task. Once the interpreter starts shutting down the pool
    stops accepting work and tasks run inline instead; the task's own timeout
    bounds that delay.

    Parameters
    ----------
    max_in_flight
        Upper bound on pending tasks and on worker threads.

    """

    def __init__(self, max_in_flight: int) -> None:
        """Create the worker pool and its admission slots."""
        if max_in_flight < 1:
            msg = f"max_in_flight must be positive, got: {max_in_flight}"
            raise ValueError(msg)
        self._slots = threading.BoundedSemaphore(max_in_flight)
        self._executor = cf.ThreadPoolExecutor(
            max_workers=max_in_flight, thread_name_prefix="obol-delivery"
        )

    def _run(self, task: cabc.Callable[[], None]) -> None:
        try:
            task()
        finally:
            self._slots.release()

    def submit(self, task: cabc.Callable[[], None]) -> bool:
        """Schedule ``task`` and return immediately.

        Returns
        -------
        bool
            ``False`` when every slot is taken and the task was refused.

        """
        if not self._slots.acquire(blocking=False):
            return False
        try:
            self._executor.submit(self._run, task)
        except RuntimeError:
            # Pool closed or interpreter exiting.
            self._run(task)
        return True

    def close(self) -> None:
        """Stop accepting work without waiting for pending tasks."""
        self._executor.shutdown(wait=False, cancel_futures=False)
