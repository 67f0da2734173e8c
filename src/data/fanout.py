"""Helpers for running collaborator calls on a shared thread pool."""

from __future__ import annotations

from concurrent.futures import Executor, Future, as_completed
import logging
import threading
from typing import Any, Callable

logger = logging.getLogger(__name__)


def run_concurrently(executor: Executor, *calls: Callable[[], Any]) -> list[Any]:
    """Run calls concurrently and return their results in call order.

    All-or-nothing: the first call to fail cancels the ones not yet started and
    its exception is raised.
    """
    futures = [executor.submit(call) for call in calls]
    try:
        for future in as_completed(futures):
            future.result()
    except BaseException:
        for future in futures:
            future.cancel()
        raise
    return [future.result() for future in futures]


def fire_and_forget(executor: Executor, description: str, func: Callable[..., Any], *args: Any) -> Future:
    """Submit a detached task; its failure is logged and never reaches the caller."""
    future = executor.submit(func, *args)

    def _log_failure(done: Future) -> None:
        if done.cancelled():
            return
        exc = done.exception()
        if exc is not None:
            logger.warning("Background task '%s' failed: %s", description, exc, exc_info=exc)

    future.add_done_callback(_log_failure)
    return future


class DeferredCall:
    """A call issued on its own timer thread after a delay, unless abandoned first.

    The wait holds no pool worker, so a long delay never starves other
    invocations. An abandoned call never reaches the collaborator.
    """

    def __init__(self, delay_seconds: float, func: Callable[[], Any]) -> None:
        self._func = func
        self._future: Future = Future()
        self._timer = threading.Timer(max(delay_seconds, 0.0), self._run)
        self._timer.daemon = True
        self._timer.start()

    def _run(self) -> None:
        if not self._future.set_running_or_notify_cancel():
            return
        try:
            result = self._func()
        except BaseException as exc:
            self._future.set_exception(exc)
        else:
            self._future.set_result(result)

    def abandon(self) -> None:
        self._timer.cancel()
        self._future.cancel()

    def result(self, timeout: float | None = None) -> Any:
        return self._future.result(timeout=timeout)


__all__ = ["DeferredCall", "fire_and_forget", "run_concurrently"]
