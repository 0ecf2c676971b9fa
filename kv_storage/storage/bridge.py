"""Synchronous access to async backends through a dedicated event loop."""

from __future__ import annotations

import asyncio
import logging
import threading
from concurrent.futures import CancelledError
from typing import TYPE_CHECKING, Any, TypeVar

from kv_storage.errors import BackendError


if TYPE_CHECKING:
    from collections.abc import Coroutine
    from concurrent.futures import Future


_T = TypeVar("_T")

logger = logging.getLogger(__name__)


class AsyncLoopBridge:
    """Run backend coroutines on an event loop owned by a background thread.

    Callers block until the coroutine finishes; its result or exception is
    handed back unchanged. Closing the bridge cancels coroutines still in
    flight, and their callers get a ``BackendError``.
    """

    def __init__(self, name: str = "kv-storage-bridge") -> None:
        super().__init__()
        self._loop_ready = threading.Event()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._closed = False
        # guards the closed check together with submission to the loop
        self._submit_lock = threading.Lock()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)
        self._thread.start()
        _ = self._loop_ready.wait()
        logger.debug("started async bridge thread %s", name)

    def _run(self) -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        self._loop = loop
        self._loop_ready.set()
        try:
            loop.run_forever()
        finally:
            try:
                _cancel_pending_tasks(loop)
                loop.run_until_complete(loop.shutdown_asyncgens())
            finally:
                loop.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def run(self, coroutine: Coroutine[Any, Any, _T]) -> _T:
        """Run ``coroutine`` on the bridge loop and wait for its result.

        Raises
        ------
        BackendError
            When the bridge is closed, or is closed before ``coroutine``
            finishes.
        """
        with self._submit_lock:
            if self._loop is None or self._closed:
                coroutine.close()
                msg = "storage async bridge is not running"
                raise BackendError(msg)
            try:
                future: Future[_T] = asyncio.run_coroutine_threadsafe(coroutine, self._loop)
            except RuntimeError as error:
                coroutine.close()
                msg = "storage async bridge is not running"
                raise BackendError(msg) from error
        try:
            return future.result()
        except CancelledError as error:
            msg = "storage async bridge closed before the backend call finished"
            raise BackendError(msg) from error

    def close(self) -> None:
        """Cancel pending calls, stop the loop and join its thread.

        Safe to call more than once.
        """
        with self._submit_lock:
            if self._loop is None or self._closed:
                return
            self._closed = True
            _ = self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout=5)
        logger.debug("stopped async bridge thread %s", self._thread.name)


def _cancel_pending_tasks(loop: asyncio.AbstractEventLoop) -> None:
    # callbacks queued before stop may start new tasks, so drain until none remain
    while tasks := asyncio.all_tasks(loop):
        for task in tasks:
            _ = task.cancel()
        _ = loop.run_until_complete(asyncio.gather(*tasks, return_exceptions=True))
