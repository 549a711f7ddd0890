"""
OperationQueue - per-connection serialization of transport operations.

File-transfer control channels are not reentrant: a second command sent
before the first response is consumed corrupts the stream. Each
connection therefore gets one worker task that pulls operations off an
asyncio.Queue and runs them strictly one at a time, in order.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

from hostlink.errors import QueueClosedError

logger = logging.getLogger(__name__)

T = TypeVar("T")

Operation = Callable[[], Awaitable[T]]

_STOP = object()


class OperationQueue:
    """
    FIFO executor with a single worker.

    Flow:
    1. enqueue() - Put (operation, future) on the channel and await the future
    2. _run() - Worker pops items in order, awaits each operation, settles its future
    3. close() - Reject anything not yet started and stop the worker
    """

    def __init__(self, name: str = ""):
        self.name = name
        self._channel: asyncio.Queue = asyncio.Queue()
        self._worker: Optional[asyncio.Task] = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        """Operations queued but not yet started."""
        return self._channel.qsize()

    async def enqueue(self, operation: Operation[T]) -> T:
        """
        Run ``operation`` after every previously enqueued one has settled.

        Returns the operation's result, or raises its exception unchanged.
        A failure never prevents later operations from running.

        Raises:
            QueueClosedError: If the queue was closed, or closed before the
                operation started.
        """
        if self._closed:
            raise QueueClosedError(f"Operation queue {self.name!r} is closed")

        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._channel.put_nowait((operation, future))
        self._ensure_worker()
        return await future

    def _ensure_worker(self) -> None:
        if self._worker is None or self._worker.done():
            self._worker = asyncio.get_running_loop().create_task(
                self._run(), name=f"opqueue-{self.name}"
            )

    async def _run(self) -> None:
        while True:
            item = await self._channel.get()
            if item is _STOP:
                return
            operation, future = item
            # Caller gave up before the operation started
            if future.done():
                continue
            try:
                result = await operation()
            except asyncio.CancelledError:
                if not future.done():
                    future.cancel()
                raise
            except Exception as e:
                if not future.done():
                    future.set_exception(e)
            else:
                if not future.done():
                    future.set_result(result)

    def _drain(self) -> int:
        rejected = 0
        while True:
            try:
                item = self._channel.get_nowait()
            except asyncio.QueueEmpty:
                return rejected
            if item is _STOP:
                continue
            _, future = item
            if not future.done():
                future.set_exception(
                    QueueClosedError(f"Operation queue {self.name!r} closed before operation ran")
                )
                rejected += 1

    async def close(self, wait: bool = False) -> None:
        """
        Stop accepting work and reject operations that have not started.

        The operation currently running (if any) is not interrupted. With
        ``wait`` the call returns only once it has settled.
        """
        if self._closed:
            return
        self._closed = True
        rejected = self._drain()
        if rejected:
            logger.debug(f"Queue {self.name}: rejected {rejected} pending operations")

        worker = self._worker
        if worker is None or worker.done():
            return
        self._channel.put_nowait(_STOP)
        if wait:
            await asyncio.shield(worker)

    def status(self) -> dict:
        return {
            "name": self.name,
            "pending": self.pending,
            "closed": self._closed,
            "running": self._worker is not None and not self._worker.done(),
        }
