"""
Strategies for handing newly loaded certificates over to their consumer.

The poll loop ('CertWatcher') drives all of them the same way:

    prepare()   - a change was detected, the new certificate is about to be read
    deliver()   - the new certificate has been read
    completion() / finished()
                - the consumer side can end on its own, the poll loop watches for it
    close()     - the poll loop is terminating
"""

import asyncio
import logging
import sys
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Awaitable, Callable, Optional, TextIO

from certwatch import metrics
from certwatch.certs.loader import LoadedCertificate
from certwatch.certs.records import X509KeyPair, encode_record
from certwatch.exceptions import ConsumerFailure, ConsumerStalled, ShutdownRequested

logger = logging.getLogger(__name__)

Consumer = Callable[[LoadedCertificate], Awaitable[None]]


class Delivery(ABC):
    def bind(self, shutdown: asyncio.Event) -> None:
        """
        Called once by the poll loop before it starts. The event is set when the outer
        lifetime of the poll loop ends.
        """

    async def prepare(self) -> bool:
        """
        Returns False when the poll loop should terminate without an error instead
        of loading the new certificate.
        """
        return True

    @abstractmethod
    async def deliver(self, cert: LoadedCertificate) -> None:
        raise NotImplementedError()

    def completion(self) -> "Optional[asyncio.Future[Any]]":
        return None

    def finished(self) -> None:
        """
        Called when the future returned from 'completion()' is done. Raises the error
        the poll loop should terminate with, returns to terminate without an error.
        """

    async def close(self) -> None:
        pass


class InvokerState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    DRAINING = "draining"
    TERMINATED = "terminated"


class _Invocation:
    def __init__(self, number: int, cert: LoadedCertificate, task: "asyncio.Task[None]") -> None:
        self.number = number
        self.certificate = cert
        self.task = task

    def __str__(self) -> str:
        return f"#{self.number}"


class PreemptiveInvoker(Delivery):
    """
    Runs the consumer with the current certificate and replaces the running invocation
    whenever a newer certificate shows up.

    At most one invocation is alive at any time. A replaced invocation is cancelled and
    the invoker waits until it is really gone before the new certificate is even read.
    Without a drain timeout the wait is unbounded, so a consumer ignoring cancellation
    stalls the rotation.
    """

    def __init__(self, consumer: Consumer, drain_timeout: Optional[float] = None) -> None:
        self._consumer = consumer
        self._drain_timeout = drain_timeout
        self._shutdown: Optional[asyncio.Event] = None
        self._current: Optional[_Invocation] = None
        self._counter = 0
        self._state = InvokerState.IDLE

    @property
    def state(self) -> InvokerState:
        return self._state

    @property
    def invocations(self) -> int:
        return self._counter

    def bind(self, shutdown: asyncio.Event) -> None:
        self._shutdown = shutdown

    def _outer_closed(self) -> bool:
        return self._shutdown is not None and self._shutdown.is_set()

    async def _invoke(self, cert: LoadedCertificate) -> None:
        await self._consumer(cert)

    async def _wait_gone(self, inv: _Invocation) -> bool:
        done, _ = await asyncio.wait({inv.task}, timeout=self._drain_timeout)
        if done:
            self._current = None
            return True
        return False

    async def prepare(self) -> bool:
        inv = self._current
        if inv is None:
            return True

        if not inv.task.cancel():
            # it has already finished on its own, that is not a preemption
            self.finished()
            return False

        self._state = InvokerState.DRAINING
        logger.info(f"Preempting consumer invocation {inv}, a newer certificate is available")
        if not await self._wait_gone(inv):
            self._state = InvokerState.TERMINATED
            raise ConsumerStalled(
                f"consumer invocation {inv} did not finish within {self._drain_timeout}s after it was preempted"
            )

        task = inv.task
        if task.cancelled():
            metrics.report_invocation_finished(preempted=True)
            if self._outer_closed():
                self._state = InvokerState.TERMINATED
                raise ShutdownRequested(f"shutdown requested while replacing consumer invocation {inv}")
            logger.debug(f"Consumer invocation {inv} acknowledged the preemption")
            return True

        metrics.report_invocation_finished(preempted=False)
        self._state = InvokerState.TERMINATED
        exc = task.exception()
        if exc is not None:
            logger.error(f"Consumer invocation {inv} failed while being preempted: {exc}")
            raise exc
        logger.warning(f"Consumer invocation {inv} ignored the preemption and returned, terminating")
        return False

    async def deliver(self, cert: LoadedCertificate) -> None:
        assert self._current is None, "a consumer invocation is still alive"

        self._counter += 1
        task = asyncio.create_task(self._invoke(cert), name=f"certwatch-invocation-{self._counter}")
        self._current = _Invocation(self._counter, cert, task)
        self._state = InvokerState.RUNNING
        metrics.report_invocation_started()
        logger.info(f"Started consumer invocation {self._current} with {cert}")

    def completion(self) -> "Optional[asyncio.Future[Any]]":
        if self._current is None:
            return None
        return self._current.task

    def finished(self) -> None:
        inv = self._current
        assert inv is not None and inv.task.done()

        self._current = None
        self._state = InvokerState.TERMINATED
        metrics.report_invocation_finished(preempted=False)

        if inv.task.cancelled():
            raise ConsumerFailure(f"consumer invocation {inv} was cancelled, but not by the certificate watcher")
        exc = inv.task.exception()
        if exc is not None:
            logger.error(f"Consumer invocation {inv} failed: {exc}")
            raise exc
        logger.info(f"Consumer invocation {inv} returned on its own, terminating")

    async def close(self) -> None:
        self._state = InvokerState.TERMINATED
        inv = self._current
        if inv is None:
            return

        if not inv.task.done():
            logger.info(f"Cancelling consumer invocation {inv}, the certificate watcher is terminating")
            inv.task.cancel()
            if not await self._wait_gone(inv):
                logger.error(f"Consumer invocation {inv} is still running after being cancelled, abandoning it")
                return
        self._current = None
        metrics.report_invocation_finished(preempted=False)

        # collect the result, so it is not reported as never retrieved
        if not inv.task.cancelled() and inv.task.exception() is not None:
            logger.error(f"Consumer invocation {inv} failed during shutdown: {inv.task.exception()}")


_END = object()


class QueueDelivery(Delivery):
    """
    Emits every new certificate to a queue and waits until it is taken by the reader.
    The end of the poll loop is signalled by 'get()' returning None.
    """

    def __init__(self) -> None:
        self._queue: "asyncio.Queue[Any]" = asyncio.Queue()

    async def deliver(self, cert: LoadedCertificate) -> None:
        await self._queue.put(cert)
        await self._queue.join()

    async def get(self) -> Optional[LoadedCertificate]:
        item = await self._queue.get()
        self._queue.task_done()
        if item is _END:
            return None
        return item

    async def close(self) -> None:
        self._queue.put_nowait(_END)


class RecordWriter(Delivery):
    """
    Writes every new certificate to a text stream as a JSON key-pair record.
    """

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self._stream = stream if stream is not None else sys.stdout

    def _write(self, record: str) -> None:
        self._stream.write(record)
        self._stream.flush()

    async def deliver(self, cert: LoadedCertificate) -> None:
        record = encode_record(X509KeyPair(cert.cert_pem, cert.key_pem))
        await asyncio.to_thread(self._write, record)
        logger.info(f"Emitted {cert}")
