import asyncio
import logging
from enum import Enum, auto
from typing import Any, Awaitable, Optional, Set, TypeVar

from certwatch import metrics
from certwatch.certs.loader import load
from certwatch.certs.probe import CertificateSource, TimestampPair, changed, probe
from certwatch.constants import DEFAULT_INTERVAL_SEC
from certwatch.exceptions import ShutdownRequested

from .delivery import Delivery

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _Wake(Enum):
    TICK = auto()
    STOP = auto()
    COMPLETED = auto()


class CertWatcher:
    """
    Polls the certificate directory in fixed intervals and hands every changed
    certificate over to the delivery strategy.

    'run()' returns only when the consumer side finished on its own without an error.
    In every other case it raises: the consumer's own exception, 'ProbeFailure' or 'LoadFailure'
    when the certificate can't be read (never retried), or 'ShutdownRequested' after 'stop()'.
    """

    def __init__(
        self,
        source: CertificateSource,
        delivery: Delivery,
        interval: float = DEFAULT_INTERVAL_SEC,
        wakeup: Optional[asyncio.Event] = None,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"polling interval must be positive, got {interval}")

        self._source = source
        self._delivery = delivery
        self._interval = interval
        self._wakeup = wakeup
        self._stop_event = asyncio.Event()
        self._next_tick: Optional[float] = None
        # only ever touched by the task running 'run()'
        self._last_seen: Optional[TimestampPair] = None

    @property
    def source(self) -> CertificateSource:
        return self._source

    @property
    def last_seen(self) -> Optional[TimestampPair]:
        return self._last_seen

    def stop(self) -> None:
        if not self._stop_event.is_set():
            logger.info(f"Stopping certificate watcher for '{self._source}'")
        self._stop_event.set()

    async def run(self) -> None:
        self._delivery.bind(self._stop_event)
        self._next_tick = asyncio.get_running_loop().time()
        logger.info(f"Watching certificate files in '{self._source}' every {self._interval}s")

        try:
            while True:
                if self._stop_event.is_set():
                    raise ShutdownRequested("shutdown requested")
                if not await self._poll():
                    return

                wake = await self._wait_for_tick()
                if wake is _Wake.STOP:
                    raise ShutdownRequested("shutdown requested")
                if wake is _Wake.COMPLETED:
                    self._delivery.finished()
                    return
        finally:
            await self._delivery.close()
            logger.debug(f"Certificate watcher for '{self._source}' terminated")

    async def _poll(self) -> bool:
        metrics.report_poll()
        current = await asyncio.to_thread(probe, self._source)
        if not changed(self._last_seen, current):
            logger.debug(f"Certificate files in '{self._source}' are unchanged")
            return True

        if self._last_seen is None:
            logger.info(f"Loading initial certificate from '{self._source}'")
        else:
            logger.info(f"Change of certificate files in '{self._source}' detected")

        if not await self._delivery.prepare():
            return False

        # read only after the previous consumer is gone, so it is never stale
        cert = await load(self._source)
        metrics.report_load()
        self._last_seen = current

        if self._stop_event.is_set():
            raise ShutdownRequested("shutdown requested before the new certificate was delivered")
        await self._until_stopped(self._delivery.deliver(cert))
        return True

    def _tick_delay(self) -> float:
        now = asyncio.get_running_loop().time()
        if self._next_tick is None:
            self._next_tick = now
        # ticks missed while busy are dropped, not replayed
        if self._next_tick <= now:
            missed = int((now - self._next_tick) // self._interval) + 1
            self._next_tick += missed * self._interval
        return self._next_tick - now

    async def _wait_for_tick(self) -> _Wake:
        timer = asyncio.create_task(asyncio.sleep(self._tick_delay()))
        stop = asyncio.create_task(self._stop_event.wait())
        helpers: Set["asyncio.Future[Any]"] = {timer, stop}

        wakeup: "Optional[asyncio.Task[Any]]" = None
        if self._wakeup is not None:
            wakeup = asyncio.create_task(self._wakeup.wait())
            helpers.add(wakeup)

        completion = self._delivery.completion()
        waiting = set(helpers)
        if completion is not None:
            waiting.add(completion)

        try:
            await asyncio.wait(waiting, return_when=asyncio.FIRST_COMPLETED)
        finally:
            # never cancel the completion future, it belongs to the delivery
            for helper in helpers:
                helper.cancel()

        # outer shutdown has priority over everything else
        if self._stop_event.is_set():
            return _Wake.STOP
        if completion is not None and completion.done():
            return _Wake.COMPLETED
        if wakeup is not None and wakeup.done() and self._wakeup is not None:
            logger.debug(f"Woken up by a file system event in '{self._source}'")
            self._wakeup.clear()
        return _Wake.TICK

    async def _until_stopped(self, aw: Awaitable[T]) -> T:
        task = asyncio.ensure_future(aw)
        stop = asyncio.create_task(self._stop_event.wait())
        try:
            await asyncio.wait({task, stop}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            stop.cancel()
            if not task.done():
                task.cancel()

        if task.done() and not task.cancelled():
            return task.result()
        raise ShutdownRequested("shutdown requested while delivering a new certificate")
