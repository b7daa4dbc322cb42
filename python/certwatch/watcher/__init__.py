import asyncio
from typing import AsyncIterator, Optional

from certwatch.certs.loader import LoadedCertificate
from certwatch.certs.probe import CertificateSource
from certwatch.constants import DEFAULT_INTERVAL_SEC
from certwatch.exceptions import ShutdownRequested

from .delivery import Consumer, Delivery, InvokerState, PreemptiveInvoker, QueueDelivery, RecordWriter
from .poll import CertWatcher


async def watch_dir(
    source: CertificateSource,
    consumer: Consumer,
    interval: float = DEFAULT_INTERVAL_SEC,
    drain_timeout: Optional[float] = None,
    wakeup: Optional[asyncio.Event] = None,
) -> None:
    """
    Keep the consumer running with the latest certificate from the source directory.

    Each change of the watched files cancels the running consumer invocation, waits for it
    to finish and starts a new one with the freshly read certificate. Returns when the consumer
    returns on its own, raises in all the other cases (see 'CertWatcher.run()').
    """

    watcher = CertWatcher(source, PreemptiveInvoker(consumer, drain_timeout), interval, wakeup)
    await watcher.run()


async def iter_certificates(
    source: CertificateSource, interval: float = DEFAULT_INTERVAL_SEC
) -> AsyncIterator[LoadedCertificate]:
    """
    Yield every newly loaded certificate from the source directory.

    The watcher waits for the previous certificate to be taken before reading the next one.
    Errors of the watcher are raised after the last certificate. Closing the iterator stops the watcher.
    """

    delivery = QueueDelivery()
    watcher = CertWatcher(source, delivery, interval)
    task = asyncio.create_task(watcher.run(), name=f"certwatch-producer-{source}")

    try:
        while True:
            cert = await delivery.get()
            if cert is None:
                break
            yield cert
        await task
    finally:
        if not task.done():
            watcher.stop()
            try:
                await task
            except ShutdownRequested:
                pass


__all__ = [
    "CertWatcher",
    "Consumer",
    "Delivery",
    "InvokerState",
    "PreemptiveInvoker",
    "QueueDelivery",
    "RecordWriter",
    "iter_certificates",
    "watch_dir",
]
