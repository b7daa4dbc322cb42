import asyncio
import logging
from pathlib import Path
from typing import Optional, Set

from certwatch.certs.probe import CertificateSource
from certwatch.constants import WATCHDOG_LIB

logger = logging.getLogger(__name__)


if WATCHDOG_LIB:
    from watchdog.events import (
        FileSystemEvent,
        FileSystemEventHandler,
    )
    from watchdog.observers import Observer

    class FilesWatchdogEventHandler(FileSystemEventHandler):
        """
        Runs in the observer thread, only passes a wakeup over to the event loop.
        """

        def __init__(self, files: Set[Path], loop: asyncio.AbstractEventLoop, wakeup: asyncio.Event) -> None:
            self._files = files
            self._loop = loop
            self._wakeup = wakeup

        def _trigger(self, path: Path, what: str) -> None:
            logger.info(f"Watched file '{path}' has been {what}")
            self._loop.call_soon_threadsafe(self._wakeup.set)

        def _watched(self, event: FileSystemEvent) -> Optional[Path]:
            for raw in (event.src_path, getattr(event, "dest_path", "")):
                if raw and Path(str(raw)) in self._files:
                    return Path(str(raw))
            return None

        def on_created(self, event: FileSystemEvent) -> None:
            path = self._watched(event)
            if path:
                self._trigger(path, "created")

        def on_moved(self, event: FileSystemEvent) -> None:
            path = self._watched(event)
            if path:
                self._trigger(path, "moved")

        def on_modified(self, event: FileSystemEvent) -> None:
            path = self._watched(event)
            if path:
                self._trigger(path, "modified")

        def on_deleted(self, event: FileSystemEvent) -> None:
            path = self._watched(event)
            if path:
                # the next tick reports the missing file
                logger.warning(f"Watched file '{path}' has been deleted")
                self._loop.call_soon_threadsafe(self._wakeup.set)


class FilesWatchdog:
    """
    Sets the 'wakeup' event whenever one of the watched certificate files changes,
    so that the poll loop does not have to wait for its next regular tick.
    """

    def __init__(self, source: CertificateSource, wakeup: asyncio.Event) -> None:
        if not WATCHDOG_LIB:
            raise RuntimeError("files watchdog requires the optional 'watchdog' dependency")

        self._source = source
        self._wakeup = wakeup
        self._observer: Optional["Observer"] = None

    def start(self) -> None:
        loop = asyncio.get_running_loop()
        files = {self._source.cert_file, self._source.key_file}
        handler = FilesWatchdogEventHandler(files, loop, self._wakeup)

        self._observer = Observer()
        self._observer.schedule(handler, str(self._source.directory), recursive=False)
        self._observer.start()
        logger.info(f"Directory '{self._source}' scheduled for watching")

    def stop(self) -> None:
        if self._observer is not None:
            self._observer.stop()
            self._observer.join()
            self._observer = None
