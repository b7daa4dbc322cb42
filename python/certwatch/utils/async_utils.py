import asyncio
import sys
from pathlib import Path
from typing import Any, Callable, Coroutine


async def readfile_bytes(path: Path) -> bytes:
    """Asynchronously read the whole file on a path."""

    def readfile_sync(path: Path) -> bytes:
        with path.open("rb") as file:
            return file.read()

    return await asyncio.to_thread(readfile_sync, path)


async def wait_for_stdin_close() -> None:
    """
    Read and discard standard input until it is closed.
    """

    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader()
    try:
        transport, _ = await loop.connect_read_pipe(lambda: asyncio.StreamReaderProtocol(reader), sys.stdin)
    except ValueError:
        # regular files can't be watched by the event loop, they always have an end
        await asyncio.to_thread(sys.stdin.buffer.read)
        return

    try:
        while await reader.read(4096):
            pass
    finally:
        transport.close()


def add_async_signal_handler(signal: int, callback: Callable[[], Coroutine[Any, Any, None]]) -> None:
    loop = asyncio.get_event_loop()
    loop.add_signal_handler(signal, lambda: asyncio.create_task(callback()))


def remove_signal_handler(signal: int) -> bool:
    loop = asyncio.get_event_loop()
    return loop.remove_signal_handler(signal)
