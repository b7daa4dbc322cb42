import asyncio
import logging
from types import TracebackType
from typing import AsyncIterator, Optional, Type

from certwatch import CertWatchBaseException
from certwatch.certs.loader import LoadedCertificate, load_from_pem
from certwatch.certs.records import RecordStreamDecoder
from certwatch.exceptions import CommandFailure, LoadFailure, RecordDecodeError

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 64 * 1024


class CommandSource:
    """
    Certificates produced by a shell command writing JSON key-pair records
    (see 'certwatch.certs.records') to its standard output, for example 'certwatch emit DIR'.

        async with CommandSource("certwatch emit /etc/letsencrypt/live/example.com") as source:
            async for cert in source:
                ...

    A malformed record ends the iteration with an error. Leaving the context waits for
    the command to exit, non-zero exit status is raised as 'CommandFailure', which also
    carries the record error if there was one.
    """

    def __init__(self, cmd: str) -> None:
        self._cmd = cmd
        self._proc: Optional[asyncio.subprocess.Process] = None
        self._record_error: Optional[CertWatchBaseException] = None
        self._eof = False
        self._terminated = False

    @property
    def cmd(self) -> str:
        return self._cmd

    async def start(self) -> None:
        try:
            self._proc = await asyncio.create_subprocess_shell(
                self._cmd, stdin=asyncio.subprocess.PIPE, stdout=asyncio.subprocess.PIPE
            )
        except OSError as e:
            raise CommandFailure(f"starting '{self._cmd}': {e}") from e
        logger.info(f"Started certificate source command '{self._cmd}' (pid {self._proc.pid})")

    def __aiter__(self) -> AsyncIterator[LoadedCertificate]:
        return self._certificates()

    async def _certificates(self) -> AsyncIterator[LoadedCertificate]:
        assert self._proc is not None and self._proc.stdout is not None, "command not started"

        decoder = RecordStreamDecoder()
        try:
            while True:
                chunk = await self._proc.stdout.read(READ_CHUNK_SIZE)
                if not chunk:
                    self._eof = True
                    decoder.close()
                    return
                for pair in decoder.feed(chunk):
                    yield load_from_pem(pair.cert_pem, pair.key_pem)
        except (RecordDecodeError, LoadFailure) as e:
            self._record_error = e
            raise

    async def close(self) -> int:
        """
        Release the command and return its exit status. The standard input of the command
        is closed, which tells emitters like 'certwatch emit' to finish. A command whose output
        is not going to be read any more is terminated first.
        """

        proc = self._proc
        assert proc is not None, "command not started"

        if proc.stdin is not None and not proc.stdin.is_closing():
            proc.stdin.close()
        if proc.returncode is None and not self._eof:
            logger.debug(f"Terminating certificate source command '{self._cmd}'")
            self._terminated = True
            try:
                proc.terminate()
            except ProcessLookupError:
                pass
        returncode = await proc.wait()

        if returncode != 0 and not (self._terminated and self._record_error is None):
            raise CommandFailure(
                f"waiting for '{self._cmd}': exit status {returncode}", returncode, self._record_error
            )
        if self._record_error is not None:
            raise self._record_error
        return returncode

    async def __aenter__(self) -> "CommandSource":
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        try:
            await self.close()
        except CertWatchBaseException as e:
            # do not hide the error of the body behind the same error raised again
            if e is not exc:
                raise
