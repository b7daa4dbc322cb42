from pathlib import Path
from typing import Optional

from certwatch import CertWatchBaseException


class ProbeFailure(CertWatchBaseException):
    """
    A watched file is missing or cannot be stat-ed.
    """

    def __init__(self, msg: str, path: Path, not_found: bool = False) -> None:
        super().__init__(msg)
        self.path = path
        self.not_found = not_found


class LoadFailure(CertWatchBaseException):
    """
    Reading or parsing of the certificate bundle and private key failed.
    """

    def __init__(self, msg: str, path: Optional[Path] = None) -> None:
        super().__init__(msg)
        self.path = path


class ShutdownRequested(CertWatchBaseException):
    pass


class ConsumerFailure(CertWatchBaseException):
    """
    A consumer invocation ended in a way the watcher cannot recover from,
    other than by raising its own exception (those are propagated unchanged).
    """


class ConsumerStalled(ConsumerFailure):
    """
    A preempted invocation did not finish within the configured drain timeout.
    """


class RecordDecodeError(CertWatchBaseException):
    pass


class CommandFailure(CertWatchBaseException):
    """
    Certificate source subprocess failed. When the failure was preceded by an error
    while decoding the subprocess output, it is available in 'record_error'.
    """

    def __init__(
        self, msg: str, returncode: Optional[int] = None, record_error: Optional[CertWatchBaseException] = None
    ) -> None:
        super().__init__(msg)
        self.returncode = returncode
        self.record_error = record_error

    def __str__(self) -> str:
        msg = super().__str__()
        if self.record_error is not None:
            return f"{msg}; {self.record_error}"
        return msg
