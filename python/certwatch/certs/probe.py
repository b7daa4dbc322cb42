import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import NamedTuple, Optional, Union

from certwatch.constants import CERT_FILE_NAME, KEY_FILE_NAME
from certwatch.exceptions import ProbeFailure


@dataclass(frozen=True)
class CertificateSource:
    """
    Directory with the two watched files, the certificate bundle and its private key.
    """

    directory: Path

    @classmethod
    def from_dir(cls, directory: Union[str, Path]) -> "CertificateSource":
        return cls(Path(directory))

    @property
    def cert_file(self) -> Path:
        return self.directory / CERT_FILE_NAME

    @property
    def key_file(self) -> Path:
        return self.directory / KEY_FILE_NAME

    def __str__(self) -> str:
        return str(self.directory)


class TimestampPair(NamedTuple):
    """
    Modification times of the certificate bundle and the private key, in nanoseconds.
    Only ever compared for equality.
    """

    cert_mtime_ns: int
    key_mtime_ns: int

    def cert_mtime(self) -> datetime:
        return datetime.fromtimestamp(self.cert_mtime_ns / 1e9, tz=timezone.utc)

    def key_mtime(self) -> datetime:
        return datetime.fromtimestamp(self.key_mtime_ns / 1e9, tz=timezone.utc)


def _mtime_ns(path: Path) -> int:
    try:
        return os.stat(path).st_mtime_ns
    except FileNotFoundError as e:
        raise ProbeFailure(f"statting {path}: file does not exist", path, not_found=True) from e
    except OSError as e:
        raise ProbeFailure(f"statting {path}: {e.strerror or e}", path) from e


def probe(source: CertificateSource) -> TimestampPair:
    """
    Stat both watched files. Fails with 'ProbeFailure' if any of them can't be stat-ed,
    there is no partial result.
    """

    cert = _mtime_ns(source.cert_file)
    key = _mtime_ns(source.key_file)
    return TimestampPair(cert, key)


def changed(previous: Optional[TimestampPair], current: TimestampPair) -> bool:
    # the very first observation is always a change
    if previous is None:
        return True
    return previous != current
