import datetime
import os
from pathlib import Path
from typing import Callable, Tuple

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from certwatch.certs.probe import CertificateSource
from certwatch.constants import CERT_FILE_NAME, KEY_FILE_NAME

PemPair = Tuple[bytes, bytes]


def make_pem_pair(common_name: str = "example.com") -> PemPair:
    key = ec.generate_private_key(ec.SECP256R1())
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    now = datetime.datetime.now(datetime.timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=90))
        .add_extension(x509.SubjectAlternativeName([x509.DNSName(common_name)]), critical=False)
        .sign(key, hashes.SHA256())
    )
    cert_pem = cert.public_bytes(serialization.Encoding.PEM)
    key_pem = key.private_bytes(
        serialization.Encoding.PEM, serialization.PrivateFormat.PKCS8, serialization.NoEncryption()
    )
    return cert_pem, key_pem


class CertDir:
    """
    Certificate directory with explicitly set, always increasing modification times,
    so every renewal is visible regardless of the file system timestamp resolution.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self.source = CertificateSource(path)
        self._mtime_ns = 1_700_000_000 * 10**9

    @property
    def cert_file(self) -> Path:
        return self.path / CERT_FILE_NAME

    @property
    def key_file(self) -> Path:
        return self.path / KEY_FILE_NAME

    def write(self, pair: PemPair) -> None:
        self.cert_file.write_bytes(pair[0])
        self.key_file.write_bytes(pair[1])
        self.touch()

    def renew(self, common_name: str = "example.com") -> PemPair:
        pair = make_pem_pair(common_name)
        self.write(pair)
        return pair

    def touch(self) -> None:
        self._mtime_ns += 10**9
        for path in (self.cert_file, self.key_file):
            os.utime(path, ns=(self._mtime_ns, self._mtime_ns))

    @property
    def mtime_ns(self) -> int:
        return self._mtime_ns


@pytest.fixture
def pem_pair() -> PemPair:
    return make_pem_pair()


@pytest.fixture
def new_pem_pair() -> Callable[..., PemPair]:
    return make_pem_pair


@pytest.fixture
def cert_dir(tmp_path: Path) -> CertDir:
    cdir = CertDir(tmp_path)
    cdir.renew()
    return cdir


@pytest.fixture
def empty_dir(tmp_path: Path) -> CertDir:
    return CertDir(tmp_path)
