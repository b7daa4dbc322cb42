import hashlib
import logging
import ssl
import tempfile
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Tuple

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.types import PrivateKeyTypes

from certwatch.constants import CERT_FILE_NAME, KEY_FILE_NAME
from certwatch.exceptions import LoadFailure
from certwatch.utils.async_utils import readfile_bytes

from .probe import CertificateSource

logger = logging.getLogger(__name__)


def _public_bytes(key: object) -> bytes:
    return key.public_bytes(  # type: ignore[attr-defined]
        serialization.Encoding.DER, serialization.PublicFormat.SubjectPublicKeyInfo
    )


@dataclass(frozen=True)
class LoadedCertificate:
    """
    Parsed certificate chain with its matching private key. Never modified after creation.

    The original PEM data are kept, so that the pair can be handed over to 'ssl'
    or forwarded to another process exactly as it was read.
    """

    chain: Tuple[x509.Certificate, ...]
    private_key: PrivateKeyTypes
    cert_pem: bytes
    key_pem: bytes

    @property
    def leaf(self) -> x509.Certificate:
        return self.chain[0]

    @property
    def subject(self) -> str:
        return self.leaf.subject.rfc4514_string()

    @property
    def serial_number(self) -> int:
        return self.leaf.serial_number

    @property
    def not_valid_after(self) -> datetime:
        return self.leaf.not_valid_after_utc

    def fingerprint(self) -> str:
        return hashlib.sha256(self.leaf.public_bytes(serialization.Encoding.DER)).hexdigest()

    def ssl_context(self, purpose: ssl.Purpose = ssl.Purpose.CLIENT_AUTH) -> ssl.SSLContext:
        """
        Create an SSL context using this certificate and key. The default purpose
        creates a context for the server side of a connection.
        """

        context = ssl.create_default_context(purpose)
        # 'ssl' can only load the chain from files, so the PEM data are materialized
        # in a private temporary directory for the duration of the call
        with tempfile.TemporaryDirectory(prefix="certwatch-") as tmp:
            cert_file = Path(tmp) / CERT_FILE_NAME
            key_file = Path(tmp) / KEY_FILE_NAME
            cert_file.write_bytes(self.cert_pem)
            key_file.touch(mode=0o600)
            key_file.write_bytes(self.key_pem)
            context.load_cert_chain(str(cert_file), str(key_file))
        return context

    def __str__(self) -> str:
        return f"certificate '{self.subject}' (serial {self.serial_number:x}, expires {self.not_valid_after})"


def load_from_pem(cert_pem: bytes, key_pem: bytes) -> LoadedCertificate:
    """
    Parse PEM-encoded certificate bundle and private key into a 'LoadedCertificate'.
    The first certificate of the bundle has to match the private key.
    """

    try:
        chain = tuple(x509.load_pem_x509_certificates(cert_pem))
        private_key = serialization.load_pem_private_key(key_pem, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise LoadFailure(f"creating certificate object: {e}") from e

    if not chain:
        raise LoadFailure("creating certificate object: no certificate found in the bundle")
    if _public_bytes(chain[0].public_key()) != _public_bytes(private_key.public_key()):
        raise LoadFailure("creating certificate object: private key does not match the certificate")

    return LoadedCertificate(chain, private_key, cert_pem, key_pem)


async def _read(path: Path) -> bytes:
    try:
        return await readfile_bytes(path)
    except OSError as e:
        raise LoadFailure(f"reading {path}: {e.strerror or e}", path) from e


async def load(source: CertificateSource) -> LoadedCertificate:
    """
    Read and parse the certificate bundle and the private key from the source directory.
    """

    cert_pem = await _read(source.cert_file)
    key_pem = await _read(source.key_file)
    cert = load_from_pem(cert_pem, key_pem)
    logger.debug(f"Loaded {cert} from '{source}'")
    return cert
