from .loader import LoadedCertificate, load, load_from_pem
from .probe import CertificateSource, TimestampPair, changed, probe

__all__ = [
    "CertificateSource",
    "LoadedCertificate",
    "TimestampPair",
    "changed",
    "load",
    "load_from_pem",
    "probe",
]
