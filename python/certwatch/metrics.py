import logging
from typing import Optional

from certwatch.constants import PROMETHEUS_LIB

logger = logging.getLogger(__name__)

if PROMETHEUS_LIB:
    from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, generate_latest

    _POLLS = Counter("certwatch_polls", "Number of polls of the certificate directory")
    _LOADS = Counter("certwatch_certificate_loads", "Number of certificates loaded after a detected change")
    _INVOCATIONS = Counter("certwatch_invocations", "Number of started consumer invocations")
    _PREEMPTIONS = Counter("certwatch_preemptions", "Number of consumer invocations replaced by a newer certificate")
    _ACTIVE = Gauge("certwatch_active_invocations", "Number of consumer invocations currently running")

    METRICS_CONTENT_TYPE: Optional[str] = CONTENT_TYPE_LATEST
else:
    METRICS_CONTENT_TYPE = None


def report_poll() -> None:
    if PROMETHEUS_LIB:
        _POLLS.inc()


def report_load() -> None:
    if PROMETHEUS_LIB:
        _LOADS.inc()


def report_invocation_started() -> None:
    if PROMETHEUS_LIB:
        _INVOCATIONS.inc()
        _ACTIVE.inc()


def report_invocation_finished(preempted: bool) -> None:
    if PROMETHEUS_LIB:
        _ACTIVE.dec()
        if preempted:
            _PREEMPTIONS.inc()


def report_prometheus() -> Optional[bytes]:
    if PROMETHEUS_LIB:
        return generate_latest()
    logger.debug("Prometheus metrics requested, but the optional 'prometheus_client' dependency is not installed")
    return None
