import logging
from typing import Any, Optional, Union

from typing_extensions import Literal

from certwatch.constants import WATCHDOG_LIB
from certwatch.datamodel.logging_schema import LoggingSchema
from certwatch.datamodel.server_schema import ServerSchema
from certwatch.datamodel.types import Dir, TimeUnit
from certwatch.utils.modeling import ConfigSchema

logger = logging.getLogger(__name__)


class CertWatchConfig(ConfigSchema):
    class Raw(ConfigSchema):
        """
        Certificate watcher configuration.

        ---
        source: Directory with the 'fullchain.pem' and 'privkey.pem' files.
        interval: Polling interval of the directory.
        drain_timeout: How long to wait for a preempted consumer to finish. Unlimited when not set.
        watchdog: Wake up the polling on file system events. Requires the optional 'watchdog' dependency.
        logging: Logging configuration.
        server: HTTPS server configuration.
        """

        source: Dir
        interval: TimeUnit = TimeUnit("1h")
        drain_timeout: Optional[TimeUnit] = None
        watchdog: Union[Literal["auto"], bool] = "auto"
        logging: LoggingSchema = LoggingSchema()
        server: ServerSchema = ServerSchema()

    _LAYER = Raw

    source: Dir
    interval: TimeUnit
    drain_timeout: Optional[TimeUnit]
    watchdog: bool
    logging: LoggingSchema
    server: ServerSchema

    def _watchdog(self, obj: Raw) -> Any:
        if obj.watchdog == "auto":
            return WATCHDOG_LIB
        return obj.watchdog

    def _validate(self) -> None:
        if self.interval.millis() <= 0:
            raise ValueError("'interval' must be positive")
        if self.drain_timeout is not None and self.drain_timeout.millis() <= 0:
            raise ValueError("'drain-timeout' must be positive")
        if self.watchdog and not WATCHDOG_LIB:
            raise ValueError("'watchdog' is enabled, but the required 'watchdog' dependency (optional) is not installed")

    def interval_seconds(self) -> float:
        return self.interval.seconds()

    def drain_timeout_seconds(self) -> Optional[float]:
        if self.drain_timeout is None:
            return None
        return self.drain_timeout.seconds()
