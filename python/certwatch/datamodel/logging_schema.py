from typing_extensions import Literal

from certwatch.utils.modeling import ConfigSchema

LogLevelEnum = Literal["crit", "err", "warning", "notice", "info", "debug"]
LogTargetEnum = Literal["syslog", "stderr", "stdout"]


class LoggingSchema(ConfigSchema):
    """
    Logging configuration.

    ---
    level: Global logging level.
    target: Global logging stream target.
    """

    level: LogLevelEnum = "notice"
    target: LogTargetEnum = "stderr"
