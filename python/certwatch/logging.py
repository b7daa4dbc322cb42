import logging
import logging.handlers
import os
import sys
from enum import Enum
from typing import Any, Optional, cast

from certwatch.datamodel.logging_schema import LoggingSchema


class LogTarget(str, Enum):
    STDOUT = "stdout"
    SYSLOG = "syslog"
    STDERR = "stderr"


NOTICE = (logging.WARNING + logging.INFO) // 2

_config_to_level = {
    "crit": logging.CRITICAL,
    "err": logging.ERROR,
    "warning": logging.WARNING,
    "notice": NOTICE,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}

_level_to_name = {
    logging.CRITICAL: "CRITICAL",
    logging.ERROR: "ERROR",
    logging.WARNING: "WARNING",
    NOTICE: "NOTICE",
    logging.INFO: "INFO",
    logging.DEBUG: "DEBUG",
}


class CertWatchLogger(logging.Logger):
    def notice(self, message: str, *args: Any, **kwargs: Any) -> None:
        if self.isEnabledFor(NOTICE):
            self._log(NOTICE, message, args, **kwargs)


logging.setLoggerClass(CertWatchLogger)


for level, name in _level_to_name.items():
    logging.addLevelName(level, name)


def get_logger(name: str) -> CertWatchLogger:
    return cast(CertWatchLogger, logging.getLogger(name))


logger = get_logger(__name__)

SERVICE_NAME = "certwatch"
NO_PREFIX_FORMAT_ENV_VAR = "CERTWATCH_LOGGING_NO_PREFIX_FORMAT"

BASIC_FORMAT = "%(name)s: %(message)s"
NO_PREFIX_FORMAT = f"[%(levelname)s] {BASIC_FORMAT}"


def get_pretty_format(stream: str) -> str:
    return f"%(asctime)s {SERVICE_NAME}[%(process)d]{stream}: [%(levelname)s] {BASIC_FORMAT}"


def get_formatter(target: LogTarget) -> logging.Formatter:
    if target == LogTarget.SYSLOG:
        return logging.Formatter(BASIC_FORMAT)
    # running under a supervisor, which adds its own prefixes
    if os.environ.get(NO_PREFIX_FORMAT_ENV_VAR) == "true":
        return logging.Formatter(NO_PREFIX_FORMAT)

    stream = ""
    if target == LogTarget.STDERR:
        stream = " (stderr)"
    return logging.Formatter(get_pretty_format(stream))


def get_logging_handler(target: LogTarget) -> logging.Handler:
    if target == LogTarget.SYSLOG:
        return logging.handlers.SysLogHandler(address="/dev/log")
    if target == LogTarget.STDERR:
        return logging.StreamHandler(sys.stderr)
    return logging.StreamHandler(sys.stdout)


def startup_logging(verbose: bool = False) -> None:
    """
    Logging before the configuration is known. Records are kept in memory
    and flushed to stderr on errors or when the real handler is configured.
    """

    level = logging.DEBUG if verbose else NOTICE
    err_handler = logging.StreamHandler(sys.stderr)
    err_handler.setFormatter(get_formatter(LogTarget.STDERR))

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(logging.handlers.MemoryHandler(10_000, logging.ERROR, err_handler))


def configure_logging(config: LoggingSchema, verbose: Optional[bool] = None) -> None:
    target = LogTarget(config.target)
    handler = get_logging_handler(target)
    handler.setFormatter(get_formatter(target))

    root = logging.getLogger()
    # give the buffered startup records to the new handler and drop the old ones
    for old in list(root.handlers):
        if isinstance(old, logging.handlers.MemoryHandler):
            old.setTarget(handler)
        old.flush()
        old.close()
        root.removeHandler(old)
    root.addHandler(handler)

    level = logging.DEBUG if verbose else _config_to_level[config.level]
    if level != root.level:
        logger.debug(f"Changing logging level to '{_level_to_name[level]}'")
    root.setLevel(level)
