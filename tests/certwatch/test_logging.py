import logging
import logging.handlers

import pytest

from certwatch.datamodel.logging_schema import LoggingSchema
from certwatch.logging import NOTICE, CertWatchLogger, configure_logging, get_logger, startup_logging


@pytest.fixture
def root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)


def test_notice_level():
    logger = get_logger("certwatch.test")
    assert isinstance(logger, CertWatchLogger)
    assert logging.getLevelName(NOTICE) == "NOTICE"
    assert logging.INFO < NOTICE < logging.WARNING


def test_startup_logging(root_logger):
    startup_logging(verbose=True)
    assert root_logger.level == logging.DEBUG
    assert any(isinstance(h, logging.handlers.MemoryHandler) for h in root_logger.handlers)


@pytest.mark.parametrize("level,expected", [("notice", NOTICE), ("debug", logging.DEBUG), ("err", logging.ERROR)])
def test_configure_logging(root_logger, level: str, expected: int):
    startup_logging()
    configure_logging(LoggingSchema({"level": level, "target": "stdout"}))

    assert root_logger.level == expected
    assert len(root_logger.handlers) == 1
    assert not isinstance(root_logger.handlers[0], logging.handlers.MemoryHandler)


def test_configure_logging_verbose(root_logger):
    configure_logging(LoggingSchema(), verbose=True)
    assert root_logger.level == logging.DEBUG


def test_startup_records_flushed(root_logger, capsys):
    startup_logging()
    get_logger("certwatch.test").notice("buffered startup message")
    configure_logging(LoggingSchema({"target": "stderr"}))

    assert "buffered startup message" in capsys.readouterr().err
