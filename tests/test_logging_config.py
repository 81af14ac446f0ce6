import json
import logging

import pytest

from otp_service.logging_config import JsonFormatter, configure_logging


@pytest.fixture
def service_logger():
    logger = logging.getLogger("otp_service")
    saved = (logger.level, list(logger.handlers), logger.propagate)
    yield logger
    logger.setLevel(saved[0])
    logger.handlers[:] = saved[1]
    logger.propagate = saved[2]


def test_configures_requested_level(service_logger):
    configure_logging("debug", "text")

    assert service_logger.level == logging.DEBUG
    assert len(service_logger.handlers) == 1
    assert service_logger.propagate is False


def test_unknown_level_falls_back_to_info(service_logger, capsys):
    configure_logging("VERBOSE", "text")

    assert service_logger.level == logging.INFO
    assert "Unknown log level 'VERBOSE'" in capsys.readouterr().out


def test_reconfiguring_replaces_handler(service_logger):
    configure_logging("INFO", "text")
    configure_logging("INFO", "json")

    assert len(service_logger.handlers) == 1
    assert isinstance(service_logger.handlers[0].formatter, JsonFormatter)


def test_json_formatter_includes_extra_fields():
    record = logging.LogRecord(
        "otp_service.test", logging.INFO, __file__, 1, "sent %s", ("ok",), None
    )
    record.otp_id = "abc"

    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "sent ok"
    assert payload["level"] == "INFO"
    assert payload["otp_id"] == "abc"
