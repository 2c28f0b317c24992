import json
import logging

import pytest
import structlog

from medflow.structlog_config import configure_structlog, get_logger


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


@pytest.mark.unit
def test_json_log_lines(capsys, restore_logging):
    configure_structlog(service_name="medflow-test", log_level=logging.INFO)

    get_logger("medflow.tests").info("Resolved file keys", operation="resolve_file_keys")

    line = capsys.readouterr().out.strip().splitlines()[-1]
    event = json.loads(line)
    assert event["event"] == "Resolved file keys"
    assert event["operation"] == "resolve_file_keys"
    assert event["service"] == "medflow-test"
    assert event["module"] == "medflow.tests"
    assert event["level"] == "info"


@pytest.mark.unit
def test_level_filtering(capsys, restore_logging):
    configure_structlog(log_level=logging.WARNING)

    get_logger("medflow.tests").info("hidden")

    assert "hidden" not in capsys.readouterr().out
