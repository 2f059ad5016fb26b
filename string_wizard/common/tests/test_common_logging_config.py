import json
import logging
import sys

from string_wizard.common.core.logging_config import CustomJsonFormatter, setup_logging


def _record(**extra):
    record = logging.LogRecord(
        name="string_wizard.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="hello %s",
        args=("world",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_basic_fields():
    data = json.loads(CustomJsonFormatter().format(_record()))
    assert data["level"] == "INFO"
    assert data["logger"] == "string_wizard.test"
    assert data["message"] == "hello world"
    assert data["_time"].endswith("+00:00")


def test_formatter_includes_extras():
    data = json.loads(
        CustomJsonFormatter().format(_record(operation="Echo", aws_request_id="req-1"))
    )
    assert data["operation"] == "Echo"
    assert data["aws_request_id"] == "req-1"


def test_formatter_skips_empty_correlation_ids():
    data = json.loads(CustomJsonFormatter().format(_record(trace_id=None, aws_request_id=None)))
    assert "trace_id" not in data
    assert "aws_request_id" not in data


def test_formatter_includes_exception():
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = _record()
        record.exc_info = sys.exc_info()
    data = json.loads(CustomJsonFormatter().format(record))
    assert "RuntimeError: boom" in data["exception"]


def test_setup_logging_substitutes_level(tmp_path):
    config_file = tmp_path / "logging.yml"
    config_file.write_text(
        """
version: 1
disable_existing_loggers: false
loggers:
  string_wizard.level_check:
    level: ${LOG_LEVEL}
"""
    )
    setup_logging(str(config_file), log_level="WARNING")
    assert logging.getLogger("string_wizard.level_check").level == logging.WARNING


def test_setup_logging_missing_file_falls_back(tmp_path):
    # Must not raise.
    setup_logging(str(tmp_path / "missing.yml"), log_level="INFO")
