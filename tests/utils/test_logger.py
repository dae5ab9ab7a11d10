# tests/utils/test_logger.py
import json
import logging

import pytest

from fluxo.shared.utils.logger import LOG_NAME, JsonFormatter, get_logger, init_logging, init_logging_from_config


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger(LOG_NAME)
    handlers, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


def test_get_logger_prefix():
    assert get_logger().name == "fluxo"
    assert get_logger("cache").name == "fluxo.cache"


def test_init_logging_console_only():
    root = init_logging(level="DEBUG", to_file=False)

    assert root.name == LOG_NAME
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0], logging.StreamHandler)


def test_init_logging_writes_file(tmp_path):
    log_file = tmp_path / "logs" / "fluxo.log"
    root = init_logging_from_config({"file": str(log_file), "console": False, "json": True, "level": "INFO"})

    get_logger("cache").info("hello", extra={"url": "https://e.com"})
    for handler in root.handlers:
        handler.flush()

    line = log_file.read_text(encoding="utf-8").strip().splitlines()[-1]
    payload = json.loads(line)
    assert payload["message"] == "hello"
    assert payload["url"] == "https://e.com"
    assert payload["name"] == "fluxo.cache"


def test_suppress_third_party():
    init_logging(to_file=False, suppress={"httpx": "ERROR"})
    assert logging.getLogger("httpx").level == logging.ERROR


def test_json_formatter_stringifies_unserializable():
    record = logging.LogRecord("fluxo.x", logging.INFO, __file__, 1, "msg", None, None)
    record.obj = object()

    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "msg"
    assert payload["obj"].startswith("<object object")
