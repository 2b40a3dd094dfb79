# tests/test_logger.py

import io
import logging

import pytest

from sfflow.utils.logger import _ColorFormatter, get_logger, init_logger, level_from_env


@pytest.mark.parametrize("value,expected", [
    ("debug", logging.DEBUG),
    ("INFO", logging.INFO),
    ("warn", logging.WARNING),
    ("bogus", logging.WARNING),
])
def test_level_from_env(monkeypatch, value, expected):
    monkeypatch.setenv("LOG_LEVEL", value)
    assert level_from_env() == expected


def test_level_from_env_default(monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    assert level_from_env() == logging.WARNING
    assert level_from_env("ERROR") == logging.ERROR


def test_child_loggers_hang_off_the_package_root():
    assert get_logger("codec").name == "sfflow.codec"


def test_init_logger_file_handler_and_no_stacking(tmp_path):
    name = "sfflow-test-file"
    logger = init_logger(name=name, level=logging.INFO, log_dir=tmp_path / "logs")
    logger = init_logger(name=name, level=logging.INFO, log_dir=tmp_path / "logs")
    try:
        assert len(logger.handlers) == 2
        assert logger.level == logging.INFO
        logger.info("hello from test")
        for h in logger.handlers:
            h.flush()
        assert "hello from test" in (tmp_path / "logs" / "sfflow.log").read_text(encoding="utf-8")
    finally:
        for h in logger.handlers:
            h.close()
        logger.handlers.clear()


class _Tty(io.StringIO):
    def isatty(self):
        return True


def test_color_only_on_terminals():
    record = logging.LogRecord("sfflow", logging.ERROR, __file__, 1, "boom", None, None)
    plain = _ColorFormatter(io.StringIO(), fmt="%(message)s").format(record)
    colored = _ColorFormatter(_Tty(), fmt="%(message)s").format(record)
    assert plain == "boom"
    assert colored.startswith("\033[91m") and colored.endswith("\033[0m")
