from __future__ import annotations

import io
import logging as py_logging
from collections.abc import Iterator
from pathlib import Path

import pytest

import termroster.logging as tr_logging
from termroster.config import AppConfig


@pytest.fixture(autouse=True)
def _restore_package_logger() -> Iterator[None]:
    yield
    logger = py_logging.getLogger(tr_logging.ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(py_logging.NOTSET)
    logger.propagate = True


def test_default_log_path_is_expanded() -> None:
    path = tr_logging.default_log_path()

    assert path.is_absolute()
    assert path.name == "termroster.log"


def test_warning_alias_maps_to_warning_level() -> None:
    logger = tr_logging.configure_logging("warning")

    assert logger.level == tr_logging.LOG_LEVELS["WARN"]


def test_unknown_log_level_falls_back_to_info() -> None:
    logger = tr_logging.configure_logging("not-a-level")

    assert logger.level == py_logging.INFO


def test_configure_logging_resets_existing_handlers() -> None:
    logger = tr_logging.configure_logging("INFO")
    assert len(logger.handlers) == 1

    logger = tr_logging.configure_logging("INFO")

    assert len(logger.handlers) == 1


def test_module_loggers_write_to_configured_stream() -> None:
    stream = io.StringIO()
    tr_logging.configure_logging("DEBUG", stream)

    py_logging.getLogger("termroster.terminal.registry").info("terminal-event handle=t1 step=add")

    assert "terminal-event handle=t1 step=add" in stream.getvalue()


def test_configure_logging_adds_debug_file_handler(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "termroster.log"

    logger = tr_logging.configure_logging("ERROR", log_file=log_file)
    file_handlers = [handler for handler in logger.handlers if isinstance(handler, py_logging.FileHandler)]

    assert len(file_handlers) == 1
    assert file_handlers[0].level == py_logging.DEBUG
    assert log_file.exists()


def test_configure_logging_ignores_file_handler_oserror(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    def raise_os_error(*args: object, **kwargs: object) -> py_logging.Handler:
        raise OSError("disk full")

    monkeypatch.setattr(tr_logging.py_logging, "FileHandler", raise_os_error)

    logger = tr_logging.configure_logging("INFO", log_file=tmp_path / "nope" / "termroster.log")

    assert len(logger.handlers) == 1
    assert type(logger.handlers[0]) is py_logging.StreamHandler


def test_configure_from_config_applies_log_level(tmp_path: Path) -> None:
    stream = io.StringIO()
    log_file = tmp_path / "termroster.log"

    logger = tr_logging.configure_from_config(AppConfig(log_level="WARNING"), stream, log_file=log_file)
    py_logging.getLogger("termroster.terminal.registry").info("terminal-event handle=t1 step=add")
    py_logging.getLogger("termroster.terminal.registry").warning("Terminal connect failed handle=t1")

    assert logger.level == py_logging.WARNING
    assert "step=add" not in stream.getvalue()
    assert "connect failed handle=t1" in stream.getvalue()
    assert log_file.exists()


def test_configure_from_config_defaults_to_default_log_path(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    monkeypatch.setattr(tr_logging, "DEFAULT_LOG_PATH", tmp_path / "logs" / "termroster.log")

    logger = tr_logging.configure_from_config(AppConfig(log_level="DEBUG"), io.StringIO())
    file_handlers = [handler for handler in logger.handlers if isinstance(handler, py_logging.FileHandler)]

    assert logger.level == py_logging.DEBUG
    assert len(file_handlers) == 1
    assert Path(file_handlers[0].baseFilename) == tmp_path / "logs" / "termroster.log"
