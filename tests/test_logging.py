from __future__ import annotations

import logging

from blepanel.utils import logging as logging_module
from blepanel.utils.logging import resolve_level, setup_logging


def test_level_comes_from_environment(monkeypatch):
    monkeypatch.setenv("LOGLEVEL", "warning")

    assert resolve_level() == "WARNING"
    assert resolve_level("ERROR") == "ERROR"


def test_verbose_forces_debug(monkeypatch):
    monkeypatch.setenv("LOGLEVEL", "ERROR")

    assert resolve_level(verbose=1) == "DEBUG"
    assert resolve_level("INFO", verbose=2) == "DEBUG"


def test_backend_logger_only_opens_on_second_step(monkeypatch):
    installed: list[str] = []
    monkeypatch.setattr(
        logging_module.coloredlogs,
        "install",
        lambda level, **kwargs: installed.append(level),
    )
    bleak_logger = logging.getLogger("bleak")
    monkeypatch.setattr(bleak_logger, "level", bleak_logger.level)

    setup_logging(verbose=1)
    after_one = bleak_logger.level
    setup_logging(verbose=2)

    assert installed == ["DEBUG", "DEBUG"]
    assert after_one == logging.WARNING
    assert bleak_logger.level == logging.DEBUG
