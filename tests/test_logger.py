from __future__ import annotations

import logging

from venue_catalog.core.config import settings
from venue_catalog.core.logger import get_logger, level_for


def test_get_logger_attaches_handlers_once(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "LOG_DIR", str(tmp_path))

    logger = get_logger("venue_catalog.tests.logger")
    again = get_logger("venue_catalog.tests.logger")

    assert logger is again
    assert len(logger.handlers) == 3
    assert logger.propagate is False
    logger.info("catalog loaded")
    for handler in logger.handlers:
        handler.flush()
    assert "catalog loaded" in (tmp_path / "venue-catalog.log").read_text(encoding="utf-8")


def test_log_file_names_come_from_settings(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "LOG_DIR", str(tmp_path / "nested"))
    monkeypatch.setattr(settings, "LOG_FILE_NAME", "sheet-sync")

    logger = get_logger("venue_catalog.tests.file_names")
    logger.warning("proxy fallback used")
    for handler in logger.handlers:
        handler.flush()

    assert "proxy fallback used" in (tmp_path / "nested" / "sheet-sync.log").read_text(encoding="utf-8")
    assert (tmp_path / "nested" / "sheet-sync_daily.log").exists()


def test_per_logger_level_overrides(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "LOG_DIR", str(tmp_path))
    monkeypatch.setattr(settings, "LOG_LEVEL", "INFO")
    monkeypatch.setattr(settings, "LOG_LEVELS", {"venue_catalog.tests": "debug"})

    assert level_for("venue_catalog.tests.levels") == "DEBUG"
    assert level_for("venue_catalog.other") == "INFO"
    assert get_logger("venue_catalog.tests.levels").level == logging.DEBUG
