"""
Tests for configuration defaults and the quiet-mode logger.

Run with: python -m pytest tests/test_config_logger.py -v
"""

from io import StringIO

from rich.console import Console

from memvox.core.config import Config
from memvox.core.logger import Logger


def make_logger(level="DEBUG", quiet=False):
    buffer = StringIO()
    out = Console(file=buffer, force_terminal=False, width=200)
    return Logger(level, quiet_mode=quiet, out=out), buffer


class TestConfig:
    """Tests for Config helpers."""

    def test_default_category_is_known(self, monkeypatch):
        monkeypatch.setattr(Config, "CATEGORIES", ["Work", "Ideas"])
        monkeypatch.setattr(Config, "DEFAULT_CATEGORY", "Personal")
        assert Config.get_categories() == ["Personal", "Work", "Ideas"]

    def test_default_category_not_duplicated(self, monkeypatch):
        monkeypatch.setattr(Config, "CATEGORIES", ["Work", "personal"])
        monkeypatch.setattr(Config, "DEFAULT_CATEGORY", "Personal")
        assert Config.get_categories() == ["Work", "personal"]

    def test_memory_file_path(self, monkeypatch):
        monkeypatch.setattr(Config, "MEMORY_FILE_PATH", "data/x.json")
        assert Config.get_memory_file_path().name == "x.json"


class TestLogger:
    """Tests for level filtering and quiet mode."""

    def test_level_filter(self):
        logger, buffer = make_logger(level="WARNING")
        logger.info("hidden")
        logger.warning("shown")
        output = buffer.getvalue()
        assert "hidden" not in output
        assert "shown" in output

    def test_tags_printed_literally(self):
        logger, buffer = make_logger()
        logger.info("[ASSISTANT] Ready")
        assert "[ASSISTANT] Ready" in buffer.getvalue()

    def test_quiet_mode_hides_traces(self):
        logger, buffer = make_logger(quiet=True)
        logger.debug("[INTERPRET] matched group=help")
        logger.error("[STORAGE] Failed to save memories: disk full")
        logger.info("[ASSISTANT] Ready with 0 memories")
        output = buffer.getvalue()
        assert "[INTERPRET]" not in output
        assert "[STORAGE]" not in output
        assert "[ASSISTANT]" in output
