import logging

import pytest

from pagecraft import logging_config
from pagecraft.config import manager as config_manager
from pagecraft.config import ConfigManager


@pytest.fixture
def isolated(tmp_path, monkeypatch):
    monkeypatch.setattr(config_manager, "_get_user_config_dir", lambda: tmp_path / "config")
    monkeypatch.setenv("PAGECRAFT_LOG_DIR", str(tmp_path / "logs"))
    ConfigManager._instance = None
    root = logging.getLogger()
    saved = (root.level, list(root.handlers))
    yield tmp_path
    ConfigManager._instance = None
    for handler in root.handlers:
        if handler not in saved[1]:
            handler.close()
    root.handlers[:] = saved[1]
    root.setLevel(saved[0])


def test_log_file_goes_to_configured_dir(isolated, monkeypatch):
    monkeypatch.delenv("PAGECRAFT_DEBUG_TREE", raising=False)
    logging_config.setup_logging()
    logging.getLogger("pagecraft.test").info("hello")
    assert (isolated / "logs" / "app.log").is_file()


def test_debug_overrides(isolated, monkeypatch):
    monkeypatch.setenv("PAGECRAFT_DEBUG_TREE", "true")
    monkeypatch.setenv("PAGECRAFT_DEBUG_MODULES", "pagecraft.core.storage.drafts, ")
    logging_config.setup_logging()

    assert logging.getLogger("pagecraft.core.tree").level == logging.DEBUG
    assert logging.getLogger("pagecraft.core.services.drag_drop").level == logging.DEBUG
    assert logging.getLogger("pagecraft.core.storage.drafts").level == logging.DEBUG


def test_broken_config_falls_back_to_console(isolated, monkeypatch):
    monkeypatch.setattr(ConfigManager, "get_logging_config",
                        lambda self: {"version": 1, "handlers": {"x": {"class": "no.such.Handler"}}})
    logging_config.setup_logging()
    assert any(isinstance(h, logging.StreamHandler) for h in logging.getLogger().handlers)


def test_fallback_still_writes_log_file(isolated, monkeypatch):
    monkeypatch.setattr(ConfigManager, "get_logging_config", lambda self: {})
    monkeypatch.setenv("PAGECRAFT_LOG_LEVEL", "debug")
    logging_config.setup_logging()

    console = [h for h in logging.getLogger().handlers if type(h) is logging.StreamHandler]
    assert console and console[0].level == logging.DEBUG
    logging.getLogger("pagecraft.core.storage.drafts").info("I/O: draft saved slug=about")
    assert "draft saved slug=about" in (isolated / "logs" / "app.log").read_text(encoding="utf-8")


def test_unknown_fallback_level_uses_info(isolated, monkeypatch):
    monkeypatch.setattr(ConfigManager, "get_logging_config", lambda self: {})
    monkeypatch.setenv("PAGECRAFT_LOG_LEVEL", "chatty")
    logging_config.setup_logging()
    console = [h for h in logging.getLogger().handlers if type(h) is logging.StreamHandler]
    assert console[0].level == logging.INFO
