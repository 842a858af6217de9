import pytest

from pagecraft.config import manager as config_manager
from pagecraft.config import ConfigManager
from pagecraft.core.models import EditorSettings


@pytest.fixture
def fresh_config(tmp_path, monkeypatch):
    monkeypatch.setattr(config_manager, "_get_user_config_dir", lambda: tmp_path)
    ConfigManager._instance = None
    yield tmp_path
    ConfigManager._instance = None


def test_packaged_defaults(fresh_config):
    settings = ConfigManager().get_editor_settings()
    assert settings == EditorSettings()
    assert settings.content_paths.page_path("about") == "src/content/pages/about.json"


def test_user_files_are_seeded(fresh_config):
    ConfigManager()
    assert (fresh_config / "editor.yml").is_file()
    assert (fresh_config / "logging.yml").is_file()


def test_user_overrides_merge(fresh_config):
    (fresh_config / "editor.yml").write_text("autosave_delay_seconds: 1.5\nmax_columns: 6\n", encoding="utf-8")
    settings = ConfigManager().get_editor_settings()
    assert settings.autosave_delay_seconds == 1.5
    assert settings.max_columns == 6
    assert settings.draft_version == 1


def test_invalid_user_yaml_is_ignored(fresh_config):
    (fresh_config / "editor.yml").write_text("autosave_delay_seconds: [unclosed\n", encoding="utf-8")
    assert ConfigManager().get_editor_settings().autosave_delay_seconds == 3.0


def test_singleton(fresh_config):
    assert ConfigManager() is ConfigManager()


def test_logging_section_has_handlers(fresh_config):
    cfg = ConfigManager().get_logging_config()
    assert cfg["version"] == 1
    assert "console" in cfg["handlers"]


@pytest.mark.parametrize("max_columns", [0, 13])
def test_max_columns_must_fit_the_grid(max_columns):
    with pytest.raises(ValueError):
        EditorSettings(max_columns=max_columns)
