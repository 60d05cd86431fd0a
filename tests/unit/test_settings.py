"""Unit tests for environment-driven settings."""

from pathlib import Path

from meta_adlib.config import Settings, load_settings


def test_defaults():
    settings = Settings(_env_file=None)
    assert settings.meta_token is None
    assert settings.graph_url == "https://graph.facebook.com/v23.0"
    assert settings.request_timeout == 60.0
    assert settings.default_page_size == 100
    assert settings.expiry_warning_days == 7
    assert settings.rate_limit_warning_threshold == 75
    assert settings.log_level == "WARNING"
    assert not settings.has_app_credentials


def test_environment_aliases(monkeypatch):
    monkeypatch.setenv("META_TOKEN", "EAAenv")
    monkeypatch.setenv("META_APP_ID", "123")
    monkeypatch.setenv("META_APP_SECRET", "secret")
    monkeypatch.setenv("META_API_BASE_URL", "http://localhost:8080/")
    monkeypatch.setenv("META_API_VERSION", "v19.0")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = load_settings(_env_file=None)
    assert settings.meta_token == "EAAenv"
    assert settings.has_app_credentials
    assert settings.graph_url == "http://localhost:8080/v19.0"
    assert settings.log_level == "DEBUG"


def test_blank_secrets_are_unset(monkeypatch):
    monkeypatch.setenv("META_TOKEN", "   ")
    monkeypatch.setenv("META_APP_ID", "")
    settings = Settings(_env_file=None)
    assert settings.meta_token is None
    assert settings.meta_app_id is None


def test_config_path_overrides(tmp_path):
    settings = Settings(_env_file=None)
    assert settings.local_config_path == Path(tmp_path / "adlib" / "config.json")
    assert settings.shared_config_path == Path(tmp_path / "meta-auth" / "config.json")


def test_env_file_is_read(tmp_path, monkeypatch):
    (tmp_path / ".env").write_text("META_APP_ID=from-dotenv\n")
    monkeypatch.chdir(tmp_path)
    assert Settings().meta_app_id == "from-dotenv"
