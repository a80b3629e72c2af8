"""Unit tests for configuration management."""
import tempfile
from pathlib import Path

from pairline.utils.config import Config, Settings, load_config, save_config


def test_load_default_config():
    """Test loading the shipped default configuration."""
    config = load_config("configs/default.yaml")

    assert isinstance(config, Config)
    assert config.server.port == 5000
    assert config.server.health_path == "/health"
    assert config.logging.level == "INFO"


def test_missing_config_falls_back_to_defaults():
    config = load_config("configs/does_not_exist.yaml")

    assert config == Config()


def test_save_and_load_config():
    config = Config()
    config.server.port = 6001
    config.logging.level = "DEBUG"

    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "pairline.yaml"
        save_config(config, path)
        loaded = load_config(path)

    assert loaded.server.port == 6001
    assert loaded.logging.level == "DEBUG"


def test_partial_config_keeps_defaults():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "partial.yaml"
        path.write_text("server:\n  port: 7000\n")
        config = load_config(path)

    assert config.server.port == 7000
    assert config.server.host == "0.0.0.0"
    assert config.logging.rotation == "10 MB"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("PORT", "8123")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")

    config = Settings().apply(Config())

    assert config.server.port == 8123
    assert config.logging.level == "WARNING"
    assert config.server.host == "0.0.0.0"


def test_settings_without_environment_leave_config_alone(monkeypatch):
    for name in ("PORT", "SIGNALING_HOST", "LOG_LEVEL", "LOG_FILE"):
        monkeypatch.delenv(name, raising=False)
    base = Config()
    base.server.port = 9000

    config = Settings(_env_file=None).apply(base)

    assert config.server.port == 9000
