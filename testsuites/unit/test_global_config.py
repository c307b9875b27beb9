import sys

import yaml
from loguru import logger

import pageroute.common as common
from pageroute.common import GlobalConfig, get_config, set_config


def _write_config(config_dir, name, data):
    config_dir.mkdir(parents=True, exist_ok=True)
    (config_dir / name).write_text(yaml.dump(data), encoding="utf-8")


def test_defaults_without_config_files(tmp_path, monkeypatch):
    monkeypatch.delenv("UI_BASE_URL", raising=False)

    config = GlobalConfig(config_dir=tmp_path / "missing")

    assert config.get("harness.default_timeout") == 10000
    assert config.get("harness.visit_default_path_index") == -1
    assert config.get("ui.base_url") == "http://localhost:3000"
    assert config.get("harness.unknown", 3) == 3


def test_file_values_and_env_override(tmp_path, monkeypatch):
    _write_config(tmp_path, "harness.yaml", {
        "ui": {"base_url": "http://example.com"},
        "harness": {"poll_interval": 50},
    })
    monkeypatch.delenv("UI_BASE_URL", raising=False)

    config = GlobalConfig(config_dir=tmp_path)
    assert config.get("ui.base_url") == "http://example.com"
    assert config.get("harness.poll_interval") == 50
    assert config.get("harness.default_timeout") == 10000

    GlobalConfig.reset()
    monkeypatch.setenv("UI_BASE_URL", "http://env.example.com")
    monkeypatch.setenv("HARNESS_POLL_INTERVAL", "25")
    monkeypatch.setenv("BROWSER_HEADLESS", "false")

    config = GlobalConfig(config_dir=tmp_path)
    assert config.get("ui.base_url") == "http://env.example.com"
    assert config.get("harness.poll_interval") == 25
    assert config.get("browser.headless") is False


def test_environment_specific_file(tmp_path, monkeypatch):
    _write_config(tmp_path, "harness.yaml", {"harness": {"default_timeout": 5000, "retry_delay": 10}})
    _write_config(tmp_path, "ci.yaml", {"harness": {"default_timeout": 20000}})
    monkeypatch.delenv("HARNESS_DEFAULT_TIMEOUT", raising=False)
    monkeypatch.setenv("ENV", "ci")

    config = GlobalConfig(config_dir=tmp_path)

    assert config.get("harness.default_timeout") == 20000
    assert config.get("harness.retry_delay") == 10


def test_singleton_and_runtime_overrides(tmp_path):
    config = GlobalConfig(config_dir=tmp_path)
    assert GlobalConfig() is config

    set_config("harness.retry_delay", 5)
    assert get_config("harness.retry_delay") == 5

    snapshot = config.get_all()
    snapshot["harness"]["retry_delay"] = 99
    assert get_config("harness.retry_delay") == 5


def test_reset_restores_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv("HARNESS_POLL_INTERVAL", raising=False)
    GlobalConfig(config_dir=tmp_path)
    set_config("harness.retry_delay", 5)
    set_config("ui.extra.flag", True)

    GlobalConfig.reset()
    monkeypatch.setenv("HARNESS_POLL_INTERVAL", "25")
    GlobalConfig(config_dir=tmp_path)

    GlobalConfig.reset()
    monkeypatch.delenv("HARNESS_POLL_INTERVAL")
    config = GlobalConfig(config_dir=tmp_path)

    assert config.get("harness.retry_delay") == 150
    assert config.get("harness.poll_interval") == 100
    assert config.get("ui.extra") is None
    assert common.DEFAULT_CONFIG["harness"]["retry_delay"] == 150


def test_init_logger_writes_file_sink(tmp_path, monkeypatch):
    monkeypatch.setattr(common, "_logger_initialized", False)
    log_file = tmp_path / "logs" / "harness.log"

    common.init_logger(level="debug", log_file=str(log_file))
    logger.info("route table loaded")
    common.init_logger(level="error")
    logger.debug("still at debug level")

    logger.remove()
    logger.add(sys.stderr)

    content = log_file.read_text(encoding="utf-8")
    assert "route table loaded" in content
    assert "still at debug level" in content
