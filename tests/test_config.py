"""Tests for YAML configuration and environment overrides."""

import pytest

from hostfacts.core.config import CollectorConfig, Config, LoggingConfig


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "HOSTFACTS_BACKEND",
        "HOSTFACTS_HWADDR_STRATEGY",
        "HOSTFACTS_FQDN_LEN",
        "HOSTFACTS_LOG_LEVEL",
        "HOSTFACTS_LOG_FILE",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    config = Config()
    assert config.collector == CollectorConfig()
    assert config.collector.backend == "auto"
    assert config.collector.fqdn_len == 512
    assert config.logging.level == "WARNING"


def test_missing_file_gives_defaults(tmp_path):
    config = Config.from_yaml(str(tmp_path / "missing.yaml"))
    assert config.collector.hwaddr_strategy == "auto"


def test_load_yaml(tmp_path):
    path = tmp_path / "hostfacts.yaml"
    path.write_text(
        "collector:\n"
        "  backend: psutil\n"
        "  hwaddr_strategy: neighbor\n"
        "logging:\n"
        "  level: DEBUG\n"
    )

    config = Config.from_yaml(str(path))

    assert config.collector.backend == "psutil"
    assert config.collector.hwaddr_strategy == "neighbor"
    assert config.collector.fqdn_len == 512
    assert config.logging.level == "DEBUG"


def test_empty_yaml(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert Config.from_yaml(str(path)).collector.backend == "auto"


def test_env_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("HOSTFACTS_BACKEND", "linux")
    monkeypatch.setenv("HOSTFACTS_HWADDR_STRATEGY", "scan")
    monkeypatch.setenv("HOSTFACTS_FQDN_LEN", "64")
    monkeypatch.setenv("HOSTFACTS_LOG_LEVEL", "INFO")
    monkeypatch.setenv("HOSTFACTS_LOG_FILE", "/tmp/hostfacts.log")

    config = Config.from_yaml(str(tmp_path / "missing.yaml"))

    assert config.collector.backend == "linux"
    assert config.collector.hwaddr_strategy == "scan"
    assert config.collector.fqdn_len == 64
    assert config.logging.level == "INFO"
    assert config.logging.file_path == "/tmp/hostfacts.log"


def test_round_trip(tmp_path):
    config = Config(
        collector=CollectorConfig(backend="psutil", ifconf_max_rounds=4),
        logging=LoggingConfig(level="ERROR", backup_count=2),
    )
    path = tmp_path / "out.yaml"
    config.to_yaml(str(path))

    loaded = Config.from_yaml(str(path))

    assert loaded.collector == config.collector
    assert loaded.logging.level == "ERROR"
    assert loaded.logging.backup_count == 2


def test_unknown_key_rejected(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("collector:\n  colour: blue\n")
    with pytest.raises(TypeError):
        Config.from_yaml(str(path))
