"""Tests for the configuration module."""

import os
import tempfile

import yaml

from sonarqube_exporter.config import (
    ExporterConfig,
    load_config,
)


def _clear_env(monkeypatch):
    for key in (
        "SONAR_URL",
        "SONAR_USER",
        "SONAR_PASSWORD",
        "SONAR_TIMEOUT",
        "SONAR_EXPORTER_ADDRESS",
        "SONAR_EXPORTER_PORT",
        "SONAR_EXPORTER_NAMESPACE",
    ):
        monkeypatch.delenv(key, raising=False)


def test_load_config_defaults(monkeypatch):
    """Loading from a non-existent file returns defaults."""
    _clear_env(monkeypatch)
    cfg = load_config("/tmp/nonexistent_sonarqube_exporter.yaml")
    assert isinstance(cfg, ExporterConfig)
    assert cfg.sonar.url == ""
    assert cfg.sonar.username == ""
    assert cfg.sonar.password == ""
    assert cfg.sonar.timeout_seconds == 10.0
    assert cfg.server.port == 2112
    assert cfg.scrape.namespace == "sonarqube"
    assert cfg.scrape.concurrent is False


def test_load_config_from_yaml(monkeypatch):
    """Loading from a YAML file populates values."""
    _clear_env(monkeypatch)
    data = {
        "sonar": {"url": "http://sonar:9000", "username": "metrics", "timeout_seconds": 3},
        "server": {"port": 9100, "unknown": True},
        "scrape": {"concurrent": True},
    }
    with tempfile.NamedTemporaryFile("w", suffix=".yaml", delete=False) as fh:
        yaml.dump(data, fh)
        path = fh.name

    try:
        cfg = load_config(path)
        assert cfg.sonar.url == "http://sonar:9000"
        assert cfg.sonar.username == "metrics"
        assert cfg.sonar.timeout_seconds == 3
        assert cfg.server.port == 9100
        assert cfg.scrape.concurrent is True
    finally:
        os.unlink(path)


def test_env_override(monkeypatch):
    """Environment variables override YAML values."""
    _clear_env(monkeypatch)
    data = {"sonar": {"url": "http://file:9000"}}
    with tempfile.NamedTemporaryFile("w", suffix=".yaml", delete=False) as fh:
        yaml.dump(data, fh)
        path = fh.name

    try:
        monkeypatch.setenv("SONAR_URL", "http://env:9000")
        monkeypatch.setenv("SONAR_USER", "admin")
        monkeypatch.setenv("SONAR_PASSWORD", "s3cret")
        monkeypatch.setenv("SONAR_EXPORTER_PORT", "9200")
        monkeypatch.setenv("SONAR_TIMEOUT", "")
        cfg = load_config(path)
        assert cfg.sonar.url == "http://env:9000"
        assert cfg.sonar.username == "admin"
        assert cfg.sonar.password == "s3cret"
        assert cfg.server.port == 9200
        assert cfg.sonar.timeout_seconds is None
    finally:
        os.unlink(path)
