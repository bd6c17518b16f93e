"""Configuration loading for sonarqube_exporter."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


@dataclass
class SonarConfig:
    """Remote SonarQube server settings."""

    url: str = ""
    username: str = ""
    password: str = ""
    timeout_seconds: float | None = 10.0


@dataclass
class ServerConfig:
    """Exposition listener settings."""

    address: str = "0.0.0.0"
    port: int = 2112


@dataclass
class ScrapeConfig:
    """Per-scrape behaviour."""

    namespace: str = "sonarqube"
    concurrent: bool = False


@dataclass
class ExporterConfig:
    """Top-level exporter configuration."""

    sonar: SonarConfig = field(default_factory=SonarConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    scrape: ScrapeConfig = field(default_factory=ScrapeConfig)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides on top of file values."""
    env_map = {
        "SONAR_URL": ("sonar", "url"),
        "SONAR_USER": ("sonar", "username"),
        "SONAR_PASSWORD": ("sonar", "password"),
        "SONAR_TIMEOUT": ("sonar", "timeout_seconds"),
        "SONAR_EXPORTER_ADDRESS": ("server", "address"),
        "SONAR_EXPORTER_PORT": ("server", "port"),
        "SONAR_EXPORTER_NAMESPACE": ("scrape", "namespace"),
    }
    for env_key, path in env_map.items():
        value = os.environ.get(env_key)
        if value is not None:
            obj = data
            for part in path[:-1]:
                obj = obj.setdefault(part, {})
            final_key = path[-1]
            # coerce numeric values
            if final_key == "timeout_seconds":
                obj[final_key] = float(value) if value else None
            elif final_key == "port":
                obj[final_key] = int(value)
            else:
                obj[final_key] = value
    return data


def _section(cls: type, data: dict[str, Any]) -> Any:
    return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})


def _dict_to_config(data: dict[str, Any]) -> ExporterConfig:
    """Convert a raw dictionary to an ExporterConfig dataclass."""
    return ExporterConfig(
        sonar=_section(SonarConfig, data.get("sonar") or {}),
        server=_section(ServerConfig, data.get("server") or {}),
        scrape=_section(ScrapeConfig, data.get("scrape") or {}),
    )


def load_config(path: str | Path | None = None) -> ExporterConfig:
    """Load configuration from a YAML file with environment overrides.

    Looks for ``sonarqube_exporter.yaml`` in the current directory if *path*
    is None. A missing file is not an error: the exporter then runs on
    defaults plus whatever ``SONAR_*`` variables are set, and an empty URL
    only fails when the first scrape is attempted.
    """
    data: dict[str, Any] = {}
    if path is None:
        path = Path("sonarqube_exporter.yaml")
    else:
        path = Path(path)

    if path.exists():
        with open(path, encoding="utf-8") as fh:
            loaded = yaml.safe_load(fh)
            if isinstance(loaded, dict):
                data = loaded

    data = _apply_env_overrides(data)
    return _dict_to_config(data)
