"""Prometheus exporter for SonarQube server metrics."""

__version__ = "0.3.0"
