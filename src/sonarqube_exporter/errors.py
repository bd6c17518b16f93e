"""Error types raised while talking to SonarQube and mapping its payloads."""

from __future__ import annotations


class SonarExporterError(Exception):
    """Base class for all exporter errors."""


class TransportError(SonarExporterError):
    """The remote service could not be reached or answered with a non-2xx status."""

    def __init__(self, message: str, *, url: str = "", status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class DecodeError(SonarExporterError):
    """A response body does not parse into the expected structure."""


class ParseError(SonarExporterError):
    """A derived field does not contain a usable numeric value."""
