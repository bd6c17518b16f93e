"""Prometheus exposition of scrape results via ``prometheus_client``."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from http.server import HTTPServer

from prometheus_client import CollectorRegistry, generate_latest, start_http_server
from prometheus_client.core import GaugeMetricFamily

from ..collector.base import MetricDescriptor, MetricSample
from ..collector.manager import Collector

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "sonarqube"


def full_name(namespace: str, name: str) -> str:
    return f"{namespace}_{name}" if namespace else name


class SonarQubeCollector:
    """Custom ``prometheus_client`` collector that scrapes on every pull.

    :meth:`describe` advertises the fixed metric schema without touching the
    network; :meth:`collect` runs a full scrape and yields one gauge family
    per metric name that produced samples, in declaration order.
    """

    def __init__(self, collector: Collector, namespace: str = DEFAULT_NAMESPACE) -> None:
        self._collector = collector
        self._namespace = namespace

    def _family(self, descriptor: MetricDescriptor) -> GaugeMetricFamily:
        return GaugeMetricFamily(
            full_name(self._namespace, descriptor.name),
            descriptor.documentation,
            labels=list(descriptor.label_names),
        )

    def describe(self) -> Iterator[GaugeMetricFamily]:
        for descriptor in self._collector.metrics:
            yield self._family(descriptor)

    def collect(self) -> Iterator[GaugeMetricFamily]:
        result = self._collector.scrape()
        if not result.available:
            logger.debug("SonarQube unavailable: %s", result.error)

        by_name: dict[str, list[MetricSample]] = {}
        for sample in result.samples:
            by_name.setdefault(sample.name, []).append(sample)

        for descriptor in self._collector.metrics:
            samples = by_name.get(descriptor.name)
            if not samples:
                continue
            family = self._family(descriptor)
            for sample in samples:
                family.add_metric(sample.label_values, sample.value)
            yield family


def build_registry(collector: Collector, namespace: str = DEFAULT_NAMESPACE) -> CollectorRegistry:
    """Create a dedicated registry holding only the SonarQube collector."""
    registry = CollectorRegistry(auto_describe=True)
    registry.register(SonarQubeCollector(collector, namespace))
    return registry


def render(registry: CollectorRegistry) -> bytes:
    """Scrape once and return the text exposition format."""
    return generate_latest(registry)


def serve(registry: CollectorRegistry, port: int, address: str = "0.0.0.0") -> HTTPServer:
    """Start the exposition listener in a background thread.

    Returns the server so the caller can ``shutdown()`` it.
    """
    server, _thread = start_http_server(port, addr=address, registry=registry)
    logger.info("Serving metrics on http://%s:%d/metrics", address, port)
    return server
