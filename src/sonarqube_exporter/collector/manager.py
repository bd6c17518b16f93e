"""Scrape orchestration: query each data source and assemble one batch."""

from __future__ import annotations

import enum
import logging
from concurrent.futures import ThreadPoolExecutor
from contextlib import closing
from dataclasses import dataclass
from typing import Any, Callable

from ..api.client import Endpoint, SonarClient
from ..config import ExporterConfig
from ..errors import DecodeError, TransportError
from .base import DEFAULT_METRICS, MetricSample, MetricSet, ScrapeResult
from .mapping import map_activity_status, map_health, map_system_info

logger = logging.getLogger(__name__)

ClientFactory = Callable[[], Any]


class ScrapeState(enum.Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    ASSEMBLING = "assembling"
    DONE = "done"


@dataclass(frozen=True)
class DataSource:
    """One logical remote query and the mapper for its record."""

    name: str
    fetch: Callable[[Any], Any]
    mapper: Callable[[Any, MetricSet], list[MetricSample]]


# Fail-fast: if this source errors the scrape reports up=0 and stops.
PRIMARY_SOURCE = DataSource("health", lambda client: client.get_health(), map_health)

# Best-effort: failures are logged and the source's samples omitted.
SECONDARY_SOURCES: tuple[DataSource, ...] = (
    DataSource("activity_status", lambda client: client.get_activity_status(), map_activity_status),
    DataSource("system_info", lambda client: client.get_system_info(), map_system_info),
)


class _Scrape:
    """Per-invocation scrape state. Never shared between scrapes."""

    def __init__(self) -> None:
        self.state = ScrapeState.IDLE
        self.records: list[tuple[DataSource, Any]] = []
        self.samples: list[MetricSample] = []
        self.failed: list[str] = []

    def advance(self, state: ScrapeState) -> None:
        logger.debug("scrape %s -> %s", self.state.value, state.value)
        self.state = state


class Collector:
    """Runs one scrape against SonarQube per call to :meth:`scrape`.

    A fresh client is obtained from *client_factory* for every source of
    every scrape, so overlapping scrapes never share a connection or a
    partially built batch.
    """

    def __init__(
        self,
        client_factory: ClientFactory,
        metrics: MetricSet = DEFAULT_METRICS,
        *,
        concurrent: bool = False,
        primary: DataSource = PRIMARY_SOURCE,
        secondaries: tuple[DataSource, ...] = SECONDARY_SOURCES,
    ) -> None:
        self._client_factory = client_factory
        self._metrics = metrics
        self._concurrent = concurrent
        self._primary = primary
        self._secondaries = secondaries

    @classmethod
    def from_config(cls, config: ExporterConfig, metrics: MetricSet = DEFAULT_METRICS) -> Collector:
        endpoint = Endpoint(
            base_url=config.sonar.url,
            username=config.sonar.username,
            password=config.sonar.password,
        )

        def factory() -> SonarClient:
            return SonarClient(endpoint, timeout=config.sonar.timeout_seconds)

        return cls(factory, metrics, concurrent=config.scrape.concurrent)

    @property
    def metrics(self) -> MetricSet:
        return self._metrics

    def _fetch(self, source: DataSource) -> Any:
        with closing(self._client_factory()) as client:
            return source.fetch(client)

    def _fetch_secondary(self, source: DataSource) -> tuple[Any, bool]:
        try:
            return self._fetch(source), True
        except (TransportError, DecodeError) as exc:
            logger.warning("Source %s failed: %s", source.name, exc)
        except Exception:
            logger.exception("Source %s failed unexpectedly", source.name)
        return None, False

    def _fetch_secondaries(self) -> list[tuple[Any, bool]]:
        if not self._concurrent or len(self._secondaries) < 2:
            return [self._fetch_secondary(s) for s in self._secondaries]
        with ThreadPoolExecutor(max_workers=len(self._secondaries)) as pool:
            futures = [pool.submit(self._fetch_secondary, s) for s in self._secondaries]
            return [f.result() for f in futures]

    def scrape(self) -> ScrapeResult:
        """Collect one batch. Never raises for remote failures."""
        run = _Scrape()
        up = self._metrics.up

        run.advance(ScrapeState.FETCHING)
        try:
            primary_record = self._fetch(self._primary)
        except (TransportError, DecodeError) as exc:
            logger.error("Primary source %s failed: %s", self._primary.name, exc)
            run.advance(ScrapeState.DONE)
            return ScrapeResult(
                samples=(up.sample(0.0),),
                available=False,
                error=exc,
                failed_sources=(self._primary.name,),
            )

        run.records.append((self._primary, primary_record))
        for source, (record, ok) in zip(self._secondaries, self._fetch_secondaries()):
            if ok:
                run.records.append((source, record))
            else:
                run.failed.append(source.name)

        run.advance(ScrapeState.ASSEMBLING)
        run.samples.append(up.sample(1.0))
        for source, record in run.records:
            try:
                run.samples.extend(source.mapper(record, self._metrics))
            except Exception:
                if source is self._primary:
                    raise
                logger.exception("Mapping %s failed", source.name)
                run.failed.append(source.name)

        run.advance(ScrapeState.DONE)
        return ScrapeResult(
            samples=tuple(run.samples),
            available=True,
            failed_sources=tuple(run.failed),
        )
