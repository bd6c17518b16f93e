"""Metric sample types and the declared metric schema."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class MetricSample:
    """A single gauge reading produced by one scrape."""

    name: str
    value: float
    label_pairs: tuple[tuple[str, str], ...] = ()
    kind: str = "gauge"

    @property
    def labels(self) -> Mapping[str, str]:
        return dict(self.label_pairs)

    @property
    def label_values(self) -> list[str]:
        return [v for _, v in self.label_pairs]


@dataclass(frozen=True)
class MetricDescriptor:
    """Name, help text and fixed label keys of one exported metric."""

    name: str
    documentation: str
    label_names: tuple[str, ...] = ()

    def sample(self, value: float, **labels: str) -> MetricSample:
        """Build a sample, enforcing the declared label keys."""
        if set(labels) != set(self.label_names) or len(labels) != len(self.label_names):
            raise ValueError(
                f"metric {self.name!r} expects labels {list(self.label_names)}, "
                f"got {sorted(labels)}"
            )
        return MetricSample(
            name=self.name,
            value=float(value),
            label_pairs=tuple((key, str(labels[key])) for key in self.label_names),
        )


@dataclass(frozen=True)
class MetricSet:
    """All metrics the exporter declares at startup."""

    up: MetricDescriptor
    health_status: MetricDescriptor
    activity_status: MetricDescriptor
    general_stats: MetricDescriptor
    code_demographics: MetricDescriptor
    project_count_demographics: MetricDescriptor
    search_status: MetricDescriptor

    def __iter__(self):
        return iter((
            self.up,
            self.health_status,
            self.activity_status,
            self.general_stats,
            self.code_demographics,
            self.project_count_demographics,
            self.search_status,
        ))


DEFAULT_METRICS = MetricSet(
    up=MetricDescriptor("up", "Was the last sonar query successful."),
    health_status=MetricDescriptor("health_status", "SonarQube Health Status"),
    activity_status=MetricDescriptor("activity_status", "SonarQube Activity Status", ("metric",)),
    general_stats=MetricDescriptor("general_stats", "SonarQube General Statistics", ("metric",)),
    code_demographics=MetricDescriptor(
        "code_demographics", "SonarQube Code Demographics", ("lang",)
    ),
    project_count_demographics=MetricDescriptor(
        "project_count_demographics", "SonarQube Project Count Demographics", ("lang",)
    ),
    search_status=MetricDescriptor("search_status", "SonarQube Search Status", ("metric",)),
)


@dataclass(frozen=True)
class ScrapeResult:
    """Outcome of one scrape: the ordered batch plus availability."""

    samples: tuple[MetricSample, ...]
    available: bool
    error: Exception | None = None
    failed_sources: tuple[str, ...] = field(default=())

    def names(self) -> list[str]:
        return [s.name for s in self.samples]

    def to_dict(self) -> list[dict[str, Any]]:
        """Serialize samples to plain dictionaries."""
        return [
            {
                "name": s.name,
                "value": s.value,
                "labels": dict(s.label_pairs),
                "kind": s.kind,
            }
            for s in self.samples
        ]
