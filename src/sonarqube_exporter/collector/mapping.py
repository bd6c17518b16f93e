"""Conversion of decoded SonarQube records into metric samples.

Every function here is pure: it takes a record plus the declared
:class:`MetricSet` and returns new :class:`MetricSample` objects.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Iterator

from ..api.models import ActivityStatus, HealthStatus, LanguageCount, SearchState, Statistics, SystemInfo
from ..errors import ParseError
from .base import MetricSample, MetricSet

logger = logging.getLogger(__name__)

GREEN = "GREEN"


def health_value(status: str) -> float:
    """Map a SonarQube health colour to 1.0 (GREEN) or 0.0 (anything else)."""
    return 1.0 if status == GREEN else 0.0


def parse_leading_number(text: str) -> float:
    """Return the numeric value of the first whitespace-delimited token.

    ``"120 MB"`` gives ``120.0``; the unit is discarded, not converted.
    """
    tokens = text.split()
    if not tokens:
        raise ParseError(f"no numeric token in {text!r}")
    token = tokens[0].replace(",", "")
    try:
        value = float(token)
    except ValueError:
        raise ParseError(f"no numeric token in {text!r}") from None
    if not math.isfinite(value):
        raise ParseError(f"non-finite value in {text!r}")
    return value


def map_health(record: HealthStatus, metrics: MetricSet) -> list[MetricSample]:
    return [metrics.health_status.sample(health_value(record.health))]


def map_activity_status(record: ActivityStatus, metrics: MetricSet) -> list[MetricSample]:
    d = metrics.activity_status
    return [
        d.sample(record.pending, metric="pending"),
        d.sample(record.failing, metric="failing"),
        d.sample(record.in_progress, metric="inProgress"),
    ]


def map_general_stats(stats: Statistics, metrics: MetricSet) -> list[MetricSample]:
    d = metrics.general_stats
    return [
        d.sample(stats.user_count, metric="UserCount"),
        d.sample(stats.project_count, metric="ProjectCount"),
        d.sample(stats.ncloc, metric="NCLoC"),
    ]


def iter_language_values(entries: Iterable[LanguageCount]) -> Iterator[tuple[str, float]]:
    """Yield ``(language, value)`` pairs in payload order."""
    for entry in entries:
        yield entry.language, float(entry.value)


def map_code_demographics(stats: Statistics, metrics: MetricSet) -> list[MetricSample]:
    d = metrics.code_demographics
    return [d.sample(value, lang=lang) for lang, value in iter_language_values(stats.ncloc_by_language)]


def map_project_count_demographics(stats: Statistics, metrics: MetricSet) -> list[MetricSample]:
    d = metrics.project_count_demographics
    return [
        d.sample(value, lang=lang)
        for lang, value in iter_language_values(stats.project_count_by_language)
    ]


def map_search_state(state: SearchState, metrics: MetricSet) -> list[MetricSample]:
    """Health, CPU usage and free disk of the search subsystem.

    CPU and disk are optional in the payload; an absent or unparseable
    value drops only that one sample.
    """
    d = metrics.search_status
    samples = [d.sample(health_value(state.state), metric="health")]

    if state.cpu_usage is not None:
        samples.append(d.sample(state.cpu_usage, metric="cpuUsage"))

    if state.disk_available is not None:
        try:
            disk = parse_leading_number(state.disk_available)
        except ParseError as exc:
            logger.debug("Skipping search disk sample: %s", exc)
        else:
            samples.append(d.sample(disk, metric="diskAvailable"))

    return samples


def map_system_info(info: SystemInfo, metrics: MetricSet) -> list[MetricSample]:
    samples = map_general_stats(info.statistics, metrics)
    samples.extend(map_code_demographics(info.statistics, metrics))
    samples.extend(map_project_count_demographics(info.statistics, metrics))
    if info.search is not None:
        samples.extend(map_search_state(info.search, metrics))
    return samples
