"""Typed records decoded from SonarQube web API responses."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from ..errors import DecodeError

logger = logging.getLogger(__name__)


def _require_mapping(payload: Any, what: str) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise DecodeError(f"{what}: expected a JSON object, got {type(payload).__name__}")
    return payload


def _int_field(data: dict[str, Any], key: str, what: str, default: int | None = None) -> int:
    value = data.get(key, default)
    # bool is an int subclass but never a valid count
    if isinstance(value, bool) or not isinstance(value, int):
        raise DecodeError(f"{what}: field {key!r} must be an integer, got {value!r}")
    return value


def _str_field(data: dict[str, Any], key: str, what: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise DecodeError(f"{what}: field {key!r} must be a string, got {value!r}")
    return value


@dataclass(frozen=True)
class HealthStatus:
    """Response of ``api/system/health``."""

    health: str
    causes: tuple[str, ...] = ()

    @classmethod
    def from_json(cls, payload: Any) -> HealthStatus:
        data = _require_mapping(payload, "system health")
        causes = data.get("causes") or []
        if not isinstance(causes, list):
            raise DecodeError("system health: field 'causes' must be a list")
        return cls(
            health=_str_field(data, "health", "system health"),
            causes=tuple(
                c.get("message", "") if isinstance(c, dict) else str(c) for c in causes
            ),
        )


@dataclass(frozen=True)
class ActivityStatus:
    """Compute engine queue counters from ``api/ce/activity_status``."""

    pending: int
    failing: int
    in_progress: int

    @classmethod
    def from_json(cls, payload: Any) -> ActivityStatus:
        data = _require_mapping(payload, "activity status")
        return cls(
            pending=_int_field(data, "pending", "activity status"),
            failing=_int_field(data, "failing", "activity status"),
            in_progress=_int_field(data, "inProgress", "activity status"),
        )


@dataclass(frozen=True)
class LanguageCount:
    """One entry of a per-language breakdown."""

    language: str
    value: int


def _language_counts(data: dict[str, Any], key: str, value_key: str) -> tuple[LanguageCount, ...]:
    entries = data.get(key) or []
    if not isinstance(entries, list):
        raise DecodeError(f"statistics: field {key!r} must be a list")
    counts = []
    for entry in entries:
        entry = _require_mapping(entry, f"statistics.{key}")
        counts.append(LanguageCount(
            language=_str_field(entry, "language", f"statistics.{key}"),
            value=_int_field(entry, value_key, f"statistics.{key}"),
        ))
    return tuple(counts)


@dataclass(frozen=True)
class Statistics:
    """Aggregate instance statistics."""

    user_count: int
    project_count: int
    ncloc: int
    ncloc_by_language: tuple[LanguageCount, ...] = ()
    project_count_by_language: tuple[LanguageCount, ...] = ()

    @classmethod
    def from_json(cls, payload: Any) -> Statistics:
        data = _require_mapping(payload, "statistics")
        return cls(
            user_count=_int_field(data, "userCount", "statistics"),
            project_count=_int_field(data, "projectCount", "statistics"),
            ncloc=_int_field(data, "ncloc", "statistics"),
            ncloc_by_language=_language_counts(data, "nclocByLanguage", "ncloc"),
            project_count_by_language=_language_counts(data, "projectCountByLanguage", "count"),
        )


@dataclass(frozen=True)
class SearchState:
    """The ``Search State`` section of the system information."""

    state: str
    cpu_usage: float | None = None
    disk_available: str | None = None

    @classmethod
    def from_json(cls, payload: Any) -> SearchState:
        data = _require_mapping(payload, "search state")
        cpu = data.get("CPU Usage (%)")
        if cpu is not None and (isinstance(cpu, bool) or not isinstance(cpu, (int, float))):
            logger.debug("Ignoring non-numeric search CPU usage %r", cpu)
            cpu = None
        disk = data.get("Disk Available")
        if disk is not None and not isinstance(disk, str):
            disk = str(disk)
        return cls(
            state=str(data.get("State", "")),
            cpu_usage=float(cpu) if cpu is not None else None,
            disk_available=disk,
        )


@dataclass(frozen=True)
class SystemInfo:
    """Response of ``api/system/info``."""

    health: str
    statistics: Statistics
    search: SearchState | None = None

    @classmethod
    def from_json(cls, payload: Any) -> SystemInfo:
        data = _require_mapping(payload, "system info")
        if "Statistics" not in data:
            raise DecodeError("system info: missing 'Statistics' section")
        search = data.get("Search State")
        if search is not None and not isinstance(search, dict):
            logger.debug("Ignoring malformed search state section: %r", search)
            search = None
        return cls(
            health=str(data.get("Health", "")),
            statistics=Statistics.from_json(data["Statistics"]),
            search=SearchState.from_json(search) if search is not None else None,
        )
