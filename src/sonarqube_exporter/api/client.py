"""HTTP client for the SonarQube web API."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any

import requests
import urllib3

from ..errors import DecodeError, TransportError
from .models import ActivityStatus, HealthStatus, SystemInfo

logger = logging.getLogger(__name__)

HEALTH_PATH = "api/system/health"
ACTIVITY_STATUS_PATH = "api/ce/activity_status"
SYSTEM_INFO_PATH = "api/system/info"


@dataclass(frozen=True)
class Endpoint:
    """Where the SonarQube server lives and who we authenticate as."""

    base_url: str
    username: str = ""
    password: str = field(default="", repr=False)

    def url_for(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"

    @property
    def auth(self) -> tuple[str, str] | None:
        if not self.username and not self.password:
            return None
        return (self.username, self.password)


class SonarClient:
    """Issues authenticated GET requests and decodes the JSON bodies.

    Every call is a single attempt: there are no retries and nothing is
    cached between calls. A ``requests.Session`` may be injected, otherwise
    one is created and owned by the client.
    """

    def __init__(
        self,
        endpoint: Endpoint,
        *,
        timeout: float | None = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._timeout = timeout
        self._owns_session = session is None
        self._session = session if session is not None else requests.Session()

    @property
    def endpoint(self) -> Endpoint:
        return self._endpoint

    def fetch(self, path: str) -> bytes:
        """GET *path* relative to the base URL and return the raw body."""
        url = self._endpoint.url_for(path)
        try:
            resp = self._session.get(url, auth=self._endpoint.auth, timeout=self._timeout)
        except (requests.RequestException, urllib3.exceptions.HTTPError) as exc:
            raise TransportError(f"GET {url} failed: {exc}", url=url) from exc

        if not 200 <= resp.status_code < 300:
            raise TransportError(
                f"GET {url} returned HTTP {resp.status_code}",
                url=url,
                status_code=resp.status_code,
            )
        logger.debug("GET %s -> %d (%d bytes)", url, resp.status_code, len(resp.content))
        return resp.content

    def _get_json(self, path: str) -> Any:
        body = self.fetch(path)
        try:
            return json.loads(body)
        except (ValueError, RecursionError) as exc:
            raise DecodeError(f"{path}: response is not valid JSON: {exc}") from exc

    def get_health(self) -> HealthStatus:
        return HealthStatus.from_json(self._get_json(HEALTH_PATH))

    def get_activity_status(self) -> ActivityStatus:
        return ActivityStatus.from_json(self._get_json(ACTIVITY_STATUS_PATH))

    def get_system_info(self) -> SystemInfo:
        return SystemInfo.from_json(self._get_json(SYSTEM_INFO_PATH))

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> SonarClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
