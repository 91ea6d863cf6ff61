"""Grafana HTTP API client."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Optional

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from ..config import GrafanaSettings
from ..config.environment import DEFAULT_TIMEOUT_SECONDS
from ..utils.http import HTTPSession, basic_auth_header

LOGGER = logging.getLogger(__name__)
_TRACER = trace.get_tracer(__name__)

DASHBOARDS_API_PATH = "api/dashboards/db"


@dataclass(frozen=True, slots=True)
class PublishResult:
    """Outcome of a single dashboard upsert."""

    success: bool
    url: str
    grafana_url: str
    status_code: Optional[int] = None
    body: str = ""
    error: Optional[str] = None


@dataclass(slots=True)
class GrafanaClient:
    """Upload dashboards to Grafana using basic authentication.

    The upsert is a single best-effort call: there is no retry, and failures
    are returned as a :class:`PublishResult` instead of being raised.
    """

    base_url: str
    username: str
    password: str
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    session: HTTPSession = field(default_factory=HTTPSession)

    def __post_init__(self) -> None:
        self.base_url = self.base_url.rstrip("/") + "/"

    @classmethod
    def from_settings(cls, settings: GrafanaSettings, session: Optional[HTTPSession] = None) -> "GrafanaClient":
        return cls(
            base_url=settings.url,
            username=settings.username,
            password=settings.password,
            timeout=settings.timeout,
            session=session or HTTPSession(),
        )

    @property
    def dashboards_url(self) -> str:
        return f"{self.base_url}{DASHBOARDS_API_PATH}"

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": basic_auth_header(self.username, self.password),
        }

    def publish(self, serialized_document: str) -> PublishResult:
        """Create or overwrite the dashboard held in ``serialized_document``.

        Raises :class:`json.JSONDecodeError` if the document is not valid JSON.
        """

        payload = {"dashboard": json.loads(serialized_document), "overwrite": True}
        url = self.dashboards_url

        with _TRACER.start_as_current_span("grafana.publish") as span:
            span.set_attribute("http.url", url)
            LOGGER.info("Publishing dashboard to %s", url)
            try:
                response = self.session.post(
                    url,
                    json=payload,
                    headers=self._headers(),
                    timeout=self.timeout,
                )
            except OSError as exc:
                LOGGER.warning("Grafana request to %s failed: %s", url, exc)
                span.record_exception(exc)
                span.set_status(Status(StatusCode.ERROR, str(exc)))
                return PublishResult(
                    success=False, url=url, grafana_url=self.base_url, error=str(exc)
                )

            span.set_attribute("http.status_code", response.status_code)
            if response.status_code != 200:
                LOGGER.warning(
                    "Grafana rejected dashboard: %s %s", response.status_code, response.text
                )
                span.set_status(Status(StatusCode.ERROR, f"HTTP {response.status_code}"))
                return PublishResult(
                    success=False,
                    url=url,
                    grafana_url=self.base_url,
                    status_code=response.status_code,
                    body=response.text,
                )

        return PublishResult(
            success=True,
            url=url,
            grafana_url=self.base_url,
            status_code=200,
            body=response.text,
        )
