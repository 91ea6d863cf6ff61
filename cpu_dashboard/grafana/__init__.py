"""Grafana API integration."""

from .client import GrafanaClient, PublishResult

__all__ = ["GrafanaClient", "PublishResult"]
