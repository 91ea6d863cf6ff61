"""Environment configuration utilities for the dashboard publisher."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, MutableMapping, Optional
import os

DEFAULT_GRAFANA_URL = "http://localhost:3000"
DEFAULT_USERNAME = "admin"
DEFAULT_PASSWORD = "admin"
DEFAULT_TIMEOUT_SECONDS = 10.0


class InvalidEnvironmentValueError(RuntimeError):
    """Raised when an environment variable cannot be parsed into the expected type."""


def load_dotenv_file(path: str | Path, *, override: bool = False, env: Optional[MutableMapping[str, str]] = None) -> None:
    """Load key/value pairs from a dotenv file into the provided environment mapping.

    Parameters
    ----------
    path:
        The path to the dotenv file.
    override:
        If ``True``, values from the dotenv file replace existing environment
        variables. Otherwise existing values are preserved.
    env:
        Mutable mapping that will receive the variables. Defaults to
        :data:`os.environ`.
    """

    environment: MutableMapping[str, str] = env if env is not None else os.environ
    dotenv_path = Path(path)
    if not dotenv_path.exists():
        raise FileNotFoundError(f"Dotenv file '{dotenv_path}' does not exist")

    for raw_line in dotenv_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            raise InvalidEnvironmentValueError(
                f"Invalid line in dotenv file '{dotenv_path}': '{raw_line}'"
            )
        key, raw_value = line.split("=", 1)
        key = key.strip()
        value = raw_value.strip().strip('"').strip("'")
        if key in environment and not override:
            continue
        environment[key] = value


@dataclass(slots=True)
class GrafanaSettings:
    """Connection settings for the Grafana HTTP API."""

    url: str = DEFAULT_GRAFANA_URL
    username: str = DEFAULT_USERNAME
    password: str = DEFAULT_PASSWORD
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "GrafanaSettings":
        mapping = env if env is not None else os.environ

        def optional(name: str, default: str) -> str:
            value = mapping.get(name)
            if value is None or value == "":
                return default
            return value

        raw_timeout = mapping.get("GRAFANA_TIMEOUT")
        timeout = DEFAULT_TIMEOUT_SECONDS
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError as exc:
                raise InvalidEnvironmentValueError(
                    f"GRAFANA_TIMEOUT must be a number of seconds, got '{raw_timeout}'"
                ) from exc

        return cls(
            url=optional("GRAFANA_URL", DEFAULT_GRAFANA_URL),
            username=optional("GRAFANA_USER", DEFAULT_USERNAME),
            password=optional("GRAFANA_PASSWORD", DEFAULT_PASSWORD),
            timeout=timeout,
        )
