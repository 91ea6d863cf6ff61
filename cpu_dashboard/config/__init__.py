"""Configuration helpers for the dashboard publisher."""

from .environment import GrafanaSettings, InvalidEnvironmentValueError, load_dotenv_file

__all__ = ["GrafanaSettings", "InvalidEnvironmentValueError", "load_dotenv_file"]
