"""CPU usage Grafana dashboard generator.

Subpackages are imported lazily so that ``python -m cpu_dashboard`` only pays
for what the invocation uses.
"""

from __future__ import annotations

import importlib
from types import ModuleType
from typing import Iterable

__version__ = "0.1.0"

__all__ = [
    "config",
    "dashboards",
    "grafana",
]


def _iter_public_names() -> Iterable[str]:
    """Return the public attribute names for :func:`__dir__`."""

    return set(globals()) | set(__all__)


def __getattr__(name: str) -> ModuleType:
    """Lazily import subpackages when they are first accessed."""

    if name not in __all__:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    return importlib.import_module(f".{name}", __name__)


def __dir__() -> list[str]:
    return sorted(_iter_public_names())
