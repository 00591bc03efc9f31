# src/tsktrack/namespace.py

from __future__ import annotations

from dataclasses import dataclass

from .config import Settings


@dataclass(frozen=True, slots=True)
class Namespace:
    name: str
    is_current: bool


def list_namespaces(settings: Settings) -> list[Namespace]:
    """Every subdirectory of the data directory is a namespace."""
    base = settings.data_dir
    if not base.is_dir():
        return []
    out = [
        Namespace(name=entry.name, is_current=entry.name == settings.namespace)
        for entry in base.iterdir()
        if entry.is_dir() and entry.name != settings.log_dir.name
    ]
    return sorted(out, key=lambda ns: ns.name)
