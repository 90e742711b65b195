"""
Record sources for lab request metrics.

Re-exports the source interfaces and concrete sources, and keeps the registry the
`report --source` CLI option resolves names against.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List

from lab_metrics.sources.abstract import AbstractRecordSource, RecordSource
from lab_metrics.sources.json_file import JsonFileSource
from lab_metrics.sources.synthetic import SyntheticSource, generate_records


def _source_factories() -> Dict[str, Callable[..., RecordSource]]:
    """Registry of available record sources."""
    return {
        "json": lambda **options: JsonFileSource(**options),
        "sample": lambda **options: SyntheticSource(**options),
    }


def available_sources() -> List[str]:
    """List available source names."""
    return sorted(_source_factories().keys())


def resolve_source(name: str, **options: Any) -> RecordSource:
    factories = _source_factories()
    if name not in factories:
        raise ValueError(f"Unknown record source '{name}'. Available: {', '.join(factories)}")
    return factories[name](**options)


__all__ = [
    # Abstracts
    "AbstractRecordSource",
    "RecordSource",
    # Concrete sources
    "JsonFileSource",
    "SyntheticSource",
    "generate_records",
    # Registry
    "available_sources",
    "resolve_source",
]
