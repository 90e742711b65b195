"""
Record source interfaces for lab request metrics.

A record source stands in for the storage collaborator: it hands over complete,
already-fetched solution and delivery collections. The metrics engine never
queries storage itself; whoever owns fetch timing calls `fetch()` and recomputes
from scratch.
"""

from __future__ import annotations

import abc
from typing import Protocol, runtime_checkable

from lab_metrics.domain.models import RequestRecords


@runtime_checkable
class RecordSource(Protocol):
    """
    Common interface all record sources implement.

    Attributes
    ----------
    name : str
        A short machine-friendly identifier.
    description : str
        A human-friendly summary of where records come from.
    """

    name: str
    description: str

    def fetch(self) -> RequestRecords:
        """
        Return the full, current record collections.

        Raises
        ------
        RecordSourceError
            When the collections cannot be produced.
        """
        ...


class AbstractRecordSource(abc.ABC):
    """
    Optional ABC helper for class-based implementations.

    Subclasses should set `name` and `description` and implement `fetch`.
    """

    name: str
    description: str

    @abc.abstractmethod
    def fetch(self) -> RequestRecords:  # pragma: no cover - interface only
        """Return solution and delivery records."""
        raise NotImplementedError


__all__ = [
    "AbstractRecordSource",
    "RecordSource",
]
