"""
JSON file record source.

Reads an export of both record families:

    {"solutions": [{...}, ...], "deliveries": [{...}, ...]}

Either key may be omitted. Rows are passed through untouched; field selection is
the normalizer's job.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from lab_metrics.domain.models import RequestRecords
from lab_metrics.errors import RecordSourceError
from lab_metrics.sources.abstract import AbstractRecordSource
from lab_metrics.utils.logging import get_logger

log = get_logger(__name__)


class JsonFileSource(AbstractRecordSource):
    """Load solution and delivery records from one JSON document."""

    name: str = "json"
    description: str = "Solution and delivery records exported to a JSON file."

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def fetch(self) -> RequestRecords:
        try:
            with self.path.open("r", encoding="utf-8") as f:
                document: Any = json.load(f)
        except FileNotFoundError:
            raise RecordSourceError(f"Record file not found: {self.path}") from None
        except json.JSONDecodeError as exc:
            raise RecordSourceError(f"Record file {self.path} is not valid JSON: {exc}") from exc

        if not isinstance(document, dict):
            raise RecordSourceError(
                f"Record file {self.path} must contain an object with "
                "'solutions' and/or 'deliveries' arrays"
            )

        collections = {}
        for key in ("solutions", "deliveries"):
            rows = document.get(key, [])
            if not isinstance(rows, list):
                raise RecordSourceError(f"'{key}' in {self.path} must be an array")
            collections[key] = rows

        log.info(
            "Records loaded",
            extra={
                "source": self.name,
                "path": str(self.path),
                "solutions": len(collections["solutions"]),
                "deliveries": len(collections["deliveries"]),
            },
        )
        return RequestRecords(**collections)


__all__ = ["JsonFileSource"]
