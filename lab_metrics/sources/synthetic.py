"""
Synthetic record source.

Generates deterministic pseudo-random solution and delivery requests shaped like
the storage client's rows (camelCase keys). A small share of rows is deliberately
malformed (bad timestamps, negative or non-numeric amounts) so dashboards and
tests exercise the data-quality counters.
"""

from __future__ import annotations

import random
from datetime import UTC, date, datetime, time, timedelta
from typing import Any, Dict, List

from lab_metrics.domain.models import RequestRecords
from lab_metrics.sources.abstract import AbstractRecordSource

CLOUDS = ["AWS", "Azure", "GCP", "Oracle", "On-Premise", "Other"]
LAB_TYPES = ["Cloud", "On-Premise", "Hybrid", "Virtual"]
SOLUTION_STATUSES = ["Solution Pending", "Solution Sent"]
DELIVERY_STATUSES = ["Pending", "Work-in-Progress", "Delivered", "Cancelled"]
CLIENTS = ["Acme Learning", "Globex", "Initech", "Umbrella Academy", "Stark Training"]
AGENTS = ["Asha", "Ravi", "Meera", "Kiran", "Dev"]
TECHNOLOGIES = ["Kubernetes", "Terraform", "Azure AI", "AWS Security", "Data Engineering"]


def _timestamp(rng: random.Random, start: date, days: int) -> str:
    moment = datetime.combine(start, time.min, tzinfo=UTC) + timedelta(
        days=rng.randrange(days), seconds=rng.randrange(86_400)
    )
    return moment.isoformat().replace("+00:00", "Z")


def _amount(rng: random.Random, users: int, malformed_ratio: float) -> Any:
    roll = rng.random()
    if roll < malformed_ratio / 2:
        return -round(rng.uniform(1, 500), 2)
    if roll < malformed_ratio:
        return "TBD"
    return round(users * rng.uniform(10, 250), 2)


def generate_records(
    rows: int,
    seed: int = 42,
    start: date = date(2025, 1, 1),
    days: int = 180,
    malformed_ratio: float = 0.02,
) -> Dict[str, List[Dict[str, Any]]]:
    """
    Generate `rows` records split roughly evenly between the two families.

    The same arguments always produce the same records.
    """
    rng = random.Random(seed)
    solutions: List[Dict[str, Any]] = []
    deliveries: List[Dict[str, Any]] = []

    for i in range(rows):
        users = rng.randint(1, 120)
        created_at = (
            "not-a-date" if rng.random() < malformed_ratio / 2 else _timestamp(rng, start, days)
        )
        common = {
            "client": rng.choice(CLIENTS),
            "agentName": rng.choice(AGENTS),
            "cloud": rng.choice(CLOUDS),
            "createdAt": created_at,
        }
        if i % 2 == 0:
            solutions.append(
                {
                    "id": f"sol-{i:06d}",
                    "labName": rng.choice(TECHNOLOGIES),
                    "userCount": users,
                    "totalAmountForTraining": _amount(rng, users, malformed_ratio),
                    "status": rng.choice(SOLUTION_STATUSES),
                    **common,
                }
            )
        else:
            deliveries.append(
                {
                    "id": f"del-{i:06d}",
                    "trainingName": rng.choice(TECHNOLOGIES),
                    "numberOfUsers": users,
                    "labType": rng.choice(LAB_TYPES),
                    "totalAmount": _amount(rng, users, malformed_ratio),
                    "labStatus": rng.choice(DELIVERY_STATUSES),
                    **common,
                }
            )

    return {"solutions": solutions, "deliveries": deliveries}


class SyntheticSource(AbstractRecordSource):
    """Deterministic generated records for demos and smoke tests."""

    name: str = "sample"
    description: str = "Seeded synthetic solution and delivery requests."

    def __init__(
        self,
        rows: int = 500,
        seed: int = 42,
        start: date = date(2025, 1, 1),
        days: int = 180,
        malformed_ratio: float = 0.02,
    ) -> None:
        if rows < 0:
            raise ValueError("rows must be non-negative")
        if days < 1:
            raise ValueError("days must be at least 1")
        self.rows = rows
        self.seed = seed
        self.start = start
        self.days = days
        self.malformed_ratio = malformed_ratio

    def fetch(self) -> RequestRecords:
        return RequestRecords(
            **generate_records(
                self.rows,
                seed=self.seed,
                start=self.start,
                days=self.days,
                malformed_ratio=self.malformed_ratio,
            )
        )


__all__ = ["SyntheticSource", "generate_records"]
