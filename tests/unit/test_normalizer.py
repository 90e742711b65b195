from __future__ import annotations

from datetime import UTC, date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from lab_metrics.errors import UnknownRecordKindError
from lab_metrics.metrics.normalizer import (
    RECORD_FAMILIES,
    RecordFamily,
    collect_warnings,
    normalize,
    parse_amount,
    parse_timestamp,
)


def test_solution_fields_are_selected_from_family_table(make_solution):
    [entry] = normalize([make_solution("2025-01-05T10:00:00Z", 1234.5)], "solution")

    assert entry.kind == "solution"
    assert entry.id == "sol-1"
    assert entry.submitted_at == datetime(2025, 1, 5, 10, tzinfo=UTC)
    assert entry.amount == Decimal("1234.50")
    assert entry.amount_issue is None
    assert entry.status == "Solution Pending"
    assert entry.technology == "Kubernetes"
    assert entry.lab_type == "AWS"
    assert entry.agent == "Asha"
    assert entry.expected_users == 10


def test_delivery_fields_are_selected_from_family_table(make_delivery):
    [entry] = normalize([make_delivery(amount="250.125", status="Delivered")], "delivery")

    assert entry.kind == "delivery"
    assert entry.amount == Decimal("250.13")
    assert entry.status == "Delivered"
    assert entry.technology == "Terraform"
    assert entry.lab_type == "Cloud"
    assert entry.expected_users == 20


def test_snake_case_rows_are_accepted():
    row = {
        "id": "d-1",
        "created_at": "2025-02-01T00:00:00+00:00",
        "total_amount": 10,
        "lab_status": "Pending",
        "number_of_users": "7",
        "agent_name": "Meera",
    }
    [entry] = normalize([row], "delivery")
    assert entry.submitted_at == datetime(2025, 2, 1, tzinfo=UTC)
    assert entry.amount == Decimal("10.00")
    assert entry.status == "Pending"
    assert entry.expected_users == 7
    assert entry.agent == "Meera"


def test_fallback_fields_and_defaults():
    [entry] = normalize([{"id": "d-2", "labName": "Azure AI", "cloudType": "Hybrid"}], "delivery")
    assert entry.technology == "Azure AI"
    assert entry.lab_type == "Hybrid"
    assert entry.client == "N/A"
    assert entry.status == "Unknown"
    assert entry.agent == "Unassigned"


def test_unrecognized_status_passes_through_verbatim(make_delivery):
    [entry] = normalize([make_delivery(status="On Hold (client)")], "delivery")
    assert entry.status == "On Hold (client)"


def test_order_is_preserved_and_nothing_is_dropped(make_solution):
    rows = [
        make_solution("2025-01-03T00:00:00Z"),
        make_solution("not-a-date"),
        make_solution(None),
        "not even a mapping",
        make_solution("2025-01-01T00:00:00Z"),
    ]
    entries = normalize(rows, "solution")

    assert [e.id for e in entries] == ["sol-1", "sol-2", "sol-3", "", "sol-4"]
    assert [e.is_bucketable for e in entries] == [True, False, False, False, True]


@pytest.mark.parametrize(
    ("value", "expected", "issue"),
    [
        (1000, Decimal("1000.00"), None),
        (0.1, Decimal("0.10"), None),
        ("19.999", Decimal("20.00"), None),
        (Decimal("5"), Decimal("5.00"), None),
        (-1, Decimal("0.00"), "negative_amount"),
        ("-0.01", Decimal("0.00"), "negative_amount"),
        ("-0", Decimal("0.00"), None),
        (-0.0, Decimal("0.00"), None),
        (float("nan"), Decimal("0.00"), "non_numeric_amount"),
        (float("inf"), Decimal("0.00"), "non_numeric_amount"),
        ("NaN", Decimal("0.00"), "non_numeric_amount"),
        ("TBD", Decimal("0.00"), "non_numeric_amount"),
        (None, Decimal("0.00"), "non_numeric_amount"),
        (True, Decimal("0.00"), "non_numeric_amount"),
        ({"amount": 1}, Decimal("0.00"), "non_numeric_amount"),
    ],
)
def test_parse_amount(value, expected, issue):
    assert parse_amount(value) == (expected, issue)


def test_zero_amounts_are_unsigned():
    amount, _ = parse_amount("-0")
    assert not amount.is_signed()
    assert str(amount) == "0.00"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("2025-01-05T10:00:00Z", datetime(2025, 1, 5, 10, tzinfo=UTC)),
        ("2025-01-05T15:30:00+05:30", datetime(2025, 1, 5, 10, tzinfo=UTC)),
        ("2025-01-05T10:00:00", datetime(2025, 1, 5, 10, tzinfo=UTC)),
        ("2025-01-05", datetime(2025, 1, 5, tzinfo=UTC)),
        (datetime(2025, 1, 5, 10), datetime(2025, 1, 5, 10, tzinfo=UTC)),
        (date(2025, 1, 5), datetime(2025, 1, 5, tzinfo=UTC)),
        (datetime(1, 1, 1, 1, tzinfo=timezone(timedelta(hours=5))), None),
        (datetime.max.replace(tzinfo=timezone(timedelta(hours=-5))), None),
        ("0001-01-01T01:00:00+05:00", None),
        ("not-a-date", None),
        ("", None),
        (None, None),
        (1736071200, None),
    ],
)
def test_parse_timestamp(value, expected):
    assert parse_timestamp(value) == expected


def test_out_of_range_timestamp_does_not_abort_batch():
    early = datetime(1, 1, 1, 1, tzinfo=timezone(timedelta(hours=5)))
    rows = [{"id": "a", "createdAt": early}, {"id": "b", "createdAt": "2025-01-01"}]
    entries = normalize(rows, "solution")

    assert [e.id for e in entries] == ["a", "b"]
    assert entries[0].submitted_at is None
    assert entries[1].submitted_at == datetime(2025, 1, 1, tzinfo=UTC)


def test_warnings_are_collected_per_clamped_amount(make_solution):
    entries = normalize(
        [make_solution(amount=-5), make_solution(amount=10), make_solution(amount="n/a")],
        "solution",
    )
    warnings = collect_warnings(entries)

    assert [(w.id, w.kind, w.reason) for w in warnings] == [
        ("sol-1", "solution", "negative_amount"),
        ("sol-3", "solution", "non_numeric_amount"),
    ]


def test_unknown_kind_fails_fast():
    with pytest.raises(UnknownRecordKindError, match="cloud"):
        normalize([{"id": "x"}], "cloud")


def test_new_family_is_a_table_row(monkeypatch):
    family = RecordFamily(
        kind="adr",
        id=("id",),
        submitted_at=("raisedOn",),
        status=("state",),
        amount=("quote",),
        expected_users=("seats",),
        technology=("topic",),
        client=("client",),
        lab_type=("platform",),
        agent=("owner",),
    )
    monkeypatch.setitem(RECORD_FAMILIES, "adr", family)

    [entry] = normalize(
        [{"id": "a-1", "raisedOn": "2025-05-01T00:00:00Z", "quote": 42, "state": "Open"}], "adr"
    )
    assert entry.kind == "adr"
    assert entry.amount == Decimal("42.00")
    assert entry.status == "Open"
