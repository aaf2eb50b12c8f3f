from __future__ import annotations

import pytest

from orderlink.domain.model import (
    EMPTY_REFERENCE,
    FieldFormat,
    Order,
    RecordKind,
    RowDescriptor,
    Subscription,
    WritePayload,
    as_reference,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (None, 0),
        (0, 0),
        (42, 42),
        (-5, 5),
        ("17", 17),
        (" 9 ", 9),
        ("abc", 0),
        (3.9, 3),
        (True, 0),
        (object(), 0),
    ],
)
def test_as_reference_coerces_to_non_negative_int(raw: object, expected: int) -> None:
    assert as_reference(raw) == expected


def test_subscription_is_orphan_only_when_both_references_empty() -> None:
    assert Subscription().is_orphan
    assert not Subscription(parent_id=5).is_orphan
    assert not Subscription(customer_id=7).is_orphan


def test_record_kind_and_display_number() -> None:
    order = Order(id=12, order_number="A-12")
    assert order.kind is RecordKind.ORDER
    assert order.display_number == "A-12"
    assert Order(id=12).display_number == "12"
    assert Subscription().kind is RecordKind.SUBSCRIPTION
    assert not Subscription().is_persisted
    assert Subscription().parent_id == EMPTY_REFERENCE


@pytest.mark.parametrize(
    ("table", "expected"),
    [
        ("orders", True),
        ("wp_orders", True),
        ("shop_wc_orders", True),
        ("orders_meta", False),
        ("order_operational_data", False),
        ("reorders", False),
    ],
)
def test_orders_row_detection_matches_suffix(table: str, expected: bool) -> None:
    assert RowDescriptor(table=table).is_orders_row is expected


def test_find_orders_row_returns_first_match_or_none() -> None:
    payload = WritePayload(
        rows=[
            RowDescriptor(table="order_operational_data"),
            RowDescriptor(table="wp_orders", data={"id": 1}, format={"id": FieldFormat.INT}),
        ]
    )
    assert payload.find_orders_row() == 1
    assert WritePayload(rows=[RowDescriptor(table="addresses")]).find_orders_row() is None


def test_payload_copy_is_independent() -> None:
    payload = WritePayload(rows=[RowDescriptor(table="orders", data={"customer_id": 0})])
    duplicate = payload.copy()
    duplicate.rows[0].data["customer_id"] = 7
    assert payload.rows[0].data["customer_id"] == 0
