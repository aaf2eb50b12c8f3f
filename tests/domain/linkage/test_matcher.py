from __future__ import annotations

from datetime import timedelta

import pytest

from orderlink.domain.linkage import OrphanMatcher
from orderlink.domain.model import OrderStatus
from tests.helpers.linkage import (
    BASE_TIME,
    FakeOrderRepository,
    LinkageStore,
    make_order,
    make_subscription,
)

PAID = frozenset({OrderStatus.COMPLETED.value, OrderStatus.PROCESSING.value})


@pytest.fixture
def matcher() -> OrphanMatcher:
    return OrphanMatcher(window=timedelta(seconds=60), paid_statuses=PAID)


def test_picks_order_closest_in_time(matcher: OrphanMatcher) -> None:
    store = LinkageStore()
    make_order(store, created_at=BASE_TIME - timedelta(seconds=40))
    closest = make_order(store, created_at=BASE_TIME + timedelta(seconds=5), customer_id=9)
    make_order(store, created_at=BASE_TIME + timedelta(seconds=30))
    orphan = make_subscription(store)

    assert matcher.find_matching_order(orphan, FakeOrderRepository(store)) is closest


def test_tie_keeps_first_candidate(matcher: OrphanMatcher) -> None:
    store = LinkageStore()
    earlier = make_order(store, created_at=BASE_TIME - timedelta(seconds=10))
    make_order(store, created_at=BASE_TIME + timedelta(seconds=10))
    orphan = make_subscription(store)

    assert matcher.find_matching_order(orphan, FakeOrderRepository(store)) is earlier


def test_ignores_unpaid_ownerless_and_out_of_window_orders(matcher: OrphanMatcher) -> None:
    store = LinkageStore()
    make_order(store, status=OrderStatus.PENDING, created_at=BASE_TIME)
    make_order(store, customer_id=0, created_at=BASE_TIME)
    make_order(store, created_at=BASE_TIME + timedelta(seconds=61))
    orphan = make_subscription(store)

    assert matcher.find_matching_order(orphan, FakeOrderRepository(store)) is None


def test_window_boundary_is_inclusive(matcher: OrphanMatcher) -> None:
    store = LinkageStore()
    edge = make_order(store, created_at=BASE_TIME - timedelta(seconds=60))
    orphan = make_subscription(store)

    assert matcher.find_matching_order(orphan, FakeOrderRepository(store)) is edge


def test_no_creation_time_means_no_match(matcher: OrphanMatcher) -> None:
    store = LinkageStore()
    make_order(store)
    orphan = make_subscription(store, created_at=None)

    assert matcher.find_matching_order(orphan, FakeOrderRepository(store)) is None


def test_linked_subscription_is_not_matched(matcher: OrphanMatcher) -> None:
    store = LinkageStore()
    order = make_order(store)
    linked = make_subscription(store, parent_id=order.id, customer_id=7)

    assert matcher.find_matching_order(linked, FakeOrderRepository(store)) is None


def test_suggestion_describes_the_match(matcher: OrphanMatcher) -> None:
    store = LinkageStore()
    order = make_order(
        store,
        created_at=BASE_TIME + timedelta(seconds=3),
        order_number="1042",
        billing_email="jane@example.com",
        customer_id=21,
    )
    orphan = make_subscription(store)

    suggestion = matcher.suggest(orphan, FakeOrderRepository(store))

    assert suggestion is not None
    assert suggestion.order_id == order.id
    assert suggestion.customer_id == 21
    assert suggestion.delta_seconds == pytest.approx(3.0)
    assert suggestion.label == "Link to Order #1042 (jane@example.com)"


def test_closest_paid_order_within_window_wins(matcher: OrphanMatcher) -> None:
    store = LinkageStore()
    make_order(store, created_at=BASE_TIME - timedelta(seconds=90))
    make_order(store, created_at=BASE_TIME - timedelta(seconds=40))
    after = make_order(store, created_at=BASE_TIME + timedelta(seconds=10))
    orphan = make_subscription(store)

    assert matcher.find_matching_order(orphan, FakeOrderRepository(store)) is after
