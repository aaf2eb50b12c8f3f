"""Heuristic match between an orphaned subscription and a probable order."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from orderlink.domain.model import EMPTY_REFERENCE, RecordKind, as_reference

if TYPE_CHECKING:
    from collections.abc import Collection

    from orderlink.domain.model import Order, Subscription
    from orderlink.domain.ports.persistence import OrderRepository


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


@dataclass(frozen=True, slots=True)
class PairingSuggestion:
    """Advisory only. Applying it is a separate, authorized action."""

    subscription_id: int
    order_id: int
    order_number: str
    customer_id: int
    billing_email: str | None
    delta_seconds: float

    @property
    def label(self) -> str:
        email = self.billing_email or "no email"
        return f"Link to Order #{self.order_number} ({email})"


@dataclass(frozen=True, slots=True)
class OrphanMatcher:
    """Pick the paid order created closest in time to an orphan subscription."""

    window: timedelta
    paid_statuses: Collection[str]

    def find_matching_order(
        self, subscription: Subscription, orders: OrderRepository
    ) -> Order | None:
        if not subscription.is_orphan or subscription.created_at is None:
            return None
        created_at = _as_utc(subscription.created_at)
        candidates = orders.created_between(
            created_at - self.window,
            created_at + self.window,
            statuses=self.paid_statuses,
        )
        best: Order | None = None
        best_delta: timedelta | None = None
        for order in candidates:
            if (
                order.kind is not RecordKind.ORDER
                or order.created_at is None
                or as_reference(order.customer_id) == EMPTY_REFERENCE
                or order.status not in self.paid_statuses
            ):
                continue
            delta = abs(_as_utc(order.created_at) - created_at)
            if delta > self.window:
                continue
            # Strict comparison keeps the first candidate on ties.
            if best_delta is None or delta < best_delta:
                best, best_delta = order, delta
        return best

    def suggest(
        self, subscription: Subscription, orders: OrderRepository
    ) -> PairingSuggestion | None:
        order = self.find_matching_order(subscription, orders)
        if order is None or order.created_at is None or subscription.created_at is None:
            return None
        delta = abs(_as_utc(order.created_at) - _as_utc(subscription.created_at))
        return PairingSuggestion(
            subscription_id=subscription.id,
            order_id=order.id,
            order_number=order.display_number,
            customer_id=as_reference(order.customer_id),
            billing_email=order.billing_email,
            delta_seconds=delta.total_seconds(),
        )
