"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class RecordKind(StrEnum):
    """Discriminator shared by every row of the orders table."""

    ORDER = "shop_order"
    SUBSCRIPTION = "shop_subscription"


class OrderStatus(StrEnum):
    PENDING = "pending"
    PROCESSING = "processing"
    ON_HOLD = "on-hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"
    FAILED = "failed"


class SubscriptionStatus(StrEnum):
    PENDING = "pending"
    ACTIVE = "active"
    ON_HOLD = "on-hold"
    PENDING_CANCEL = "pending-cancel"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class SaveContext(StrEnum):
    """Tag handed to pre-write interceptors describing the kind of write."""

    CREATE = "create"
    UPDATE = "update"


class RepairSource(StrEnum):
    """Which repair layer produced a linkage change."""

    CHECKOUT = "checkout-origin"
    BACKSTOP = "completion-backstop"
    MANUAL = "manual-pairing"
