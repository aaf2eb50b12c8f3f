"""Orders and the subscriptions that must link back to them.

Both kinds live in the same store table and share identity allocation with the
generic content hierarchy. A reference value of ``0`` means "not linked".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, Final

from orderlink.domain.model.enums import OrderStatus, RecordKind, SubscriptionStatus

if TYPE_CHECKING:
    from datetime import datetime

EMPTY_REFERENCE: Final[int] = 0


def as_reference(value: object) -> int:
    """Coerce a stored reference value to a non-negative id (``0`` when empty/invalid)."""

    if value is None or isinstance(value, bool):
        return EMPTY_REFERENCE
    if isinstance(value, int):
        return abs(value)
    if isinstance(value, float):
        return abs(int(value))
    if isinstance(value, str):
        stripped = value.strip()
        try:
            return abs(int(stripped))
        except ValueError:
            return EMPTY_REFERENCE
    return EMPTY_REFERENCE


@dataclass(eq=False, kw_only=True)
class Record:
    """Common shape of every row in the orders table."""

    KIND: ClassVar[RecordKind]

    id: int = EMPTY_REFERENCE
    status: str
    parent_id: int = EMPTY_REFERENCE
    customer_id: int = EMPTY_REFERENCE
    created_at: datetime | None = None

    @property
    def kind(self) -> RecordKind:
        return self.KIND

    @property
    def is_persisted(self) -> bool:
        return self.id > EMPTY_REFERENCE


@dataclass(eq=False, kw_only=True)
class Order(Record):
    KIND: ClassVar[RecordKind] = RecordKind.ORDER

    status: str = OrderStatus.PENDING
    order_number: str | None = None
    billing_email: str | None = None

    @property
    def display_number(self) -> str:
        return self.order_number or str(self.id)


@dataclass(eq=False, kw_only=True)
class Subscription(Record):
    """Recurring record created as a child of an order.

    ``hierarchy_parent_id`` mirrors the content hierarchy's parent pointer. It is a
    looser linkage than ``parent_id`` and is only trusted when ``parent_id`` is empty.
    """

    KIND: ClassVar[RecordKind] = RecordKind.SUBSCRIPTION

    status: str = SubscriptionStatus.PENDING
    hierarchy_parent_id: int = EMPTY_REFERENCE

    @property
    def is_orphan(self) -> bool:
        return (
            as_reference(self.parent_id) == EMPTY_REFERENCE
            and as_reference(self.customer_id) == EMPTY_REFERENCE
        )
