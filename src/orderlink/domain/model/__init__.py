"""Public domain model surface."""

from __future__ import annotations

from orderlink.domain.model.audit import RepairNote, repair_message
from orderlink.domain.model.enums import (
    OrderStatus,
    RecordKind,
    RepairSource,
    SaveContext,
    SubscriptionStatus,
)
from orderlink.domain.model.payload import (
    CUSTOMER_COLUMN,
    ORDERS_TABLE_PATTERN,
    PARENT_COLUMN,
    FieldFormat,
    RowDescriptor,
    WritePayload,
)
from orderlink.domain.model.records import (
    EMPTY_REFERENCE,
    Order,
    Record,
    Subscription,
    as_reference,
)

__all__ = [  # noqa: RUF022
    # records
    "EMPTY_REFERENCE",
    "Order",
    "Record",
    "Subscription",
    "as_reference",
    # audit
    "RepairNote",
    "repair_message",
    # payload
    "CUSTOMER_COLUMN",
    "ORDERS_TABLE_PATTERN",
    "PARENT_COLUMN",
    "FieldFormat",
    "RowDescriptor",
    "WritePayload",
    # enums
    "OrderStatus",
    "RecordKind",
    "RepairSource",
    "SaveContext",
    "SubscriptionStatus",
]
