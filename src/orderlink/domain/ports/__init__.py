"""Domain port definitions for adapters."""

from __future__ import annotations

from .authorization import MANAGE_ORDERS, PAIRING_ACTION, Authorizer, Credentials
from .entitlements import EntitlementConnector
from .hooks import (
    ROWS_FOR_RECORD,
    SUBSCRIPTION_CREATED,
    HookDispatcher,
    order_status_hook,
)
from .persistence import (
    ConsumedTokenRepository,
    HierarchyRepository,
    OrderRepository,
    RepairNoteRepository,
    StoreError,
    SubscriptionRepository,
)
from .unit_of_work import (
    LinkageRepositories,
    LinkageUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "MANAGE_ORDERS",
    "PAIRING_ACTION",
    "ROWS_FOR_RECORD",
    "SUBSCRIPTION_CREATED",
    "Authorizer",
    "ConsumedTokenRepository",
    "Credentials",
    "EntitlementConnector",
    "HierarchyRepository",
    "HookDispatcher",
    "LinkageRepositories",
    "LinkageUnitOfWork",
    "OrderRepository",
    "RepairNoteRepository",
    "RepositoryCollection",
    "StoreError",
    "SubscriptionRepository",
    "UnitOfWork",
    "order_status_hook",
]
