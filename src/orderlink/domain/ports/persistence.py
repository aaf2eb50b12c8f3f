"""Ports for reading and persisting linkage records."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Collection, Sequence
    from datetime import datetime

    from orderlink.domain.model import (
        Order,
        RecordKind,
        RepairNote,
        SaveContext,
        Subscription,
    )


class StoreError(RuntimeError):
    """Raised by adapters when the underlying datastore fails."""


@runtime_checkable
class OrderRepository(Protocol):
    """Authoritative store of orders. Read-only to the linkage engine."""

    def add(self, order: Order) -> None: ...

    def get(self, order_id: int) -> Order | None: ...

    def created_between(
        self,
        start: datetime,
        end: datetime,
        *,
        statuses: Collection[str],
    ) -> Sequence[Order]:
        """Orders with an owner, in ``statuses``, created within ``[start, end]``.

        Results follow the store's natural ordering (ascending id).
        """
        ...


@runtime_checkable
class SubscriptionRepository(Protocol):
    """Authoritative store of subscriptions."""

    def create(self, subscription: Subscription, *, context: SaveContext) -> Subscription:
        """Write a new subscription through the interceptor-aware write path."""
        ...

    def get(self, subscription_id: int) -> Subscription | None: ...

    def save(self, subscription: Subscription) -> None: ...


@runtime_checkable
class HierarchyRepository(Protocol):
    """Secondary, less authoritative parent pointers kept by the content hierarchy."""

    def parent_of(self, record_id: int) -> int | None: ...

    def children_of(self, parent_id: int, *, kind: RecordKind) -> Sequence[int]: ...


@runtime_checkable
class RepairNoteRepository(Protocol):
    def add(self, note: RepairNote) -> None: ...

    def for_record(self, record_id: int) -> Sequence[RepairNote]: ...


@runtime_checkable
class ConsumedTokenRepository(Protocol):
    """Ledger of spent anti-replay nonces, shared by every process using the store."""

    def consume(self, nonce: str, *, actor: str, issued_at: int) -> bool:
        """Record ``nonce`` as spent. Returns False when it was already spent."""
        ...

    def prune(self, *, issued_before: int) -> None: ...
