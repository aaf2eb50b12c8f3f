"""Unit-of-work abstractions for coordinating repositories."""

from __future__ import annotations

from contextlib import nullcontext
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Callable
    from contextlib import AbstractContextManager
    from types import TracebackType

    from orderlink.domain.ports.persistence import (
        ConsumedTokenRepository,
        HierarchyRepository,
        OrderRepository,
        RepairNoteRepository,
        SubscriptionRepository,
    )


@runtime_checkable
class RepositoryCollection(Protocol):
    """Marker protocol for groups of repositories managed together."""


@runtime_checkable
class UnitOfWork[TRepositories: RepositoryCollection](Protocol):
    """Generic unit-of-work boundary around a repository collection."""

    @property
    def repositories(self) -> TRepositories: ...

    def __enter__(self) -> UnitOfWork[TRepositories]: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


@dataclass(slots=True)
class LinkageRepositories(RepositoryCollection):
    """Repositories the linkage engine reads and writes.

    ``savepoint`` opens a nested transaction: leaving it with an exception undoes
    only the writes made inside it, so the enclosing unit of work can still commit.
    """

    orders: OrderRepository
    subscriptions: SubscriptionRepository
    hierarchy: HierarchyRepository
    notes: RepairNoteRepository
    tokens: ConsumedTokenRepository
    savepoint: Callable[[], AbstractContextManager[object]] = nullcontext


type LinkageUnitOfWork = UnitOfWork[LinkageRepositories]
