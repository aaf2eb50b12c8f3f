"""Read-only lookups of fallback linkage values."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from orderlink.domain.model import EMPTY_REFERENCE, as_reference
from orderlink.domain.ports.persistence import StoreError

if TYPE_CHECKING:
    from orderlink.domain.ports.unit_of_work import LinkageRepositories

log = getLogger(__name__)


class ReferenceResolver:
    """Resolve missing references from the secondary hierarchy and from orders.

    Absence is an expected outcome: every lookup answers ``0`` instead of raising.
    """

    def __init__(self, repositories: LinkageRepositories) -> None:
        self._repositories = repositories

    def resolve_secondary_parent(self, record_id: int) -> int:
        """Parent id recorded by the content hierarchy for ``record_id``."""

        if record_id <= EMPTY_REFERENCE:
            return EMPTY_REFERENCE
        try:
            parent_id = self._repositories.hierarchy.parent_of(record_id)
        except StoreError:
            log.debug("Hierarchy lookup failed for record %s", record_id, exc_info=True)
            return EMPTY_REFERENCE
        return as_reference(parent_id)

    def resolve_owner(self, order_id: int) -> int:
        """Customer owning order ``order_id``."""

        if order_id <= EMPTY_REFERENCE:
            return EMPTY_REFERENCE
        try:
            order = self._repositories.orders.get(order_id)
        except StoreError:
            log.debug("Order lookup failed for order %s", order_id, exc_info=True)
            return EMPTY_REFERENCE
        if order is None:
            return EMPTY_REFERENCE
        return as_reference(order.customer_id)
