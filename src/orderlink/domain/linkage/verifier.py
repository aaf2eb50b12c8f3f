"""Post-creation check run once a subscription has been created at checkout."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from orderlink.config.logging import source_extra
from orderlink.domain.model import (
    EMPTY_REFERENCE,
    Order,
    RepairNote,
    RepairSource,
    Subscription,
    as_reference,
    repair_message,
)

from .resolver import ReferenceResolver
from .results import RepairApplied, RepairFailed, RepairSkipped

if TYPE_CHECKING:
    from orderlink.domain.ports.unit_of_work import LinkageRepositories

    from .results import RepairOutcome

log = getLogger(__name__)


@dataclass(slots=True)
class PostCreateVerifier:
    """Compare a freshly created subscription with its originating order.

    Only empty references are filled; a subscription already carrying a
    different non-empty value is logged and left alone. Writes happen inside a
    savepoint of the caller's unit of work.
    """

    version: str

    def __call__(
        self,
        subscription: object,
        order: object,
        schedule: object,
        repositories: LinkageRepositories,
    ) -> RepairOutcome:
        del schedule
        if not isinstance(subscription, Subscription) or not isinstance(order, Order):
            return RepairSkipped(record_id=None, reason="not a subscription created from an order")
        try:
            return self._verify(subscription, order, repositories)
        except Exception as exc:  # noqa: BLE001
            log.warning(
                "Post-create verification failed for subscription %s",
                subscription.id,
                exc_info=True,
                extra=source_extra(),
            )
            return RepairFailed(record_id=subscription.id, error=str(exc))

    def _verify(
        self,
        subscription: Subscription,
        order: Order,
        repositories: LinkageRepositories,
    ) -> RepairOutcome:
        resolver = ReferenceResolver(repositories)
        current_parent = as_reference(subscription.parent_id)
        current_customer = as_reference(subscription.customer_id)

        expected_parent = as_reference(order.id) or resolver.resolve_secondary_parent(
            as_reference(subscription.id)
        )
        expected_customer = as_reference(order.customer_id)
        if expected_customer == EMPTY_REFERENCE and expected_parent > EMPTY_REFERENCE:
            expected_customer = resolver.resolve_owner(expected_parent)

        parent_id = current_parent or expected_parent
        customer_id = current_customer or expected_customer
        if (current_parent and expected_parent and current_parent != expected_parent) or (
            current_customer and expected_customer and current_customer != expected_customer
        ):
            log.info(
                "Subscription %s disagrees with order %s "
                "(parent_id=%s/%s customer_id=%s/%s); keeping stored values",
                subscription.id,
                order.id,
                current_parent,
                expected_parent,
                current_customer,
                expected_customer,
                extra=source_extra(),
            )
        if parent_id == current_parent and customer_id == current_customer:
            return RepairSkipped(record_id=subscription.id, reason="linkage intact")

        # Shares the creation unit of work; a failure rolls back to this point only.
        with repositories.savepoint():
            subscription.parent_id = parent_id
            subscription.customer_id = customer_id
            repositories.subscriptions.save(subscription)
            repositories.notes.add(
                RepairNote(
                    record_id=subscription.id,
                    source=RepairSource.CHECKOUT,
                    parent_id=parent_id,
                    customer_id=customer_id,
                    version=self.version,
                    message=repair_message(
                        RepairSource.CHECKOUT, parent_id, customer_id, self.version
                    ),
                )
            )
        log.warning(
            "Repaired subscription %s after checkout: parent_id %s -> %s, customer_id %s -> %s",
            subscription.id,
            current_parent,
            parent_id,
            current_customer,
            customer_id,
            extra=source_extra(),
        )
        return RepairApplied(
            record_id=subscription.id,
            source=RepairSource.CHECKOUT,
            parent_id=parent_id,
            customer_id=customer_id,
            previous_parent_id=current_parent,
            previous_customer_id=current_customer,
        )
