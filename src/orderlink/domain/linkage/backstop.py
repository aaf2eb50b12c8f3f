"""Sweep run when an order reaches a paid status.

Every subscription the hierarchy lists under the order is checked and repaired
independently; one failing subscription never stops the sweep.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from orderlink.config.logging import source_extra
from orderlink.domain.model import (
    EMPTY_REFERENCE,
    RecordKind,
    RepairNote,
    RepairSource,
    as_reference,
    repair_message,
)

from .results import BackstopReport, RepairApplied, RepairFailed, RepairSkipped

if TYPE_CHECKING:
    from collections.abc import Callable

    from orderlink.domain.ports.entitlements import EntitlementConnector
    from orderlink.domain.ports.unit_of_work import LinkageUnitOfWork

    from .results import RepairOutcome

log = getLogger(__name__)


@dataclass(slots=True)
class LifecycleBackstop:
    unit_of_work_factory: Callable[[], LinkageUnitOfWork]
    version: str
    entitlements: EntitlementConnector | None = None

    def __call__(self, order_id: object) -> BackstopReport:
        order_ref = as_reference(order_id)
        report = BackstopReport(order_id=order_ref)
        if order_ref == EMPTY_REFERENCE:
            return report
        try:
            if not self._sweep(order_ref, report):
                return report
        except Exception as exc:  # noqa: BLE001
            log.warning(
                "Backstop sweep for order %s aborted",
                order_ref,
                exc_info=True,
                extra=source_extra(),
            )
            report.error = str(exc)
            return report
        self._ensure_entitlement(report)
        return report

    def _sweep(self, order_id: int, report: BackstopReport) -> bool:
        with self.unit_of_work_factory() as uow:
            repositories = uow.repositories
            order = repositories.orders.get(order_id)
            if order is None:
                log.debug("Backstop skipped: order %s not found", order_id)
                return False
            owner = as_reference(order.customer_id)
            for subscription_id in repositories.hierarchy.children_of(
                order_id, kind=RecordKind.SUBSCRIPTION
            ):
                report.outcomes.append(self._repair(uow, subscription_id, order_id, owner))
        return True

    def _repair(
        self,
        uow: LinkageUnitOfWork,
        subscription_id: int,
        order_id: int,
        owner: int,
    ) -> RepairOutcome:
        repositories = uow.repositories
        try:
            subscription = repositories.subscriptions.get(subscription_id)
            if subscription is None:
                return RepairSkipped(record_id=subscription_id, reason="subscription not found")

            current_parent = as_reference(subscription.parent_id)
            current_customer = as_reference(subscription.customer_id)
            # An existing owner wins over the order's customer.
            customer_id = current_customer or owner
            if current_parent == order_id and current_customer == customer_id:
                return RepairSkipped(record_id=subscription_id, reason="linkage intact")

            subscription.parent_id = order_id
            subscription.customer_id = customer_id
            repositories.subscriptions.save(subscription)
            repositories.notes.add(
                RepairNote(
                    record_id=subscription_id,
                    source=RepairSource.BACKSTOP,
                    parent_id=order_id,
                    customer_id=customer_id,
                    version=self.version,
                    message=repair_message(
                        RepairSource.BACKSTOP, order_id, customer_id, self.version
                    ),
                )
            )
            uow.commit()
        except Exception as exc:  # noqa: BLE001
            uow.rollback()
            log.warning(
                "Backstop could not repair subscription %s of order %s",
                subscription_id,
                order_id,
                exc_info=True,
                extra=source_extra(),
            )
            return RepairFailed(record_id=subscription_id, error=str(exc))

        log.warning(
            "Backstop repaired subscription %s: parent_id %s -> %s, customer_id %s -> %s",
            subscription_id,
            current_parent,
            order_id,
            current_customer,
            customer_id,
            extra=source_extra(),
        )
        return RepairApplied(
            record_id=subscription_id,
            source=RepairSource.BACKSTOP,
            parent_id=order_id,
            customer_id=customer_id,
            previous_parent_id=current_parent,
            previous_customer_id=current_customer,
        )

    def _ensure_entitlement(self, report: BackstopReport) -> None:
        if self.entitlements is None:
            return
        try:
            if self.entitlements.exists(report.order_id):
                return
            self.entitlements.update(report.order_id)
        except Exception as exc:  # noqa: BLE001
            log.warning(
                "Entitlement update failed for order %s",
                report.order_id,
                exc_info=True,
                extra=source_extra(),
            )
            report.error = str(exc)
            return
        report.entitlement_triggered = True
        log.info("Entitlements generated for order %s", report.order_id, extra=source_extra())
