"""Operator-initiated pairing of an orphan subscription with an order."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from orderlink.config.logging import source_extra
from orderlink.domain.model import (
    EMPTY_REFERENCE,
    RepairNote,
    RepairSource,
    SubscriptionStatus,
    as_reference,
)
from orderlink.domain.ports.authorization import MANAGE_ORDERS, PAIRING_ACTION

from .results import PairingErrorKind, PairingFailure, PairingSuccess

if TYPE_CHECKING:
    from collections.abc import Callable

    from orderlink.domain.ports.authorization import Authorizer, Credentials
    from orderlink.domain.ports.entitlements import EntitlementConnector
    from orderlink.domain.ports.unit_of_work import LinkageUnitOfWork

    from .results import PairingResult

log = getLogger(__name__)

NOT_FOUND_MESSAGE = "Subscription or order not found"
NOT_ORPHAN_MESSAGE = "Subscription is not an orphan"
NO_CUSTOMER_MESSAGE = "Order has no customer ID"
FORBIDDEN_MESSAGE = "Not allowed to pair subscriptions"
INTERNAL_ERROR_MESSAGE = "An internal error occurred while pairing. Check logs."


def pairing_note(order_number: str, customer_id: int) -> str:
    return f"Subscription paired with order #{order_number}. Customer ID: {customer_id}."


@dataclass(slots=True)
class PairingService:
    unit_of_work_factory: Callable[[], LinkageUnitOfWork]
    authorizer: Authorizer | None
    version: str
    entitlements: EntitlementConnector | None = None

    def authorize(self, credentials: Credentials | None) -> bool:
        """Capability check first, then consume the single-use token."""

        if self.authorizer is None or credentials is None:
            return False
        if not self.authorizer.has_capability(credentials.actor, MANAGE_ORDERS):
            return False
        return self.authorizer.verify_token(
            credentials.token, actor=credentials.actor, action=PAIRING_ACTION
        )

    def pair(
        self,
        subscription_id: int,
        order_id: int,
        *,
        credentials: Credentials | None,
    ) -> PairingResult:
        actor = credentials.actor if credentials else None
        try:
            authorized = self.authorize(credentials)
        except Exception as exc:  # noqa: BLE001
            self._log_failure(exc, subscription_id, order_id, actor)
            return PairingFailure(kind=PairingErrorKind.INTERNAL, message=INTERNAL_ERROR_MESSAGE)
        if not authorized:
            log.warning(
                "Rejected pairing of subscription %s with order %s for %s",
                subscription_id,
                order_id,
                actor or "anonymous",
                extra=source_extra(),
            )
            return PairingFailure(kind=PairingErrorKind.UNAUTHORIZED, message=FORBIDDEN_MESSAGE)

        with self.unit_of_work_factory() as uow:
            repositories = uow.repositories
            subscription = repositories.subscriptions.get(as_reference(subscription_id))
            order = repositories.orders.get(as_reference(order_id))
            if subscription is None or order is None:
                return PairingFailure(kind=PairingErrorKind.NOT_FOUND, message=NOT_FOUND_MESSAGE)
            if not subscription.is_orphan:
                return PairingFailure(
                    kind=PairingErrorKind.INVALID_STATE, message=NOT_ORPHAN_MESSAGE
                )
            customer_id = as_reference(order.customer_id)
            if customer_id == EMPTY_REFERENCE:
                return PairingFailure(
                    kind=PairingErrorKind.INVALID_STATE, message=NO_CUSTOMER_MESSAGE
                )

            try:
                subscription.customer_id = customer_id
                subscription.parent_id = order.id
                subscription.status = SubscriptionStatus.ACTIVE
                repositories.subscriptions.save(subscription)
                repositories.notes.add(
                    RepairNote(
                        record_id=subscription.id,
                        source=RepairSource.MANUAL,
                        parent_id=order.id,
                        customer_id=customer_id,
                        version=self.version,
                        message=pairing_note(order.display_number, customer_id),
                        created_by=actor,
                    )
                )
                uow.commit()
            except Exception as exc:  # noqa: BLE001
                uow.rollback()
                self._log_failure(exc, subscription_id, order_id, actor)
                return PairingFailure(
                    kind=PairingErrorKind.INTERNAL, message=INTERNAL_ERROR_MESSAGE
                )
            paired_id = subscription.id
            paired_order_id = order.id
            order_number = order.display_number
            status = subscription.status

        # The pairing is committed; an entitlement failure is reported, not rolled back.
        entitlement_triggered = False
        entitlement_error: str | None = None
        try:
            entitlement_triggered = self._ensure_entitlement(paired_order_id)
        except Exception as exc:  # noqa: BLE001
            entitlement_error = str(exc)
            log.error(  # noqa: TRY400
                "Entitlement update failed after pairing: %s | subscription_id=%s order_id=%s",
                exc,
                paired_id,
                paired_order_id,
                exc_info=True,
                extra=source_extra(),
            )

        result = PairingSuccess(
            subscription_id=paired_id,
            order_id=paired_order_id,
            order_number=order_number,
            customer_id=customer_id,
            subscription_status=status,
            entitlement_triggered=entitlement_triggered,
            entitlement_error=entitlement_error,
        )
        log.info(result.message, extra=source_extra())
        return result

    def _ensure_entitlement(self, order_id: int) -> bool:
        if self.entitlements is None or self.entitlements.exists(order_id):
            return False
        self.entitlements.update(order_id)
        return True

    @staticmethod
    def _log_failure(
        exc: Exception, subscription_id: int, order_id: int, actor: str | None
    ) -> None:
        log.error(  # noqa: TRY400
            "Pairing failed: %s | subscription_id=%s order_id=%s user=%s",
            exc,
            subscription_id,
            order_id,
            actor,
            exc_info=True,
            extra=source_extra(),
        )
