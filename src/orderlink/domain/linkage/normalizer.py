"""Pre-write interception of subscription rows.

Runs as the last filter over the per-table rows the store is about to write for a
new record, and fills parent/customer references the upstream write path dropped.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from orderlink.config.logging import source_extra
from orderlink.domain.model import (
    CUSTOMER_COLUMN,
    EMPTY_REFERENCE,
    PARENT_COLUMN,
    FieldFormat,
    SaveContext,
    Subscription,
    WritePayload,
    as_reference,
)

from .resolver import ReferenceResolver

if TYPE_CHECKING:
    from orderlink.domain.ports.unit_of_work import LinkageRepositories

log = getLogger(__name__)


class RowNormalizer:
    """Fill empty linkage columns in the orders-table row of a new subscription.

    The normalizer never raises: on any failure it hands back the payload it was
    given, so a bug here can never break the write it intercepts.
    """

    def __call__(
        self,
        payload: WritePayload,
        candidate: object,
        context: object,
        repositories: LinkageRepositories,
    ) -> WritePayload:
        if context != SaveContext.CREATE or not isinstance(candidate, Subscription):
            return payload
        try:
            normalized = self._normalize(payload, candidate, ReferenceResolver(repositories))
        except Exception:  # noqa: BLE001
            log.warning(
                "Row normalization failed for subscription %s; writing rows unchanged",
                candidate.id,
                exc_info=True,
                extra=source_extra(),
            )
            return payload
        return payload if normalized is None else normalized

    def _normalize(
        self,
        payload: WritePayload,
        candidate: Subscription,
        resolver: ReferenceResolver,
    ) -> WritePayload | None:
        index = payload.find_orders_row()
        if index is None:
            return None
        row = payload.rows[index]
        current_parent = as_reference(row.data.get(PARENT_COLUMN))
        current_customer = as_reference(row.data.get(CUSTOMER_COLUMN))
        if current_parent > EMPTY_REFERENCE and current_customer > EMPTY_REFERENCE:
            return None

        parent_id = current_parent
        if parent_id == EMPTY_REFERENCE:
            parent_id = as_reference(candidate.parent_id) or resolver.resolve_secondary_parent(
                as_reference(candidate.id)
            )

        customer_id = current_customer
        if customer_id == EMPTY_REFERENCE:
            customer_id = as_reference(candidate.customer_id)
            if customer_id == EMPTY_REFERENCE and parent_id > EMPTY_REFERENCE:
                customer_id = resolver.resolve_owner(parent_id)

        if parent_id == current_parent and customer_id == current_customer:
            return None

        normalized = payload.copy()
        target = normalized.rows[index]
        target.data[PARENT_COLUMN] = parent_id
        target.data[CUSTOMER_COLUMN] = customer_id
        target.format[PARENT_COLUMN] = FieldFormat.INT
        target.format[CUSTOMER_COLUMN] = FieldFormat.INT
        log.info(
            "Normalized orders row of subscription %s: parent_id=%s customer_id=%s",
            candidate.id,
            parent_id,
            customer_id,
            extra=source_extra(),
        )
        return normalized
