"""Outcome types returned by the repair layers.

Automated layers return these instead of raising so that the hook that invoked
them can discard the outcome. Manual pairing hands its result to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from http import HTTPStatus
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from orderlink.domain.model import RepairSource


class RepairStatus(StrEnum):
    APPLIED = "applied"
    UNCHANGED = "unchanged"
    FAILED = "failed"


@dataclass(frozen=True, slots=True, kw_only=True)
class RepairApplied:
    """Linkage fields were changed and persisted."""

    record_id: int
    source: RepairSource
    parent_id: int
    customer_id: int
    previous_parent_id: int
    previous_customer_id: int
    status: Literal[RepairStatus.APPLIED] = RepairStatus.APPLIED


@dataclass(frozen=True, slots=True, kw_only=True)
class RepairSkipped:
    """Nothing to do: already linked, not applicable, or unresolvable."""

    record_id: int | None
    reason: str
    status: Literal[RepairStatus.UNCHANGED] = RepairStatus.UNCHANGED


@dataclass(frozen=True, slots=True, kw_only=True)
class RepairFailed:
    """The repair was attempted and abandoned; no change was kept."""

    record_id: int | None
    error: str
    status: Literal[RepairStatus.FAILED] = RepairStatus.FAILED


type RepairOutcome = RepairApplied | RepairSkipped | RepairFailed


@dataclass(slots=True, kw_only=True)
class BackstopReport:
    """Summary of one status-transition sweep."""

    order_id: int
    outcomes: list[RepairOutcome] = field(default_factory=list["RepairOutcome"])
    entitlement_triggered: bool = False
    error: str | None = None

    def _ids(self, status: RepairStatus) -> tuple[int, ...]:
        return tuple(
            outcome.record_id
            for outcome in self.outcomes
            if outcome.status is status and outcome.record_id is not None
        )

    @property
    def repaired(self) -> tuple[int, ...]:
        return self._ids(RepairStatus.APPLIED)

    @property
    def unchanged(self) -> tuple[int, ...]:
        return self._ids(RepairStatus.UNCHANGED)

    @property
    def failed(self) -> tuple[int, ...]:
        return self._ids(RepairStatus.FAILED)


class PairingErrorKind(StrEnum):
    NOT_FOUND = "not_found"
    INVALID_STATE = "invalid_state"
    UNAUTHORIZED = "unauthorized"
    INTERNAL = "internal"


_STATUS_BY_ERROR: dict[PairingErrorKind, HTTPStatus] = {
    PairingErrorKind.NOT_FOUND: HTTPStatus.NOT_FOUND,
    PairingErrorKind.INVALID_STATE: HTTPStatus.BAD_REQUEST,
    PairingErrorKind.UNAUTHORIZED: HTTPStatus.FORBIDDEN,
    PairingErrorKind.INTERNAL: HTTPStatus.INTERNAL_SERVER_ERROR,
}


@dataclass(frozen=True, slots=True, kw_only=True)
class PairingSuccess:
    subscription_id: int
    order_id: int
    order_number: str
    customer_id: int
    subscription_status: str
    entitlement_triggered: bool
    entitlement_error: str | None = None
    success: Literal[True] = True

    @property
    def status_code(self) -> HTTPStatus:
        return HTTPStatus.OK

    @property
    def message(self) -> str:
        suffix = " License generated." if self.entitlement_triggered else ""
        if self.entitlement_error is not None:
            suffix = " License generation failed; replay with recover."
        return (
            f"Subscription #{self.subscription_id} paired with Order #{self.order_number}. "
            f"Customer: {self.customer_id}. Status: Active.{suffix}"
        )


@dataclass(frozen=True, slots=True, kw_only=True)
class PairingFailure:
    kind: PairingErrorKind
    message: str
    success: Literal[False] = False

    @property
    def status_code(self) -> HTTPStatus:
        return _STATUS_BY_ERROR[self.kind]


type PairingResult = PairingSuccess | PairingFailure
