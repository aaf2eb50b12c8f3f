"""Request/response contract of the manual pairing endpoint."""

from __future__ import annotations

from http import HTTPStatus
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, PositiveInt, ValidationError

from orderlink.domain.linkage import PairingSuccess

if TYPE_CHECKING:
    from collections.abc import Mapping

    from orderlink.domain.linkage import LinkageEngine, PairingResult
    from orderlink.domain.ports.authorization import Credentials

log = getLogger(__name__)


class PairingBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class PairingRequest(PairingBaseModel):
    subscription_id: PositiveInt
    order_id: PositiveInt


class PairingResponse(PairingBaseModel):
    success: bool
    message: str
    status_code: int
    subscription_id: int | None = None
    order_id: int | None = None
    customer_id: int | None = None
    entitlement_triggered: bool = False
    entitlement_error: str | None = None

    @classmethod
    def from_result(cls, result: PairingResult) -> PairingResponse:
        if isinstance(result, PairingSuccess):
            return cls(
                success=True,
                message=result.message,
                status_code=int(result.status_code),
                subscription_id=result.subscription_id,
                order_id=result.order_id,
                customer_id=result.customer_id,
                entitlement_triggered=result.entitlement_triggered,
                entitlement_error=result.entitlement_error,
            )
        return cls(success=False, message=result.message, status_code=int(result.status_code))


def handle_pair_request(
    engine: LinkageEngine,
    body: Mapping[str, object],
    *,
    credentials: Credentials | None,
) -> PairingResponse:
    """Validate ``body`` and run the pairing. Never raises."""

    try:
        request = PairingRequest.model_validate(body)
    except ValidationError as exc:
        fields = ", ".join(str(error["loc"][0]) for error in exc.errors() if error["loc"])
        log.info("Rejected pairing request with invalid fields: %s", fields)
        return PairingResponse(
            success=False,
            message=f"Invalid pairing request: {fields or 'malformed body'}",
            status_code=int(HTTPStatus.BAD_REQUEST),
        )
    result = engine.pair(request.subscription_id, request.order_id, credentials=credentials)
    return PairingResponse.from_result(result)
