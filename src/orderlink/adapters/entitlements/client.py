"""HTTP connector for the downstream entitlement (license) service."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from http import HTTPStatus
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError

from orderlink.adapters.http_resilience import ResilientClient
from orderlink.config import get_entitlement_config

from .schema import ErrorResponse, OrderResourcesResponse

if TYPE_CHECKING:
    from collections.abc import Callable

    import httpx

    from orderlink.config import EntitlementConfig, ResilienceConfig
    from orderlink.domain.ports.entitlements import EntitlementConnector

log = getLogger(__name__)


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


class EntitlementAPIError(RuntimeError):
    """Raised when the entitlement service rejects a request or answers garbage."""

    def __init__(self, message: str, *, code: str | None = None, status: int | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.status = status


@dataclass(slots=True)
class HttpEntitlementConnector:
    config: EntitlementConfig
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    def exists(self, order_id: int) -> bool:
        return asyncio.run(self._exists_async(order_id))

    def update(self, order_id: int) -> None:
        resources = asyncio.run(self._update_async(order_id))
        log.info(
            "Entitlement service returned %d resource(s) for order %s",
            len(resources.resources),
            order_id,
        )

    def _resources_url(self, order_id: int) -> str:
        return f"{self.config.base_url.rstrip('/')}/orders/{order_id}/resources"

    async def _exists_async(self, order_id: int) -> bool:
        async with self.client_factory(self.config.resilience) as client:
            response = await client.get(self._resources_url(order_id))
        if response.status_code == HTTPStatus.NOT_FOUND:
            return False
        return self._parse(response).has_active_resource

    async def _update_async(self, order_id: int) -> OrderResourcesResponse:
        async with self.client_factory(self.config.resilience) as client:
            response = await client.post(self._resources_url(order_id), json={"order_id": order_id})
        return self._parse(response)

    def _parse(self, response: httpx.Response) -> OrderResourcesResponse:
        if response.is_error:
            try:
                error = ErrorResponse.model_validate(response.json()).error
            except (ValueError, ValidationError):
                raise EntitlementAPIError(
                    f"Entitlement service answered HTTP {response.status_code}",
                    status=response.status_code,
                ) from None
            log.error(f"Entitlement API error {error.code}: {error.message}")
            raise EntitlementAPIError(error.message, code=error.code, status=response.status_code)
        try:
            return OrderResourcesResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise EntitlementAPIError("Unexpected entitlement response payload") from exc


def build_entitlement_connector() -> EntitlementConnector | None:
    """Connector for the configured service, or ``None`` when none is configured."""

    config = get_entitlement_config()
    if config is None:
        log.debug("No entitlement service configured")
        return None
    return HttpEntitlementConnector(config=config)


if TYPE_CHECKING:
    _connector_check: EntitlementConnector = HttpEntitlementConnector(
        config=EntitlementConfig(
            base_url="", api_token=None, resilience=ResilienceConfig(name="check")
        )
    )
