"""Public interface for the entitlement service adapter."""

from __future__ import annotations

from .client import EntitlementAPIError, HttpEntitlementConnector, build_entitlement_connector
from .schema import OrderResourcesResponse, ResourcePayload

__all__ = [
    "EntitlementAPIError",
    "HttpEntitlementConnector",
    "OrderResourcesResponse",
    "ResourcePayload",
    "build_entitlement_connector",
]
