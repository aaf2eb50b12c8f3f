"""Pydantic models describing the entitlement service payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class EntitlementBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ResourcePayload(EntitlementBaseModel):
    resource_id: int = Field(alias="id")
    product_id: int | None = None
    active: bool = True


class OrderResourcesResponse(EntitlementBaseModel):
    order_id: int
    resources: list[ResourcePayload] = Field(default_factory=list[ResourcePayload])

    @property
    def has_active_resource(self) -> bool:
        return any(resource.active for resource in self.resources)


class ErrorDetail(EntitlementBaseModel):
    code: str
    message: str


class ErrorResponse(EntitlementBaseModel):
    error: ErrorDetail
