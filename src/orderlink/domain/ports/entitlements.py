"""Port for the optional downstream entitlement (license) service."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class EntitlementConnector(Protocol):
    """Issues access rights tied to a paid order."""

    def exists(self, order_id: int) -> bool:
        """Whether an entitlement resource already exists for ``order_id``."""
        ...

    def update(self, order_id: int) -> None:
        """Create or refresh the entitlement resources of ``order_id``."""
        ...
