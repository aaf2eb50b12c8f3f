"""Port for the authorization collaborator guarding manual repairs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Protocol, runtime_checkable

MANAGE_ORDERS: Final[str] = "manage_orders"
PAIRING_ACTION: Final[str] = "pair-subscription"


@dataclass(frozen=True, slots=True)
class Credentials:
    """Identity and single-use anti-replay token presented by a caller."""

    actor: str
    token: str


@runtime_checkable
class Authorizer(Protocol):
    def has_capability(self, actor: str, capability: str) -> bool: ...

    def verify_token(self, token: str, *, actor: str, action: str) -> bool:
        """Validate and consume ``token``. A token verifies at most once."""
        ...
