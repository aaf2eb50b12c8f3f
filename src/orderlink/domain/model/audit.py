"""Audit notes describing linkage repairs."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .enums import RepairSource


@dataclass(eq=False, kw_only=True)
class RepairNote:
    """Operator-facing trace of one repair. Written, never read back by the engine."""

    record_id: int
    source: RepairSource
    parent_id: int
    customer_id: int
    version: str
    message: str
    id: int | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))
    created_by: str | None = None


def repair_message(source: RepairSource, parent_id: int, customer_id: int, version: str) -> str:
    return (
        f"Subscription linkage repaired ({source}). parent_id={parent_id}, "
        f"customer_id={customer_id}. orderlink v{version}."
    )
