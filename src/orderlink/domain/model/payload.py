"""Transient row descriptors produced right before a record is written."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Final

ORDERS_TABLE_PATTERN: Final[re.Pattern[str]] = re.compile(r"(?:^|_)orders$")
PARENT_COLUMN: Final[str] = "parent_order_id"
CUSTOMER_COLUMN: Final[str] = "customer_id"


class FieldFormat(StrEnum):
    """Storage format tag for one column value."""

    INT = "int"
    STR = "str"
    DATETIME = "datetime"


@dataclass(slots=True)
class RowDescriptor:
    table: str
    data: dict[str, object] = field(default_factory=dict[str, object])
    format: dict[str, FieldFormat] = field(default_factory=dict[str, FieldFormat])

    def copy(self) -> RowDescriptor:
        return RowDescriptor(table=self.table, data=dict(self.data), format=dict(self.format))

    @property
    def is_orders_row(self) -> bool:
        return bool(ORDERS_TABLE_PATTERN.search(self.table))


@dataclass(slots=True)
class WritePayload:
    """Ordered per-table rows for one record write."""

    rows: list[RowDescriptor] = field(default_factory=list[RowDescriptor])

    def copy(self) -> WritePayload:
        return WritePayload(rows=[row.copy() for row in self.rows])

    def find_orders_row(self) -> int | None:
        """Index of the orders-table row, or ``None`` when the payload has none."""

        for index, row in enumerate(self.rows):
            if row.table and row.is_orders_row:
                return index
        return None
