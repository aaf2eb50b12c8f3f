"""SQLAlchemy mapping metadata for orders, subscriptions and repair notes."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING, Final

from sqlalchemy import (
    Column,
    DateTime,
    Dialect,
    Enum,
    Index,
    Integer,
    String,
    Table,
    TypeDecorator,
    orm,
    select,
)
from sqlalchemy.orm import column_property, configure_mappers

from orderlink.domain.model import (
    CUSTOMER_COLUMN,
    PARENT_COLUMN,
    Order,
    Record,
    RecordKind,
    RepairNote,
    RepairSource,
    Subscription,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

ORDERS_TABLE: Final[str] = "orders"
OPERATIONAL_TABLE: Final[str] = "order_operational_data"
HIERARCHY_TABLE: Final[str] = "record_hierarchy"
REPAIR_NOTE_TABLE: Final[str] = "repair_note"
CONSUMED_TOKEN_TABLE: Final[str] = "consumed_token"


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


mapper_registry = orm.registry()
metadata = mapper_registry.metadata


# Content hierarchy: allocates ids for every record and keeps the secondary
# parent pointer.
hierarchy_table = Table(
    HIERARCHY_TABLE,
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("kind", String(32), nullable=False),
    Column("parent_id", Integer, nullable=False, default=0),
    Index("ix_record_hierarchy_parent_kind", "parent_id", "kind"),
)

orders_table = Table(
    ORDERS_TABLE,
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=False),
    Column("kind", String(32), nullable=False),
    Column("status", String(32), nullable=False),
    Column(PARENT_COLUMN, Integer, nullable=False, default=0),
    Column(CUSTOMER_COLUMN, Integer, nullable=False, default=0),
    Column("created_at", UTCDateTime(), nullable=True),
    Column("order_number", String(64), nullable=True),
    Column("billing_email", String(255), nullable=True),
    Index("ix_orders_kind_created_at", "kind", "created_at"),
)

operational_table = Table(
    OPERATIONAL_TABLE,
    metadata,
    Column("order_id", Integer, primary_key=True, autoincrement=False),
    Column("created_via", String(64), nullable=True),
)

repair_note_table = Table(
    REPAIR_NOTE_TABLE,
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("record_id", Integer, nullable=False),
    Column(
        "source",
        Enum(RepairSource, native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    ),
    Column("parent_id", Integer, nullable=False),
    Column("customer_id", Integer, nullable=False),
    Column("version", String(32), nullable=False),
    Column("message", String(512), nullable=False),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("created_by", String(255), nullable=True),
    Index("ix_repair_note_record_id", "record_id"),
)

consumed_token_table = Table(
    CONSUMED_TOKEN_TABLE,
    metadata,
    Column("nonce", String(64), primary_key=True),
    Column("actor", String(255), nullable=False),
    Column("issued_at", Integer, nullable=False),
    Index("ix_consumed_token_issued_at", "issued_at"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    record_mapper = mapper_registry.map_imperatively(
        Record,
        orders_table,
        polymorphic_on=orders_table.c.kind,
        properties={
            "_kind": orders_table.c.kind,
            "parent_id": orders_table.c[PARENT_COLUMN],
        },
    )
    mapper_registry.map_imperatively(
        Order,
        inherits=record_mapper,
        polymorphic_identity=RecordKind.ORDER.value,
    )
    mapper_registry.map_imperatively(
        Subscription,
        inherits=record_mapper,
        polymorphic_identity=RecordKind.SUBSCRIPTION.value,
        properties={
            "hierarchy_parent_id": column_property(
                select(hierarchy_table.c.parent_id)
                .where(hierarchy_table.c.id == orders_table.c.id)
                .correlate_except(hierarchy_table)
                .scalar_subquery()
            ),
        },
    )
    mapper_registry.map_imperatively(RepairNote, repair_note_table)

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    metadata.create_all(engine)
