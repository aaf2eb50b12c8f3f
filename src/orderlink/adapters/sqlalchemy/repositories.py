"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from contextlib import contextmanager
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from sqlalchemy import delete, insert, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from orderlink.adapters.sqlalchemy.mappings import (
    OPERATIONAL_TABLE,
    ORDERS_TABLE,
    consumed_token_table,
    hierarchy_table,
    metadata,
    orders_table,
    repair_note_table,
)
from orderlink.domain.model import (
    CUSTOMER_COLUMN,
    EMPTY_REFERENCE,
    PARENT_COLUMN,
    FieldFormat,
    Order,
    RecordKind,
    RepairNote,
    RowDescriptor,
    SaveContext,
    Subscription,
    WritePayload,
    as_reference,
)
from orderlink.domain.ports.hooks import ROWS_FOR_RECORD
from orderlink.domain.ports.persistence import StoreError

if TYPE_CHECKING:
    from collections.abc import Collection, Iterator

    from sqlalchemy.orm import Session

    from orderlink.domain.ports.hooks import HookDispatcher
    from orderlink.domain.ports.unit_of_work import LinkageRepositories

log = getLogger(__name__)

DEFAULT_CREATED_VIA = "checkout"


@contextmanager
def _store_errors(action: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        raise StoreError(f"Failed to {action}: {exc}") from exc


class SqlAlchemyHierarchyRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def allocate(self, kind: RecordKind, *, record_id: int = 0, parent_id: int = 0) -> int:
        """Insert a hierarchy node and return its id."""

        values: dict[str, object] = {"kind": kind.value, "parent_id": as_reference(parent_id)}
        if record_id > EMPTY_REFERENCE:
            values["id"] = record_id
        with _store_errors(f"allocate {kind.value} id"):
            result = self.session.execute(insert(hierarchy_table).values(**values))
        (allocated,) = result.inserted_primary_key or (record_id,)
        return int(allocated)

    def parent_of(self, record_id: int) -> int | None:
        stmt = select(hierarchy_table.c.parent_id).where(hierarchy_table.c.id == record_id)
        with _store_errors(f"read hierarchy parent of {record_id}"):
            return self.session.execute(stmt).scalar_one_or_none()

    def children_of(self, parent_id: int, *, kind: RecordKind) -> list[int]:
        stmt = (
            select(hierarchy_table.c.id)
            .where(hierarchy_table.c.parent_id == parent_id)
            .where(hierarchy_table.c.kind == kind.value)
            .order_by(hierarchy_table.c.id)
        )
        with _store_errors(f"list children of {parent_id}"):
            return list(self.session.execute(stmt).scalars())


class SqlAlchemyOrderRepository:
    def __init__(self, session: Session, hierarchy: SqlAlchemyHierarchyRepository) -> None:
        self.session = session
        self._hierarchy = hierarchy

    def add(self, order: Order) -> None:
        if order.created_at is None:
            order.created_at = datetime.now(tz=UTC)
        if not order.is_persisted or self._hierarchy.parent_of(order.id) is None:
            order.id = self._hierarchy.allocate(RecordKind.ORDER, record_id=order.id)
        with _store_errors(f"add order {order.id}"):
            self.session.add(order)
            self.session.flush()

    def get(self, order_id: int) -> Order | None:
        with _store_errors(f"load order {order_id}"):
            return self.session.get(Order, order_id)

    def created_between(
        self,
        start: datetime,
        end: datetime,
        *,
        statuses: Collection[str],
    ) -> list[Order]:
        stmt = (
            select(Order)
            .where(orders_table.c.created_at.between(start, end))
            .where(orders_table.c[CUSTOMER_COLUMN] > EMPTY_REFERENCE)
            .where(orders_table.c.status.in_([str(status) for status in statuses]))
            .order_by(orders_table.c.id)
        )
        with _store_errors("search orders by creation time"):
            return list(self.session.execute(stmt).scalars())


def build_write_payload(
    subscription: Subscription, *, created_via: str = DEFAULT_CREATED_VIA
) -> WritePayload:
    """Rows the store writes for a new subscription, before any row filter runs."""

    return WritePayload(
        rows=[
            RowDescriptor(
                table=ORDERS_TABLE,
                data={
                    "id": subscription.id,
                    "kind": RecordKind.SUBSCRIPTION.value,
                    "status": str(subscription.status),
                    PARENT_COLUMN: subscription.parent_id,
                    CUSTOMER_COLUMN: subscription.customer_id,
                    "created_at": subscription.created_at,
                },
                format={
                    "id": FieldFormat.INT,
                    "kind": FieldFormat.STR,
                    "status": FieldFormat.STR,
                    PARENT_COLUMN: FieldFormat.INT,
                    CUSTOMER_COLUMN: FieldFormat.INT,
                    "created_at": FieldFormat.DATETIME,
                },
            ),
            RowDescriptor(
                table=OPERATIONAL_TABLE,
                data={"order_id": subscription.id, "created_via": created_via},
                format={"order_id": FieldFormat.INT, "created_via": FieldFormat.STR},
            ),
        ]
    )


def _coerce(value: object, field_format: FieldFormat | None) -> object:
    if value is None:
        return None
    match field_format:
        case FieldFormat.INT:
            return as_reference(value)
        case FieldFormat.STR:
            return str(value)
        case _:
            return value


class SqlAlchemySubscriptionRepository:
    def __init__(
        self,
        session: Session,
        hierarchy: SqlAlchemyHierarchyRepository,
        *,
        hooks: HookDispatcher | None = None,
    ) -> None:
        self.session = session
        self._hierarchy = hierarchy
        self._hooks = hooks
        self._repositories: LinkageRepositories | None = None

    def bind(self, repositories: LinkageRepositories) -> None:
        """Collection handed to row filters alongside each write."""

        self._repositories = repositories

    def create(
        self,
        subscription: Subscription,
        *,
        context: SaveContext = SaveContext.CREATE,
        created_via: str = DEFAULT_CREATED_VIA,
    ) -> Subscription:
        if subscription.created_at is None:
            subscription.created_at = datetime.now(tz=UTC)
        subscription.id = self._hierarchy.allocate(
            RecordKind.SUBSCRIPTION,
            record_id=subscription.id,
            parent_id=subscription.hierarchy_parent_id,
        )
        payload = build_write_payload(subscription, created_via=created_via)
        if self._hooks is not None:
            filtered = self._hooks.apply_filters(
                ROWS_FOR_RECORD, payload, subscription, context, self._repositories
            )
            if isinstance(filtered, WritePayload):
                payload = filtered
            else:
                log.warning("Row filter returned %r; writing unfiltered rows", type(filtered))

        with _store_errors(f"write subscription {subscription.id}"):
            for row in payload.rows:
                self._write_row(row)
            self.session.flush()
            stored = self.session.get(Subscription, subscription.id)
        if stored is None:
            raise StoreError(f"Subscription {subscription.id} missing after write")
        return stored

    def _write_row(self, row: RowDescriptor) -> None:
        table = metadata.tables.get(row.table)
        if table is None:
            raise StoreError(f"Unknown table in write payload: {row.table}")
        values = {
            column: _coerce(value, row.format.get(column)) for column, value in row.data.items()
        }
        self.session.execute(insert(table).values(**values))

    def get(self, subscription_id: int) -> Subscription | None:
        with _store_errors(f"load subscription {subscription_id}"):
            return self.session.get(Subscription, subscription_id)

    def save(self, subscription: Subscription) -> None:
        with _store_errors(f"save subscription {subscription.id}"):
            self.session.add(subscription)
            self.session.flush()


class SqlAlchemyRepairNoteRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, note: RepairNote) -> None:
        with _store_errors(f"add repair note for {note.record_id}"):
            self.session.add(note)
            self.session.flush()

    def for_record(self, record_id: int) -> list[RepairNote]:
        stmt = (
            select(RepairNote)
            .where(repair_note_table.c.record_id == record_id)
            .order_by(repair_note_table.c.id)
        )
        with _store_errors(f"list repair notes for {record_id}"):
            return list(self.session.execute(stmt).scalars())


class SqlAlchemyConsumedTokenRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def consume(self, nonce: str, *, actor: str, issued_at: int) -> bool:
        spent = select(consumed_token_table.c.nonce).where(consumed_token_table.c.nonce == nonce)
        with _store_errors(f"consume token of {actor}"):
            if self.session.execute(spent).first() is not None:
                return False
            try:
                # Another process may spend the same nonce between the read and the insert.
                with self.session.begin_nested():
                    self.session.execute(
                        insert(consumed_token_table).values(
                            nonce=nonce, actor=actor, issued_at=issued_at
                        )
                    )
            except IntegrityError:
                return False
        return True

    def prune(self, *, issued_before: int) -> None:
        stmt = delete(consumed_token_table).where(consumed_token_table.c.issued_at < issued_before)
        with _store_errors("prune consumed tokens"):
            self.session.execute(stmt)
