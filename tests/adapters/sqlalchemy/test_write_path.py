from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

import pytest

from orderlink.config import LinkageConfig
from orderlink.domain.linkage import (
    LinkageEngine,
    PairingSuccess,
    PostCreateVerifier,
    RepairFailed,
)
from orderlink.domain.model import (
    CUSTOMER_COLUMN,
    PARENT_COLUMN,
    Order,
    OrderStatus,
    RepairSource,
    SaveContext,
    Subscription,
    SubscriptionStatus,
    WritePayload,
)
from orderlink.domain.ports.authorization import Credentials
from orderlink.domain.ports.hooks import ROWS_FOR_RECORD, SUBSCRIPTION_CREATED, order_status_hook
from tests.helpers.linkage import FakeAuthorizer, FakeEntitlements

if TYPE_CHECKING:
    from collections.abc import Callable

    from orderlink.adapters.hooks import InProcessHookDispatcher
    from orderlink.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork

    UowFactory = Callable[[], SqlAlchemyUnitOfWork]

CREATED = datetime(2025, 3, 14, 12, 0, tzinfo=UTC)


def _drop_linkage(payload: WritePayload, *_: object) -> WritePayload:
    broken = payload.copy()
    index = broken.find_orders_row()
    assert index is not None
    broken.rows[index].data[PARENT_COLUMN] = 0
    broken.rows[index].data[CUSTOMER_COLUMN] = 0
    return broken


@pytest.fixture
def entitlements() -> FakeEntitlements:
    return FakeEntitlements()


@pytest.fixture
def engine(
    sqlite_unit_of_work: UowFactory,
    hook_dispatcher: InProcessHookDispatcher,
    entitlements: FakeEntitlements,
) -> LinkageEngine:
    linkage = LinkageEngine(
        unit_of_work_factory=sqlite_unit_of_work,
        config=LinkageConfig(version="4.0"),
        entitlements=entitlements,
        authorizer=FakeAuthorizer(),
    )
    linkage.register(hook_dispatcher)
    return linkage


def _add_order(
    factory: UowFactory,
    *,
    customer_id: int = 7,
    status: str = OrderStatus.PENDING,
    created_at: datetime = CREATED,
    order_number: str | None = None,
) -> int:
    with factory() as uow:
        order = Order(
            status=status,
            customer_id=customer_id,
            created_at=created_at,
            order_number=order_number,
        )
        uow.repositories.orders.add(order)
        uow.commit()
        return order.id


@pytest.mark.usefixtures("engine")
def test_normalizer_restores_linkage_dropped_by_the_write_path(
    sqlite_unit_of_work: UowFactory, hook_dispatcher: InProcessHookDispatcher
) -> None:
    hook_dispatcher.add_filter(ROWS_FOR_RECORD, _drop_linkage, priority=10)
    order_id = _add_order(sqlite_unit_of_work)

    with sqlite_unit_of_work() as uow:
        stored = uow.repositories.subscriptions.create(
            Subscription(
                parent_id=order_id,
                customer_id=7,
                hierarchy_parent_id=order_id,
                created_at=CREATED,
            )
        )
        uow.commit()
        subscription_id = stored.id

    with sqlite_unit_of_work() as uow:
        reloaded = uow.repositories.subscriptions.get(subscription_id)
        assert reloaded is not None
        assert reloaded.parent_id == order_id
        assert reloaded.customer_id == 7


@pytest.mark.usefixtures("engine")
def test_normalizer_falls_back_to_uncommitted_hierarchy_row(
    sqlite_unit_of_work: UowFactory, hook_dispatcher: InProcessHookDispatcher
) -> None:
    hook_dispatcher.add_filter(ROWS_FOR_RECORD, _drop_linkage, priority=10)
    order_id = _add_order(sqlite_unit_of_work, customer_id=21)

    with sqlite_unit_of_work() as uow:
        stored = uow.repositories.subscriptions.create(
            Subscription(hierarchy_parent_id=order_id, created_at=CREATED)
        )
        uow.commit()

    assert stored.parent_id == order_id
    assert stored.customer_id == 21


def test_verifier_repairs_after_checkout(
    sqlite_unit_of_work: UowFactory,
    hook_dispatcher: InProcessHookDispatcher,
    engine: LinkageEngine,
) -> None:
    del engine
    order_id = _add_order(sqlite_unit_of_work)

    with sqlite_unit_of_work() as uow:
        repositories = uow.repositories
        # Created with no hierarchy parent: the row filter has nothing to recover from.
        subscription = repositories.subscriptions.create(Subscription(created_at=CREATED))
        order = repositories.orders.get(order_id)
        hook_dispatcher.do_action(SUBSCRIPTION_CREATED, subscription, order, None, repositories)
        uow.commit()
        subscription_id = subscription.id

    with sqlite_unit_of_work() as uow:
        reloaded = uow.repositories.subscriptions.get(subscription_id)
        assert reloaded is not None
        assert (reloaded.parent_id, reloaded.customer_id) == (order_id, 7)
        [note] = uow.repositories.notes.for_record(subscription_id)
        assert note.source is RepairSource.CHECKOUT
        assert note.version == "4.0"


def test_failed_verifier_write_keeps_creation_committable(
    sqlite_unit_of_work: UowFactory,
) -> None:
    order_id = _add_order(sqlite_unit_of_work)
    # repair_note.version is NOT NULL, so the note insert fails on flush.
    verifier = PostCreateVerifier(version=None)  # type: ignore[arg-type]

    with sqlite_unit_of_work() as uow:
        repositories = uow.repositories
        subscription = repositories.subscriptions.create(Subscription(created_at=CREATED))
        order = repositories.orders.get(order_id)
        outcome = verifier(subscription, order, None, repositories)
        uow.commit()
        subscription_id = subscription.id

    assert isinstance(outcome, RepairFailed)
    assert outcome.record_id == subscription_id
    with sqlite_unit_of_work() as uow:
        reloaded = uow.repositories.subscriptions.get(subscription_id)
        assert reloaded is not None
        assert (reloaded.parent_id, reloaded.customer_id) == (0, 0)
        assert uow.repositories.notes.for_record(subscription_id) == []


def test_backstop_repairs_on_completion(
    sqlite_unit_of_work: UowFactory,
    hook_dispatcher: InProcessHookDispatcher,
    engine: LinkageEngine,
    entitlements: FakeEntitlements,
) -> None:
    del engine
    order_id = _add_order(sqlite_unit_of_work, customer_id=33, status=OrderStatus.COMPLETED)
    with sqlite_unit_of_work() as uow:
        # Bypass the row filter by writing an update-context subscription.
        orphan = uow.repositories.subscriptions.create(
            Subscription(hierarchy_parent_id=order_id, created_at=CREATED),
            context=SaveContext.UPDATE,
        )
        uow.commit()
        orphan_id = orphan.id
    assert orphan.is_orphan

    hook_dispatcher.do_action(order_status_hook(OrderStatus.COMPLETED), order_id)
    hook_dispatcher.do_action(order_status_hook(OrderStatus.COMPLETED), order_id)

    with sqlite_unit_of_work() as uow:
        reloaded = uow.repositories.subscriptions.get(orphan_id)
        assert reloaded is not None
        assert (reloaded.parent_id, reloaded.customer_id) == (order_id, 33)
        assert len(uow.repositories.notes.for_record(orphan_id)) == 1
    assert entitlements.updates == [order_id]


def test_manual_pairing_persists(
    sqlite_unit_of_work: UowFactory, engine: LinkageEngine
) -> None:
    order_id = _add_order(
        sqlite_unit_of_work,
        customer_id=55,
        status=OrderStatus.PROCESSING,
        created_at=CREATED + timedelta(seconds=12),
        order_number="W-1001",
    )
    with sqlite_unit_of_work() as uow:
        orphan = uow.repositories.subscriptions.create(
            Subscription(created_at=CREATED), context=SaveContext.UPDATE
        )
        uow.commit()
        orphan_id = orphan.id

    suggestion = engine.suggest_pairing(orphan_id)
    assert suggestion is not None
    assert suggestion.order_id == order_id

    result = engine.pair(
        orphan_id, order_id, credentials=Credentials(actor="shop-manager", token="token-1")
    )

    assert isinstance(result, PairingSuccess)
    assert result.order_number == "W-1001"
    with sqlite_unit_of_work() as uow:
        reloaded = uow.repositories.subscriptions.get(orphan_id)
        assert reloaded is not None
        assert reloaded.status == SubscriptionStatus.ACTIVE
        assert (reloaded.parent_id, reloaded.customer_id) == (order_id, 55)
        [note] = uow.repositories.notes.for_record(orphan_id)
        assert note.created_by == "shop-manager"
