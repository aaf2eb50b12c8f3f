from __future__ import annotations

from http import HTTPStatus

import pytest

from orderlink.domain.linkage import (
    PairingErrorKind,
    PairingFailure,
    PairingService,
    PairingSuccess,
)
from orderlink.domain.model import RepairSource, SubscriptionStatus
from orderlink.domain.ports.authorization import Credentials
from tests.helpers.linkage import (
    FakeAuthorizer,
    FakeEntitlements,
    UnitOfWorkRecorder,
    make_order,
    make_subscription,
)

MANAGER = Credentials(actor="shop-manager", token="token-1")


@pytest.fixture
def recorder() -> UnitOfWorkRecorder:
    return UnitOfWorkRecorder()


def _service(
    recorder: UnitOfWorkRecorder, entitlements: FakeEntitlements | None = None
) -> PairingService:
    return PairingService(
        unit_of_work_factory=recorder,
        authorizer=FakeAuthorizer(),
        version="3.1",
        entitlements=entitlements,
    )


def test_pairs_orphan_with_order(recorder: UnitOfWorkRecorder) -> None:
    store = recorder.store
    order = make_order(store, customer_id=7, order_number="1042")
    orphan = make_subscription(store)
    entitlements = FakeEntitlements()

    result = _service(recorder, entitlements).pair(orphan.id, order.id, credentials=MANAGER)

    assert isinstance(result, PairingSuccess)
    assert result.status_code is HTTPStatus.OK
    assert result.message == (
        f"Subscription #{orphan.id} paired with Order #1042. Customer: 7. "
        "Status: Active. License generated."
    )
    assert orphan.parent_id == order.id
    assert orphan.customer_id == 7
    assert orphan.status == SubscriptionStatus.ACTIVE
    [note] = store.notes
    assert note.source is RepairSource.MANUAL
    assert note.created_by == "shop-manager"
    assert note.message == "Subscription paired with order #1042. Customer ID: 7."
    assert entitlements.updates == [order.id]
    assert recorder.commits == 1


def test_message_omits_license_without_connector(recorder: UnitOfWorkRecorder) -> None:
    store = recorder.store
    order = make_order(store, customer_id=7)
    orphan = make_subscription(store)

    result = _service(recorder).pair(orphan.id, order.id, credentials=MANAGER)

    assert isinstance(result, PairingSuccess)
    assert result.message.endswith("Status: Active.")


def test_second_pairing_is_rejected(recorder: UnitOfWorkRecorder) -> None:
    store = recorder.store
    order = make_order(store, customer_id=7)
    orphan = make_subscription(store)
    service = _service(recorder)

    service.pair(orphan.id, order.id, credentials=MANAGER)
    second = service.pair(
        orphan.id, order.id, credentials=Credentials(actor="shop-manager", token="token-2")
    )

    assert isinstance(second, PairingFailure)
    assert second.status_code is HTTPStatus.BAD_REQUEST
    assert second.message == "Subscription is not an orphan"
    assert len(store.notes) == 1


@pytest.mark.parametrize(
    ("subscription_exists", "order_exists"),
    [(False, True), (True, False), (False, False)],
)
def test_missing_records_yield_not_found(
    recorder: UnitOfWorkRecorder, subscription_exists: bool, order_exists: bool  # noqa: FBT001
) -> None:
    store = recorder.store
    order_id = make_order(store).id if order_exists else 9999
    subscription_id = make_subscription(store).id if subscription_exists else 8888

    result = _service(recorder).pair(subscription_id, order_id, credentials=MANAGER)

    assert isinstance(result, PairingFailure)
    assert result.kind is PairingErrorKind.NOT_FOUND
    assert result.status_code is HTTPStatus.NOT_FOUND
    assert result.message == "Subscription or order not found"


def test_order_without_customer_is_rejected(recorder: UnitOfWorkRecorder) -> None:
    store = recorder.store
    order = make_order(store, customer_id=0)
    orphan = make_subscription(store)

    result = _service(recorder).pair(orphan.id, order.id, credentials=MANAGER)

    assert isinstance(result, PairingFailure)
    assert result.status_code is HTTPStatus.BAD_REQUEST
    assert result.message == "Order has no customer ID"
    assert orphan.is_orphan


@pytest.mark.parametrize(
    "credentials",
    [
        None,
        Credentials(actor="customer", token="token-1"),
        Credentials(actor="shop-manager", token="forged"),
    ],
)
def test_unauthorized_callers_are_rejected(
    recorder: UnitOfWorkRecorder, credentials: Credentials | None
) -> None:
    store = recorder.store
    order = make_order(store, customer_id=7)
    orphan = make_subscription(store)

    result = _service(recorder).pair(orphan.id, order.id, credentials=credentials)

    assert isinstance(result, PairingFailure)
    assert result.status_code is HTTPStatus.FORBIDDEN
    assert orphan.is_orphan
    assert recorder.created == []


def test_token_is_single_use(recorder: UnitOfWorkRecorder) -> None:
    store = recorder.store
    order = make_order(store, customer_id=7)
    first = make_subscription(store)
    second = make_subscription(store)
    service = _service(recorder)

    service.pair(first.id, order.id, credentials=MANAGER)
    replay = service.pair(second.id, order.id, credentials=MANAGER)

    assert isinstance(replay, PairingFailure)
    assert replay.kind is PairingErrorKind.UNAUTHORIZED


def test_store_failure_yields_internal_error(
    recorder: UnitOfWorkRecorder, caplog: pytest.LogCaptureFixture
) -> None:
    store = recorder.store
    order = make_order(store, customer_id=7)
    orphan = make_subscription(store)
    store.failing_saves.add(orphan.id)

    result = _service(recorder).pair(orphan.id, order.id, credentials=MANAGER)

    assert isinstance(result, PairingFailure)
    assert result.status_code is HTTPStatus.INTERNAL_SERVER_ERROR
    assert result.message == "An internal error occurred while pairing. Check logs."
    assert recorder.rollbacks == 1
    assert recorder.commits == 0
    assert f"subscription_id={orphan.id}" in caplog.text
    assert "user=shop-manager" in caplog.text


def test_entitlement_failure_keeps_committed_pairing(
    recorder: UnitOfWorkRecorder, caplog: pytest.LogCaptureFixture
) -> None:
    store = recorder.store
    order = make_order(store, customer_id=7, order_number="1042")
    orphan = make_subscription(store)
    entitlements = FakeEntitlements(failure=RuntimeError("license service down"))

    result = _service(recorder, entitlements).pair(orphan.id, order.id, credentials=MANAGER)

    assert isinstance(result, PairingSuccess)
    assert result.status_code is HTTPStatus.OK
    assert not result.entitlement_triggered
    assert result.entitlement_error == "license service down"
    assert result.message.endswith("License generation failed; replay with recover.")
    assert orphan.parent_id == order.id
    assert recorder.commits == 1
    assert recorder.rollbacks == 0
    assert "Entitlement update failed after pairing" in caplog.text


def test_authorizer_failure_yields_internal_error(recorder: UnitOfWorkRecorder) -> None:
    class BrokenLedger(FakeAuthorizer):
        def verify_token(self, token: str, *, actor: str, action: str) -> bool:
            del token, actor, action
            raise RuntimeError("token ledger unavailable")

    store = recorder.store
    order = make_order(store, customer_id=7)
    orphan = make_subscription(store)
    service = PairingService(
        unit_of_work_factory=recorder, authorizer=BrokenLedger(), version="3.1"
    )

    result = service.pair(orphan.id, order.id, credentials=MANAGER)

    assert isinstance(result, PairingFailure)
    assert result.kind is PairingErrorKind.INTERNAL
    assert orphan.is_orphan
    assert recorder.created == []
