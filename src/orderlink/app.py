"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from orderlink.adapters.authorization import TokenAuthorizer
from orderlink.adapters.entitlements import build_entitlement_connector
from orderlink.adapters.hooks import InProcessHookDispatcher
from orderlink.adapters.pairing_api import PairingResponse, handle_pair_request
from orderlink.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork, is_started, startup
from orderlink.config import (
    MissingConfigurationError,
    get_authorization_config,
    get_linkage_config,
)
from orderlink.domain.linkage import LinkageEngine
from orderlink.domain.ports.authorization import PAIRING_ACTION, Credentials
from orderlink.domain.ports.unit_of_work import LinkageUnitOfWork

if TYPE_CHECKING:
    from orderlink.config import LinkageConfig
    from orderlink.domain.linkage import BackstopReport, PairingSuggestion
    from orderlink.domain.ports.authorization import Authorizer
    from orderlink.domain.ports.entitlements import EntitlementConnector

UnitOfWorkFactory = Callable[[], LinkageUnitOfWork]

log = getLogger(__name__)


@dataclass(slots=True)
class LinkageRuntime:
    """Engine plus the dispatcher it is registered on."""

    engine: LinkageEngine
    hooks: InProcessHookDispatcher
    registered: bool


def _default_authorizer(unit_of_work_factory: UnitOfWorkFactory) -> TokenAuthorizer | None:
    try:
        return TokenAuthorizer(get_authorization_config(), unit_of_work_factory)
    except MissingConfigurationError:
        log.debug("No authorization secret configured; manual pairing is disabled")
        return None


def bootstrap(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    entitlements: EntitlementConnector | None = None,
    authorizer: Authorizer | None = None,
    config: LinkageConfig | None = None,
) -> LinkageRuntime:
    """Build the engine from configuration and register it on a fresh dispatcher."""

    hooks = InProcessHookDispatcher()
    factory = unit_of_work_factory
    if factory is None:
        if not is_started():
            startup()

        def factory() -> LinkageUnitOfWork:
            return SqlAlchemyUnitOfWork(hooks=hooks)

    engine = LinkageEngine(
        unit_of_work_factory=factory,
        config=config or get_linkage_config(),
        entitlements=entitlements or build_entitlement_connector(),
        authorizer=authorizer or _default_authorizer(factory),
    )
    registered = engine.register(hooks)
    return LinkageRuntime(engine=engine, hooks=hooks, registered=registered)


def pair_subscription(
    subscription_id: int,
    order_id: int,
    *,
    actor: str,
    token: str,
    runtime: LinkageRuntime | None = None,
) -> PairingResponse:
    """Pair an orphan subscription with an order on behalf of ``actor``."""

    effective = runtime or bootstrap()
    response = handle_pair_request(
        effective.engine,
        {"subscription_id": subscription_id, "order_id": order_id},
        credentials=Credentials(actor=actor, token=token),
    )
    log.info("Pairing finished with HTTP %s: %s", response.status_code, response.message)
    return response


def recover_order(order_id: int, *, runtime: LinkageRuntime | None = None) -> BackstopReport:
    """Replay the completion backstop for an order already in a paid status."""

    effective = runtime or bootstrap()
    engine = effective.engine
    with engine.unit_of_work_factory() as uow:
        order = uow.repositories.orders.get(order_id)
        status = None if order is None else order.status
    if order is None:
        raise ValueError(f"Order {order_id} not found")
    if status not in engine.config.paid_statuses:
        raise ValueError(f"Order {order_id} is {status}, not a paid status")

    report = engine.recover_order(order_id)
    log.info(
        f"Backstop for order {order_id}: repaired={list(report.repaired)}, "
        f"unchanged={list(report.unchanged)}, failed={list(report.failed)}, "
        f"entitlement_triggered={report.entitlement_triggered}"
    )
    return report


def suggest_pairing(
    subscription_id: int, *, runtime: LinkageRuntime | None = None
) -> PairingSuggestion | None:
    effective = runtime or bootstrap()
    return effective.engine.suggest_pairing(subscription_id)


def issue_pairing_token(actor: str, *, authorizer: TokenAuthorizer | None = None) -> str:
    """Mint a single-use pairing token for ``actor``."""

    effective = authorizer or TokenAuthorizer(get_authorization_config())
    return effective.issue_token(actor=actor, action=PAIRING_ACTION)
