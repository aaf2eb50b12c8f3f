"""Wire the repair layers into the host platform's hooks."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from logging import getLogger
from typing import TYPE_CHECKING, Final

from orderlink.config.linkage import LinkageConfig
from orderlink.config.logging import source_extra
from orderlink.domain.ports.hooks import (
    ROWS_FOR_RECORD,
    SUBSCRIPTION_CREATED,
    order_status_hook,
)

from .backstop import LifecycleBackstop
from .matcher import OrphanMatcher
from .normalizer import RowNormalizer
from .pairing import PairingService
from .verifier import PostCreateVerifier

if TYPE_CHECKING:
    from collections.abc import Callable

    from orderlink.domain.model import Order, WritePayload
    from orderlink.domain.ports.authorization import Authorizer, Credentials
    from orderlink.domain.ports.entitlements import EntitlementConnector
    from orderlink.domain.ports.hooks import HookDispatcher
    from orderlink.domain.ports.unit_of_work import LinkageRepositories, LinkageUnitOfWork

    from .matcher import PairingSuggestion
    from .results import BackstopReport, PairingResult, RepairOutcome

log = getLogger(__name__)

# Normalizer runs after every other row filter; verifier before other creation
# listeners; backstop after the platform's own status handlers.
NORMALIZER_PRIORITY: Final[int] = 999
VERIFIER_PRIORITY: Final[int] = 5
BACKSTOP_PRIORITY: Final[int] = 20


@dataclass(slots=True)
class LinkageEngine:
    """Facade over the four repair layers and the orphan matcher."""

    unit_of_work_factory: Callable[[], LinkageUnitOfWork]
    config: LinkageConfig = field(default_factory=LinkageConfig)
    entitlements: EntitlementConnector | None = None
    authorizer: Authorizer | None = None

    normalizer: RowNormalizer = field(init=False)
    verifier: PostCreateVerifier = field(init=False)
    backstop: LifecycleBackstop = field(init=False)
    matcher: OrphanMatcher = field(init=False)
    pairing: PairingService = field(init=False)

    def __post_init__(self) -> None:
        self.normalizer = RowNormalizer()
        self.verifier = PostCreateVerifier(version=self.config.version)
        self.backstop = LifecycleBackstop(
            unit_of_work_factory=self.unit_of_work_factory,
            version=self.config.version,
            entitlements=self.entitlements,
        )
        self.matcher = OrphanMatcher(
            window=timedelta(seconds=self.config.match_window_seconds),
            paid_statuses=frozenset(str(status) for status in self.config.paid_statuses),
        )
        self.pairing = PairingService(
            unit_of_work_factory=self.unit_of_work_factory,
            authorizer=self.authorizer,
            version=self.config.version,
            entitlements=self.entitlements,
        )

    def register(self, hooks: HookDispatcher) -> bool:
        """Attach every layer to ``hooks``; a no-op when subscriptions are disabled."""

        if not self.config.subscriptions_enabled:
            log.info("Subscriptions disabled; linkage repair not registered", extra=source_extra())
            return False
        hooks.add_filter(ROWS_FOR_RECORD, self.normalize_rows, priority=NORMALIZER_PRIORITY)
        hooks.add_action(SUBSCRIPTION_CREATED, self.verify_created, priority=VERIFIER_PRIORITY)
        for status in sorted(self.config.paid_statuses):
            hooks.add_action(
                order_status_hook(status), self.recover_order, priority=BACKSTOP_PRIORITY
            )
        log.debug("Linkage repair registered (v%s)", self.config.version)
        return True

    def normalize_rows(
        self,
        payload: WritePayload,
        candidate: object,
        context: object,
        repositories: LinkageRepositories,
    ) -> WritePayload:
        return self.normalizer(payload, candidate, context, repositories)

    def verify_created(
        self,
        subscription: object,
        order: object,
        schedule: object,
        repositories: LinkageRepositories,
    ) -> RepairOutcome:
        return self.verifier(subscription, order, schedule, repositories)

    def recover_order(self, order_id: object) -> BackstopReport:
        return self.backstop(order_id)

    def find_matching_order(self, subscription_id: int) -> Order | None:
        with self.unit_of_work_factory() as uow:
            subscription = uow.repositories.subscriptions.get(subscription_id)
            if subscription is None:
                return None
            return self.matcher.find_matching_order(subscription, uow.repositories.orders)

    def suggest_pairing(self, subscription_id: int) -> PairingSuggestion | None:
        with self.unit_of_work_factory() as uow:
            subscription = uow.repositories.subscriptions.get(subscription_id)
            if subscription is None:
                return None
            return self.matcher.suggest(subscription, uow.repositories.orders)

    def pair(
        self,
        subscription_id: int,
        order_id: int,
        *,
        credentials: Credentials | None,
    ) -> PairingResult:
        return self.pairing.pair(subscription_id, order_id, credentials=credentials)
