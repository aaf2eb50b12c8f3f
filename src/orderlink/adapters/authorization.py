"""HMAC-signed, single-use action tokens plus a static capability table."""

from __future__ import annotations

import hashlib
import hmac
import secrets
import time
from collections.abc import Callable, Iterable, Mapping
from logging import getLogger
from typing import TYPE_CHECKING

from orderlink.domain.ports.authorization import MANAGE_ORDERS

if TYPE_CHECKING:
    from orderlink.config import AuthorizationConfig
    from orderlink.domain.ports.unit_of_work import LinkageUnitOfWork

log = getLogger(__name__)

_SEPARATOR = "."


class TokenAuthorizer:
    """Issue and verify tokens of the form ``<issued_at>.<nonce>.<signature>``.

    The signature binds actor and action, so a token minted for one operator or
    action does not verify for another. Spent nonces are recorded through
    ``unit_of_work_factory`` so a token is accepted once across every process
    sharing the store; nonces older than the TTL are pruned on each check.
    Without a factory no token verifies.
    """

    def __init__(
        self,
        config: AuthorizationConfig,
        unit_of_work_factory: Callable[[], LinkageUnitOfWork] | None = None,
        *,
        grants: Mapping[str, Iterable[str]] | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._secret = config.secret.encode("utf-8")
        self._ttl = config.token_ttl_seconds
        self._clock = clock
        self._grants: dict[str, frozenset[str]] = {
            actor: frozenset({MANAGE_ORDERS}) for actor in config.operators
        }
        for actor, capabilities in (grants or {}).items():
            self._grants[actor] = self._grants.get(actor, frozenset()) | frozenset(capabilities)
        self._unit_of_work_factory = unit_of_work_factory

    def has_capability(self, actor: str, capability: str) -> bool:
        return capability in self._grants.get(actor, frozenset())

    def issue_token(self, *, actor: str, action: str) -> str:
        issued_at = str(int(self._clock()))
        nonce = secrets.token_urlsafe(16)
        signature = self._sign(actor, action, issued_at, nonce)
        return _SEPARATOR.join((issued_at, nonce, signature))

    def verify_token(self, token: str, *, actor: str, action: str) -> bool:
        parts = token.split(_SEPARATOR)
        if len(parts) != 3:  # noqa: PLR2004
            return False
        issued_at, nonce, signature = parts
        if not issued_at.isdigit():
            return False
        expected = self._sign(actor, action, issued_at, nonce)
        if not hmac.compare_digest(expected, signature):
            log.debug("Token signature mismatch for %s/%s", actor, action)
            return False
        now = int(self._clock())
        if now - int(issued_at) > self._ttl:
            log.debug("Expired token presented by %s", actor)
            return False
        if self._unit_of_work_factory is None:
            log.warning("No token ledger configured; rejecting token presented by %s", actor)
            return False
        with self._unit_of_work_factory() as uow:
            tokens = uow.repositories.tokens
            tokens.prune(issued_before=now - self._ttl)
            accepted = tokens.consume(nonce, actor=actor, issued_at=int(issued_at))
            uow.commit()
        if not accepted:
            log.warning("Replayed token presented by %s for %s", actor, action)
        return accepted

    def _sign(self, actor: str, action: str, issued_at: str, nonce: str) -> str:
        message = "|".join((actor, action, issued_at, nonce)).encode("utf-8")
        return hmac.new(self._secret, message, hashlib.sha256).hexdigest()


if TYPE_CHECKING:
    from orderlink.domain.ports.authorization import Authorizer

    _authorizer_check: Authorizer = TokenAuthorizer(AuthorizationConfig(secret="check"))
