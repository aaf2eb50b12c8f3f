"""Authorization settings for the manual pairing entry point."""

from __future__ import annotations

from dataclasses import dataclass, field

from .env import env_int, env_list, require_env_var

DEFAULT_TOKEN_TTL_SECONDS = 24 * 60 * 60


@dataclass(frozen=True, slots=True)
class AuthorizationConfig:
    secret: str
    token_ttl_seconds: int = DEFAULT_TOKEN_TTL_SECONDS
    operators: frozenset[str] = field(default_factory=frozenset)


def get_authorization_config() -> AuthorizationConfig:
    return AuthorizationConfig(
        secret=require_env_var("ORDERLINK_AUTH_SECRET"),
        token_ttl_seconds=env_int("ORDERLINK_TOKEN_TTL_SECONDS", DEFAULT_TOKEN_TTL_SECONDS),
        operators=frozenset(env_list("ORDERLINK_OPERATORS", ())),
    )
