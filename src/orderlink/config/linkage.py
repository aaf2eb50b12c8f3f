"""Tunables for the linkage repair engine."""

from __future__ import annotations

from dataclasses import dataclass, field

from orderlink import __version__
from orderlink.domain.model.enums import OrderStatus

from .env import env_int, env_list
from .errors import ConfigurationError

DEFAULT_MATCH_WINDOW_SECONDS = 60
DEFAULT_PAID_STATUSES = (OrderStatus.COMPLETED, OrderStatus.PROCESSING)


@dataclass(frozen=True, slots=True)
class LinkageConfig:
    match_window_seconds: int = DEFAULT_MATCH_WINDOW_SECONDS
    paid_statuses: frozenset[OrderStatus] = field(
        default_factory=lambda: frozenset(DEFAULT_PAID_STATUSES)
    )
    version: str = __version__
    subscriptions_enabled: bool = True

    def __post_init__(self) -> None:
        if self.match_window_seconds < 0:
            raise ConfigurationError("Match window must be non-negative")
        if not self.paid_statuses:
            raise ConfigurationError("At least one paid status is required")


def get_linkage_config() -> LinkageConfig:
    raw_statuses = env_list(
        "ORDERLINK_PAID_STATUSES",
        [status.value for status in DEFAULT_PAID_STATUSES],
    )
    try:
        statuses = frozenset(OrderStatus(value) for value in raw_statuses)
    except ValueError as exc:
        raise ConfigurationError(f"Unknown order status in ORDERLINK_PAID_STATUSES: {exc}") from exc
    return LinkageConfig(
        match_window_seconds=env_int(
            "ORDERLINK_MATCH_WINDOW_SECONDS", DEFAULT_MATCH_WINDOW_SECONDS
        ),
        paid_statuses=statuses,
        subscriptions_enabled=env_int("ORDERLINK_SUBSCRIPTIONS_ENABLED", 1) != 0,
    )
