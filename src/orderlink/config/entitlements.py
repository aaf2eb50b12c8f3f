"""Entitlement (license) service configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

ENTITLEMENT_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class EntitlementConfig:
    """Holds entitlement API connection values."""

    base_url: str
    api_token: str | None
    resilience: ResilienceConfig


def get_entitlement_config(
    *,
    resilience: ResilienceConfig | None = None,
) -> EntitlementConfig | None:
    """Return the connector configuration, or ``None`` when no service is configured."""

    base_url = optional_env_var("ENTITLEMENT_API_URL")
    if base_url is None:
        return None
    api_token = optional_env_var("ENTITLEMENT_API_TOKEN")
    headers = {"Authorization": f"Bearer {api_token}"} if api_token else None
    return EntitlementConfig(
        base_url=base_url,
        api_token=api_token,
        resilience=resilience
        or ResilienceConfig(
            name="entitlements",
            base_url=base_url,
            timeout_seconds=ENTITLEMENT_TIMEOUT_SECONDS,
            retry=RetryPolicy(total=3),
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
            default_headers=headers,
        ),
    )
