"""Tenant and device registry configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_float, env_int, optional_env_var, require_env_vars
from .http_resilience import RateLimit, ResilienceConfig

REGISTRY_TIMEOUT_SECONDS = 10.0
DEFAULT_DEVICE_PAGE_SIZE = 100


@dataclass(frozen=True)
class RegistryConfig:
    """Holds the endpoints and client settings of both registries."""

    tenant_resilience: ResilienceConfig
    device_resilience: ResilienceConfig
    device_page_size: int = DEFAULT_DEVICE_PAGE_SIZE


def _auth_headers(token: str | None) -> dict[str, str] | None:
    if token is None:
        return None
    return {"Authorization": f"Bearer {token}"}


def get_registry_config() -> RegistryConfig:
    values = require_env_vars(("TENANT_REGISTRY_URL", "DEVICE_REGISTRY_URL"))
    headers = _auth_headers(optional_env_var("REGISTRY_API_TOKEN"))
    timeout = env_float("REGISTRY_TIMEOUT_SECONDS", REGISTRY_TIMEOUT_SECONDS)
    return RegistryConfig(
        tenant_resilience=ResilienceConfig(
            name="tenant-registry",
            base_url=values["TENANT_REGISTRY_URL"].rstrip("/"),
            timeout_seconds=timeout,
            default_headers=headers,
        ),
        device_resilience=ResilienceConfig(
            name="device-registry",
            base_url=values["DEVICE_REGISTRY_URL"].rstrip("/"),
            timeout_seconds=timeout,
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
            default_headers=headers,
        ),
        device_page_size=env_int("DEVICE_PAGE_SIZE", DEFAULT_DEVICE_PAGE_SIZE),
    )
