"""Remote collection API configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_float, env_int, optional_env_var, require_env_vars
from .errors import ConfigurationError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

DEFAULT_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True)
class RemoteConfig:
    """Holds the settings needed to talk to a remote collection API."""

    base_url: str
    resilience: ResilienceConfig
    api_token: str | None = None


def _rate_limit_from_environment() -> RateLimit | None:
    rate = env_float("MODELSYNC_RATE_LIMIT", None)
    if rate is None:
        return None
    try:
        return RateLimit.per_second(rate)
    except ValueError as exc:
        raise ConfigurationError(
            f"MODELSYNC_RATE_LIMIT must be positive, got {rate}",
            variable="MODELSYNC_RATE_LIMIT",
        ) from exc


def get_remote_config(*, resilience: ResilienceConfig | None = None) -> RemoteConfig:
    values = require_env_vars(("MODELSYNC_BASE_URL",))
    base_url = values["MODELSYNC_BASE_URL"]
    api_token = optional_env_var("MODELSYNC_API_TOKEN")

    if resilience is None:
        headers = {"Accept": "application/json"}
        if api_token is not None:
            headers["Authorization"] = f"Bearer {api_token}"
        resilience = ResilienceConfig(
            name="remote",
            base_url=base_url,
            timeout_seconds=env_float("MODELSYNC_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS)
            or DEFAULT_TIMEOUT_SECONDS,
            retry=RetryPolicy(total=env_int("MODELSYNC_HTTP_RETRIES", 0)),
            ratelimit=_rate_limit_from_environment(),
            default_headers=headers,
        )

    return RemoteConfig(base_url=base_url, resilience=resilience, api_token=api_token)
