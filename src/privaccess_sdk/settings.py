"""
privaccess_sdk.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for the SDK (HTTP, logging, paging, fan-out).
- Offer a cached settings instance for callers that do not build their own.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Root domains per platform environment; tenant hosts are `<tenant>[-service].<root>`.
ROOT_DOMAINS: dict[str, str] = {
    "prod": "cyberark.cloud",
    "gov-prod": "cyberarkgov.cloud",
}


class Settings(BaseSettings):
    """
    SDK configuration:
    - Env-driven (prefix `PRIVACCESS_`), defaults safe for interactive use
    - One settings object injected into every service
    """

    model_config = SettingsConfigDict(env_prefix="PRIVACCESS_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "prod"
    service_name: str = "privaccess-sdk"
    log_level: str = "INFO"
    log_json: bool = True

    # Platform environment; selects the root domain used for tenant URLs.
    deploy_env: Literal["prod", "gov-prod"] = "prod"

    # HTTP
    http_timeout_seconds: float = 30.0
    verify_tls: bool = True
    user_agent: str = "privaccess-sdk/0.1.0"

    # Stats fan-out: number of concurrent per-entity workers (0 = one task per entity).
    stats_max_concurrency: int = Field(default=10, ge=0)

    # Cursor-paged listings
    strong_accounts_page_limit: int = Field(default=500, ge=1, le=1000)

    @property
    def root_domain(self) -> str:
        return ROOT_DOMAINS[self.deploy_env]

    @property
    def fan_out_limit(self) -> int | None:
        return self.stats_max_concurrency or None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for every client construction.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Services never read the environment directly; they receive a Settings instance
# from `privaccess_sdk.client.PrivAccessClient` or from the caller.
