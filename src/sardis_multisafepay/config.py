"""Configuration surface for the MultiSafepay adapter."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings

from sardis_multisafepay.constants import (
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    PSP_NAME,
    Endpoints,
)
from sardis_multisafepay.models import Environment


class MultiSafepayConfig(BaseSettings):
    """Process-wide adapter configuration."""

    # Deployment environment; selects credentials and API endpoint
    environment: Environment = Environment.DEVELOPMENT

    # API base urls
    live_api_base: str = Endpoints.LIVE
    test_api_base: str = Endpoints.TEST

    request_timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS

    # Name written to the audit log
    psp_name: str = PSP_NAME

    class Config:
        env_prefix = "SARDIS_MULTISAFEPAY_"
        env_file = ".env"
        extra = "ignore"

    @field_validator("environment", mode="before")
    @classmethod
    def parse_environment(cls, v):
        """Accept environment names in any case."""
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("live_api_base", "test_api_base")
    @classmethod
    def ensure_trailing_slash(cls, v: str) -> str:
        # Relative paths like "orders" must resolve below the version prefix.
        return v if v.endswith("/") else v + "/"

    @field_validator("request_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("request_timeout_seconds must be positive")
        return v

    def api_base_for(self, environment: Environment) -> str:
        """Return the API base url used for ``environment``."""
        if environment.uses_production_endpoint:
            return self.live_api_base
        return self.test_api_base


@lru_cache
def load_config(env_file: str | None = None) -> MultiSafepayConfig:
    """Load MultiSafepayConfig once per process."""
    env_path = Path(env_file) if env_file else None
    return MultiSafepayConfig(_env_file=env_path)
