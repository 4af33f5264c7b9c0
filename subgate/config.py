"""Runtime configuration helpers."""
from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Mapping, Optional
import os

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


@dataclass(frozen=True)
class SubgateConfig:
    """Configuration for the billing provider and subscription endpoints."""

    stripe_secret_key: str
    stripe_api_version: Optional[str]
    app_base_url: str
    entitled_statuses: FrozenSet[str]
    log_level: str


def _to_set(value: Optional[str]) -> FrozenSet[str]:
    if not value:
        return frozenset()
    return frozenset(item.strip().lower() for item in value.split(",") if item.strip())


def _to_log_level(value: Optional[str], *, default: str) -> str:
    if value is None or value.strip() == "":
        return default
    level = value.strip().upper()
    if level not in _LOG_LEVELS:
        raise ValueError(f"Expected one of {sorted(_LOG_LEVELS)}, got {value!r}")
    return level


def load_config(env: Optional[Mapping[str, str]] = None) -> SubgateConfig:
    """Load :class:`SubgateConfig` from environment variables."""

    env_mapping = os.environ if env is None else env

    stripe_secret_key = env_mapping.get("STRIPE_SECRET_KEY", "")
    stripe_api_version = env_mapping.get("STRIPE_API_VERSION") or None
    app_base_url = env_mapping.get("APP_BASE_URL", "http://localhost:3000")
    entitled_statuses = _to_set(env_mapping.get("SUBGATE_ENTITLED_STATUSES"))
    log_level = _to_log_level(env_mapping.get("SUBGATE_LOG_LEVEL"), default="INFO")

    return SubgateConfig(
        stripe_secret_key=stripe_secret_key,
        stripe_api_version=stripe_api_version,
        app_base_url=app_base_url.rstrip("/"),
        entitled_statuses=entitled_statuses,
        log_level=log_level,
    )
