from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import find_dotenv, load_dotenv

# Приоритетно загружаем .env.covenant (если есть), затем .env.
load_dotenv(find_dotenv(filename=".env.covenant", raise_error_if_not_found=False))
load_dotenv(find_dotenv())


def _get_bool(value: Optional[str], *, default: bool = False) -> bool:
    if value is None:
        return default
    return value.lower() in {"1", "true", "yes", "y", "on"}


def _get_optional_float(value: Optional[str]) -> Optional[float]:
    if value is None or not value.strip():
        return None
    return float(value)


DEFAULT_PORT = int(os.getenv("COVENANT_PORT", os.getenv("PORT", "8200")))
DEFAULT_HOST = os.getenv("COVENANT_HOST", os.getenv("HOST", "0.0.0.0"))
DEFAULT_LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
DEFAULT_SOURCE_NAME = os.getenv("COVENANT_SOURCE_NAME", "Genesis")
DEFAULT_DELEGATION_TIMEOUT = _get_optional_float(os.getenv("COVENANT_DELEGATION_TIMEOUT_SECONDS"))
DEFAULT_BOOT_AGENTS = _get_bool(os.getenv("COVENANT_BOOT_AGENTS"), default=True)
DEFAULT_ENABLE_MONITORING = _get_bool(
    os.getenv("COVENANT_ENABLE_MONITORING") or os.getenv("ENABLE_MONITORING"),
    default=True,
)
DEFAULT_NAME_LORE_MAX_RETRIES = int(os.getenv("COVENANT_NAME_LORE_MAX_RETRIES", "1"))
DEFAULT_RETRY_BACKOFF_SECONDS = float(os.getenv("COVENANT_RETRY_BACKOFF_SECONDS", "0.5"))
DEFAULT_DOMAIN_REGISTRY_URL = os.getenv("COVENANT_DOMAIN_REGISTRY_URL") or None
DEFAULT_DOMAIN_REGISTRY_TIMEOUT = float(os.getenv("COVENANT_DOMAIN_REGISTRY_TIMEOUT_SECONDS", "5"))

LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


@dataclass
class CovenantConfig:
    """
    Хранит параметры HTTP-сервиса и ядра делегирования.
    """

    port: int = DEFAULT_PORT
    host: str = DEFAULT_HOST
    log_level: str = DEFAULT_LOG_LEVEL
    source_name: str = DEFAULT_SOURCE_NAME
    delegation_timeout_seconds: Optional[float] = DEFAULT_DELEGATION_TIMEOUT
    boot_agents: bool = DEFAULT_BOOT_AGENTS
    enable_monitoring: bool = DEFAULT_ENABLE_MONITORING
    name_lore_max_retries: int = DEFAULT_NAME_LORE_MAX_RETRIES
    retry_backoff_seconds: float = DEFAULT_RETRY_BACKOFF_SECONDS
    domain_registry_url: Optional[str] = DEFAULT_DOMAIN_REGISTRY_URL
    domain_registry_timeout_seconds: float = DEFAULT_DOMAIN_REGISTRY_TIMEOUT

    def __post_init__(self) -> None:
        if not 0 < self.port < 65536:
            raise ValueError("port must be in range 1..65535")
        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(LOG_LEVELS)}")
        self.log_level = self.log_level.upper()
        if not self.source_name:
            raise ValueError("source_name must not be empty")
        if self.delegation_timeout_seconds is not None and self.delegation_timeout_seconds <= 0:
            raise ValueError("delegation_timeout_seconds must be positive")
        if self.name_lore_max_retries < 0:
            raise ValueError("name_lore_max_retries must be non-negative")
        if self.retry_backoff_seconds < 0:
            raise ValueError("retry_backoff_seconds must be non-negative")
        if self.domain_registry_timeout_seconds <= 0:
            raise ValueError("domain_registry_timeout_seconds must be positive")

    @classmethod
    def from_env(cls) -> "CovenantConfig":
        """
        Построить конфигурацию из переменных окружения.
        """
        return cls(
            port=int(os.getenv("COVENANT_PORT", os.getenv("PORT", str(DEFAULT_PORT)))),
            host=os.getenv("COVENANT_HOST", os.getenv("HOST", DEFAULT_HOST)),
            log_level=os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL),
            source_name=os.getenv("COVENANT_SOURCE_NAME", DEFAULT_SOURCE_NAME),
            delegation_timeout_seconds=_get_optional_float(
                os.getenv("COVENANT_DELEGATION_TIMEOUT_SECONDS")
            ),
            boot_agents=_get_bool(os.getenv("COVENANT_BOOT_AGENTS"), default=DEFAULT_BOOT_AGENTS),
            enable_monitoring=_get_bool(
                os.getenv("COVENANT_ENABLE_MONITORING") or os.getenv("ENABLE_MONITORING"),
                default=DEFAULT_ENABLE_MONITORING,
            ),
            name_lore_max_retries=int(
                os.getenv("COVENANT_NAME_LORE_MAX_RETRIES", str(DEFAULT_NAME_LORE_MAX_RETRIES))
            ),
            retry_backoff_seconds=float(
                os.getenv("COVENANT_RETRY_BACKOFF_SECONDS", str(DEFAULT_RETRY_BACKOFF_SECONDS))
            ),
            domain_registry_url=os.getenv("COVENANT_DOMAIN_REGISTRY_URL") or None,
            domain_registry_timeout_seconds=float(
                os.getenv(
                    "COVENANT_DOMAIN_REGISTRY_TIMEOUT_SECONDS",
                    str(DEFAULT_DOMAIN_REGISTRY_TIMEOUT),
                )
            ),
        )
