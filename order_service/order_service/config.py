"""Environment-driven settings for the order service."""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Settings:
    """Runtime configuration read from the environment.

    Attributes:
        kafka_bootstrap_servers: Comma-separated list of Kafka broker addresses.
        inventory_service_url: Base URL of the inventory service.
        inventory_timeout: HTTP timeout in seconds for stock checks.
        database_url: SQLAlchemy URL of the order database.
        placement_timeout: Optional per-request deadline in seconds.
        log_level: Minimum log level for the service logger.
        log_file: Optional path of a rotating log file.
    """

    kafka_bootstrap_servers: str = "kafka:9092"
    inventory_service_url: str = "http://inventory-service:8082"
    inventory_timeout: float = 5.0
    database_url: str = "sqlite:///./orders.db"
    placement_timeout: Optional[float] = None
    log_level: str = "INFO"
    log_file: Optional[str] = None


def _optional_float(value: Optional[str]) -> Optional[float]:
    if value is None or value.strip() == "":
        return None
    return float(value)


def load_settings() -> Settings:
    """Build settings from environment variables, falling back to defaults.

    Returns:
        Settings: The resolved configuration.
    """
    return Settings(
        kafka_bootstrap_servers=os.getenv("KAFKA_BOOTSTRAP_SERVERS", "kafka:9092"),
        inventory_service_url=os.getenv("INVENTORY_SERVICE_URL", "http://inventory-service:8082"),
        inventory_timeout=float(os.getenv("INVENTORY_TIMEOUT", "5")),
        database_url=os.getenv("DATABASE_URL", "sqlite:///./orders.db"),
        placement_timeout=_optional_float(os.getenv("ORDER_PLACEMENT_TIMEOUT")),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_file=os.getenv("LOG_FILE") or None,
    )
