"""
Shared configuration management for the Admin Service.

Settings are read once from the environment (and an optional ``.env``
file) at startup. Invalid values abort startup with ``ConfigurationError``.
"""

from enum import Enum
from typing import Dict, Optional

from pydantic import Field, ValidationError as PydanticValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared.errors import ConfigurationError


class TransportMode(str, Enum):
    """How downstream services are reached."""

    DIRECT = "direct"
    SIDECAR = "sidecar"


VALID_LOG_LEVELS = {"critical", "error", "warning", "warn", "info", "debug"}
VALID_ENVIRONMENTS = {"local", "development", "test", "staging", "production"}


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Environment
    env: str = Field(default="development")
    log_level: str = Field(default="info")

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        if value.lower() not in VALID_LOG_LEVELS:
            raise ValueError(f"log_level must be one of: {', '.join(sorted(VALID_LOG_LEVELS))}")
        value = value.lower()
        return "warning" if value == "warn" else value

    @field_validator("env")
    @classmethod
    def _check_env(cls, value: str) -> str:
        if value.lower() not in VALID_ENVIRONMENTS:
            raise ValueError(f"env must be one of: {', '.join(sorted(VALID_ENVIRONMENTS))}")
        return value.lower()


class AdminConfig(BaseConfig):
    """Admin service configuration."""

    service_name: str = "admin-service"
    host: str = "0.0.0.0"
    port: int = Field(default=3008)
    api_version: str = Field(default="1.0.0")

    # Service invocation
    platform_mode: TransportMode = Field(default=TransportMode.DIRECT)
    dapr_host: str = Field(default="localhost")
    dapr_http_port: int = Field(default=3500)
    http_timeout_seconds: float = Field(default=10.0, gt=0)
    service_url_prefix: str = Field(default="xshopai")

    # Direct mode base URLs
    user_service_url: str = Field(default="http://xshopai-user-service:8002")
    order_service_url: str = Field(default="http://xshopai-order-service:8006")
    product_service_url: str = Field(default="http://xshopai-product-service:8001")
    payment_service_url: str = Field(default="http://xshopai-payment-service:8009")
    auth_service_url: str = Field(default="http://xshopai-auth-service:8004")
    audit_service_url: str = Field(default="http://xshopai-audit-service:8012")
    notification_service_url: str = Field(default="http://xshopai-notification-service:8011")

    # Sidecar mode app ids
    user_service_app_id: str = Field(default="user-service")
    order_service_app_id: str = Field(default="order-service")
    product_service_app_id: str = Field(default="product-service")
    payment_service_app_id: str = Field(default="payment-service")
    auth_service_app_id: str = Field(default="auth-service")
    audit_service_app_id: str = Field(default="audit-service")
    notification_service_app_id: str = Field(default="notification-service")

    # Messaging
    messaging_provider: str = Field(default="dapr")
    pubsub_name: str = Field(default="pubsub")
    kafka_bootstrap: str = Field(default="localhost:9092")

    # Security
    jwt_secret: Optional[str] = Field(default=None)
    jwt_secret_source: str = Field(default="env")
    jwt_issuer: str = Field(default="xshopai-auth-service")
    jwt_audience: str = Field(default="xshopai-services")
    jwt_algorithm: str = Field(default="HS256")
    secret_store_name: str = Field(default="secret-store")

    @field_validator("platform_mode", mode="before")
    @classmethod
    def _accept_dapr_alias(cls, value):
        if isinstance(value, str) and value.lower() == "dapr":
            return TransportMode.SIDECAR
        if isinstance(value, str):
            return value.lower()
        return value

    @field_validator("port", "dapr_http_port")
    @classmethod
    def _check_port(cls, value: int) -> int:
        if not 0 < value <= 65535:
            raise ValueError("port must be a valid port number (1-65535)")
        return value

    @field_validator("jwt_secret_source")
    @classmethod
    def _check_secret_source(cls, value: str) -> str:
        if value not in ("env", "secret-store"):
            raise ValueError("jwt_secret_source must be 'env' or 'secret-store'")
        return value

    def service_urls(self) -> Dict[str, str]:
        """Direct-mode base URL for each known downstream service."""
        return {
            "user-service": self.user_service_url,
            "order-service": self.order_service_url,
            "product-service": self.product_service_url,
            "payment-service": self.payment_service_url,
            "auth-service": self.auth_service_url,
            "audit-service": self.audit_service_url,
            "notification-service": self.notification_service_url,
        }

    def service_app_ids(self) -> Dict[str, str]:
        """Sidecar-mode app id for each known downstream service."""
        return {
            "user-service": self.user_service_app_id,
            "order-service": self.order_service_app_id,
            "product-service": self.product_service_app_id,
            "payment-service": self.payment_service_app_id,
            "auth-service": self.auth_service_app_id,
            "audit-service": self.audit_service_app_id,
            "notification-service": self.notification_service_app_id,
        }


def get_config(**overrides) -> AdminConfig:
    """Load admin configuration, failing fast on invalid settings."""
    try:
        return AdminConfig(**overrides)
    except PydanticValidationError as e:
        problems = [
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in e.errors()
        ]
        raise ConfigurationError(
            f"Configuration validation failed with {len(problems)} error(s)",
            details={"errors": problems},
        ) from e
