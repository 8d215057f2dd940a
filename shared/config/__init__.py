"""Shared configuration base classes.

Common settings blocks composed by the service ``Settings`` class so the
logging and broker knobs are spelled the same everywhere.
"""

from pydantic_settings import BaseSettings


class BaseLoggingConfig(BaseSettings):
    """Common logging configuration."""

    app_log_level: str = "INFO"
    app_log_redaction_patterns: list[str] = [
        "password",
        "token",
        "secret",
        "api_key",
        "authorization",
        "cookie",
    ]
    app_environment: str = "production"


class BaseKafkaConfig(BaseSettings):
    """Common Kafka configuration."""

    kafka_bootstrap_servers: str = "kafka1:19092"


class BaseServiceConfig(BaseLoggingConfig, BaseKafkaConfig):
    """Base configuration combining logging and Kafka settings.

    Services inherit from this and add their own specific settings.
    The otel_service_name should be overridden by each service.
    """

    otel_service_name: str = "unknown"  # Should be overridden by service


__all__ = ["BaseLoggingConfig", "BaseKafkaConfig", "BaseServiceConfig"]
