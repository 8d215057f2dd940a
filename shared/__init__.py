"""Shared utilities and components for the analytics services."""

from .config import BaseKafkaConfig, BaseLoggingConfig, BaseServiceConfig
from .constants import CacheNamespaces, Environment, Topics

__all__ = [
    "Environment",
    "Topics",
    "CacheNamespaces",
    "BaseServiceConfig",
    "BaseLoggingConfig",
    "BaseKafkaConfig",
]
