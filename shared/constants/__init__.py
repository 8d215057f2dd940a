from .cache_namespaces import CacheNamespaces
from .environments import Environment
from .topics import Topics

__all__ = ["CacheNamespaces", "Environment", "Topics"]
