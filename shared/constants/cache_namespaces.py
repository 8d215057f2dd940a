class CacheNamespaces:
    """Centralised cache namespace and key pattern definitions"""

    DASHBOARD_METRICS = "dashboardMetrics"
    PRODUCT_METRICS = "productMetrics"
    SALES_DATA = "salesData"
    ALERTS = "alerts"

    # {prefix}:{namespace}:{tag}:{digest}
    ENTRY_KEY = "{prefix}:{namespace}:{key}"
    NAMESPACE_PATTERN = "{prefix}:{namespace}:*"

    @classmethod
    def all(cls) -> list[str]:
        return [cls.DASHBOARD_METRICS, cls.PRODUCT_METRICS, cls.SALES_DATA, cls.ALERTS]

    @classmethod
    def entry_key(cls, prefix: str, namespace: str, key: str) -> str:
        """Generate the Redis key for an entry inside a namespace."""
        if namespace not in cls.all():
            raise ValueError(f"Unknown cache namespace: {namespace}")
        return cls.ENTRY_KEY.format(prefix=prefix, namespace=namespace, key=key)

    @classmethod
    def namespace_pattern(cls, prefix: str, namespace: str) -> str:
        """Generate the SCAN pattern matching every entry of a namespace."""
        if namespace not in cls.all():
            raise ValueError(f"Unknown cache namespace: {namespace}")
        return cls.NAMESPACE_PATTERN.format(prefix=prefix, namespace=namespace)
