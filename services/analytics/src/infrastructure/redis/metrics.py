from shared.metrics import get_counter

CACHE_HITS_TOTAL = get_counter(
    "cache_hits_total",
    "Read-through cache hits.",
    service="analytics",
    labelnames=("namespace",),
)
CACHE_MISSES_TOTAL = get_counter(
    "cache_misses_total",
    "Read-through cache misses (value recomputed).",
    service="analytics",
    labelnames=("namespace",),
)
CACHE_ERRORS_TOTAL = get_counter(
    "cache_errors_total",
    "Cache operations that failed and fell back to direct computation.",
    service="analytics",
    labelnames=("namespace", "operation"),
)
CACHE_EVICTIONS_TOTAL = get_counter(
    "cache_evictions_total",
    "Entries removed by namespace-wide eviction.",
    service="analytics",
    labelnames=("namespace",),
)
