from datetime import datetime

from src.infrastructure.redis.keys import entry_name, params_digest

from shared.constants import CacheNamespaces


def test_digest_ignores_argument_order():
    assert params_digest({"page": 0, "size": 10}) == params_digest(
        {"size": 10, "page": 0}
    )


def test_digest_changes_with_any_argument():
    base = params_digest({"q": "lamp", "page": 0, "size": 10})
    assert base != params_digest({"q": "lamp", "page": 1, "size": 10})
    assert base != params_digest({"q": "Lamp!", "page": 0, "size": 10})


def test_digest_accepts_non_json_values():
    digest = params_digest({"windowStart": datetime(2024, 3, 1)})
    assert len(digest) == 16


def test_entry_key_layout():
    name = entry_name("topSelling", {"limit": 5})
    key = CacheNamespaces.entry_key("analytics", CacheNamespaces.PRODUCT_METRICS, name)
    prefix, namespace, tag, digest = key.split(":")
    assert (prefix, namespace, tag) == ("analytics", "productMetrics", "topSelling")
    assert digest == params_digest({"limit": 5})
