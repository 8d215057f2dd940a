import hashlib
import json
from typing import Any, Dict, Tuple

KV_SEPARATOR = ":"


def stable_params_tuple(params: Dict[str, Any]) -> Tuple[Tuple[str, Any], ...]:
    return tuple(sorted(params.items()))


def params_digest(params: Dict[str, Any], prefix_len: int = 16) -> str:
    """Short digest of every argument that shapes a cached result.

    Values go through sorted-key JSON so equal inputs hash the same regardless
    of argument order; non-JSON values (dates, decimals) use ``str``.
    """
    stable = json.dumps(
        stable_params_tuple(params), separators=(",", ":"), default=str
    )
    sha1 = hashlib.sha1(stable.encode("utf-8")).hexdigest()
    return sha1[:prefix_len]


def entry_name(tag: str, params: Dict[str, Any]) -> str:
    """Name of a cache entry inside its namespace, e.g. ``topSelling:3f9a...``."""
    return f"{tag}{KV_SEPARATOR}{params_digest(params)}"
