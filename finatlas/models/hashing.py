"""
Input hashing for result caching.

The hash is a SHA-256 digest of a canonical JSON rendering of the scenario
(camelCase keys, recursively sorted, no whitespace). It identifies identical
inputs for caching; it is not meant as an integrity or security guarantee.
"""

import hashlib
import json
from typing import Any

from pydantic import BaseModel

SHORT_HASH_LENGTH = 8


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    return value


def canonical_json(value: Any) -> str:
    """Serialize a model or JSON-like value with sorted keys and no spaces."""
    return json.dumps(
        _to_jsonable(value),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )


def hash_input(value: Any) -> str:
    """
    Hash a scenario for use as a cache key.

    Args:
        value: ScenarioInput (or any JSON-like value)

    Returns:
        64-character lowercase hex SHA-256 digest
    """
    return hashlib.sha256(canonical_json(value).encode("utf-8")).hexdigest()


def short_hash(value: Any) -> str:
    """First 8 hex characters of ``hash_input``, for logs and display."""
    return hash_input(value)[:SHORT_HASH_LENGTH]


def inputs_equal(a: Any, b: Any) -> bool:
    """Check whether two inputs hash identically."""
    return hash_input(a) == hash_input(b)
