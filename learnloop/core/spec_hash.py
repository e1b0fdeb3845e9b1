"""Spec Hash — deterministic sha256 of a canonicalized LessonSpec.

Invariants:
    - PURE: same spec → same hash, regardless of object key insertion order
    - Object keys are sorted recursively; arrays keep their order (block order is semantic)
    - Any leaf value change changes the hash
    - Models are hashed in their wire form (camelCase keys, absent optionals omitted)
"""

import hashlib
import json
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel


def canonicalize(value: Any) -> Any:
    """Recursively sort mapping keys; leave sequences in order."""
    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(value, Mapping):
        return {key: canonicalize(value[key]) for key in sorted(value)}
    if isinstance(value, (list, tuple)):
        return [canonicalize(item) for item in value]
    return value


def canonical_json(value: Any) -> str:
    return json.dumps(
        canonicalize(value), separators=(",", ":"), ensure_ascii=False,
    )


def compute_spec_hash(spec: Any) -> str:
    """sha256 hex digest of the canonical JSON of `spec` (a LessonSpec or plain dict)."""
    return hashlib.sha256(canonical_json(spec).encode("utf-8")).hexdigest()
