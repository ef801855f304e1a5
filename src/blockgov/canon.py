"""
Canonical JSON Serialization

Provides deterministic JSON serialization for fingerprinting ledger
entries. Based on RFC 8785 (JSON Canonicalization Scheme) principles:
- Sorted keys (lexicographic)
- No whitespace
- Consistent number formatting
- UTF-8 encoding

The same decision payload always produces the same bytes, so an auditor
holding only an exported entry can re-derive its fingerprint.
"""
from __future__ import annotations

import hashlib
import json
from datetime import date
from enum import Enum
from typing import Any

FINGERPRINT_ALGORITHM = "SHA-256"
FINGERPRINT_PREFIX = f"{FINGERPRINT_ALGORITHM}:"


def _default_serializer(obj: Any) -> Any:
    """Dates and datetimes as ISO 8601 (microseconds kept), enums as their value."""
    if isinstance(obj, date):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def canonical_json(obj: Any) -> str:
    """
    Serialize object to canonical JSON string.

    Example:
        >>> canonical_json({"b": 1, "a": 2})
        '{"a":2,"b":1}'
    """
    return json.dumps(
        obj,
        sort_keys=True,
        separators=(",", ":"),
        default=_default_serializer,
        ensure_ascii=False,
        allow_nan=False,
    )


def canonical_json_bytes(obj: Any) -> bytes:
    """Serialize object to canonical JSON as UTF-8 bytes."""
    return canonical_json(obj).encode("utf-8")


def content_hash(obj: Any) -> str:
    """
    Compute SHA-256 hash of canonical JSON representation.

    Returns:
        Hex-encoded SHA-256 hash string (64 characters)
    """
    return hashlib.sha256(canonical_json_bytes(obj)).hexdigest()


def fingerprint(obj: Any) -> str:
    """
    Compute a labelled fingerprint of an object.

    The label names the digest so stored fingerprints stay readable if
    the algorithm is ever rotated.

    Example:
        >>> fingerprint({"a": 1})[:8]
        'SHA-256:'
    """
    return FINGERPRINT_PREFIX + content_hash(obj)


def is_fingerprint(value: Any) -> bool:
    """Check that a value is a well-formed ``SHA-256:<64 hex>`` string."""
    if not isinstance(value, str) or not value.startswith(FINGERPRINT_PREFIX):
        return False
    digest = value[len(FINGERPRINT_PREFIX):]
    return len(digest) == 64 and all(c in "0123456789abcdef" for c in digest)


def short_fingerprint(value: str, length: int = 12) -> str:
    """Truncated digest for display and log lines."""
    if value.startswith(FINGERPRINT_PREFIX):
        value = value[len(FINGERPRINT_PREFIX):]
    return value[:length]
