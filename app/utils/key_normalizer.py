"""
Key casing normalization for upstream API payloads.

The hostel API mixes naming conventions (``ID``, ``UserID``, ``CreatedAt``,
``created_at``); everything entering the portal is rewritten to camelCase
once, at fetch time.
"""

import re
from typing import Any

_ACRONYM_RE = re.compile(r"^[A-Z0-9_]+$")
_SEGMENT_RE = re.compile(r"[A-Z]+(?=[A-Z][a-z]|$)|[A-Z]?[a-z]+|\d+")


def to_camel(key: str) -> str:
    """
    Convert a single key to camelCase.

    >>> to_camel("ID")
    'id'
    >>> to_camel("UserID")
    'userId'
    >>> to_camel("created_at")
    'createdAt'
    """
    # Fully uppercase keys are acronyms
    if _ACRONYM_RE.match(key):
        return key.lower()

    parts = _SEGMENT_RE.findall(key)
    if not parts:
        return key

    head, *rest = parts
    return head.lower() + "".join(part[:1].upper() + part[1:].lower() for part in rest)


def normalize_keys(value: Any) -> Any:
    """Recursively rewrite mapping keys to camelCase; returns a new structure."""
    if value is None:
        return None

    if isinstance(value, list):
        return [normalize_keys(item) for item in value]

    if isinstance(value, dict):
        return {to_camel(str(key)): normalize_keys(item) for key, item in value.items()}

    return value


__all__ = ["to_camel", "normalize_keys"]
