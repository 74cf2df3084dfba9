"""Helpers that keep household figures out of logs and audit rows."""

import hashlib
import json
from collections.abc import Iterable, Mapping
from typing import Any

REDACTED = "[REDACTED]"


def hash_payload(value: Any) -> str:
    """
    SHA-256 fingerprint used to correlate log lines about the same snapshot or key.

    Strings are hashed as UTF-8 text; anything else is hashed as key-sorted JSON, so
    two snapshots with the same entries produce the same fingerprint.
    """

    if isinstance(value, str):
        raw = value.encode("utf-8")
    else:
        raw = json.dumps(value, sort_keys=True, default=str).encode("utf-8")
    return hashlib.sha256(raw).hexdigest()


def redact_fields(payload: Mapping[str, Any], allowed_keys: Iterable[str]) -> dict[str, Any]:
    """
    Mask every value whose key is not whitelisted.

    Expense names, goal descriptions, and amounts are personal; callers whitelist
    only structural keys such as ids, categories, and frequencies.
    """

    whitelist = set(allowed_keys)
    return {key: (value if key in whitelist else REDACTED) for key, value in payload.items()}
