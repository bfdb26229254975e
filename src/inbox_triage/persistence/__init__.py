"""
JSON document persistence.

- store.py: MemoizedStore, compute-once storage of per-message properties
- exceptions.py: Store error hierarchy

Storage Strategy:
- One JSON document, {"entries": [...]}, rewritten whole on every change
- Re-read before every operation; single writer process assumed
"""

from inbox_triage.persistence.exceptions import (
    StoreClosedError,
    StoreCorruptedError,
    StoreError,
    UnknownPropertyError,
)
from inbox_triage.persistence.store import MemoizedStore, resolve_property

__all__ = [
    "MemoizedStore",
    "resolve_property",
    "StoreError",
    "StoreClosedError",
    "StoreCorruptedError",
    "UnknownPropertyError",
]
