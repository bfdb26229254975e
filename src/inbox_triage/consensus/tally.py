"""
Vote counting for consensus runs.
"""

import json
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def canonicalize(value: Any) -> str:
    """
    Stable serialization used as the vote key.
    
    Equal values produce equal keys regardless of dict ordering; str enums
    serialize as their value.
    """
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=_to_jsonable)


class ConsensusTally(Generic[T]):
    """
    Insertion-ordered vote counts keyed by canonical serialization.
    
    The first sampled instance of each distinct answer is kept so the winner
    can be returned with its original type.
    """

    def __init__(self) -> None:
        self._counts: dict[str, int] = {}
        self._values: dict[str, T] = {}
        self.samples = 0

    def record(self, value: T) -> int:
        """Count one sample and return the new count for its answer."""
        key = canonicalize(value)
        if key not in self._counts:
            self._counts[key] = 0
            self._values[key] = value
        self._counts[key] += 1
        self.samples += 1
        return self._counts[key]

    def count(self, value: T) -> int:
        return self._counts.get(canonicalize(value), 0)

    def value_for(self, value: T) -> T:
        """Return the first-sampled instance equal to ``value``."""
        return self._values[canonicalize(value)]

    def most_frequent(self) -> Optional[tuple[T, int]]:
        """Highest count wins; ties go to the answer sampled first."""
        best_key: Optional[str] = None
        for key, count in self._counts.items():
            if best_key is None or count > self._counts[best_key]:
                best_key = key
        if best_key is None:
            return None
        return self._values[best_key], self._counts[best_key]

    def as_dict(self) -> dict[str, int]:
        return dict(self._counts)

    def __len__(self) -> int:
        return len(self._counts)

    def __repr__(self) -> str:
        return f"ConsensusTally(samples={self.samples}, counts={self._counts})"
