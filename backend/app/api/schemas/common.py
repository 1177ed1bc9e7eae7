"""Validation predicates shared by the entity schemas."""
from __future__ import annotations

from collections import Counter
from typing import Iterable, List, Literal, Optional, Protocol

Priority = Literal["low", "med", "high"]

MINUTES_PER_DAY = 1440


class _HasId(Protocol):
    id: str


def clean_required_text(value: str, field_name: str) -> str:
    """Trim ``value`` and reject it if nothing is left."""
    cleaned = value.strip()
    if not cleaned:
        raise ValueError(f"{field_name} must not be empty")
    return cleaned


def check_time_window(start_min: Optional[int], end_min: Optional[int]) -> None:
    """A window is valid when either bound is open or it ends after it starts."""
    if start_min is not None and end_min is not None and end_min <= start_min:
        raise ValueError("end_min must be greater than start_min")


def duplicate_ids(items: Iterable[_HasId]) -> List[str]:
    counts = Counter(item.id for item in items)
    return sorted(item_id for item_id, count in counts.items() if count > 1)


def check_unique_ids(items: Iterable[_HasId], label: str) -> None:
    duplicates = duplicate_ids(items)
    if duplicates:
        raise ValueError(f"duplicate {label} ids: {', '.join(duplicates)}")
