from __future__ import annotations

from typing import Dict, Iterable, List, Sequence, Tuple

# GetParameters accepts at most ten names per call.
MAX_BATCH_SIZE = 10

PendingSsmGroup = Dict[str, List[str]]
Batch = List[str]


def group_references(entries: Iterable[Tuple[str, str]]) -> PendingSsmGroup:
    """Group ``(variable, lookup_key)`` pairs by lookup key."""

    group: PendingSsmGroup = {}
    for name, lookup_key in entries:
        names = group.setdefault(lookup_key, [])
        if name not in names:
            names.append(name)
    return group


def partition(keys: Sequence[str], size: int = MAX_BATCH_SIZE) -> List[Batch]:
    validate_batch_size(size)
    unique = list(dict.fromkeys(keys))
    return [unique[i : i + size] for i in range(0, len(unique), size)]


def validate_batch_size(size: int) -> int:
    if not 1 <= size <= MAX_BATCH_SIZE:
        raise ValueError(f"batch size must be between 1 and {MAX_BATCH_SIZE}, got {size}")
    return size
