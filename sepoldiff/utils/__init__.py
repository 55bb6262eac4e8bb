from typing import TypeVar

T = TypeVar("T")


def chunked(items: list[T], count: int) -> list[list[T]]:
    """Split ``items`` into at most ``count`` contiguous, non-empty shards."""
    if count <= 1 or len(items) <= 1:
        return [items]
    size = -(-len(items) // count)
    return [items[i : i + size] for i in range(0, len(items), size)]
