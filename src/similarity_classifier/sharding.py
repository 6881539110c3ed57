"""Contiguous sharding of work items across a thread pool."""

from __future__ import annotations

import concurrent.futures
from collections.abc import Sequence
from typing import Callable, Optional, TypeVar

T = TypeVar("T")
R = TypeVar("R")


def partition(items: Sequence[T], parts: int) -> list[list[T]]:
    """Split ``items`` into at most ``parts`` contiguous, order-preserving shards.

    Shard sizes differ by at most one, larger shards first. No shard is
    empty, so fewer than ``parts`` shards are returned for short inputs.

    Args:
        items: Items to split.
        parts: Requested number of shards (must be positive).

    Returns:
        List of shards, concatenating back to ``items``.

    Raises:
        ValueError: If ``parts`` is not positive.
    """
    if parts < 1:
        raise ValueError(f"parts must be positive, got {parts}")

    parts = min(parts, len(items))
    if parts == 0:
        return []

    base, extra = divmod(len(items), parts)
    shards: list[list[T]] = []
    start = 0
    for i in range(parts):
        end = start + base + (1 if i < extra else 0)
        shards.append(list(items[start:end]))
        start = end
    return shards


def map_shards(
    func: Callable[[list[T]], R],
    items: Sequence[T],
    parts: int,
    max_workers: Optional[int] = None,
) -> list[R]:
    """Run ``func`` once per shard of ``items`` and collect results in shard order.

    Blocks until every shard has finished. With a single shard or a single
    worker, the shards run on the calling thread.
    """
    shards = partition(items, parts)
    workers = max_workers if max_workers is not None else len(shards)

    if len(shards) <= 1 or workers <= 1:
        return [func(shard) for shard in shards]

    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as ex:
        return list(ex.map(func, shards))
