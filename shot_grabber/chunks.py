import math
from typing import Sequence, TypeVar

T = TypeVar("T")


def partition(items: Sequence[T], size: int) -> list[list[T]]:
    """Split items into ordered chunks of `size`; the last one may be shorter."""
    if size < 1:
        raise ValueError(f"chunk size must be at least 1, got {size}")
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


def process_chunk_size(total: int, worker_count: int, batch_size: int) -> int:
    """Number of urls handed to each worker process.

    Never smaller than one full batch, so fewer workers than requested may be
    used when the url list is short.
    """
    if worker_count < 1:
        raise ValueError(f"worker count must be at least 1, got {worker_count}")
    return max(math.ceil(total / worker_count), batch_size)
