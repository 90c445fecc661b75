# thumbnail_ingest/utils/chunking.py
"""Helpers for splitting row sequences into fixed-size chunks."""

from typing import Iterator, List, Sequence, TypeVar

T = TypeVar("T")


def count_chunks(total: int, chunk_size: int) -> int:
    """Number of chunks needed to cover ``total`` items."""
    if chunk_size < 1:
        raise ValueError("chunk_size must be at least 1")
    return (total + chunk_size - 1) // chunk_size


def chunk_rows(items: Sequence[T], chunk_size: int) -> Iterator[List[T]]:
    """
    Yield consecutive slices of at most ``chunk_size`` items.

    Order is preserved and the final chunk may be shorter.
    """
    if chunk_size < 1:
        raise ValueError("chunk_size must be at least 1")
    for start in range(0, len(items), chunk_size):
        yield list(items[start : start + chunk_size])
