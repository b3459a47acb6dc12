"""Fixed-size chunk allocation tracked by a 64-bit occupancy bitmap."""

from __future__ import annotations

from dataclasses import dataclass

NUM_BITS_SIZE_T = 64
FULL_BITMAP = (1 << NUM_BITS_SIZE_T) - 1


def memory_size_chunk(chunk_size: int) -> int:
    """Size of the memory area managed by one bitmap with this chunk size."""
    return chunk_size * NUM_BITS_SIZE_T


@dataclass
class BitmapAlloc:
    """A memory area split into 64 chunks; bit ``i`` set means chunk ``i`` is taken."""

    chunk_size: int
    memory: int
    occupied_areas: int = 0


def alloc_block_in_bitmap(alloc: BitmapAlloc) -> int | None:
    """Take the lowest free chunk and return its address, or None if all are taken."""
    free = ~alloc.occupied_areas & FULL_BITMAP
    if not free:
        return None
    pos = (free & -free).bit_length() - 1
    alloc.occupied_areas |= 1 << pos
    return alloc.memory + pos * alloc.chunk_size


def dealloc_block_in_bitmap(alloc: BitmapAlloc, obj: int | None) -> None:
    """Release the chunk starting at ``obj``; addresses that start no chunk are ignored."""
    if obj is None or obj < alloc.memory:
        return
    distance = obj - alloc.memory
    if distance >= memory_size_chunk(alloc.chunk_size):
        return
    if distance % alloc.chunk_size:
        return
    alloc.occupied_areas &= ~(1 << (distance // alloc.chunk_size))