"""General-purpose allocator: small requests from bitmaps, large ones from the OS.

Every block carries an 8-byte header just before the returned address.  For
bitmap blocks the header holds the index of the owning bitmap; for blocks
mapped directly from the OS it holds the mapping size with the top bit set.
"""

from __future__ import annotations

import struct

from blockalloc.bitmap import (
    FULL_BITMAP,
    BitmapAlloc,
    alloc_block_in_bitmap,
    dealloc_block_in_bitmap,
    memory_size_chunk,
)
from blockalloc.os_memory import DEFAULT_SPACE, AddressSpace

BALLOC_ALIGNMENT = 8
BITMAP_CHUNK_SIZE = 64
INITIAL_BITMAP_ALLOCATORS = 4

_HEADER = struct.Struct("<Q")
_OS_ALLOCATION = 1 << 63


class BlockAllocator:
    """Allocator handing out integer addresses inside an :class:`AddressSpace`."""

    def __init__(self, space: AddressSpace | None = None) -> None:
        self.space = space if space is not None else DEFAULT_SPACE
        self._allocators: list[BitmapAlloc] = []
        self._free: list[int] = []
        self._active = False

    @property
    def is_set_up(self) -> bool:
        return self._active

    @property
    def bitmap_allocators(self) -> tuple[BitmapAlloc, ...]:
        """The bitmaps currently owned by the allocator, in creation order."""
        return tuple(self._allocators)

    @property
    def num_bitmap_allocators(self) -> int:
        return len(self._allocators)

    def setup(self) -> None:
        """Prepare the allocator; must be called before the first allocation."""
        if self._active:
            raise RuntimeError("allocator is already set up")
        self._active = True
        self._allocators = []
        self._free = []
        for _ in range(INITIAL_BITMAP_ALLOCATORS):
            self._add_allocator()

    def teardown(self) -> None:
        """Return every bitmap's memory to the OS and forget all bitmaps."""
        if not self._active:
            return
        for allocator in self._allocators:
            self.space.dealloc_to_os(allocator.memory, memory_size_chunk(allocator.chunk_size))
        self._allocators = []
        self._free = []
        self._active = False

    def _add_allocator(self) -> int:
        memory = self.space.alloc_from_os(memory_size_chunk(BITMAP_CHUNK_SIZE))
        if memory is None:
            raise MemoryError("the OS refused memory for a new bitmap")
        self._allocators.append(BitmapAlloc(chunk_size=BITMAP_CHUNK_SIZE, memory=memory))
        index = len(self._allocators) - 1
        self._free.append(index)
        return index

    def _require_setup(self) -> None:
        if not self._active:
            raise RuntimeError("allocator is not set up")

    def alloc(self, size: int) -> int | None:
        """Allocate at least ``size`` bytes; return the address, or None for 0 bytes."""
        if size < 0:
            raise ValueError("size must not be negative")
        if size == 0:
            return None
        total = size + _HEADER.size

        if total > BITMAP_CHUNK_SIZE:
            memory = self.space.alloc_from_os(total)
            if memory is None:
                raise MemoryError(f"the OS refused {total} bytes")
            self.space.write(memory, _HEADER.pack(_OS_ALLOCATION | total))
            return memory + _HEADER.size

        self._require_setup()
        while True:
            if not self._free:
                index = self._add_allocator()
                allocator = self._allocators[index]
                allocator.occupied_areas = 1
                block = allocator.memory
                break
            index = self._free[-1]
            allocator = self._allocators[index]
            block = alloc_block_in_bitmap(allocator)
            if block is None:
                self._free.pop()
                continue
            if allocator.occupied_areas == FULL_BITMAP:
                self._free.pop()
            break

        self.space.write(block, _HEADER.pack(index))
        return block + _HEADER.size

    def dealloc(self, address: int | None) -> None:
        """Release a block returned by :meth:`alloc`; None is ignored."""
        if address is None:
            return
        start = address - _HEADER.size
        (header,) = _HEADER.unpack(self.space.read(start, _HEADER.size))
        if header & _OS_ALLOCATION:
            self.space.dealloc_to_os(start, header & ~_OS_ALLOCATION)
            return
        self._require_setup()
        if header >= len(self._allocators):
            raise ValueError(f"address {address:#x} was not handed out by this allocator")
        dealloc_block_in_bitmap(self._allocators[header], start)
        self._free.append(header)

    def __enter__(self) -> BlockAllocator:
        self.setup()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.teardown()