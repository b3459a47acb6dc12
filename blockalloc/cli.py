"""Command that copies its arguments into blocks from each allocation strategy."""

from __future__ import annotations

import sys

from blockalloc.allocator import BlockAllocator
from blockalloc.bitmap import BitmapAlloc, alloc_block_in_bitmap, dealloc_block_in_bitmap
from blockalloc.os_memory import BITMAP_PAGE_SIZE, AddressSpace


def _use_block(space: AddressSpace, address: int, text: bytes) -> None:
    space.write(address, text + b"\0")
    stored = space.read(address, len(text))
    print(f"input string is: {stored.decode('utf-8', errors='replace')}")


def main(argv: list[str] | None = None) -> int:
    """Copy the arguments, space separated, into a bitmap block, an OS block and a general block."""
    args = sys.argv[1:] if argv is None else list(argv)
    text = "".join(f"{argument} " for argument in args).encode("utf-8")
    num_input_chars = len(text) + 1

    space = AddressSpace()
    static_area = space.alloc_from_os(max(2 * BITMAP_PAGE_SIZE, num_input_chars))
    static_alloc = BitmapAlloc(chunk_size=num_input_chars, memory=static_area)

    print("Testing allocation in static bitmap:")
    memory = alloc_block_in_bitmap(static_alloc)
    if memory is not None:
        _use_block(space, memory, text)
        dealloc_block_in_bitmap(static_alloc, memory)
    else:
        print("Failed to allocate from static bitmap")

    print("\nTesting OS allocation:")
    memory = space.alloc_from_os(num_input_chars)
    if memory is not None:
        _use_block(space, memory, text)
        space.dealloc_to_os(memory, num_input_chars)
    else:
        print("Failed to allocate from OS")

    print("\nTesting general allocation:")
    with BlockAllocator(space) as allocator:
        memory = allocator.alloc(num_input_chars)
        if memory is not None:
            _use_block(space, memory, text)
            allocator.dealloc(memory)
        else:
            print("Failed to allocate memory")

    sys.stdout.flush()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())