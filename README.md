# blockalloc

`blockalloc` models a bitmap block allocator on a simulated address space.
Addresses are plain integers, and no real memory is mapped.

## Layers

- `blockalloc.os_memory` provides `AddressSpace(base=0x10000000, limit=None)`.
  - `alloc_from_os(size)` maps `size` bytes, rounded up to whole 4096-byte
    pages, and returns the start address. The pages start out zero-filled. It
    returns `None` when `size` is 0 or when the mapping would exceed `limit`.
  - `dealloc_to_os(address, size)` unmaps every page that overlaps the range.
    The address must be page aligned.
  - `read(address, length)` and `write(address, data)` access mapped memory.
    Touching an unmapped address raises `SegmentationFault`.
  - `is_mapped(address)` and the `mapped_bytes` property report what is mapped.
  - The module-level `alloc_from_os` and `dealloc_to_os` work on a shared
    `DEFAULT_SPACE`.
- `blockalloc.bitmap` provides the `BitmapAlloc(chunk_size, memory,
  occupied_areas=0)` dataclass. It manages 64 chunks, and bit `i` of
  `occupied_areas` marks chunk `i` as taken.
  - `alloc_block_in_bitmap` takes the lowest free chunk. It returns `None`
    when all chunks are taken.
  - `dealloc_block_in_bitmap` releases a chunk. It ignores `None`, addresses
    outside the area and addresses that are not at the start of a chunk.
  - `memory_size_chunk(chunk_size)` gives the size of the area.
- `blockalloc.allocator` provides `BlockAllocator(space=None)`. When no space
  is given, it uses `DEFAULT_SPACE`.
  - Each block carries an 8-byte header just before the returned address.
  - A request that fits in 64 bytes together with its header comes from a
    64-byte chunk of one of the allocator's bitmaps. `setup()` creates four of
    these bitmaps, and more are added when all of them are full.
  - Larger requests are mapped straight from the address space and are
    unmapped again on `dealloc`.

## Usage

```python
from blockalloc.os_memory import AddressSpace
from blockalloc.allocator import BlockAllocator

space = AddressSpace()
with BlockAllocator(space) as allocator:
    address = allocator.alloc(16)
    space.write(address, b"hello")
    assert space.read(address, 5) == b"hello"
    allocator.dealloc(address)
```

The allocator follows these rules:

- `alloc(0)` returns `None`, and `dealloc(None)` does nothing.
- A negative size raises `ValueError`.
- A small request made before `setup()` raises `RuntimeError`, and so does a
  second `setup()`.
- `MemoryError` is raised if the address space refuses memory.
- `teardown()`, which also runs when the `with` block ends, unmaps the memory
  of every bitmap and forgets them. Large blocks that are still allocated stay
  mapped until they are passed to `dealloc`.

After `setup()`, the allocator's state can be inspected through the
`bitmap_allocators`, `num_bitmap_allocators` and `is_set_up` properties.

Working with a single bitmap directly:

```python
from blockalloc.bitmap import BitmapAlloc, alloc_block_in_bitmap, dealloc_block_in_bitmap

bitmap = BitmapAlloc(chunk_size=8, memory=0x1000)
first = alloc_block_in_bitmap(bitmap)   # 0x1000
second = alloc_block_in_bitmap(bitmap)  # 0x1008
dealloc_block_in_bitmap(bitmap, first)
```

## Printing routines

`blockalloc.printing` has small text routines. Each one writes its output one
character at a time to an optional `putchar` callable. Without a callable,
the output goes to standard output.

- `print_helloworld` writes `Hello World!` and a newline.
- `print_buggy(string)` writes the string, then `: <sum>/<count>=<average>`
  and a newline. The sum is the sum of the character codes, and the average
  is the character with the integer mean code. An empty string gives
  `: 0/0=0`.
- `print_leaky(string)` writes the characters of the string sorted by code.
- `print_very_slowly(c, num_lines)` writes a triangle. Line `i`, counting from
  0, holds `i` copies of `c`.
- `print_number(number)` writes a signed 64-bit integer. A value out of that
  range raises `OverflowError`.

## Commands

```
blockalloc some words here
```

This copies the arguments, separated by spaces, into three blocks and prints
them each time. The blocks come from a bitmap chunk, a direct address-space
mapping and the general allocator.

```
blockalloc-print
```

This runs each printing routine once on standard output.

## What it does not do

Everything happens inside a simulated `AddressSpace`. The package neither
hands out real process memory nor replaces Python's own allocation. It also
includes no benchmarks.