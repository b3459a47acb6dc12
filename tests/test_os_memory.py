import random
import struct

import pytest

from blockalloc.os_memory import (
    DEFAULT_SPACE,
    PAGE_SIZE,
    AddressSpace,
    SegmentationFault,
    alloc_from_os,
    dealloc_to_os,
)


@pytest.fixture
def space():
    return AddressSpace()


def test_basic_allocation(space):
    result = space.alloc_from_os(4096)
    assert result
    space.write(result, struct.pack("<i", 5))
    assert struct.unpack("<i", space.read(result, 4))[0] == 5
    space.dealloc_to_os(result, 4096)
    assert not space.is_mapped(result)


def test_two_allocations(space):
    size = 4096
    first = space.alloc_from_os(size)
    second = space.alloc_from_os(size)
    assert first and second
    assert first != second
    if first < second:
        assert first + size <= second
    else:
        assert second + size <= first
    space.write(first, b"\x08")
    assert space.read(first, 1) == b"\x08"
    space.write(second, b"\x09")
    assert space.read(second, 1) == b"\x09"
    assert space.read(first, 1) == b"\x08"
    space.write(first, b"\x0a")
    assert space.read(second, 1) == b"\x09"
    space.dealloc_to_os(first, size)
    space.dealloc_to_os(second, size)
    assert space.mapped_bytes == 0


def test_various_sizes(space):
    sizes = [3, 4095, 4096, 4097, 8192, 1024 * 1024, 1024 * 1024 * 10]
    allocations = []
    for size in sizes:
        result = space.alloc_from_os(size)
        assert result, f"failed to allocate {size} bytes"
        allocations.append(result)
        space.write(result, b"\x01")
        space.write(result + size // 2, b"\x02")
        space.write(result + size - 1, b"\x03")
        assert space.read(result, 1) == b"\x01"
        assert space.read(result + size // 2, 1) == b"\x02"
        assert space.read(result + size - 1, 1) == b"\x03"
    for address, size in zip(allocations, sizes):
        space.dealloc_to_os(address, size)
    assert space.mapped_bytes == 0


def test_many_allocations(space):
    rng = random.Random(1234)
    pattern = bytes(range(256))
    allocations = []
    for i in range(100):
        size = rng.randint(1, 100 * 1024)
        result = space.alloc_from_os(size)
        assert result
        allocations.append((result, size))
        space.write(result, (pattern * (size // 256 + 1))[:size])
        if i > 0 and i % 10 == 0:
            prev, prev_size = allocations[rng.randint(0, i - 1)]
            for _ in range(10):
                offset = rng.randint(0, prev_size - 1)
                assert space.read(prev + offset, 1)[0] == offset & 0xFF
    for address, size in allocations:
        space.dealloc_to_os(address, size)
    assert space.mapped_bytes == 0


def test_zero_size_allocation_fails(space):
    assert space.alloc_from_os(0) is None


def test_large_allocation(space):
    size = 100 * 1024 * 1024
    result = space.alloc_from_os(size)
    assert result
    space.write(result, b"\x01")
    space.write(result + size // 2, b"\x02")
    space.write(result + size - 1, b"\x03")
    assert space.read(result, 1) == b"\x01"
    assert space.read(result + size // 2, 1) == b"\x02"
    assert space.read(result + size - 1, 1) == b"\x03"
    space.dealloc_to_os(result, size)
    assert not space.is_mapped(result + size - 1)


def test_fresh_memory_is_zeroed(space):
    result = space.alloc_from_os(3 * PAGE_SIZE)
    assert space.read(result, 3 * PAGE_SIZE) == bytes(3 * PAGE_SIZE)


def test_write_across_pages(space):
    result = space.alloc_from_os(2 * PAGE_SIZE)
    data = bytes(range(200))
    space.write(result + PAGE_SIZE - 100, data)
    assert space.read(result + PAGE_SIZE - 100, 200) == data


def test_access_after_unmap_faults(space):
    result = space.alloc_from_os(PAGE_SIZE)
    space.dealloc_to_os(result, PAGE_SIZE)
    with pytest.raises(SegmentationFault):
        space.read(result, 1)
    with pytest.raises(SegmentationFault):
        space.write(result, b"x")


def test_access_past_mapping_faults(space):
    result = space.alloc_from_os(10)
    with pytest.raises(SegmentationFault):
        space.write(result + PAGE_SIZE - 1, b"ab")


def test_null_is_never_mapped(space):
    assert not space.is_mapped(0)
    with pytest.raises(SegmentationFault):
        space.read(0, 1)


def test_addresses_are_page_aligned(space):
    addresses = [space.alloc_from_os(size) for size in (1, 5000, 77)]
    assert all(address % PAGE_SIZE == 0 for address in addresses)


def test_mapped_bytes_rounds_to_pages(space):
    space.alloc_from_os(1)
    assert space.mapped_bytes == PAGE_SIZE
    space.alloc_from_os(PAGE_SIZE + 1)
    assert space.mapped_bytes == 3 * PAGE_SIZE


def test_limit_makes_allocation_fail(space):
    limited = AddressSpace(limit=2 * PAGE_SIZE)
    assert limited.alloc_from_os(PAGE_SIZE)
    assert limited.alloc_from_os(2 * PAGE_SIZE) is None


def test_misaligned_unmap_is_rejected(space):
    result = space.alloc_from_os(PAGE_SIZE)
    with pytest.raises(ValueError):
        space.dealloc_to_os(result + 1, PAGE_SIZE)


def test_negative_size_is_rejected(space):
    with pytest.raises(ValueError):
        space.alloc_from_os(-1)


def test_module_functions_use_default_space():
    result = alloc_from_os(PAGE_SIZE)
    assert DEFAULT_SPACE.is_mapped(result)
    dealloc_to_os(result, PAGE_SIZE)
    assert not DEFAULT_SPACE.is_mapped(result)