"""A simulated process address space handing out page-granular mappings.

Memory is addressed by plain integers.  Mappings are made in whole pages,
are zero-filled, and are backed lazily so that large mappings stay cheap.
Touching an address that is not mapped raises :class:`SegmentationFault`.
"""

from __future__ import annotations

PAGE_SIZE = 4096
BITMAP_PAGE_SIZE = PAGE_SIZE


class SegmentationFault(Exception):
    """Raised when memory that is not mapped is read or written."""


def _pages_for(size: int) -> int:
    return -(-size // PAGE_SIZE)


class AddressSpace:
    """A page-granular address space with mmap/munmap-like operations."""

    def __init__(self, base: int = 0x1000_0000, limit: int | None = None) -> None:
        if base <= 0 or base % PAGE_SIZE:
            raise ValueError("base must be a positive multiple of the page size")
        self._next = base
        self._limit = limit
        self._pages: set[int] = set()
        self._data: dict[int, bytearray] = {}

    @property
    def mapped_bytes(self) -> int:
        """Number of bytes currently mapped."""
        return len(self._pages) * PAGE_SIZE

    def alloc_from_os(self, size: int) -> int | None:
        """Map ``size`` bytes rounded up to whole pages; return the start or None."""
        if size < 0:
            raise ValueError("size must not be negative")
        if size == 0:
            return None
        pages = _pages_for(size)
        if self._limit is not None and self.mapped_bytes + pages * PAGE_SIZE > self._limit:
            return None
        address = self._next
        self._next += pages * PAGE_SIZE
        first = address // PAGE_SIZE
        self._pages.update(range(first, first + pages))
        return address

    def dealloc_to_os(self, address: int, size: int) -> None:
        """Unmap every page that overlaps ``[address, address + size)``."""
        if address % PAGE_SIZE:
            raise ValueError(f"address {address:#x} is not page aligned")
        if size <= 0:
            raise ValueError("size must be positive")
        first = address // PAGE_SIZE
        for page in range(first, first + _pages_for(size)):
            self._pages.discard(page)
            self._data.pop(page, None)

    def is_mapped(self, address: int) -> bool:
        """Tell whether the page holding ``address`` is mapped."""
        return address // PAGE_SIZE in self._pages

    def _check(self, page: int, address: int) -> None:
        if page not in self._pages:
            raise SegmentationFault(f"address {address:#x} is not mapped")

    def _spans(self, address: int, length: int) -> list[tuple[int, int, int]]:
        spans = []
        while length > 0:
            page, offset = divmod(address, PAGE_SIZE)
            self._check(page, address)
            count = min(length, PAGE_SIZE - offset)
            spans.append((page, offset, count))
            address += count
            length -= count
        return spans

    def read(self, address: int, length: int) -> bytes:
        """Return ``length`` bytes starting at ``address``."""
        if length < 0:
            raise ValueError("length must not be negative")
        page, offset = divmod(address, PAGE_SIZE)
        if offset + length <= PAGE_SIZE:
            self._check(page, address)
            data = self._data.get(page)
            return bytes(length) if data is None else bytes(data[offset:offset + length])
        out = bytearray()
        for page, offset, count in self._spans(address, length):
            data = self._data.get(page)
            out += bytes(count) if data is None else data[offset:offset + count]
        return bytes(out)

    def write(self, address: int, data: bytes) -> None:
        """Store ``data`` starting at ``address``."""
        length = len(data)
        page, offset = divmod(address, PAGE_SIZE)
        if offset + length <= PAGE_SIZE:
            self._check(page, address)
            backing = self._data.get(page)
            if backing is None:
                backing = self._data[page] = bytearray(PAGE_SIZE)
            backing[offset:offset + length] = data
            return
        view = memoryview(bytes(data))
        position = 0
        for page, offset, count in self._spans(address, length):
            backing = self._data.get(page)
            if backing is None:
                backing = self._data[page] = bytearray(PAGE_SIZE)
            backing[offset:offset + count] = view[position:position + count]
            position += count


DEFAULT_SPACE = AddressSpace()


def alloc_from_os(size: int) -> int | None:
    """Map memory in the default address space."""
    return DEFAULT_SPACE.alloc_from_os(size)


def dealloc_to_os(address: int, size: int) -> None:
    """Unmap memory in the default address space."""
    DEFAULT_SPACE.dealloc_to_os(address, size)