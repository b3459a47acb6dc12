"""Bitmap block allocation over a simulated address space, with character-printing helpers."""

__version__ = "0.1.0"
__all__ = ["allocator", "bitmap", "cli", "os_memory", "printing"]