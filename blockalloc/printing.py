"""Character-by-character printing routines built on a single output hook.

Every routine emits its output exclusively through a ``putchar`` callable
that receives one character at a time.  When no callable is given, the
characters go to standard output.
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Iterable

PutChar = Callable[[str], object]

_LONG_LONG_MIN = -(2**63)
_LONG_LONG_MAX = 2**63 - 1


def _stdout_putchar(c: str) -> None:
    sys.stdout.write(c)


def _emit(chars: Iterable[str], putchar: PutChar | None) -> None:
    sink = putchar if putchar is not None else _stdout_putchar
    for c in chars:
        sink(c)


def print_helloworld(putchar: PutChar | None = None) -> None:
    """Print ``"Hello World!\\n"``."""
    _emit("Hello World!\n", putchar)


def print_number(number: int, putchar: PutChar | None = None) -> None:
    """Print a signed 64-bit integer in decimal.

    Raises OverflowError if the value does not fit a signed 64-bit integer.
    """
    if not _LONG_LONG_MIN <= number <= _LONG_LONG_MAX:
        raise OverflowError(f"{number} does not fit a signed 64-bit integer")
    _emit(str(number), putchar)


def print_buggy(string: str, putchar: PutChar | None = None) -> None:
    """Print a string followed by its character-code sum, length and average character.

    The output has the form ``"<string>: <sum>/<count>=<average>\\n"``, where
    the average is the character whose code is the integer mean of the codes.
    An empty string prints ``'0'`` as its average.
    """
    total = sum(map(ord, string))
    count = len(string)
    average = chr(total // count) if count else "0"

    _emit(string, putchar)
    _emit(": ", putchar)
    print_number(total, putchar)
    _emit("/", putchar)
    print_number(count, putchar)
    _emit("=", putchar)
    _emit(average, putchar)
    _emit("\n", putchar)


def print_leaky(string: str, putchar: PutChar | None = None) -> None:
    """Print the characters of a string sorted by character code."""
    _emit(sorted(string), putchar)


def print_very_slowly(c: str, num_lines: int, putchar: PutChar | None = None) -> None:
    """Print a triangle of ``num_lines`` lines; line ``i`` (from 0) holds ``i`` copies of ``c``."""
    if len(c) != 1:
        raise ValueError("expected a single character")
    if num_lines < 0:
        raise ValueError("num_lines must not be negative")
    _emit("".join(c * i + "\n" for i in range(num_lines)), putchar)


def main(argv: list[str] | None = None) -> int:
    """Run every printing routine once on standard output."""
    out = sys.stdout
    out.write("First step, print hello world:\n")
    print_helloworld()

    out.write("Second step, print string with length:\n")
    print_buggy("This will crash")

    out.write("Third step, print a sorted string:\n")
    print_leaky("zyxwvutsrqponmlkjihgfedcba")

    out.write("Final step, print a wonderful triangle that screams at you:\n")
    print_very_slowly("A", 50)
    out.flush()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())