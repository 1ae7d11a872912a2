"""Guest program: a Fibonacci-style sequence over 32-bit wrapping integers."""

from __future__ import annotations

import re
import sys
from typing import Iterable, Sequence

_U32_LIMIT = 1 << 32
_U32_PATTERN = re.compile(r"\+?[0-9]+")


def _parse_u32(text: str) -> int:
    stripped = text.strip()
    if not _U32_PATTERN.fullmatch(stripped):
        raise ValueError(f"invalid digit found in string: {stripped!r}")
    value = int(stripped)
    if value >= _U32_LIMIT:
        raise ValueError(f"number too large to fit in target type: {stripped!r}")
    return value


def parse_inputs(lines: Iterable[str]) -> tuple[int, int, int]:
    """Read (n, init_a, init_b) from lines; the two seeds default to 1.

    The first line is required and must hold an unsigned 32-bit number.
    """
    it = iter(lines)
    try:
        first = next(it)
    except StopIteration:
        raise ValueError("No first input provided") from None
    try:
        n = _parse_u32(first)
    except ValueError as exc:
        raise ValueError(f"Failed to parse first input as u32: {exc}") from exc

    def seed() -> int:
        line = next(it, None)
        if line is None:
            return 1
        try:
            return _parse_u32(line)
        except ValueError:
            return 1

    init_a = seed()
    init_b = seed()
    return n, init_a, init_b


def fibonacci(n: int, init_a: int, init_b: int) -> int:
    """Advance the sequence n steps from (init_a, init_b), wrapping at 2**32."""
    prev, curr = init_a % _U32_LIMIT, init_b % _U32_LIMIT
    for _ in range(n):
        prev, curr = curr, (prev + curr) % _U32_LIMIT
    return curr


def main(argv: Sequence[str] | None = None) -> int:
    """Read inputs from standard input and print the final value."""
    try:
        n, init_a, init_b = parse_inputs(line.rstrip("\n") for line in sys.stdin)
    except ValueError as exc:
        print(exc, file=sys.stderr)
        return 1
    print(fibonacci(n, init_a, init_b))
    return 0


if __name__ == "__main__":
    sys.exit(main())