"""
Integer helpers for deterministic scoring.

Scores are computed with unsigned 64-bit semantics so results match
on-chain consumers bit for bit: no floating point, saturating arithmetic,
floor log2 and floor sqrt.
"""

from __future__ import annotations

U64_MAX = 2**64 - 1
SECONDS_PER_DAY = 86_400


def saturating_add(a: int, b: int, limit: int = U64_MAX) -> int:
    return min(a + b, limit)


def saturating_sub(a: int, b: int) -> int:
    return max(a - b, 0)


def saturating_mul(a: int, b: int, limit: int = U64_MAX) -> int:
    return min(a * b, limit)


def clamp(value: int, lower: int, upper: int) -> int:
    return max(lower, min(upper, value))


def integer_log2(n: int) -> int:
    """Floor log2 by right-shift count; 0 and 1 map to 0."""
    log = 0
    while n > 1:
        n >>= 1
        log += 1
    return log


def integer_sqrt(n: int) -> int:
    """Floor square root via Newton iteration (x=n, y=(x+1)//2, y=(x+n//x)//2 while y<x)."""
    if n < 2:
        return max(n, 0)
    x = n
    y = (x + 1) // 2
    while y < x:
        x = y
        y = (x + n // x) // 2
    return x


def seconds_to_days(seconds: int) -> int:
    return seconds // SECONDS_PER_DAY


def days_to_seconds(days: int) -> int:
    return saturating_mul(days, SECONDS_PER_DAY)
