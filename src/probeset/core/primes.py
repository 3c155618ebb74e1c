"""Prime capacity sizing for the quadratic-probing table."""

from __future__ import annotations

import math


def is_prime(n: int) -> bool:
    if n < 2:
        return False
    if n < 4:
        return True
    if n % 2 == 0:
        return False
    for divisor in range(3, math.isqrt(n) + 1, 2):
        if n % divisor == 0:
            return False
    return True


def smallest_prime_at_least(n: int) -> int:
    """Return the smallest prime ``>= n`` (never less than 2)."""

    candidate = max(n, 2)
    while not is_prime(candidate):
        candidate += 1
    return candidate


__all__ = ["is_prime", "smallest_prime_at_least"]
