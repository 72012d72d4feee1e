"""Level bounds and the four cubic growth curves.

Level 1 always needs 0 EXP and levels are capped at 100.
"""
from __future__ import annotations
from typing import Callable, Dict, Optional

MIN_LEVEL = 1
MAX_LEVEL = 100

GROWTH_RATE_DEFAULT = "medium-fast"
GROWTH_RATES: Dict[str, Callable[[int], float]] = {
    "fast": lambda n: 0.8 * n**3,
    "medium-fast": lambda n: n**3,
    "medium-slow": lambda n: 1.2 * n**3 - 15 * n**2 + 100 * n - 140,
    "slow": lambda n: 1.25 * n**3,
}


def clamp_level(level: int) -> int:
    return max(MIN_LEVEL, min(int(level), MAX_LEVEL))


def growth_rate(name: Optional[str]) -> str:
    r = (name or GROWTH_RATE_DEFAULT).lower().replace("_", "-").replace(" ", "-")
    return r if r in GROWTH_RATES else GROWTH_RATE_DEFAULT


def required_exp_for_level(level: int, *, rate: str | None = None) -> int:
    """Total EXP required to be at given level for a growth curve."""
    if level <= MIN_LEVEL:
        return 0
    level = min(level, MAX_LEVEL)
    return max(0, int(GROWTH_RATES[growth_rate(rate)](level)))


def level_for_exp(exp: int, *, rate: str | None = None) -> int:
    """Highest level whose requirement is met by exp (binary search over 1..100)."""
    lo, hi = MIN_LEVEL, MAX_LEVEL
    while lo < hi:
        mid = (lo + hi + 1) // 2
        if required_exp_for_level(mid, rate=rate) <= exp:
            lo = mid
        else:
            hi = mid - 1
    return lo

__all__ = [
    "MIN_LEVEL","MAX_LEVEL","clamp_level","growth_rate","required_exp_for_level","level_for_exp",
    "GROWTH_RATES","GROWTH_RATE_DEFAULT",
]
