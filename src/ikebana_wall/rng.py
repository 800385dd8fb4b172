"""
Seeded RNG (mulberry32)
-----------------------
Small, fast, reproducible float stream. Every bit of variation in the toy
(petal wobble, stem placement, leaves, tilt) is drawn from one of these
streams so a (seed, slot) pair always rebuilds the same flower.

Arithmetic is done on unsigned 32-bit integers (multiplications wrap like
a 32-bit imul), so streams are identical across platforms.
"""

from __future__ import annotations

from collections.abc import Callable

MASK32 = 0xFFFFFFFF
_INCREMENT = 0x6D2B79F5
_TWO_32 = 4294967296.0


def _imul(a: int, b: int) -> int:
    return (a * b) & MASK32


def mix_seed(seed: int, salt: int) -> int:
    """XOR a salt into a seed and wrap to uint32."""
    return ((int(seed) & MASK32) ^ (int(salt) & MASK32)) & MASK32


def create_rng(seed: int) -> Callable[[], float]:
    """
    Return a generator of floats in [0, 1) fully determined by seed.

    Two generators built from the same seed yield identical sequences.
    """
    state = int(seed) & MASK32

    def next_float() -> float:
        nonlocal state
        state = (state + _INCREMENT) & MASK32
        t = state
        t = _imul(t ^ (t >> 15), t | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & MASK32
        return ((t ^ (t >> 14)) & MASK32) / _TWO_32

    return next_float
