"""Uniform [0, 1) sources for shot sampling and readout noise.

Seeded runs use mulberry32 so that a seed gives the same shot sequence here
and in the browser preview; unseeded runs use numpy's default generator.
Both expose ``random(size=None)`` like :class:`numpy.random.Generator`.
"""
from __future__ import annotations

import math
from typing import Optional, Union

import numpy as np

_MASK32 = 0xFFFFFFFF
_GOLDEN = 0x6D2B79F5
_INV_2_32 = 1.0 / 4294967296.0


def _imul(a: int, b: int) -> int:
    return (a * b) & _MASK32


class Mulberry32:
    """32-bit mulberry32; all arithmetic is modulo 2^32."""

    def __init__(self, seed: int):
        self.state = int(seed) & _MASK32

    def next_u32(self) -> int:
        self.state = (self.state + _GOLDEN) & _MASK32
        t = self.state
        t = _imul(t ^ (t >> 15), t | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & _MASK32
        return (t ^ (t >> 14)) & _MASK32

    def random(self, size: Optional[int] = None) -> Union[float, np.ndarray]:
        if size is None:
            return self.next_u32() * _INV_2_32
        return np.array([self.next_u32() * _INV_2_32 for _ in range(size)],
                        dtype=np.float64)


def normalize_seed(seed) -> Optional[int]:
    """Finite numbers truncate toward zero.

    None, bools, strings and non-finite values mean unseeded.
    """
    if seed is None or isinstance(seed, (bool, str)):
        return None
    if isinstance(seed, (int, np.integer)):
        return int(seed)
    try:
        v = float(seed)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(v):
        return None
    return int(v)


def make_rng(seed=None):
    """Generator owned by one simulation call."""
    s = normalize_seed(seed)
    if s is None:
        return np.random.default_rng()
    return Mulberry32(s)
