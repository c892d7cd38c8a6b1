"""Shot sampling from a probability vector.

Counts are kept per integer basis index (insertion ordered, i.e. in order of
first appearance) and only rendered as bitstrings at result assembly.
"""
from __future__ import annotations

from typing import Optional

import numpy as np

from qbsim.sampling.noise import ReadoutNoise, corrupt_outcome


def cdf_from_probs(probs: np.ndarray) -> np.ndarray:
    """Running prefix sum, divided by the total when it is positive.

    An all-zero vector stays all zero.
    """
    cdf = np.cumsum(np.asarray(probs, dtype=np.float64))
    if len(cdf) and cdf[-1] > 0:
        cdf = cdf / cdf[-1]
    return cdf


def sample_index(cdf: np.ndarray, r):
    """First index whose cdf entry is >= r (scalar or array of draws).

    A degenerate (all-zero) cdf resolves every draw to index 0.
    """
    if not len(cdf) or cdf[-1] <= 0:
        return 0 if np.isscalar(r) else np.zeros(len(r), dtype=np.int64)
    idx = np.searchsorted(cdf, r, side="left")
    return np.minimum(idx, len(cdf) - 1)


def sample_counts(
    probs: np.ndarray,
    n: int,
    shots: int,
    rng,
    noise: Optional[ReadoutNoise] = None,
) -> dict[int, int]:
    """Draw ``shots`` outcomes, pass each through ``noise``, tally by index."""
    counts: dict[int, int] = {}
    if shots <= 0:
        return counts
    cdf = cdf_from_probs(probs)

    if noise is None or not noise.consumes_randomness:
        # no per-shot noise draws: the sample draws are consecutive
        for idx in sample_index(cdf, rng.random(shots)):
            counts[int(idx)] = counts.get(int(idx), 0) + 1
        return counts

    for _ in range(shots):
        idx = int(sample_index(cdf, rng.random()))
        idx = corrupt_outcome(idx, n, noise, rng)
        counts[idx] = counts.get(idx, 0) + 1
    return counts
