"""Readout-noise approximations applied to each sampled outcome.

No quantum channel is simulated; each output bit of each shot is corrupted
independently after sampling:

  depolarizing   flip the bit with probability p            (one draw per bit)
  amp-damp       1 -> 0 with probability gamma              (one draw per 1-bit)
  phase-damp     no effect on populations                   (no draws)

Bits are visited in rendered order, qubit n-1 first, and the number of draws
per bit is fixed: seeded runs reproduce the browser preview only if the
generator is consumed in exactly this order.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

log = logging.getLogger(__name__)


class NoiseKind(Enum):
    DEPOLARIZING = "depolarizing"
    AMP_DAMP = "amp-damp"
    PHASE_DAMP = "phase-damp"


_KIND_NAMES = {
    "depolarizing": NoiseKind.DEPOLARIZING,
    "amp-damp": NoiseKind.AMP_DAMP,
    "amplitude-damping": NoiseKind.AMP_DAMP,
    "phase-damp": NoiseKind.PHASE_DAMP,
    "phase-damping": NoiseKind.PHASE_DAMP,
}

# magnitude keys accepted per kind, first match wins
_PARAM_KEYS = {
    NoiseKind.DEPOLARIZING: ("p", "prob"),
    NoiseKind.AMP_DAMP: ("gamma", "g"),
    NoiseKind.PHASE_DAMP: ("lambda", "lam"),
}


def _magnitude(spec: dict, keys) -> float:
    for k in keys:
        if spec.get(k) is not None:
            try:
                return float(spec[k])
            except (TypeError, ValueError):
                return 0.0
    return 0.0


@dataclass(frozen=True)
class ReadoutNoise:
    kind: Optional[NoiseKind]
    magnitude: float = 0.0
    raw_type: str = ""

    @classmethod
    def from_spec(cls, spec: Any) -> Optional["ReadoutNoise"]:
        """``{"type": "depolarizing", "p": 0.02}`` -> ReadoutNoise; no type -> None.

        An unrecognised type is kept (kind None) and corrupts nothing.
        """
        if isinstance(spec, ReadoutNoise):
            return spec
        if not isinstance(spec, dict) or not spec.get("type"):
            return None
        raw = str(spec["type"])
        kind = _KIND_NAMES.get(raw.strip().lower())
        if kind is None:
            log.warning("unknown noise type %r, readout left uncorrupted", raw)
            return cls(kind=None, raw_type=raw)
        return cls(kind=kind, magnitude=_magnitude(spec, _PARAM_KEYS[kind]), raw_type=raw)

    @property
    def consumes_randomness(self) -> bool:
        return self.kind in (NoiseKind.DEPOLARIZING, NoiseKind.AMP_DAMP)

    def to_dict(self) -> dict:
        if self.kind is None:
            return {"type": self.raw_type}
        key = _PARAM_KEYS[self.kind][0]
        return {"type": self.kind.value, key: self.magnitude}


def corrupt_outcome(index: int, n: int, noise: Optional[ReadoutNoise], rng) -> int:
    """Return ``index`` with its n readout bits passed through ``noise``."""
    if noise is None or not noise.consumes_randomness:
        return index
    p = noise.magnitude
    for q in range(n - 1, -1, -1):
        mask = 1 << q
        if noise.kind is NoiseKind.DEPOLARIZING:
            if rng.random() < p:
                index ^= mask
        elif index & mask and rng.random() < p:
            index &= ~mask
    return index
