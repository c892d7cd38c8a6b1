"""Canonical gate matrices and the closed gate set.

Convention:
  1-qubit gates: 2x2 complex128 ndarray, row-major, basis order [|0>, |1>].
  Multi-qubit gates have no matrix here; they are index-permutation /
  phase kernels in :mod:`qbsim.kernel.dense`.

The constants are chosen to be bit-identical with the browser preview:
H uses 1/sqrt(2) (…475) while T's phase uses sqrt(1/2) (…476) for both parts.
"""
from __future__ import annotations

import math
from enum import Enum
from typing import Optional

import numpy as np

_S2 = 1.0 / math.sqrt(2.0)
_SQRT1_2 = math.sqrt(0.5)


def _mat(*rows):
    return np.array(rows, dtype=np.complex128)


# ── 1-qubit fixed ───────────────────────────────────────────────────
def H():
    return _mat([_S2, _S2], [_S2, -_S2])

def X():
    return _mat([0, 1], [1, 0])

def Y():
    return _mat([0, -1j], [1j, 0])

def Z():
    return _mat([1, 0], [0, -1])

def S():
    return _mat([1, 0], [0, 1j])

def T():
    return _mat([1, 0], [0, complex(_SQRT1_2, _SQRT1_2)])


# ── 1-qubit parameterised ──────────────────────────────────────────
def RX(theta: float):
    c, s = math.cos(theta / 2), math.sin(theta / 2)
    return _mat([c, complex(0, -s)], [complex(0, -s), c])

def RY(theta: float):
    c, s = math.cos(theta / 2), math.sin(theta / 2)
    return _mat([c, -s], [s, c])

def RZ(theta: float):
    p = theta / 2
    return _mat([complex(math.cos(-p), math.sin(-p)), 0],
                [0, complex(math.cos(p), math.sin(p))])


def theta_param(params) -> float:
    """Rotation angle from an op's params; missing or non-numeric -> 0."""
    if not params:
        return 0.0
    raw = params.get("theta", 0)
    try:
        theta = float(raw or 0)
    except (TypeError, ValueError):
        return 0.0
    return theta


# ── closed gate set ─────────────────────────────────────────────────
class GateKind(Enum):
    """Every gate the simulator knows, with its arity."""

    X = ("X", 1)
    Y = ("Y", 1)
    Z = ("Z", 1)
    H = ("H", 1)
    S = ("S", 1)
    T = ("T", 1)
    RX = ("RX", 1)
    RY = ("RY", 1)
    RZ = ("RZ", 1)
    CX = ("CX", 2)
    CY = ("CY", 2)
    CZ = ("CZ", 2)
    SWAP = ("SWAP", 2)
    CCX = ("CCX", 3)
    CSWAP = ("CSWAP", 3)

    def __init__(self, label: str, arity: int):
        self.label = label
        self.arity = arity

    @property
    def entangling(self) -> bool:
        return self.arity > 1

    @property
    def parametrized(self) -> bool:
        return self in _PARAM_1Q

    def matrix(self, params: Optional[dict] = None) -> np.ndarray:
        """2x2 unitary of a single-qubit gate."""
        if self in _FIXED_1Q:
            return _FIXED_1Q[self]()
        if self in _PARAM_1Q:
            return _PARAM_1Q[self](theta_param(params))
        raise ValueError(f"{self.label} is a {self.arity}-qubit gate and has no 2x2 matrix")


_FIXED_1Q = {
    GateKind.X: X, GateKind.Y: Y, GateKind.Z: Z,
    GateKind.H: H, GateKind.S: S, GateKind.T: T,
}
_PARAM_1Q = {GateKind.RX: RX, GateKind.RY: RY, GateKind.RZ: RZ}

_ALIASES = {
    "CNOT": GateKind.CX,
    "CCNOT": GateKind.CCX,
    "TOFFOLI": GateKind.CCX,
    "FREDKIN": GateKind.CSWAP,
}


def normalize_ref(ref) -> str:
    """'gate.cx' / 'CX' / 'cx' -> 'CX'."""
    name = str(ref if ref is not None else "").strip().upper()
    if name.startswith("GATE."):
        name = name[5:]
    return name


def parse_gate(ref) -> Optional[GateKind]:
    """Resolve a gate reference; unknown names give None."""
    name = normalize_ref(ref)
    if name in _ALIASES:
        return _ALIASES[name]
    try:
        return GateKind[name]
    except KeyError:
        return None
