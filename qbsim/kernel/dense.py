"""Dense in-place kernels: vectorised numpy, one gate at a time.

Operates in-place on the full state (1-D complex128 array of length 2^n).
Endianness: little-endian (qubit q = bit q of the index).

Every kernel is permissive: qubit arguments that are not integers, fall
outside [0, n), or (for multi-qubit gates) are not pairwise distinct leave
the state untouched.  Kernels return True when they touched the state.
"""
from __future__ import annotations

from typing import Callable, Optional, Sequence

import numpy as np

from qbsim.kernel import gates as gmod
from qbsim.kernel.gates import GateKind


def is_qubit(q, n: int) -> bool:
    if isinstance(q, bool) or not isinstance(q, (int, np.integer)):
        return False
    return 0 <= q < n


def valid2(n: int, a, b) -> bool:
    return is_qubit(a, n) and is_qubit(b, n) and a != b


def valid3(n: int, a, b, c) -> bool:
    return all(is_qubit(q, n) for q in (a, b, c)) and len({a, b, c}) == 3


def _indices(psi: np.ndarray) -> np.ndarray:
    return np.arange(len(psi))


def _swap_pairs(psi: np.ndarray, i: np.ndarray, j: np.ndarray) -> None:
    a = psi[i].copy()
    psi[i] = psi[j]
    psi[j] = a


# ── 1-qubit ─────────────────────────────────────────────────────────
def apply_1q(psi: np.ndarray, n: int, q, U: np.ndarray) -> bool:
    if not is_qubit(q, n):
        return False
    N = len(psi)
    step = 1 << q
    block = step << 1
    base = np.arange(0, N, block)
    off = np.arange(step)
    idx0 = (base[:, None] + off[None, :]).ravel()
    idx1 = idx0 + step
    a, b = psi[idx0].copy(), psi[idx1].copy()
    psi[idx0] = U[0, 0] * a + U[0, 1] * b
    psi[idx1] = U[1, 0] * a + U[1, 1] * b
    return True


# ── 2-qubit ─────────────────────────────────────────────────────────
def _controlled_pairs(psi: np.ndarray, controls: Sequence[int], target: int):
    """Indices with every control bit set and the target bit clear."""
    idx = _indices(psi)
    sel = (idx >> target) & 1 == 0
    for c in controls:
        sel &= (idx >> c) & 1 == 1
    i = idx[sel]
    return i, i | (1 << target)


def apply_cx(psi: np.ndarray, n: int, control, target) -> bool:
    if not valid2(n, control, target):
        return False
    i, j = _controlled_pairs(psi, [control], target)
    _swap_pairs(psi, i, j)
    return True


def apply_cy(psi: np.ndarray, n: int, control, target) -> bool:
    """Controlled-Y: Y applied to each (a_i, a_j) pair, so i|1> and -i|0>."""
    if not valid2(n, control, target):
        return False
    i, j = _controlled_pairs(psi, [control], target)
    U = gmod.Y()
    a0, a1 = psi[i].copy(), psi[j].copy()
    psi[i] = U[0, 0] * a0 + U[0, 1] * a1
    psi[j] = U[1, 0] * a0 + U[1, 1] * a1
    return True


def apply_cz(psi: np.ndarray, n: int, control, target) -> bool:
    if not valid2(n, control, target):
        return False
    both = (1 << control) | (1 << target)
    idx = _indices(psi)
    sel = idx[(idx & both) == both]
    psi[sel] = -psi[sel]
    return True


def apply_swap(psi: np.ndarray, n: int, q0, q1) -> bool:
    if not valid2(n, q0, q1):
        return False
    idx = _indices(psi)
    # one representative per unordered pair: bit q0 set, bit q1 clear
    i = idx[((idx >> q0) & 1 == 1) & ((idx >> q1) & 1 == 0)]
    _swap_pairs(psi, i, i ^ ((1 << q0) | (1 << q1)))
    return True


# ── 3-qubit ─────────────────────────────────────────────────────────
def apply_ccx(psi: np.ndarray, n: int, c1, c2, target) -> bool:
    if not valid3(n, c1, c2, target):
        return False
    i, j = _controlled_pairs(psi, [c1, c2], target)
    _swap_pairs(psi, i, j)
    return True


def apply_cswap(psi: np.ndarray, n: int, control, q0, q1) -> bool:
    if not valid3(n, control, q0, q1):
        return False
    idx = _indices(psi)
    sel = ((idx >> control) & 1 == 1) & ((idx >> q0) & 1 == 1) & ((idx >> q1) & 1 == 0)
    i = idx[sel]
    _swap_pairs(psi, i, i ^ ((1 << q0) | (1 << q1)))
    return True


# ── dispatcher ──────────────────────────────────────────────────────
_MULTI: dict[GateKind, Callable[..., bool]] = {
    GateKind.CX: apply_cx,
    GateKind.CY: apply_cy,
    GateKind.CZ: apply_cz,
    GateKind.SWAP: apply_swap,
    GateKind.CCX: apply_ccx,
    GateKind.CSWAP: apply_cswap,
}


def _pad(targets: Sequence, arity: int) -> list:
    """First ``arity`` targets; absent positions become None (invalid)."""
    ts = list(targets or [])[:arity]
    return ts + [None] * (arity - len(ts))


def apply_gate(psi: np.ndarray, n: int, kind: GateKind, targets: Sequence,
               params: Optional[dict] = None) -> bool:
    """Apply one gate of the closed set in place.  Returns False on a no-op."""
    qs = _pad(targets, kind.arity)
    if kind.arity == 1:
        return apply_1q(psi, n, qs[0], kind.matrix(params))
    return _MULTI[kind](psi, n, *qs)


def zero_state(n: int) -> np.ndarray:
    """|0...0> on n qubits."""
    psi = np.zeros(1 << n, dtype=np.complex128)
    psi[0] = 1.0
    return psi
