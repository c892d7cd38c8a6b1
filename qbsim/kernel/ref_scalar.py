"""Pure-Python reference simulator (tiny n only, oracle for the dense kernels).

Loops over every basis index with :func:`cadd` / :func:`cmul` and returns a
fresh list per gate instead of mutating, so it shares no code path with
:mod:`qbsim.kernel.dense` beyond the gate matrices.
Endianness: little-endian (qubit 0 = bit 0 = LSB).
"""
from __future__ import annotations

from qbsim.circuit.io import Circuit
from qbsim.kernel.amplitude import ONE, ZERO, Amplitude, cadd, cmul
from qbsim.kernel.dense import is_qubit, valid2, valid3
from qbsim.kernel.gates import GateKind


def _matrix(kind: GateKind, params) -> list[list[Amplitude]]:
    U = kind.matrix(params)
    return [[Amplitude.from_complex(U[r, c]) for c in range(2)] for r in range(2)]


def _pair(M, a0: Amplitude, a1: Amplitude) -> tuple[Amplitude, Amplitude]:
    return (cadd(cmul(M[0][0], a0), cmul(M[0][1], a1)),
            cadd(cmul(M[1][0], a0), cmul(M[1][1], a1)))


def apply1(state: list, n: int, q, M) -> list:
    if not is_qubit(q, n):
        return state
    mask = 1 << q
    out = list(state)
    for i in range(len(state)):
        if i & mask == 0:
            j = i | mask
            out[i], out[j] = _pair(M, state[i], state[j])
    return out


def _controlled(state: list, controls: list[int], target: int, M=None) -> list:
    cm = sum(1 << c for c in controls)
    tm = 1 << target
    out = list(state)
    for i in range(len(state)):
        if i & cm == cm and i & tm == 0:
            j = i | tm
            if M is None:
                out[i], out[j] = state[j], state[i]
            else:
                out[i], out[j] = _pair(M, state[i], state[j])
    return out


def _swap(state: list, a: int, b: int, control_mask: int = 0) -> list:
    am, bm = 1 << a, 1 << b
    out = list(state)
    for i in range(len(state)):
        if i & control_mask != control_mask:
            continue
        if bool(i & am) != bool(i & bm):
            j = i ^ (am | bm)
            if i < j:
                out[i], out[j] = state[j], state[i]
    return out


def apply_op(state: list, n: int, kind: GateKind, targets: list, params=None) -> list:
    t = list(targets) + [None] * (kind.arity - len(targets))
    if kind.arity == 1:
        return apply1(state, n, t[0], _matrix(kind, params))
    if kind in (GateKind.CX, GateKind.CY, GateKind.CZ, GateKind.SWAP):
        if not valid2(n, t[0], t[1]):
            return state
        if kind is GateKind.CX:
            return _controlled(state, [t[0]], t[1])
        if kind is GateKind.CY:
            return _controlled(state, [t[0]], t[1], _matrix(GateKind.Y, None))
        if kind is GateKind.SWAP:
            return _swap(state, t[0], t[1])
        both = (1 << t[0]) | (1 << t[1])
        return [Amplitude(-a.re, -a.im) if i & both == both else a
                for i, a in enumerate(state)]
    if not valid3(n, t[0], t[1], t[2]):
        return state
    if kind is GateKind.CCX:
        return _controlled(state, [t[0], t[1]], t[2])
    return _swap(state, t[1], t[2], control_mask=1 << t[0])


def simulate(circuit: Circuit) -> list[Amplitude]:
    """Run the gate ops of ``circuit`` in tick order, return the amplitudes."""
    n = circuit.qubits
    state = [ONE if i == 0 else ZERO for i in range(1 << n)]
    for op in circuit.sorted_ops():
        kind = op.gate
        if kind is not None:
            state = apply_op(state, n, kind, op.targets, op.params)
    return state
