"""Evolve |0...0> through the tick-ordered gate ops of a circuit.

One state buffer is allocated per call and mutated in place by each kernel.
``entangled_likely`` is a structural heuristic: it turns True as soon as any
2- or 3-qubit gate is dispatched, whether or not the state actually ends up
entangled (and even when the kernel rejected its qubit arguments).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from qbsim.circuit.io import Circuit
from qbsim.kernel.dense import apply_gate, zero_state

log = logging.getLogger(__name__)


@dataclass
class Evolution:
    psi: np.ndarray
    entangled_likely: bool
    applied: int
    skipped: int


def evolve(circuit: Circuit) -> Evolution:
    n = circuit.qubits
    psi = zero_state(n)
    entangled_likely = False
    applied = skipped = 0

    for op in circuit.sorted_ops():
        if op.kind != "gate":
            continue
        kind = op.gate
        if kind is None:
            log.debug("ignoring unknown gate %r at tick %s", op.ref, op.tick)
            skipped += 1
            continue
        if kind.entangling:
            entangled_likely = True
        if apply_gate(psi, n, kind, op.targets, op.params):
            applied += 1
        else:
            log.debug("%s on %s is a no-op for %d qubit(s)", kind.label, op.targets, n)
            skipped += 1

    return Evolution(psi=psi, entangled_likely=entangled_likely,
                     applied=applied, skipped=skipped)
