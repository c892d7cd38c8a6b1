"""Post-selection on one qubit's value, driven by a ``note/postselect`` op.

    {"type": "note", "ref": "postselect", "targets": [bit], "params": {"expect": 0|1}}
"""
from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from qbsim.circuit.io import Circuit, Operation, as_index
from qbsim.kernel.dense import is_qubit

log = logging.getLogger(__name__)


def find_postselect(circuit: Circuit) -> Optional[Operation]:
    """First postselect note in authored order; later ones are ignored."""
    for op in circuit.ops:
        if op.is_postselect:
            return op
    return None


def expected_bit(params: dict) -> int:
    """``expect`` defaults to 1; any non-zero number means 1, anything else 0."""
    raw = params.get("expect") if params else None
    if raw is None:
        return 1
    if isinstance(raw, bool):
        return int(raw)
    try:
        v = float(raw)
    except (TypeError, ValueError):
        return 0
    return 1 if v == v and v != 0 else 0


def postselect_by_bit(psi: np.ndarray, n: int, bit, expect: int) -> Optional[float]:
    """Project ``psi`` in place onto ``bit == expect`` and renormalise.

    Returns the probability mass kept before renormalisation, 0.0 when
    nothing survives (``psi`` is then all zero), or None when ``bit`` is
    not a valid qubit (``psi`` untouched).
    """
    if not is_qubit(bit, n):
        return None
    idx = np.arange(len(psi))
    drop = ((idx >> bit) & 1) != expect
    psi[drop] = 0
    # sequential sum, not numpy's pairwise one: rounding must match the browser preview
    keep = float(np.cumsum(psi.real * psi.real + psi.imag * psi.imag)[-1])
    if keep <= 0:
        return 0.0
    psi *= 1.0 / np.sqrt(keep)
    return keep


def apply_postselect(psi: np.ndarray, circuit: Circuit) -> Optional[float]:
    op = find_postselect(circuit)
    if op is None or not op.targets:
        return None
    bit = as_index(op.targets[0])
    kept = postselect_by_bit(psi, circuit.qubits, bit, expected_bit(op.params))
    if kept is None:
        log.debug("postselect on qubit %r ignored for %d qubit(s)", op.targets[0], circuit.qubits)
    else:
        log.debug("postselect q%d=%d kept %.6f of the mass", bit, expected_bit(op.params), kept)
    return kept
