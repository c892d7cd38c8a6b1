"""Simulation entry point: IR + options -> probabilities, amplitudes, counts.

Pipeline:  parse → evolve → [post-select] → |amp|^2 → [sample → readout noise] → result

Each call owns its state buffer and its generator; nothing is shared between
calls, so concurrent simulations of independent circuits need no locking.
:func:`simulate_circuit` is ``async`` only to sit in the caller's event loop;
it never suspends.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import numpy as np

from qbsim.circuit.io import Circuit, bitstring, parse_ir, validate_circuit
from qbsim.config import PRACTICAL_QUBIT_CEILING, SimulationOptions
from qbsim.kernel.amplitude import Amplitude
from qbsim.runner.evolve import evolve
from qbsim.runner.postselect import apply_postselect
from qbsim.sampling.rng import make_rng
from qbsim.sampling.sampler import sample_counts

log = logging.getLogger(__name__)


@dataclass
class SimulationResult:
    qubits: int
    ops: int                               # gate ops present (applied or not)
    probs: np.ndarray
    amps: np.ndarray
    counts: Optional[dict[str, int]]       # None when shots == 0
    entangled_likely: bool                 # heuristic, see runner.evolve
    post_select_prob: Optional[float]      # None when no post-selection ran

    @property
    def amplitudes(self) -> list[Amplitude]:
        return [Amplitude.from_complex(z) for z in self.amps]

    def top_outcomes(self, k: int = 8) -> list[tuple[str, float]]:
        """Largest outcomes as (bitstring, value): counts if sampled, else probabilities."""
        if self.counts is not None:
            entries = [(b, float(c)) for b, c in self.counts.items()]
        else:
            entries = [(bitstring(i, self.qubits), float(p)) for i, p in enumerate(self.probs)]
        entries.sort(key=lambda e: e[1], reverse=True)
        return entries[:k]

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready result in the editor's field names."""
        return {
            "qubits": self.qubits,
            "ops": self.ops,
            "probs": [float(p) for p in self.probs],
            "amps": [a.to_dict() for a in self.amplitudes],
            "counts": None if self.counts is None else dict(self.counts),
            "entangledLikely": self.entangled_likely,
            "postSelectProb": self.post_select_prob,
        }


def _check_size(circuit: Circuit, options: SimulationOptions) -> None:
    n = circuit.qubits
    if options.max_qubits is not None and n > options.max_qubits:
        raise ValueError(f"circuit has {n} qubits, max_qubits is {options.max_qubits}")
    if n > PRACTICAL_QUBIT_CEILING:
        log.warning("simulating %d qubits: the state holds 2^%d amplitudes", n, n)


def run_simulation(ir: Any, opts: Any = None) -> SimulationResult:
    """Synchronous simulation of one circuit."""
    options = SimulationOptions.from_dict(opts)
    circuit = parse_ir(ir)
    if options.strict:
        validate_circuit(circuit)
    _check_size(circuit, options)
    n = circuit.qubits

    evo = evolve(circuit)
    psi = evo.psi
    post_select_prob = apply_postselect(psi, circuit)
    probs = psi.real * psi.real + psi.imag * psi.imag

    counts = None
    if options.shots > 0:
        rng = make_rng(options.seed)
        by_index = sample_counts(probs, n, options.shots, rng, options.noise)
        counts = {bitstring(i, n): c for i, c in by_index.items()}

    n_gate_ops = len(circuit.gate_ops())
    log.info(
        "simulated %d qubit(s): %d gate op(s), %d applied, %d skipped, shots=%d",
        n, n_gate_ops, evo.applied, evo.skipped, options.shots,
    )
    return SimulationResult(
        qubits=n,
        ops=n_gate_ops,
        probs=probs,
        amps=psi,
        counts=counts,
        entangled_likely=evo.entangled_likely,
        post_select_prob=post_select_prob,
    )


async def simulate_circuit(ir: Any, opts: Any = None) -> SimulationResult:
    """Awaitable form of :func:`run_simulation` (runs to completion, no suspension)."""
    return run_simulation(ir, opts)
