"""Circuit IR parsing, tick ordering and (opt-in) validation.

The IR comes from the circuit editor::

    {"circuit": {"qubits": n,
                 "ops": [{"type": "gate", "ref": "gate.cx", "targets": [0, 1],
                          "params": {...}, "tick": 3}, ...]}}

Parsing is permissive: nothing here raises on malformed per-op data.
Bad qubit indices become ``None`` and the kernels treat them as no-ops.
:func:`find_problems` reports what the permissive path would silently skip.

Endianness convention: LITTLE-ENDIAN.
  qubit 0 = bit 0 (LSB) of the state-vector index.
  Bitstrings are rendered MSB first: qubit n-1 is the leftmost character.
"""
from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from qbsim.kernel.gates import GateKind, parse_gate

ENDIANNESS = "little"

OP_KINDS = frozenset({"gate", "io", "oracle", "algorithm", "note"})
POSTSELECT_REF = "postselect"


class InvalidCircuitError(ValueError):
    """Raised in strict mode; carries one message per offending operation."""

    def __init__(self, problems: list[str]):
        self.problems = list(problems)
        super().__init__("; ".join(self.problems))


# ── coercion ────────────────────────────────────────────────────────
def _as_number(x: Any) -> Optional[float]:
    if isinstance(x, bool) or x is None:
        return None
    if isinstance(x, str) and not x.strip():
        return None
    try:
        v = float(x)
    except (TypeError, ValueError):
        return None
    return v if math.isfinite(v) else None


def as_index(x: Any) -> Optional[int]:
    """Integral numbers (1, 1.0, "1") -> int; anything else -> None."""
    v = _as_number(x)
    if v is None or not v.is_integer():
        return None
    return int(v)


def as_qubit_count(x: Any) -> int:
    """Declared qubit count; absent, negative or non-numeric clamps to 0."""
    v = _as_number(x)
    if v is None:
        return 0
    return max(int(v), 0)


def _as_tick(x: Any):
    v = _as_number(x)
    if v is None:
        return 0
    return int(v) if v.is_integer() else v


# ── model ───────────────────────────────────────────────────────────
@dataclass(frozen=True)
class Operation:
    kind: str
    ref: str
    targets: list = field(default_factory=list)
    params: dict = field(default_factory=dict)
    tick: Any = 0

    @property
    def gate(self) -> Optional[GateKind]:
        """Resolved gate for ``gate`` ops; None for other kinds and unknown refs."""
        if self.kind != "gate":
            return None
        return parse_gate(self.ref)

    @property
    def is_postselect(self) -> bool:
        return self.kind == "note" and self.ref == POSTSELECT_REF

    @classmethod
    def from_dict(cls, d: Any) -> "Operation":
        if not isinstance(d, dict):
            return cls(kind="", ref="")
        raw_targets = d.get("targets")
        if not isinstance(raw_targets, (list, tuple)):
            raw_targets = []
        params = d.get("params")
        return cls(
            kind=str(d.get("type", d.get("kind", "")) or ""),
            ref=str(d.get("ref", "") or ""),
            targets=[as_index(t) for t in raw_targets],
            params=dict(params) if isinstance(params, dict) else {},
            tick=_as_tick(d.get("tick")),
        )

    def to_dict(self) -> dict:
        return {"type": self.kind, "ref": self.ref, "targets": list(self.targets),
                "params": dict(self.params), "tick": self.tick}


@dataclass
class Circuit:
    qubits: int
    ops: list[Operation] = field(default_factory=list)

    @property
    def size(self) -> int:
        return 1 << self.qubits

    def sorted_ops(self) -> list[Operation]:
        """Stable sort by tick: equal ticks keep their authored order."""
        return sorted(self.ops, key=lambda o: o.tick)

    def gate_ops(self) -> list[Operation]:
        return [o for o in self.ops if o.kind == "gate"]

    def to_ir(self) -> dict:
        return {"circuit": {"qubits": self.qubits,
                            "ops": [o.to_dict() for o in self.ops]}}


def parse_ir(ir: Any) -> Circuit:
    """Build a :class:`Circuit` from an IR mapping (or pass one through)."""
    if isinstance(ir, Circuit):
        return ir
    if not isinstance(ir, dict):
        return Circuit(qubits=0)
    body = ir.get("circuit", ir)
    if not isinstance(body, dict):
        return Circuit(qubits=0)
    raw_ops = body.get("ops")
    if not isinstance(raw_ops, (list, tuple)):
        raw_ops = []
    return Circuit(
        qubits=as_qubit_count(body.get("qubits")),
        ops=[Operation.from_dict(o) for o in raw_ops],
    )


def load_ir(path: str | Path) -> Circuit:
    """Read an editor IR export (``circuit.json``)."""
    with open(path) as f:
        return parse_ir(json.load(f))


def bitstring(index: int, n: int) -> str:
    """Basis index -> zero-padded bitstring, qubit n-1 leftmost."""
    return format(index, "b").zfill(n)


# ── validation ──────────────────────────────────────────────────────
def _target_problems(tag: str, label: str, targets: list, arity: int, n: int) -> list[str]:
    out = []
    if len(targets) < arity:
        out.append(f"{tag}: {label} needs {arity} qubit(s), got {len(targets)}")
    qs = targets[:arity]
    for q in qs:
        if q is None:
            out.append(f"{tag}: {label} has a malformed qubit index")
        elif q < 0 or q >= n:
            out.append(f"{tag}: qubit {q} out of range [0, {n})")
    present = [q for q in qs if q is not None]
    if len(set(present)) != len(present):
        out.append(f"{tag}: {label} qubits must be distinct, got {present}")
    return out


def find_problems(circuit: Circuit) -> list[str]:
    """Everything the permissive simulator would skip, one message per issue."""
    n = circuit.qubits
    problems: list[str] = []
    seen_postselect = False
    for i, op in enumerate(circuit.ops):
        tag = f"op[{i}]"
        if op.kind not in OP_KINDS:
            problems.append(f"{tag}: unknown op type '{op.kind}'")
            continue
        if op.kind == "gate":
            kind = op.gate
            if kind is None:
                problems.append(f"{tag}: unsupported gate '{op.ref}'")
                continue
            problems.extend(_target_problems(tag, kind.label, op.targets, kind.arity, n))
        elif op.is_postselect and not seen_postselect:
            seen_postselect = True
            problems.extend(_target_problems(tag, POSTSELECT_REF, op.targets, 1, n))
    return problems


def validate_circuit(circuit: Circuit) -> Circuit:
    """Strict mode: raise :class:`InvalidCircuitError` listing every problem."""
    problems = find_problems(circuit)
    if problems:
        raise InvalidCircuitError(problems)
    return circuit
