"""Render a circuit as OpenQASM 3 text or as a Qiskit script.

Ops are emitted in tick order.  ``io/measure`` becomes a measurement into a
classical register; other non-gate ops (oracles, algorithms, notes) and
unknown gates survive as comments so nothing authored is silently lost.
"""
from __future__ import annotations

import json

from qbsim.circuit.io import Circuit, Operation
from qbsim.kernel.gates import theta_param


def _is_measure(op: Operation) -> bool:
    return op.kind == "io" and op.ref.lower() == "measure"


def _renderable(kind, targets) -> bool:
    if kind is None or len(targets) < kind.arity:
        return False
    return None not in targets[:kind.arity]


def _angle(op: Operation) -> str:
    return f"{theta_param(op.params):.6f}"


def _params_json(op: Operation) -> str:
    return json.dumps(op.params or {}, sort_keys=True, default=str)


def to_qasm3(circuit: Circuit) -> str:
    n = circuit.qubits
    ops = circuit.sorted_ops()
    lines = ["OPENQASM 3.0;", 'include "stdgates.inc";', f"qubit[{n}] q;"]
    if any(_is_measure(o) for o in ops):
        lines.append(f"bit[{n}] c;")
    for op in ops:
        t = op.targets
        kind = op.gate
        if _renderable(kind, t):
            name = kind.label.lower()
            args = ", ".join(f"q[{q}]" for q in t[:kind.arity])
            if kind.parametrized:
                lines.append(f"{name}({_angle(op)}) {args};")
            else:
                lines.append(f"{name} {args};")
        elif op.kind == "gate":
            lines.append(f"// {op.ref}")
        elif _is_measure(op) and t and t[0] is not None:
            lines.append(f"c[{t[0]}] = measure q[{t[0]}];")
        else:
            lines.append(f"// {op.kind.upper()} {op.ref} {_params_json(op)}")
    return "\n".join(lines) + "\n"


def to_qiskit(circuit: Circuit) -> str:
    n = circuit.qubits
    ops = circuit.sorted_ops()
    measured = any(_is_measure(o) for o in ops)
    lines = [
        "from qiskit import QuantumCircuit",
        f"qc = QuantumCircuit({n}, {n})" if measured else f"qc = QuantumCircuit({n})",
    ]
    for op in ops:
        t = op.targets
        kind = op.gate
        if _renderable(kind, t):
            args = ", ".join(str(q) for q in t[:kind.arity])
            if kind.parametrized:
                args = f"{_angle(op)}, {args}"
            lines.append(f"qc.{kind.label.lower()}({args})")
        elif op.kind == "gate":
            lines.append(f"# {op.ref}")
        elif _is_measure(op) and t and t[0] is not None:
            lines.append(f"qc.measure({t[0]}, {t[0]})")
        else:
            lines.append(f"# {op.kind}: {op.ref} params={_params_json(op)}")
    lines += ["", "print(qc)"]
    return "\n".join(lines) + "\n"
