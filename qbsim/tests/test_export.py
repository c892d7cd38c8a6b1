"""OpenQASM 3 and Qiskit script rendering."""
from qbsim.circuit.export import to_qasm3, to_qiskit
from qbsim.circuit.io import parse_ir
from qbsim.tests.fixtures.circuits import bell_2q, ir, op, postselect_note


def test_bell_qasm():
    assert to_qasm3(parse_ir(bell_2q())) == (
        "OPENQASM 3.0;\n"
        'include "stdgates.inc";\n'
        "qubit[2] q;\n"
        "h q[0];\n"
        "cx q[0], q[1];\n"
    )


def test_qasm_rotation_and_measure():
    c = parse_ir(ir(2, [
        op("gate.rx", [1], tick=0, theta=0.123),
        op("measure", [1], tick=1, kind="io"),
    ]))
    lines = to_qasm3(c).splitlines()
    assert "bit[2] c;" in lines
    assert "rx(0.123000) q[1];" in lines
    assert lines[-1] == "c[1] = measure q[1];"


def test_qasm_follows_tick_order():
    c = parse_ir(ir(2, [op("gate.x", [1], tick=4), op("gate.ccx", [0, 1, 1], tick=5),
                        op("gate.h", [0], tick=1)]))
    body = to_qasm3(c).splitlines()[3:]
    assert body[:2] == ["h q[0];", "x q[1];"]
    # distinctness is not checked on export
    assert body[2] == "ccx q[0], q[1], q[1];"


def test_qasm_keeps_unrenderable_ops_as_comments():
    c = parse_ir(ir(2, [
        op("gate.sqrtx", [0]),
        op("gate.cx", [0, "a"]),
        op("grover", [0, 1], kind="algorithm", iterations=2),
        postselect_note(1, expect=1),
    ]))
    lines = to_qasm3(c).splitlines()
    assert "// gate.sqrtx" in lines
    assert "// gate.cx" in lines
    assert '// ALGORITHM grover {"iterations": 2}' in lines
    assert '// NOTE postselect {"expect": 1}' in lines
    assert "bit[2] c;" not in lines


def test_bell_qiskit_script():
    assert to_qiskit(parse_ir(bell_2q())) == (
        "from qiskit import QuantumCircuit\n"
        "qc = QuantumCircuit(2)\n"
        "qc.h(0)\n"
        "qc.cx(0, 1)\n"
        "\n"
        "print(qc)\n"
    )


def test_qiskit_script_details():
    c = parse_ir(ir(3, [
        op("gate.rz", [2], theta=-1.5),
        op("gate.cswap", [0, 1, 2], tick=1),
        op("measure", [0], tick=2, kind="io"),
        op("marked", [], tick=3, kind="oracle"),
    ]))
    lines = to_qiskit(c).splitlines()
    assert lines[1] == "qc = QuantumCircuit(3, 3)"
    assert "qc.rz(-1.500000, 2)" in lines
    assert "qc.cswap(0, 1, 2)" in lines
    assert "qc.measure(0, 0)" in lines
    assert "# oracle: marked params={}" in lines
