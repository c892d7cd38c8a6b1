"""End-to-end behaviour of run_simulation / simulate_circuit."""
import asyncio
import json
import logging

import numpy as np
import pytest

from qbsim import SimulationOptions, run_simulation, simulate_circuit
from qbsim.circuit.io import InvalidCircuitError, parse_ir
from qbsim.tests.fixtures.circuits import (
    bell_2q, empty, ghz, h_only_1q, ir, mixed_3q, op, rotations_3q,
)

S2 = 1.0 / np.sqrt(2.0)

MIXED_3Q_PROBS = [
    0.12263212715768003, 0.06103644291078758, 0.18896355708921234, 0.12736787284231985,
    0.06103644291078758, 0.12263212715768003, 0.12736787284231985, 0.18896355708921234,
]


@pytest.mark.parametrize("n", [0, 1, 3])
def test_empty_circuit_is_ground_state(n):
    res = run_simulation(empty(n))
    assert res.probs[0] == 1.0
    assert res.probs.sum() == 1.0
    assert len(res.amps) == 1 << n
    assert res.counts is None
    assert res.post_select_prob is None
    assert res.entangled_likely is False
    assert res.ops == 0


def test_bell_state():
    res = run_simulation(bell_2q())
    np.testing.assert_allclose(res.amps, [S2, 0, 0, S2], atol=1e-15)
    np.testing.assert_allclose(res.probs, [0.5, 0, 0, 0.5], atol=1e-15)
    assert res.entangled_likely is True
    assert res.ops == 2


@pytest.mark.parametrize("circ_fn", [bell_2q, rotations_3q, mixed_3q, lambda: ghz(5)])
def test_probabilities_sum_to_one(circ_fn):
    res = run_simulation(circ_fn())
    assert res.probs.sum() == pytest.approx(1.0, abs=1e-12)
    assert (res.probs >= 0).all()


def test_mixed_circuit_probabilities():
    np.testing.assert_allclose(run_simulation(mixed_3q()).probs, MIXED_3Q_PROBS, atol=1e-15)


def test_single_qubit_gates_never_flag_entanglement():
    assert run_simulation(rotations_3q()).entangled_likely is False


def test_invalid_multi_qubit_gate_still_flags_entanglement():
    res = run_simulation(ir(2, [op("gate.cx", [0, 5])]))
    assert res.entangled_likely is True
    assert res.probs[0] == 1.0


def test_ops_counts_every_gate_op():
    res = run_simulation(ir(2, [
        op("gate.h", [0]), op("gate.unknown", [1]), op("gate.x", [9]),
        op("measure", [0], kind="io"),
    ]))
    assert res.ops == 3


def test_unknown_gates_and_other_kinds_do_not_touch_state():
    res = run_simulation(ir(1, [
        op("gate.sqrtx", [0]), op("grover", [0], kind="algorithm"),
        op("marked", [0], kind="oracle"), op("measure", [0], kind="io"),
    ]))
    np.testing.assert_array_equal(res.probs, [1.0, 0.0])


def test_tick_order_not_authored_order():
    # tick order H, X, Z gives |->; authored order would give -|->
    res = run_simulation(ir(1, [op("gate.x", [0], tick=2), op("gate.z", [0], tick=3),
                                op("gate.h", [0], tick=1)]))
    np.testing.assert_allclose(res.amps, [S2, -S2], atol=1e-15)


def test_shots_counts_sum():
    res = run_simulation(ghz(3), {"shots": 333, "seed": 4})
    assert sum(res.counts.values()) == 333
    assert set(res.counts) <= {"000", "111"}


def test_counts_absent_without_shots():
    assert run_simulation(bell_2q(), {"seed": 1}).counts is None
    assert run_simulation(bell_2q(), {"shots": -5}).counts is None


def test_seeded_runs_are_reproducible():
    a = run_simulation(mixed_3q(), {"shots": 500, "seed": 99})
    b = run_simulation(mixed_3q(), {"shots": 500, "seed": 99})
    assert a.counts == b.counts
    assert list(a.counts) == list(b.counts)


def test_recorded_bell_counts():
    res = run_simulation(bell_2q(), {"shots": 100, "seed": 7})
    assert res.counts == {"11": 57, "00": 43}
    assert list(res.counts) == ["00", "11"]


def test_recorded_single_qubit_counts():
    res = run_simulation(h_only_1q(), {"shots": 10000, "seed": 12345})
    assert res.counts == {"0": 4931, "1": 5069}


def test_recorded_depolarizing_counts():
    res = run_simulation(bell_2q(), {"shots": 200, "seed": 3,
                                     "noise": {"type": "depolarizing", "p": 0.1}})
    assert res.counts == {"10": 16, "11": 84, "01": 18, "00": 82}


def test_recorded_amp_damp_counts():
    res = run_simulation(ghz(3), {"shots": 64, "seed": 11,
                                  "noise": {"type": "amp-damp", "gamma": 0.3}})
    assert res.counts == {"100": 2, "101": 4, "110": 7, "111": 13, "000": 31, "011": 2, "001": 5}


def test_phase_damp_matches_noiseless():
    noisy = run_simulation(ghz(3), {"shots": 64, "seed": 11,
                                    "noise": {"type": "phase-damp", "lambda": 0.5}})
    clean = run_simulation(ghz(3), {"shots": 64, "seed": 11})
    assert noisy.counts == clean.counts == {"111": 34, "000": 30}


def test_noise_does_not_touch_probabilities():
    res = run_simulation(bell_2q(), {"shots": 10, "seed": 1,
                                     "noise": {"type": "depolarizing", "p": 0.5}})
    np.testing.assert_allclose(res.probs, [0.5, 0, 0, 0.5], atol=1e-15)


def test_unseeded_runs_still_sample():
    res = run_simulation(h_only_1q(), {"shots": 100})
    assert sum(res.counts.values()) == 100


def test_mirror_has_no_effect():
    a = run_simulation(bell_2q(), {"shots": 50, "seed": 2})
    b = run_simulation(bell_2q(), {"shots": 50, "seed": 2, "mirror": 3})
    assert a.counts == b.counts


@pytest.mark.parametrize("qubits", [-2, "abc", None])
def test_bad_qubit_count_clamps_to_zero(qubits):
    res = run_simulation({"circuit": {"qubits": qubits, "ops": [op("gate.x", [0])]}})
    assert res.qubits == 0
    np.testing.assert_array_equal(res.probs, [1.0])


def test_garbage_input_is_ground_state():
    res = run_simulation(None, None)
    assert res.qubits == 0 and res.ops == 0


def test_input_circuit_not_mutated():
    cd = bell_2q()
    before = json.dumps(cd, sort_keys=True)
    c = parse_ir(cd)
    run_simulation(c, {"shots": 5, "seed": 1})
    assert json.dumps(cd, sort_keys=True) == before
    assert [o.ref for o in c.ops] == ["gate.h", "gate.cx"]


def test_strict_mode_raises():
    bad = ir(2, [op("gate.h", [0]), op("gate.cx", [0, 3])])
    assert run_simulation(bad).probs.sum() == pytest.approx(1.0)
    with pytest.raises(InvalidCircuitError, match=r"op\[1\]"):
        run_simulation(bad, {"strict": True})


def test_strict_mode_accepts_valid_circuit():
    assert run_simulation(mixed_3q(), {"strict": True}).qubits == 3


def test_max_qubits_guard():
    with pytest.raises(ValueError, match="max_qubits"):
        run_simulation(ghz(4), {"maxQubits": 3})
    assert run_simulation(ghz(3), {"max_qubits": 3}).qubits == 3


def test_large_circuit_logs_warning(caplog, monkeypatch):
    monkeypatch.setattr("qbsim.runner.simulate.PRACTICAL_QUBIT_CEILING", 2)
    with caplog.at_level(logging.WARNING, logger="qbsim"):
        run_simulation(ghz(3))
    assert "2^3" in caplog.text


def test_options_normalisation():
    o = SimulationOptions.from_dict({"shots": "12.9", "seed": 3.7, "mirror": -1,
                                     "maxQubits": 4.2, "panel": "left"})
    assert o.shots == 12 and o.seed == 3 and o.mirror == 0 and o.max_qubits == 4
    assert o.seeded and o.extra == {"panel": "left"}
    o = SimulationOptions.from_dict({"shots": "lots", "seed": float("inf")})
    assert o.shots == 0 and not o.seeded
    assert SimulationOptions.from_dict(o) is o
    assert SimulationOptions.from_dict(None).shots == 0


def test_to_dict_is_json_ready():
    res = run_simulation(bell_2q(), {"shots": 4, "seed": 1})
    d = json.loads(json.dumps(res.to_dict()))
    assert d["qubits"] == 2 and d["ops"] == 2
    assert d["entangledLikely"] is True
    assert d["postSelectProb"] is None
    assert d["amps"][0] == pytest.approx({"re": S2, "im": 0.0})
    assert sum(d["counts"].values()) == 4
    assert len(d["probs"]) == 4


def test_top_outcomes():
    res = run_simulation(bell_2q())
    top = res.top_outcomes(2)
    assert {b for b, _ in top} == {"00", "11"}
    assert top[0][1] == pytest.approx(0.5)
    sampled = run_simulation(bell_2q(), {"shots": 100, "seed": 7})
    assert sampled.top_outcomes(1) == [("11", 57.0)]


def test_amplitude_view():
    amps = run_simulation(bell_2q()).amplitudes
    assert amps[3].re == pytest.approx(S2) and amps[3].im == 0.0


def test_async_entry_point():
    res = asyncio.run(simulate_circuit(bell_2q(), {"shots": 100, "seed": 7}))
    assert res.counts == {"11": 57, "00": 43}


def test_concurrent_calls_are_independent():
    async def many():
        return await asyncio.gather(*(
            simulate_circuit(ghz(n), {"shots": 20, "seed": n}) for n in range(1, 6)
        ))

    results = asyncio.run(many())
    for n, res in zip(range(1, 6), results):
        assert res.qubits == n
        assert res.counts == run_simulation(ghz(n), {"shots": 20, "seed": n}).counts


def test_default_options_match_empty_mapping():
    assert SimulationOptions() == SimulationOptions.from_dict({})
    o = SimulationOptions()
    assert o.shots == 0 and o.seed is None and o.noise is None
    assert not o.strict and o.max_qubits is None


def test_string_seed_means_unseeded():
    o = SimulationOptions.from_dict({"seed": "7"})
    assert o.seed is None and not o.seeded
    res = run_simulation(bell_2q(), {"shots": 100, "seed": "7"})
    assert sum(res.counts.values()) == 100
