import argparse
import json
import sys
from pathlib import Path

from .circuit.export import to_qasm3, to_qiskit
from .circuit.io import InvalidCircuitError, find_problems, load_ir
from .runner.simulate import run_simulation
from .utils.logging_config import get_logger, level_for_verbosity, setup_logging

log = get_logger("cli")

# preview-panel defaults per noise type
NOISE_DEFAULTS = {
    "depolarizing": ("p", 0.02),
    "amp-damp": ("gamma", 0.05),
    "phase-damp": ("lambda", 0.05),
}


def _noise_spec(kind, level):
    if not kind:
        return None
    key, default = NOISE_DEFAULTS[kind]
    return {"type": kind, key: default if level is None else level}


def _write(text: str, out: str) -> None:
    if out == "-":
        sys.stdout.write(text)
    else:
        Path(out).parent.mkdir(parents=True, exist_ok=True)
        Path(out).write_text(text)
        print(f"[ok] wrote {out}")


def _print_summary(res, top: int) -> None:
    keep = "n/a" if res.post_select_prob is None else f"{100 * res.post_select_prob:.1f}%"
    print(f"qubits:        {res.qubits}")
    print(f"gate ops:      {res.ops}")
    print(f"entanglement:  {'likely' if res.entangled_likely else 'unlikely'}")
    print(f"post-select:   {keep}")
    label = "count" if res.counts is not None else "prob"
    print(f"\n{'outcome':<{max(res.qubits, 7)}}  {label}")
    for bits, value in res.top_outcomes(top):
        shown = f"{int(value)}" if res.counts is not None else f"{value:.6f}"
        print(f"{bits:<{max(res.qubits, 7)}}  {shown}")


def main(argv=None):
    ap = argparse.ArgumentParser(prog="qbsim")
    ap.add_argument("-v", "--verbose", action="count", default=0,
                    help="Log to stderr: -v for info, -vv for debug")
    ap.add_argument("--log-file", default=None, help="Also write log records to this file")
    sub = ap.add_subparsers(dest="cmd", required=True)

    ap_run = sub.add_parser("run", help="Simulate an IR circuit file")
    ap_run.add_argument("src")
    ap_run.add_argument("--shots", type=int, default=0)
    ap_run.add_argument("--seed", type=int, default=None)
    ap_run.add_argument("--noise", choices=sorted(NOISE_DEFAULTS), default=None)
    ap_run.add_argument("--noise-level", type=float, default=None)
    ap_run.add_argument("--max-qubits", type=int, default=None)
    ap_run.add_argument("--strict", action="store_true", help="Fail on ops the simulator would skip")
    ap_run.add_argument("--json", action="store_true", help="Print the full result as JSON")
    ap_run.add_argument("--top", type=int, default=8)

    ap_check = sub.add_parser("check", help="List ops the simulator would skip")
    ap_check.add_argument("src")

    for name, help_ in (("qasm", "Export to OpenQASM 3"), ("qiskit", "Export to a Qiskit script")):
        ap_x = sub.add_parser(name, help=help_)
        ap_x.add_argument("src")
        ap_x.add_argument("-o", "--out", default="-")

    args = ap.parse_args(argv)
    setup_logging(level_for_verbosity(args.verbose), log_file=args.log_file)

    circuit = load_ir(args.src)
    log.debug("loaded %s: %d qubit(s), %d op(s)", args.src, circuit.qubits, len(circuit.ops))

    if args.cmd == "run":
        opts = {
            "shots": args.shots,
            "seed": args.seed,
            "noise": _noise_spec(args.noise, args.noise_level),
            "strict": args.strict,
            "maxQubits": args.max_qubits,
        }
        try:
            res = run_simulation(circuit, opts)
        except InvalidCircuitError as e:
            for p in e.problems:
                print(f"error: {p}", file=sys.stderr)
            return 1
        except ValueError as e:
            print(f"error: {e}", file=sys.stderr)
            return 1
        if args.json:
            print(json.dumps(res.to_dict(), indent=2))
        else:
            _print_summary(res, args.top)

    elif args.cmd == "check":
        problems = find_problems(circuit)
        for p in problems:
            print(p)
        if problems:
            return 1
        print("[ok] no problems")

    elif args.cmd == "qasm":
        _write(to_qasm3(circuit), args.out)

    elif args.cmd == "qiskit":
        _write(to_qiskit(circuit), args.out)

    return 0

if __name__ == "__main__":
    sys.exit(main())
