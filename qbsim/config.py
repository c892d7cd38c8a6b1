"""
Options accepted by the simulation entry point.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from qbsim.sampling.noise import ReadoutNoise
from qbsim.sampling.rng import normalize_seed

# Above this the 2^n state makes interactive previews sluggish; logged, not enforced.
PRACTICAL_QUBIT_CEILING = 20


def _non_negative_int(value: Any, default: Optional[int]) -> Optional[int]:
    """Truncate to int and clamp at 0; unusable values fall back to ``default``."""
    if value is None or isinstance(value, bool):
        return default
    try:
        v = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default
    return max(v, 0)


@dataclass
class SimulationOptions:
    """Configuration for one simulation call."""

    # Sampling
    shots: int = 0                          # 0 = analytic only, no counts
    seed: Optional[int] = None              # None = non-reproducible
    noise: Optional[ReadoutNoise] = None

    # Reserved by the editor's preview panel; accepted and carried, no effect.
    mirror: int = 0

    # Validation
    strict: bool = False                    # raise on ops the kernels would skip
    max_qubits: Optional[int] = None        # hard guard, off by default

    extra: dict = field(default_factory=dict)

    def __post_init__(self):
        self.shots = _non_negative_int(self.shots, 0)
        self.mirror = _non_negative_int(self.mirror, 0)
        self.seed = normalize_seed(self.seed)
        if not isinstance(self.noise, (ReadoutNoise, type(None))):
            self.noise = ReadoutNoise.from_spec(self.noise)
        if self.max_qubits is not None:
            self.max_qubits = _non_negative_int(self.max_qubits, None)

    @property
    def seeded(self) -> bool:
        return self.seed is not None

    @classmethod
    def from_dict(cls, opts: Optional[dict]) -> "SimulationOptions":
        """Build options from the editor's camelCase mapping; unknown keys are kept in ``extra``."""
        if isinstance(opts, SimulationOptions):
            return opts
        opts = dict(opts or {})
        known = {"shots", "seed", "noise", "mirror", "strict", "maxQubits", "max_qubits"}
        return cls(
            shots=opts.get("shots"),
            seed=opts.get("seed"),
            noise=ReadoutNoise.from_spec(opts.get("noise")),
            mirror=opts.get("mirror"),
            strict=bool(opts.get("strict", False)),
            max_qubits=opts.get("maxQubits", opts.get("max_qubits")),
            extra={k: v for k, v in opts.items() if k not in known},
        )
