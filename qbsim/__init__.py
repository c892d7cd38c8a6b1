"""Statevector preview simulator for editor-built circuits."""

__version__ = "0.1.0"

from qbsim.config import SimulationOptions
from qbsim.runner.simulate import SimulationResult, run_simulation, simulate_circuit

__all__ = [
    "SimulationOptions", "SimulationResult",
    "run_simulation", "simulate_circuit",
    "__version__",
]
