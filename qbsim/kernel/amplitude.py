"""Two-component complex amplitudes.

The dense kernels work on ``numpy.complex128`` buffers; this value type is
what crosses the result boundary (``{"re", "im"}``) and what the pure-Python
reference kernel computes with.  NaN / inf propagate unguarded.
"""
from __future__ import annotations

from typing import NamedTuple


class Amplitude(NamedTuple):
    re: float = 0.0
    im: float = 0.0

    @classmethod
    def from_complex(cls, z: complex) -> "Amplitude":
        return cls(float(z.real), float(z.imag))

    def to_complex(self) -> complex:
        return complex(self.re, self.im)

    def norm2(self) -> float:
        """Squared magnitude |a|^2."""
        return self.re * self.re + self.im * self.im

    def to_dict(self) -> dict:
        return {"re": self.re, "im": self.im}


ZERO = Amplitude(0.0, 0.0)
ONE = Amplitude(1.0, 0.0)


def cadd(a: Amplitude, b: Amplitude) -> Amplitude:
    return Amplitude(a.re + b.re, a.im + b.im)


def cmul(a: Amplitude, b: Amplitude) -> Amplitude:
    return Amplitude(a.re * b.re - a.im * b.im, a.re * b.im + a.im * b.re)
