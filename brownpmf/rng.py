"""Deterministic random numbers matching a minimal-standard LCG engine."""

from __future__ import annotations

import math

DEFAULT_SEED = 101013

_MODULUS = 2**31 - 1
_MULTIPLIER = 16807
_MIN_OUTPUT = 1
# Width of the engine's output range (max - min + 1).
_RANGE = float(_MODULUS - 1)
# Two engine draws are needed to fill the 53 bits of a double.
_DRAWS_PER_DOUBLE = 2
_BELOW_ONE = math.nextafter(1.0, 0.0)


def box_muller(num1: float, num2: float) -> float:
    """Turn two uniform numbers in [0, 1) into one standard normal number."""
    radius = math.sqrt(-2.0 * math.log(num1)) if num1 > 0.0 else math.inf
    return math.cos(2.0 * math.pi * num2) * radius


class MinStdRand0:
    """Multiplicative congruential generator (a = 16807, m = 2**31 - 1)."""

    def __init__(self, seed: int = DEFAULT_SEED) -> None:
        state = seed % _MODULUS
        self._state = state if state != 0 else 1

    def next_int(self) -> int:
        """Advance the engine and return its raw output in [1, 2**31 - 2]."""
        self._state = (self._state * _MULTIPLIER) % _MODULUS
        return self._state

    def uniform(self) -> float:
        """Return a uniform double in [0, 1)."""
        total = 0.0
        scale = 1.0
        for _ in range(_DRAWS_PER_DOUBLE):
            total += float(self.next_int() - _MIN_OUTPUT) * scale
            scale *= _RANGE
        value = total / scale
        return value if value < 1.0 else _BELOW_ONE

    def gaussian(self) -> float:
        """Return a standard normal number from two uniform draws."""
        num1 = self.uniform()
        num2 = self.uniform()
        return box_muller(num1, num2)

    def position(self) -> tuple[float, float, float]:
        """Return a random point in the unit cube."""
        x = self.uniform()
        y = self.uniform()
        z = self.uniform()
        return (x, y, z)