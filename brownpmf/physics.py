"""Periodic box geometry, pair potentials and Brownian moves."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from .params import ANGSTROM, K_BOLTZMANN, K_RED
from .rng import MinStdRand0

# Offset used by the repulsive force when two cores overlap.
_OVERLAP_FACTOR = 1.000000001


class OverlapError(ArithmeticError):
    """Raised when two repulsive cores overlap and the energy diverges."""


class DisplacementError(ArithmeticError):
    """Raised when a particle moves further than one box image in a step."""


def _scalar(value: np.ndarray) -> float | np.ndarray:
    return float(value) if np.ndim(value) == 0 else value


@dataclass(frozen=True)
class Box:
    """Cubic periodic box centred on the origin."""

    length: float

    @property
    def half(self) -> float:
        return self.length / 2.0

    def image(self, reference, point) -> np.ndarray:
        """Return the periodic image of ``point`` closest to ``reference``."""
        point = np.asarray(point, dtype=float)
        delta = point - np.asarray(reference, dtype=float)
        shift = np.where(
            delta > self.half,
            -self.length,
            np.where(delta < -self.half, self.length, 0.0),
        )
        return point + shift

    def minimum_image(self, delta):
        """Fold a separation vector into the nearest periodic image."""
        delta = np.asarray(delta, dtype=float)
        return _scalar(delta - np.rint(delta / self.length) * self.length)

    def wrap(self, point: Sequence[float]) -> tuple[np.ndarray, tuple[int, int, int]]:
        """Bring a moved point back into the box.

        Returns the wrapped point and the cell shift along each axis.
        A point more than one box length outside raises DisplacementError.
        """
        half = self.half
        wrapped = np.array(point, dtype=float)
        shifts = [0, 0, 0]
        for axis, name in enumerate("xyz"):
            value = wrapped[axis]
            if half < value <= 3.0 * half:
                wrapped[axis] = value - self.length
                shifts[axis] += 1
            elif -3.0 * half <= value < -half:
                wrapped[axis] = value + self.length
                shifts[axis] -= 1
            elif value > 3.0 * half or value < -3.0 * half:
                raise DisplacementError(f"{name} coordinate {value:f} left the box")
        return wrapped, (shifts[0], shifts[1], shifts[2])


def erc(r, ri, rj, sigma):
    """Shifted repulsive-core energy between two ions (in kT)."""
    r = np.asarray(r, dtype=float)
    dij = np.asarray(ri, dtype=float) + np.asarray(rj, dtype=float) - sigma
    if np.any(r <= dij):
        raise OverlapError("infinite repulsive-core energy: cores overlap")
    with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
        ratio = sigma / (r - dij)
        result = np.where(
            r < dij + (2.0 * sigma) ** (1.0 / 6.0),
            4.0 * (ratio**12 - ratio**6) + 1.0,
            0.0,
        )
    return _scalar(result)


def eew(r, vi, vj, bjerrum):
    """Coulomb energy between two ions (in kT), Bjerrum length in Angstroms."""
    r = np.asarray(r, dtype=float)
    return _scalar(bjerrum * (np.asarray(vi) * np.asarray(vj)) / r)


def frc(r, ri, rj, sigma):
    """Magnitude of the repulsive-core force between two ions."""
    r = np.asarray(r, dtype=float)
    dij = np.asarray(ri, dtype=float) + np.asarray(rj, dtype=float) - sigma
    separation = np.where(r <= dij, _OVERLAP_FACTOR * dij - dij, r - dij)
    with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
        ratio = sigma / separation
        result = np.where(
            r < dij + sigma * 2.0 ** (1.0 / 6.0),
            1.0 / (ANGSTROM * sigma) * (48.0 * ratio**13 - 24.0 * ratio**7),
            0.0,
        )
    return _scalar(result)


def few0(r, vi, vj, bjerrum):
    """Magnitude of the Coulomb force between two ions."""
    r = np.asarray(r, dtype=float)
    return _scalar((bjerrum / ANGSTROM) * (np.asarray(vi) * np.asarray(vj)) / r**2)


class ForceField:
    """Pair energies and overdamped Brownian moves for a set of ions."""

    def __init__(
        self,
        box: Box,
        radii: Sequence[float],
        valences: Sequence[float],
        sigma: float,
        bjerrum: float,
        diffusion: float,
        diffusion2: float,
        temperature: float = 298.0,
        spring_index: int | None = None,
        spring_constant: float = K_RED,
    ) -> None:
        self.box = box
        self.radii = np.asarray(radii, dtype=float)
        self.valences = np.asarray(valences, dtype=float)
        self.sigma = sigma
        self.bjerrum = bjerrum
        self.diffusion = diffusion
        self.diffusion2 = diffusion2
        self.temperature = temperature
        self.spring_index = spring_index
        self.spring_constant = spring_constant

    def _neighbours(self, index: int, positions: np.ndarray):
        positions = np.asarray(positions, dtype=float)
        centre = positions[index]
        separations = centre - self.box.image(centre, positions)
        others = np.arange(len(positions)) != index
        separations = separations[others]
        distances = np.sqrt((separations**2).sum(axis=1))
        return centre, separations, distances, others

    def rc_energy_of(self, index: int, positions) -> float:
        """Half the repulsive-core energy of one ion, per particle."""
        _, _, r, others = self._neighbours(index, positions)
        energies = erc(r, self.radii[index], self.radii[others], self.sigma)
        return 0.5 * float(np.sum(energies)) / len(others)

    def electrostatic_energy_of(self, index: int, positions) -> float:
        """Half the Coulomb energy of one ion, per particle."""
        _, _, r, others = self._neighbours(index, positions)
        energies = eew(r, self.valences[index], self.valences[others], self.bjerrum)
        return 0.5 * float(np.sum(energies)) / len(others)

    def total_energies(self, positions) -> tuple[float, float]:
        """Return (repulsive-core, electrostatic) energy per particle."""
        count = len(positions)
        repulsive = sum(self.rc_energy_of(i, positions) for i in range(count))
        electric = sum(self.electrostatic_energy_of(i, positions) for i in range(count))
        return repulsive, electric

    def propose_move(
        self, index: int, positions, dt: float, rng: MinStdRand0
    ) -> tuple[np.ndarray, tuple[int, int, int]]:
        """Compute one Brownian step of an ion.

        Returns the new wrapped position and the cell shift it crossed.
        """
        centre, d, r, others = self._neighbours(index, positions)
        with np.errstate(divide="ignore", invalid="ignore"):
            magnitude = frc(r, self.radii[index], self.radii[others], self.sigma)
            magnitude = magnitude + few0(
                r, self.valences[index], self.valences[others], self.bjerrum
            )
            force = ((magnitude / r)[:, None] * d).sum(axis=0)
        noise = np.array([rng.gaussian() for _ in range(3)])

        new = (
            centre
            + force * self.diffusion * dt
            + noise * math.sqrt(2.0 * self.diffusion2 * dt)
        )

        if self.spring_index is not None and index == self.spring_index:
            stretch = new - centre
            length = float(np.sqrt((stretch**2).sum()))
            pull = self.spring_constant * length
            quarter = self.diffusion / 4.0
            with np.errstate(divide="ignore", invalid="ignore"):
                new = (
                    centre
                    + force * quarter * dt
                    + noise * math.sqrt(2.0 * (self.diffusion2 / 16.0) * dt)
                    + quarter
                    / (K_BOLTZMANN * self.temperature * 1e20)
                    * pull
                    * (stretch / length)
                )

        return self.box.wrap(new)