"""Composition of the simulated electrolyte: species, counts and per-ion data."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from .params import Q_ELECTRON, Parameters


class ElectroneutralityError(ValueError):
    """Raised when the ions of a system do not add up to zero net charge."""


@dataclass(frozen=True)
class Species:
    """One kind of ion in the system."""

    label: str
    radius: float
    valence: float
    count: int


@dataclass
class ParticleSystem:
    """Per-ion properties of every particle, stored in species order."""

    species: tuple[Species, ...]
    labels: list[str]
    radii: np.ndarray
    valences: np.ndarray
    species_index: np.ndarray
    macro_num: int = 0
    added_particles: int = 0
    notes: list[str] = field(default_factory=list)

    @property
    def num_particles(self) -> int:
        return len(self.labels)

    @property
    def num_species(self) -> int:
        return len(self.species)

    @property
    def atoms_per_species(self) -> tuple[int, ...]:
        return tuple(kind.count for kind in self.species)

    def charges(self) -> np.ndarray:
        """Charge of every ion in coulombs."""
        return self.valences * Q_ELECTRON


def _balance_macroions(params: Parameters) -> tuple[list[int], int, list[str]]:
    """Counts per species with counter-ions added to cancel the macroion charge."""
    if params.macro is None:
        raise ValueError("macroion parameters are required")
    per_species = params.num_particles // params.species
    counts = [per_species, per_species, params.macro_num]
    ions_charge = params.val_1 * per_species + params.val_2 * per_species
    charge = ions_charge + params.macro.valence * params.macro_num
    difference = charge - ions_charge
    notes: list[str] = []
    added = 0
    if charge != 0.0:
        notes.append("Electronegativity condition is not met!")
        positive = difference > 0
        # Add ions of whichever species carries charge opposite to the excess.
        use_first = (params.val_1 < 0.0) == positive
        valence = params.val_1 if use_first else params.val_2
        added = int(abs(difference / valence))
        counts[0 if use_first else 1] += added
        sign = "+" if positive else ""
        notes.append(f"Valence difference = {sign}{difference:.2f}")
        notes.append(
            f"Adding {added} particles with {valence:.2f} valence "
            f"(val {1 if use_first else 2})"
        )
    return counts, added, notes


def build_system(params: Parameters) -> ParticleSystem:
    """Lay out the ions described by the parameters.

    Without macroions the two species must be electroneutral. With
    macroions, counter-ions are added until the total charge cancels.
    """
    if params.macro_num != 0:
        counts, added, notes = _balance_macroions(params)
        assert params.macro is not None
        kinds = (
            Species("A", params.r_1, params.val_1, counts[0]),
            Species("B", params.r_2, params.val_2, counts[1]),
            Species("C", params.macro.radius, params.macro.valence, counts[2]),
        )
    else:
        per_species = params.num_particles // params.species
        charge = params.val_1 * per_species + params.val_2 * per_species
        if charge != 0.0:
            raise ElectroneutralityError(
                f"electroneutrality condition is not met: total charge {charge:f}"
            )
        added, notes = 0, []
        # Any remainder of an odd particle count goes to the second species.
        kinds = (
            Species("A", params.r_1, params.val_1, per_species),
            Species("B", params.r_2, params.val_2, params.num_particles - per_species),
        )

    labels = [kind.label for kind in kinds for _ in range(kind.count)]
    radii = np.repeat([kind.radius for kind in kinds], [kind.count for kind in kinds])
    valences = np.repeat(
        [kind.valence for kind in kinds], [kind.count for kind in kinds]
    )
    index = np.repeat(np.arange(len(kinds)), [kind.count for kind in kinds])

    if params.macro_num == 0:
        # Reported counts stay at the nominal per-species value.
        per_species = params.num_particles // params.species
        kinds = tuple(
            Species(k.label, k.radius, k.valence, per_species) for k in kinds
        )
        system_species = kinds
    else:
        system_species = kinds

    return ParticleSystem(
        species=system_species,
        labels=labels,
        radii=radii.astype(float),
        valences=valences.astype(float),
        species_index=index.astype(int),
        macro_num=params.macro_num,
        added_particles=added,
        notes=notes,
    )