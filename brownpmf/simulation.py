"""Brownian dynamics run: equilibration, sampling and the output files."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Callable
from pathlib import Path

import numpy as np

from .analysis import (
    DiagonalHistogram,
    PairHistogram,
    write_macro_histogram,
    write_table,
)
from .params import Parameters, read_parameters
from .physics import Box, ForceField
from .positions import (
    PositionFileError,
    generate_macro_positions,
    read_atom_positions,
    read_macro_positions,
    write_positions,
)
from .rng import MinStdRand0, box_muller
from .system import ParticleSystem, build_system

REPULSIVE_FILE = "repulsive_energy.out"
ELECTRIC_FILE = "electric_energy.out"
MSD_FILE = "mean_square_displacement.out"
MOVIE_FILE = "electrolyte_movie.xyz"


def _silent(message: str) -> None:
    del message


class Simulation:
    """Overdamped Langevin run of an electrolyte in a periodic box.

    Positions are given in Angstroms, centred on the origin. With
    macroions, the last particle is held fixed at the box centre and the
    one before it is tethered by a spring.
    """

    def __init__(
        self,
        params: Parameters,
        system: ParticleSystem,
        positions,
        *,
        output_dir: str | Path = ".",
        rng: MinStdRand0 | None = None,
        log: Callable[[str], None] | None = None,
    ) -> None:
        for name in ("msd_steps", "histo_steps", "tau_steps"):
            if getattr(params, name) <= 0:
                raise ValueError(f"{name} must be positive")
        coords = np.array(positions, dtype=float)
        count = system.num_particles
        if coords.shape != (count, 3):
            raise ValueError(f"expected positions of shape ({count}, 3)")

        self.params = params
        self.system = system
        self.box = Box(params.box_len)
        self.positions = coords
        self.initial_positions = coords.copy()
        self.cells = np.zeros((count, 3), dtype=int)
        self.rng = rng if rng is not None else MinStdRand0()
        self.output_dir = Path(output_dir)
        self.log = log if log is not None else _silent

        macro = system.macro_num != 0
        self._moving = count - 1 if macro else count
        self.force_field = ForceField(
            self.box,
            system.radii,
            system.valences,
            params.d_rc,
            params.bjerrum_reduced,
            params.diff_c_red,
            params.diff_c_red2,
            temperature=params.temp,
            spring_index=count - 2 if macro else None,
        )
        self.dim_gr = int(np.rint(0.5 * params.box_len / params.delta_gr))
        self.histogram = PairHistogram(
            system.num_species, self.dim_gr, params.delta_gr, params.box_len
        )
        self.diagonal = (
            DiagonalHistogram(params.delta_gr, params.box_len) if macro else None
        )
        self.iteration = 0
        self.tau = 1
        self.energies: list[tuple[float, float, float]] = []
        self.msd: list[tuple[float, float]] = []

    def _path(self, name: str) -> Path:
        return self.output_dir / name

    def _append(self, name: str, text: str) -> None:
        with open(self._path(name), "a", encoding="utf-8") as handle:
            handle.write(text)

    def _start_outputs(self) -> None:
        repulsive, electric = self.force_field.total_energies(self.positions)
        self.energies.append((0.0, repulsive, electric))
        self.log(f"Repulsive Core Energy {repulsive:.6e}")
        self.log(f"Electrostatic Energy {electric:.6e}\n\t\t#####\n")
        self._path(REPULSIVE_FILE).write_text(f"0\t\t{repulsive:.6e}\n")
        self._path(ELECTRIC_FILE).write_text(f"0\t\t{electric:.6e}\n")
        self._path(MSD_FILE).write_text("")
        self._path(MOVIE_FILE).write_text("")

    def _record_energy(self) -> None:
        time = self.iteration * self.params.dt
        unwrapped = self.positions + self.cells * self.params.box_len
        displacement = unwrapped - self.initial_positions
        msd = float((displacement**2).sum(axis=1).mean())
        self.msd.append((time, msd))
        self._append(MSD_FILE, f"{time:.6e}\t\t{msd:.6e}\n")

        repulsive, electric = self.force_field.total_energies(self.positions)
        self.energies.append((time, repulsive, electric))
        self._append(REPULSIVE_FILE, f"{time:.6e}\t\t{repulsive:.6e}\n")
        self._append(ELECTRIC_FILE, f"{time:.6e}\t\t{electric:.6e}\n")

    def _sample(self) -> None:
        tau = self.tau
        if tau == 1:
            self.log("... Equilibration is done!\n")
        rows = "".join(
            f"{label}\t{x:.6e}\t{y:.6e}\t{z:.6e}\n"
            for label, (x, y, z) in zip(self.system.labels, self.positions)
        )
        self._append(MOVIE_FILE, f"{self.system.num_particles}\nElectrolyte\n{rows}")

        self.histogram.accumulate(self.positions, self.system.species_index)
        if self.diagonal is not None:
            self.diagonal.add(self.positions[self._moving - 1])

        if tau % self.params.tau_steps == 0:
            self.log(f"##### {tau}\u03c4 iteration #####")
            rhor, gr = self.histogram.densities(tau, self.system.atoms_per_species)
            species = self.system.num_species
            xr = self.histogram.xr
            write_table(self._path(f"{tau}_gr.out"), tau, species, xr, gr)
            write_table(self._path(f"{tau}_rhor.out"), tau, species, xr, rhor)
            if self.diagonal is not None:
                write_macro_histogram(
                    self._path(f"{tau}_macro_hist.out"),
                    tau,
                    species,
                    self.diagonal.xr,
                    self.diagonal.normalized(tau),
                )
        self.tau += 1

    def step(self) -> int:
        """Move every free ion once and write any output due; return the step count."""
        proposed = np.zeros_like(self.positions)
        for index in range(self._moving):
            new, shift = self.force_field.propose_move(
                index, self.positions, self.params.dt, self.rng
            )
            proposed[index] = new
            self.cells[index] += shift
        self.positions = proposed
        self.iteration += 1

        count = self.iteration
        if count % self.params.msd_steps == 0:
            self._record_energy()
        if count % self.params.histo_steps == 0 and count > self.params.min_eq_steps:
            self._sample()
        return count

    def run(self) -> None:
        """Write the initial energies, then step until the last time step."""
        if self.iteration == 0:
            self._start_outputs()
            self.log("##### Equilibration initialized #####")
            self.log(f"\t# Set to {self.params.min_eq_steps} steps #")
        while self.iteration < self.params.max_time_steps:
            self.step()


def _report_generator() -> None:
    generator = MinStdRand0()
    print("\n\t##### random number generator #####")
    for _ in range(3):
        print(f"{generator.uniform():.6f}")
    print("\t##### Box Muller generator #####")
    for _ in range(10):
        first = generator.uniform()
        second = generator.uniform()
        print(f"{box_muller(first, second):.6f}")
    print("\n\t\t#####")


def _prepare(workdir: Path) -> Simulation:
    params = read_parameters(workdir / "param.in")
    print(params.describe(), end="")
    print(f"Bjerrum length is {params.bjerrum_length():.6e}")
    print(f"Reduced Bjerrum length is {params.bjerrum_reduced:.6e}")

    system = build_system(params)
    for note in system.notes:
        print(note)

    rng = MinStdRand0()
    positions_file = workdir / "positions.xyz"
    if params.macro_num != 0 and params.macro is not None:
        print(f"Total number of particles will be now {system.num_particles}")
        print(
            " ".join(
                f"sp{i + 1}: {n}" for i, n in enumerate(system.atoms_per_species)
            )
        )
        if params.macro.generate_positions:
            reduced = generate_macro_positions(params, system.num_particles, rng)
            write_positions(positions_file, system.labels, reduced)
        else:
            labels, reduced = read_macro_positions(positions_file, params)
            if len(labels) != system.num_particles:
                raise PositionFileError(
                    f"positions file holds {len(labels)} particles, "
                    f"expected {system.num_particles}"
                )
            print("Position file read successfully!")
    else:
        reduced, _ = read_atom_positions(
            workdir / "input_mono_rcp.dat", system.num_particles
        )

    positions = (np.asarray(reduced, dtype=float) - 0.5) * params.box_len
    simulation = Simulation(
        params, system, positions, output_dir=workdir, rng=rng, log=print
    )
    print(f"Grid dimension {simulation.dim_gr}")
    _report_generator()
    return simulation


def main(argv=None) -> int:
    """Run a simulation from the input files of a directory."""
    parser = argparse.ArgumentParser(
        prog="brownpmf",
        description="Brownian dynamics of a primitive-model electrolyte.",
    )
    parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="directory holding param.in and the positions file",
    )
    args = parser.parse_args(argv)
    try:
        simulation = _prepare(Path(args.directory))
        simulation.run()
    except FileNotFoundError as exc:
        print(f"Missing input file: {exc.filename}", file=sys.stderr)
        return 1
    except (ValueError, ArithmeticError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())