"""Physical constants and the simulation parameters file."""

from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

K_BOLTZMANN = 1.380649e-23
EPSILON_ZERO = 8.8541878128e-12
Q_ELECTRON = 1.602176634e-19
AVOGADRO = 6.02214076e23

K_SPRING = 1e-11
K_RED = K_SPRING / 1e-10

ANGSTROM = 1e-10


class ParameterError(ValueError):
    """Raised when a parameters file is malformed or unsupported."""


@dataclass(frozen=True)
class MacroionParameters:
    """Settings of the macroion section of the parameters file."""

    valence: float
    radius: float
    core_distance: float
    generate_positions: bool


@dataclass(frozen=True)
class Parameters:
    """Everything read from a parameters file."""

    num_particles: int
    species: int
    r_1: float
    r_2: float
    val_1: float
    val_2: float
    rp_d: float
    diff_c: float
    d_rc: float
    box_len: float
    delta_gr: float
    dt: float
    min_eq_steps: int
    max_time_steps: int
    msd_steps: int
    histo_steps: int
    tau_steps: int
    disol: bool
    eps_r: float
    temp: float
    macro_num: int = 0
    macro: MacroionParameters | None = None

    @property
    def half_box(self) -> float:
        return self.box_len / 2.0

    @property
    def diff_c_red(self) -> float:
        return self.diff_c / ANGSTROM

    @property
    def diff_c_red2(self) -> float:
        return self.diff_c_red / ANGSTROM

    def bjerrum_length(self) -> float:
        """Bjerrum length in metres."""
        return Q_ELECTRON**2 / (
            4.0 * math.pi * self.eps_r * EPSILON_ZERO * K_BOLTZMANN * self.temp
        )

    @property
    def bjerrum_reduced(self) -> float:
        """Bjerrum length in Angstroms."""
        return self.bjerrum_length() / ANGSTROM

    def describe(self) -> str:
        """Human-readable summary of the parameters."""
        lines = [
            "**** PARAMETERS FILE ****",
            "",
            f"    Number of particles = {self.num_particles}",
            f"    Number of species = {self.species}",
            f"    Radius of species 1 = {self.r_1:.2f}\u00c5",
            f"    Radius of species 2 = {self.r_2:.2f}\u00c5",
            f"    Valence of species 1 = {self.val_1:+.2f}",
            f"    Valence of species 2 = {self.val_2:+.2f}",
            f"    Repulsive core distance = {self.rp_d:.2f}\u00c5",
            f"    Diffusion coefficient = {self.diff_c:.2e}",
            f"    Repulsive core sigma = {self.d_rc:.2f}",
            f"    Length of the box = {self.box_len:.2f}\u00c5",
            f"    Delta grid = {self.delta_gr:.2f}",
            f"    Delta time = {self.dt:.2e}s",
            f"    Min equilibration time steps = {self.min_eq_steps}",
            f"    Max time steps = {self.max_time_steps}",
            f"    Energy & MSD saving steps = {self.msd_steps}",
            f"    Histogram steps = {self.histo_steps}",
            f"    \u03c4 steps = {self.tau_steps}",
            f"    Infinite disolution = {'True' if self.disol else 'False'}",
            f"    Epsilon r = {self.eps_r:.2f}",
            f"    Temperature = {self.temp:.2f}K",
            "",
            "",
        ]
        text = "\n".join(lines)
        if self.macro_num != 0 and self.macro is not None:
            macro_lines = [
                "**** MACROION PARAMETERS ****",
                "",
                f"    Number of macroions = {self.macro_num}",
                f"    Valence = +{self.macro.valence:.2f}",
                f"    Radius = {self.macro.radius:.2f}\u00c5",
                f"    Repulsive Core Distance = {self.macro.core_distance:.2f}\u00c5",
                f"    Position file generator = {int(self.macro.generate_positions)}",
                "",
                "",
            ]
            text += "\n".join(macro_lines)
        return text


def _flag(token: str) -> bool:
    return int(token) != 0


_Field = tuple[str, str, Callable[[str], object]]

_MAIN_FIELDS: tuple[_Field, ...] = (
    ("Number of particles", "num_particles", int),
    ("Number of species", "species", int),
    ("Radius of species 1", "r_1", float),
    ("Radius of species 2", "r_2", float),
    ("Valence of species 1", "val_1", float),
    ("Valence of species 2", "val_2", float),
    ("Repulsive core distance", "rp_d", float),
    ("Diffusion coefficient", "diff_c", float),
    ("Repulsive core sigma", "d_rc", float),
    ("Length of the box", "box_len", float),
    ("Delta grid", "delta_gr", float),
    ("Delta time", "dt", float),
    ("Min equilibration time steps", "min_eq_steps", int),
    ("Max time steps", "max_time_steps", int),
    ("Energy steps", "msd_steps", int),
    ("Histogram steps", "histo_steps", int),
    ("tau steps", "tau_steps", int),
    ("Infinite disolution", "disol", _flag),
    ("Epsilon r", "eps_r", float),
    ("Temperature", "temp", float),
    ("Number of macroions", "macro_num", int),
)

_MACRO_FIELDS: tuple[_Field, ...] = (
    ("Valence", "valence", float),
    ("Radius", "radius", float),
    ("Repulsive core distance", "core_distance", float),
    ("Position file generator", "generate_positions", _flag),
)


def _read_fields(entries, fields: tuple[_Field, ...]) -> dict[str, object]:
    values: dict[str, object] = {}
    for label, attr, convert in fields:
        try:
            name, raw = next(entries)
        except StopIteration:
            raise ParameterError(f"missing parameter '{label}'") from None
        if name != label:
            raise ParameterError(f"expected parameter '{label}', found '{name}'")
        tokens = raw.split("#", 1)[0].split()
        if not tokens:
            raise ParameterError(f"no value given for '{label}'")
        try:
            values[attr] = convert(tokens[0])
        except ValueError:
            raise ParameterError(f"bad value {tokens[0]!r} for '{label}'") from None
    return values


def parse_parameters(text: str) -> Parameters:
    """Parse the contents of a parameters file."""
    entries = (
        (name.strip(), raw)
        for name, _, raw in (
            line.partition("=") for line in text.splitlines() if "=" in line
        )
    )
    values = _read_fields(entries, _MAIN_FIELDS)
    macro = None
    if values["macro_num"] != 0:
        macro = MacroionParameters(**_read_fields(entries, _MACRO_FIELDS))
    if values["species"] != 2:
        raise ParameterError("only systems with 2 species are supported")
    return Parameters(**values, macro=macro)


def read_parameters(path: str | Path = "param.in") -> Parameters:
    """Read and parse a parameters file."""
    return parse_parameters(Path(path).read_text())