"""Reading, generating and writing initial particle positions."""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from pathlib import Path

import numpy as np

from .params import Parameters
from .rng import MinStdRand0

_HEADER_LINES = 6
_DIAMETER_LINE = 3
_MACRO_1 = (0.75, 0.75, 0.75)
_MACRO_2 = (0.5, 0.5, 0.5)


class PositionFileError(ValueError):
    """Raised when a positions file is malformed or not electroneutral."""


def read_atom_positions(
    path: str | Path, num_particles: int
) -> tuple[np.ndarray, float]:
    """Read reduced positions and the diameter from a packing file.

    The file has six header lines, the fourth holding the diameter,
    followed by one ``x y z`` line per particle.
    """
    lines = [line for line in Path(path).read_text().splitlines() if line.strip()]
    if len(lines) < _HEADER_LINES:
        raise PositionFileError("positions file header is incomplete")
    try:
        diameter = float(lines[_DIAMETER_LINE].split()[0])
        tokens = " ".join(lines[_HEADER_LINES:]).split()
        values = [float(token) for token in tokens[: 3 * num_particles]]
    except ValueError as exc:
        raise PositionFileError(f"bad number in positions file: {exc}") from None
    if len(values) < 3 * num_particles:
        raise PositionFileError(
            f"expected {num_particles} positions, found {len(values) // 3}"
        )
    return np.array(values, dtype=float).reshape(num_particles, 3), diameter


def _periodic_distance(a: Sequence[float], b: Sequence[float], box: float) -> float:
    dx, dy, dz = ((p - q) * box for p, q in zip(a, b))
    dx -= round(dx / box) * box
    dy -= round(dy / box) * box
    dz -= round(dz / box) * box
    return math.sqrt(dx * dx + dy * dy + dz * dz)


def generate_macro_positions(
    params: Parameters, num_particles: int, rng: MinStdRand0
) -> np.ndarray:
    """Place ions at random around two fixed macroions, avoiding overlaps.

    Positions are in reduced units of the box (the unit cube). The
    macroions sit at the last two slots.
    """
    if params.macro is None:
        raise ValueError("macroion parameters are required")
    box = params.box_len
    radius = params.r_1 if params.r_1 > params.r_2 else params.r_2
    reach = params.macro.radius + radius

    positions = np.zeros((num_particles, 3))
    positions[num_particles - 2] = _MACRO_1
    positions[num_particles - 1] = _MACRO_2

    def clear_of_macros(pos: Sequence[float]) -> bool:
        return (
            _periodic_distance(_MACRO_1, pos, box) > reach
            and _periodic_distance(_MACRO_2, pos, box) > reach
        )

    def fits(pos: Sequence[float], placed: list[tuple[float, float, float]]) -> bool:
        return all(
            _periodic_distance(other, pos, box) > 2.0 * radius and clear_of_macros(pos)
            for other in placed
        )

    placed: list[tuple[float, float, float]] = []
    for i in range(num_particles - params.macro_num):
        pos = rng.position()
        if not placed:
            while (
                _periodic_distance(_MACRO_1, pos, box) <= reach
                and _periodic_distance(_MACRO_2, pos, box) <= reach
            ):
                pos = rng.position()
        else:
            while not fits(pos, placed):
                pos = rng.position()
        placed.append(pos)
        positions[i] = pos
    return positions


def read_macro_positions(
    path: str | Path, params: Parameters
) -> tuple[list[str], np.ndarray]:
    """Read labelled reduced positions and check electroneutrality."""
    tokens = Path(path).read_text().split()
    if len(tokens) < 2 or tokens[1] != "Positions":
        raise PositionFileError("positions file header is malformed")
    try:
        count = int(tokens[0])
    except ValueError:
        raise PositionFileError(f"bad particle count {tokens[0]!r}") from None
    body = tokens[2:]
    if len(body) < 4 * count:
        raise PositionFileError(f"expected {count} positions")
    macro_valence = params.macro.valence if params.macro is not None else 0.0
    valences = {"A": params.val_1, "B": params.val_2}

    labels: list[str] = []
    coords: list[list[float]] = []
    rows = zip(*[iter(body[: 4 * count])] * 4)
    total_valence = 0.0
    for label, *xyz in rows:
        if len(label) != 1:
            raise PositionFileError(f"bad particle label {label!r}")
        try:
            coords.append([float(value) for value in xyz])
        except ValueError as exc:
            raise PositionFileError(f"bad number in positions file: {exc}") from None
        labels.append(label)
        total_valence += valences.get(label, macro_valence)

    if total_valence != 0.0:
        raise PositionFileError("electroneutrality condition is not met")
    return labels, np.array(coords, dtype=float).reshape(count, 3)


def write_positions(
    path: str | Path, labels: Iterable[str], positions: Iterable[Sequence[float]]
) -> None:
    """Write labelled positions in the positions.xyz format."""
    rows = [
        f"{label}\t{x:.12f}\t{y:.12f}\t{z:.12f}\n"
        for label, (x, y, z) in zip(labels, positions)
    ]
    with open(path, "w") as handle:
        handle.write(f"{len(rows)}\nPositions\n")
        handle.writelines(rows)