"""Radial distribution histograms and the output files built from them."""

from __future__ import annotations

import math
from collections.abc import Sequence
from pathlib import Path

import numpy as np


def radial_grid(delta: float, dim: int) -> tuple[np.ndarray, np.ndarray]:
    """Return bin centres and shell volumes of the radial grid."""
    xr = (np.arange(dim) + 0.5) * delta
    shifted = xr - xr[0] if dim else xr
    volumes = np.empty(dim)
    if dim:
        volumes[:-1] = 4.0 / 3.0 * math.pi * (shifted[1:] ** 3 - shifted[:-1] ** 3)
        volumes[-1] = 4.0 / 3.0 * math.pi * ((dim + 0.5) * delta - xr[0]) ** 3
    return xr, volumes


class PairHistogram:
    """Accumulated pair-distance counts per species pair."""

    def __init__(self, species: int, dim: int, delta: float, box_len: float) -> None:
        self.species = species
        self.dim = dim
        self.delta = delta
        self.box_len = box_len
        self.xr, self.bin_volumes = radial_grid(delta, dim)
        self.counts = np.zeros((species, species, dim))

    def accumulate(self, positions, species) -> None:
        """Add one configuration's pair distances to the histogram."""
        positions = np.asarray(positions, dtype=float)
        labels = np.asarray(species, dtype=int)
        diff = positions[:, None, :] - positions[None, :, :]
        diff -= np.rint(diff / self.box_len) * self.box_len
        scaled = np.sqrt((diff**2).sum(axis=2)) / self.delta
        inside = scaled < self.dim
        bins = np.where(inside, scaled, 0.0).astype(int)
        mask = (
            inside
            & ~np.eye(len(positions), dtype=bool)
            & (labels[:, None] <= labels[None, :])
        )
        i, j = np.nonzero(mask)
        np.add.at(self.counts, (labels[i], labels[j], bins[i, j]), 1.0)

    def densities(self, tau: float, counts: Sequence[int]) -> tuple[np.ndarray, np.ndarray]:
        """Return (rho(r), g(r)) averaged over ``tau`` samples."""
        atoms = np.asarray(counts, dtype=float)
        shape = self.counts.shape
        first = np.broadcast_to(tau * atoms[:, None, None] * self.bin_volumes, shape)
        second = np.broadcast_to(tau * atoms[None, :, None] * self.bin_volumes, shape)
        rhor = np.divide(self.counts, first, out=np.zeros(shape), where=first > 0.0)
        bulk = np.broadcast_to(atoms[None, :, None] / self.box_len**3, shape)
        gr = np.divide(rhor, bulk, out=np.zeros(shape), where=second > 0.0)
        return rhor, gr


class DiagonalHistogram:
    """Histogram of a position projected on the box diagonal."""

    def __init__(self, delta: float, box_len: float) -> None:
        half = box_len / 2.0
        self.delta = delta
        self.diagonal = np.array([half, half, half])
        self.magnitude = float(np.sqrt((self.diagonal**2).sum()))
        self.grid = int(np.rint(self.magnitude / delta))
        self.xr = (np.arange(self.grid) + 0.5) * delta
        self.counts = np.zeros(self.grid)

    def add(self, position) -> None:
        """Count one position along the diagonal."""
        projection = float(np.dot(position, self.diagonal)) / self.magnitude
        bin_index = int(projection / self.delta)
        if 0 <= bin_index < self.grid:
            self.counts[bin_index] += 1.0

    def normalized(self, tau: float) -> np.ndarray:
        """Counts averaged over ``tau`` samples."""
        return self.counts / tau


def write_table(path: str | Path, tau: int, species: int, xr, table) -> None:
    """Write g(r) or rho(r) for every species pair."""
    pairs = [(i, j) for i in range(species) for j in range(i, species)]
    columns = "".join(f"\t\t{c}" for c in range(2, species * species + 2))
    names = "".join(f"\t\tg{i + 1}{j + 1}" for i, j in pairs)
    with open(path, "w", encoding="utf-8") as handle:
        handle.write(f"# {tau}\u03c4\n# {species} species\n# 1{columns}\n")
        handle.write(f"# x{names}\t\tbin\n")
        for k, x in enumerate(xr):
            values = "".join(f"\t{table[i][j][k]:.6f}" for i, j in pairs)
            handle.write(f"{x:.6f}{values}\t{k}\n")


def write_macro_histogram(path: str | Path, tau: int, species: int, xr, histogram) -> None:
    """Write the diagonal histogram of the macroion position."""
    with open(path, "w", encoding="utf-8") as handle:
        handle.write(f"# {tau}\u03c4\n# {species} species\n# 1\t\t2\n")
        handle.write("# x\t\t1\t\tbin\n")
        for k, (x, value) in enumerate(zip(xr, histogram)):
            handle.write(f"{x:.6f}\t{value:.6f}\t{k}\n")


def write_hoomd_xml(path: str | Path, positions, labels: Sequence[str]) -> None:
    """Write a HOOMD XML snapshot of the configuration."""
    rows = [f"{x:.6f}\t{y:.6f}\t{z:.6f}\n" for x, y, z in positions]
    count = len(rows)
    empty = ("body", "bond", "angle", "dihedral", "improper")
    with open(path, "w", encoding="utf-8") as handle:
        handle.write('<?xml version="1.0" encoding="UTF-8"?>\n')
        handle.write('<hoomd_xml version="1.7">\n')
        handle.write(
            f'<configuration time_step="1" dimensions="3" natoms="{count}">\n'
        )
        handle.write('<box lx="30.0" ly="30.0" lz="30.0" xy="0" xz="0" yz="0"/>\n')
        handle.write(f'<position num="{count}">\n')
        handle.writelines(rows)
        handle.write("</position>\n")
        for tag in ("mass", "charge", "diameter"):
            handle.write(f'<{tag} num="0">\n</{tag}>\n')
        handle.write('<type num="0">\n')
        handle.writelines(f"{label}\n" for label in labels)
        handle.write("</type>\n")
        for tag in empty:
            handle.write(f'<{tag} num="0">\n</{tag}>\n')
        handle.write("</configuration>\n</hoomd_xml>\n")