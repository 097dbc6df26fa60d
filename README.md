# brownpmf

Brownian dynamics for a two-species primitive-model electrolyte in a
periodic cubic box centred on the origin, optionally with macroions. Ions
interact through a shifted Lennard-Jones repulsive core and bare Coulomb
forces scaled by the Bjerrum length. Each step moves every free ion by the
overdamped Langevin rule, using a seeded random stream so that runs are
reproducible.

A run records:

- repulsive-core and electrostatic energies per particle over time,
- the mean square displacement, with box crossings unwrapped,
- an XYZ movie of the configurations sampled after equilibration,
- pair distribution functions g(r) and local densities rho(r) per species pair,
- with macroions, a histogram of the next-to-last particle's position
  projected on the box diagonal.

With macroions, the last particle is not moved: it stays at the box centre.
The next-to-last particle moves with a quarter of the diffusion coefficient
and feels an extra spring term proportional to the length of its proposed
step.

## Installation

```
pip install .
```

Use `pip install .[test]` to add the test dependencies, then run `pytest`.

## Running

```
brownpmf [directory]
```

`directory` defaults to the current directory. It must hold `param.in` and the
starting positions file described below; every output file is written there.
The command prints the parameters, the Bjerrum length, the grid dimension and
a short sample of the random stream, then runs up to `Max time steps`. A
missing input file, a malformed file, a charged system or an ion that overlaps
another or jumps more than one box length in a step ends the run with a
message on standard error and exit status 1.

### `param.in`

Only lines that contain `=` are read. They must appear in this order and
carry these names (the text left of the first `=`); the value is the first
word after it, and anything after `#` is ignored:

```
**** PARAMETERS FILE ****

Number of particles = 100
Number of species = 2
Radius of species 1 = 1.0
Radius of species 2 = 1.0
Valence of species 1 = 1.0
Valence of species 2 = -1.0
Repulsive core distance = 1.0
Diffusion coefficient = 1.0e-9
Repulsive core sigma = 1.0 #Hardness
Length of the box = 30.0 #Length in Angstroms
Delta grid = 0.2 #1 space over 5 splits = 0.2
Delta time = 1.0e-15 #Time step in seconds
Min equilibration time steps = 10000 #Min time for equilibration
Max time steps = 100000 #Max number of steps
Energy steps = 100 #Saving steps for Energy and MSD file
Histogram steps = 100 #Steps for calculating histogram
tau steps = 100 #Steps for calculating g(r) and rho(r)
Infinite disolution = 0 #0:Homogeneous or 1:Inhomogeneous
Epsilon r = 78.5 #Epsilon for electrolyte
Temperature = 298.0 #Temperature in Kelvin(K)

### Macroion parameters ###

Number of macroions = 0 #0: no macroion implementation
```

`Number of species` must be 2. `Energy steps`, `Histogram steps` and
`tau steps` must be positive. If `Number of macroions` is not zero, four more
entries follow:

```
Valence = 10.0
Radius = 5.0
Repulsive core distance = 1.0
Position file generator = 1 #0 if you have the positions file
```

### Starting positions

Positions are given in box units, from 0 to 1, and shifted and scaled to
Angstroms when the run starts.

- Without macroions, positions are read from `input_mono_rcp.dat`: six header
  lines, the fourth of them holding the diameter, then one `x y z` line per
  particle. The two species must be electroneutral, or the run stops.
- With macroions, counter-ions are added to one species until the macroion
  charge is balanced.
  - With `Position file generator = 1`, non-overlapping positions are
    generated around two macroions at (0.75, 0.75, 0.75) and (0.5, 0.5, 0.5)
    and written to `positions.xyz`.
  - With `Position file generator = 0`, positions are read from an existing
    `positions.xyz` (a count line, a `Positions` line, then `label x y z`
    lines). Its charges must sum to zero and its count must match the system.

### Output files

| File | Contents |
| --- | --- |
| `repulsive_energy.out` | time, repulsive-core energy per particle (first line at time 0) |
| `electric_energy.out` | time, electrostatic energy per particle (first line at time 0) |
| `mean_square_displacement.out` | time, MSD in square Angstroms |
| `electrolyte_movie.xyz` | one snapshot per histogram sample after equilibration |
| `<n>_gr.out`, `<n>_rhor.out` | g(r) and rho(r) after n samples, every `tau steps` samples |
| `<n>_macro_hist.out` | diagonal-position histogram, with macroions only |

Energies and the MSD are written every `Energy steps` steps. A histogram
sample is taken every `Histogram steps` steps once the step count exceeds
`Min equilibration time steps`.

## Library use

- `brownpmf.params`: `parse_parameters`, `read_parameters`, `Parameters`
  (with `describe()` and `bjerrum_length()`), `MacroionParameters`,
  `ParameterError` and the physical constants.
- `brownpmf.positions`: `read_atom_positions`, `generate_macro_positions`,
  `read_macro_positions`, `write_positions` and `PositionFileError`.
- `brownpmf.system`: `build_system`, `ParticleSystem`, `Species` and
  `ElectroneutralityError`.
- `brownpmf.physics`: `Box` (`image`, `minimum_image`, `wrap`), `ForceField`
  (`rc_energy_of`, `electrostatic_energy_of`, `total_energies`,
  `propose_move`), the pair functions `erc`, `eew`, `frc`, `few0`, and the
  errors `OverlapError` and `DisplacementError`.
- `brownpmf.analysis`: `radial_grid`, `PairHistogram`, `DiagonalHistogram`,
  `write_table`, `write_macro_histogram` and `write_hoomd_xml`.
- `brownpmf.simulation`: `Simulation`, with `step()` and `run()`, and `main`.
- `brownpmf.rng`: `MinStdRand0` (`next_int`, `uniform`, `gaussian`,
  `position`) and `box_muller`.

## Limits

- Only two ion species are supported, plus the macroion species.
- The random seed is fixed; the command offers no option to change it.
- `write_hoomd_xml` is available from Python, but the command does not write
  a HOOMD XML file.