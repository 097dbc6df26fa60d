from dataclasses import replace

import numpy as np
import pytest

from brownpmf.params import MacroionParameters, Parameters
from brownpmf.rng import MinStdRand0
from brownpmf.simulation import Simulation, main
from brownpmf.system import build_system


def make_params(**changes):
    base = Parameters(
        num_particles=2,
        species=2,
        r_1=0.5,
        r_2=0.5,
        val_1=1.0,
        val_2=-1.0,
        rp_d=1.0,
        diff_c=1e-9,
        d_rc=1.0,
        box_len=20.0,
        delta_gr=1.0,
        dt=1e-13,
        min_eq_steps=1,
        max_time_steps=4,
        msd_steps=2,
        histo_steps=1,
        tau_steps=1,
        disol=False,
        eps_r=78.5,
        temp=298.0,
    )
    return replace(base, **changes)


def make_macro_params(**changes):
    macro = MacroionParameters(
        valence=0.0, radius=0.5, core_distance=0.0, generate_positions=True
    )
    return make_params(macro_num=2, macro=macro, max_time_steps=2, **changes)


TWO_IONS = np.array([[-5.0, 0.0, 0.0], [5.0, 0.0, 0.0]])
FOUR_IONS = np.array(
    [[-5.0, 0.0, 0.0], [5.0, 0.0, 0.0], [0.0, 5.0, 5.0], [3.0, -3.0, 3.0]]
)


def make_simulation(tmp_path, params=None, positions=TWO_IONS, seed=101013):
    params = params if params is not None else make_params()
    system = build_system(params)
    return Simulation(
        params, system, positions, output_dir=tmp_path, rng=MinStdRand0(seed)
    )


def read_lines(path):
    return path.read_text(encoding="utf-8").splitlines()


def test_run_writes_energy_and_msd_files(tmp_path):
    sim = make_simulation(tmp_path)
    sim.run()
    repulsive = read_lines(tmp_path / "repulsive_energy.out")
    electric = read_lines(tmp_path / "electric_energy.out")
    msd = read_lines(tmp_path / "mean_square_displacement.out")
    assert len(repulsive) == 3
    assert len(electric) == 3
    assert len(msd) == 2
    assert repulsive[0].startswith("0\t\t")
    assert electric[1].split("\t\t")[0] == f"{2 * sim.params.dt:.6e}"
    assert sim.iteration == 4


def test_initial_energy_matches_force_field(tmp_path):
    sim = make_simulation(tmp_path)
    expected = sim.force_field.total_energies(TWO_IONS)
    sim.run()
    assert sim.energies[0] == (0.0, expected[0], expected[1])
    first = read_lines(tmp_path / "electric_energy.out")[0]
    assert first == f"0\t\t{expected[1]:.6e}"


def test_movie_frames_and_tables(tmp_path):
    sim = make_simulation(tmp_path)
    sim.run()
    movie = read_lines(tmp_path / "electrolyte_movie.xyz")
    # Samples are taken after steps 2, 3 and 4.
    assert len(movie) == 3 * (2 + 2)
    assert movie[0] == "2"
    assert movie[1] == "Electrolyte"
    assert movie[2].split("\t")[0] == "A"
    assert movie[3].split("\t")[0] == "B"
    for tau in (1, 2, 3):
        assert (tmp_path / f"{tau}_gr.out").exists()
        assert (tmp_path / f"{tau}_rhor.out").exists()
    gr = read_lines(tmp_path / "2_gr.out")
    assert gr[0] == "# 2\u03c4"
    assert gr[1] == "# 2 species"
    assert len(gr) == 4 + sim.dim_gr
    assert sim.tau == 4


def test_positions_stay_in_box(tmp_path):
    sim = make_simulation(tmp_path, params=make_params(max_time_steps=20))
    sim.run()
    largest = float(np.abs(sim.positions).max())
    assert largest <= sim.params.box_len / 2.0
    assert sim.positions.shape == (2, 3)


def test_same_seed_gives_same_trajectory(tmp_path):
    first_dir = tmp_path / "a"
    second_dir = tmp_path / "b"
    first_dir.mkdir()
    second_dir.mkdir()
    first = make_simulation(first_dir)
    second = make_simulation(second_dir)
    first.run()
    second.run()
    np.testing.assert_array_equal(first.positions, second.positions)
    assert read_lines(first_dir / "mean_square_displacement.out") == read_lines(
        second_dir / "mean_square_displacement.out"
    )


def test_different_seed_moves_differently(tmp_path):
    first = make_simulation(tmp_path, seed=1)
    second = make_simulation(tmp_path, seed=2)
    first.step()
    second.step()
    assert not np.allclose(first.positions, second.positions)


def test_zero_diffusion_keeps_ions_still(tmp_path):
    sim = make_simulation(tmp_path, params=make_params(diff_c=0.0))
    sim.run()
    np.testing.assert_array_equal(sim.positions, TWO_IONS)
    msd = read_lines(tmp_path / "mean_square_displacement.out")
    assert all(line.endswith("\t\t0.000000e+00") for line in msd)
    energies = [entry[1:] for entry in sim.energies]
    assert all(entry == energies[0] for entry in energies)


def test_step_counts_iterations(tmp_path):
    sim = make_simulation(tmp_path)
    assert sim.step() == 1
    assert sim.step() == 2
    assert len(sim.msd) == 1


def test_invalid_sampling_interval(tmp_path):
    with pytest.raises(ValueError):
        make_simulation(tmp_path, params=make_params(msd_steps=0))


def test_wrong_position_shape(tmp_path):
    with pytest.raises(ValueError):
        make_simulation(tmp_path, positions=np.zeros((3, 3)))


def test_macroion_is_held_at_centre(tmp_path):
    sim = make_simulation(tmp_path, params=make_macro_params(), positions=FOUR_IONS)
    sim.step()
    np.testing.assert_array_equal(sim.positions[-1], [0.0, 0.0, 0.0])
    np.testing.assert_array_equal(sim.cells[-1], [0, 0, 0])
    assert sim.force_field.spring_index == 2


def test_macroion_histogram_written(tmp_path):
    sim = make_simulation(tmp_path, params=make_macro_params(), positions=FOUR_IONS)
    sim.run()
    lines = read_lines(tmp_path / "1_macro_hist.out")
    assert lines[0] == "# 1\u03c4"
    assert lines[1] == "# 3 species"
    assert len(lines) == 4 + sim.diagonal.grid
    assert read_lines(tmp_path / "1_gr.out")[1] == "# 3 species"


PARAM_TEXT = """**** PARAMETERS FILE ****

Number of particles = 2
Number of species = 2
Radius of species 1 = 0.5
Radius of species 2 = 0.5
Valence of species 1 = 1
Valence of species 2 = {val_2}
Repulsive core distance = 1
Diffusion coefficient = 1e-9
Repulsive core sigma = 1 #Hardness
Length of the box = 20 #Length in Angstroms
Delta grid = 1 #1 space over 5 splits = 0.2
Delta time = 1e-13 #Time step in seconds
Min equilibration time steps = 1 #Min time for equilibration
Max time steps = 4 #Max number of steps
Energy steps = 2 #Saving steps for Energy and MSD file
Histogram steps = 1 #Steps for calculating histogram
tau steps = 2 #Steps for calculating g(r) and rho(r)
Infinite disolution = 0 #0:Homogeneous or 1:Inhomogeneous
Epsilon r = 78.5 #Epsilon for electrolyte
Temperature = 298 #Temperature in Kelvin(K)

### Macroion parameters ###

Number of macroions = {macro_num} #0: no macroion implementation
"""

MACRO_TEXT = """Valence = 0
Radius = 0.5
Repulsive core distance = 0
Position file generator = 1 #0 if you have the positions file
"""

ATOM_FILE = "header\nheader\nheader\n1.0\nheader\nheader\n0.25 0.5 0.5\n0.75 0.5 0.5\n"


def test_main_runs_from_directory(tmp_path, capsys):
    (tmp_path / "param.in").write_text(PARAM_TEXT.format(val_2="-1", macro_num=0))
    (tmp_path / "input_mono_rcp.dat").write_text(ATOM_FILE)
    assert main([str(tmp_path)]) == 0
    assert len(read_lines(tmp_path / "repulsive_energy.out")) == 3
    assert (tmp_path / "2_gr.out").exists()
    assert not (tmp_path / "1_gr.out").exists()
    assert "Grid dimension 10" in capsys.readouterr().out


def test_main_generates_macroion_positions(tmp_path):
    text = PARAM_TEXT.format(val_2="-1", macro_num=2) + MACRO_TEXT
    (tmp_path / "param.in").write_text(text)
    assert main([str(tmp_path)]) == 0
    lines = read_lines(tmp_path / "positions.xyz")
    assert lines[0] == "4"
    assert lines[1] == "Positions"
    assert [line.split("\t")[0] for line in lines[2:]] == ["A", "B", "C", "C"]


def test_main_missing_parameters(tmp_path):
    assert main([str(tmp_path)]) == 1


def test_main_rejects_charged_system(tmp_path):
    (tmp_path / "param.in").write_text(PARAM_TEXT.format(val_2="-2", macro_num=0))
    (tmp_path / "input_mono_rcp.dat").write_text(ATOM_FILE)
    assert main([str(tmp_path)]) == 1
    assert not (tmp_path / "repulsive_energy.out").exists()


def test_main_missing_positions(tmp_path):
    (tmp_path / "param.in").write_text(PARAM_TEXT.format(val_2="-1", macro_num=0))
    assert main([str(tmp_path)]) == 1