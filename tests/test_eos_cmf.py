import pytest

from relhydro.eos_cmf import EPS_0, N_0, EoSCMF, nearest_index
from relhydro.eos_grid import ThermoState

N_T = 4
N_NB = 3
P_RAW = 2.0


def _write(path, n_t=N_T, n_nb=N_NB, temp_offset=0.0):
    lines = []
    for i_t in range(n_t):
        for i_n in range(n_nb):
            temp = 0.5 * i_t + temp_offset
            nb = 0.1 * i_n
            lines.append(f"{temp!r} {nb!r} {float(i_t + 1)!r} {P_RAW!r} 1.0 100.0 50.0 0.0")
    path.write_text("\n".join(lines) + "\n")
    return path


@pytest.fixture
def model(tmp_path):
    return EoSCMF(_write(tmp_path / "cmf.dat"), N_T, N_NB)


def test_nearest_index_exact_middle():
    assert nearest_index([1.0, 2.0, 3.0, 4.0, 5.0], 0, 4, 3.0) == 2


def test_nearest_index_picks_closer_neighbour():
    values = [1.0, 2.0, 3.0, 4.0, 5.0]
    assert values[nearest_index(values, 0, 4, 3.6)] == 4.0


def test_nearest_index_upper_bound_past_end():
    assert nearest_index([0.0, 10.0], 1, 2, 100.0) == 1


def test_nearest_index_empty_range():
    with pytest.raises(ValueError):
        nearest_index([1.0], 1, 0, 0.0)


def test_ranges(model):
    assert model.tmin == 0.0
    assert model.nmin == 0.0
    assert model.nmax == pytest.approx(0.2 * N_0)


@pytest.mark.parametrize("i_t", range(N_T))
def test_get_temp_inverts_table(model, i_t):
    assert model.get_temp(model.etab[i_t][0], 0.0) == pytest.approx(0.5 * i_t)


def test_get_temp_is_capped(model):
    assert model.get_temp(1e6, 0.0) == 499.0


def test_eos_below_cutoff_is_zero(model):
    assert model.eos(1e-6, 0.0, 0.0, 0.0) == ThermoState()


def test_eos_cold_table_region_is_zero(model):
    assert model.eos(0.3, 0.0, 0.0, 0.0) == ThermoState()


def test_eos_ideal_gas_beyond_table(model):
    state = model.eos(200.0, 0.0, 0.0, 0.0)
    assert state.p == pytest.approx(0.2964 * 200.0)
    assert state.T == pytest.approx(0.15120476935 * 200.0**0.25)
    assert state.mub == 0.0


def test_pressure_in_table_region(model):
    assert model.p(0.3, 0.0, 0.0, 0.0) == pytest.approx(P_RAW * EPS_0 / 1000.0)


def test_pressure_outside_table_region(model):
    assert model.p(2.0, 0.0, 0.0, 0.0) == pytest.approx(0.2964 * 2.0)
    assert model.p(1.0e-6, 0.0, 0.0, 0.0) == 0.0


def test_short_file_raises(tmp_path):
    path = tmp_path / "short.dat"
    path.write_text("0 0 1 2 3 4 5 6\n")
    with pytest.raises(ValueError):
        EoSCMF(path, N_T, N_NB)


def test_record_outside_grid_raises(tmp_path):
    with pytest.raises(ValueError):
        EoSCMF(_write(tmp_path / "bad.dat", temp_offset=1000.0), N_T, N_NB)