import io

import pytest

from fakeg.parsers.bdf import BdfParser
from fakeg.typing import ComputationRecord


def test_step_count_and_indices(bdf_opt_freq: ComputationRecord) -> None:
    assert [step.index for step in bdf_opt_freq.steps] == [1, 2]
    assert bdf_opt_freq.has_optimization
    assert bdf_opt_freq.n_atoms == 3


def test_hessian_energy_is_not_a_step_energy(bdf_opt_freq: ComputationRecord) -> None:
    """The Energy= printed by the Hessian run lies outside the last step window."""
    assert bdf_opt_freq.steps[0].energy == pytest.approx(-76.40701234)
    assert bdf_opt_freq.steps[1].energy == pytest.approx(-76.40852341)


def test_current_values_on_one_line(bdf_opt_freq: ComputationRecord) -> None:
    step = bdf_opt_freq.steps[0]
    assert step.rms_force == pytest.approx(4.512e-3)
    assert step.max_force == pytest.approx(6.701e-3)
    assert step.rms_displacement == pytest.approx(1.134e-2)
    assert step.max_displacement == pytest.approx(1.702e-2)
    assert step.converged is False


def test_current_values_wrapped_onto_next_line(bdf_opt_freq: ComputationRecord) -> None:
    step = bdf_opt_freq.steps[1]
    assert step.rms_force == pytest.approx(1.021e-4)
    assert step.max_force == pytest.approx(1.873e-4)
    assert step.rms_displacement == pytest.approx(4.012e-4)
    assert step.max_displacement == pytest.approx(7.12e-4)
    assert step.converged is True


def test_frequencies(bdf_opt_freq: ComputationRecord) -> None:
    modes = bdf_opt_freq.modes
    assert [m.symmetry for m in modes] == ["A1", "A1", "B2"]
    assert [m.frequency for m in modes] == pytest.approx([1653.0489, 3750.0953, 3862.1213])
    assert [m.ir_intensity for m in modes] == pytest.approx([71.5513, 2.4604, 20.3587])


def test_displacements(bdf_opt_freq: ComputationRecord) -> None:
    modes = bdf_opt_freq.modes
    assert modes[0].displacements[0] == pytest.approx((0.0, 0.0, -0.07))
    assert modes[1].displacements[1] == pytest.approx((0.0, -0.584, -0.391))
    assert modes[2].displacements[2] == pytest.approx((0.0, 0.546, 0.432))


def test_thermochemistry(bdf_opt_freq: ComputationRecord) -> None:
    thermo = bdf_opt_freq.thermochemistry
    assert thermo is not None
    assert thermo.temperature == pytest.approx(298.15)
    assert thermo.pressure == pytest.approx(1.0)
    assert thermo.electronic_energy == pytest.approx(-76.408524)
    assert thermo.zero_point_energy == pytest.approx(0.021316)
    assert thermo.thermal_energy_correction == pytest.approx(0.024151)
    assert thermo.thermal_enthalpy_correction == pytest.approx(0.025095)
    assert thermo.thermal_gibbs_correction == pytest.approx(0.003656)


def test_final_structure_diagnostics(bdf_opt_freq: ComputationRecord) -> None:
    diagnostics = bdf_opt_freq.thermochemistry.diagnostics
    assert diagnostics is not None
    assert diagnostics.max_force == pytest.approx(0.000187)
    assert diagnostics.rms_force == pytest.approx(0.000102)
    assert diagnostics.max_displacement == pytest.approx(0.000712)
    assert diagnostics.rms_displacement == pytest.approx(0.000401)
    assert diagnostics.expected_energy_change == pytest.approx(-2.7e-9)


def test_header_only_log_fails() -> None:
    text = " BDF (Beijing Density Functional)\n |================== BDFOPT ==================|\n"
    record, ok = BdfParser().parse(io.StringIO(text))
    assert not ok
    assert record.steps == ()


def test_step_without_atoms_is_dropped() -> None:
    text = """   Geometry Optimization step :    1

   Energy=     -76.40000000

   Geometry Optimization step :    2

                      Atom         Coord
                         O       0.00000000       0.00000000       0.11926200
                         H       0.00000000       0.76323600      -0.47704700

   Energy=     -76.40852341
"""
    record, ok = BdfParser().parse(io.StringIO(text))

    assert ok
    assert [step.index for step in record.steps] == [2]
    assert record.n_atoms == 2
