import logging

import pytest

from fakeg.typing import (
    Atom,
    ComputationRecord,
    ConvergenceDiagnostics,
    ExcitedState,
    OptimizationStep,
    TDDFTBlock,
    ThermochemistrySummary,
    VibrationalMode,
    _MutableRecord,
)

WATER = [Atom("O", 0.0, 0.0, 0.119), Atom("H", 0.0, 0.763, -0.477), Atom("H", 0.0, -0.763, -0.477)]


@pytest.fixture
def mutable_data() -> _MutableRecord:
    """Provides a fresh mutable record for each test."""
    return _MutableRecord()


def test_step_without_atoms_is_not_added(mutable_data: _MutableRecord) -> None:
    assert not mutable_data.add_step(OptimizationStep(index=1))
    assert mutable_data.add_step(OptimizationStep(index=2, atoms=list(WATER)))
    assert [s.index for s in mutable_data.steps] == [2]
    assert len(mutable_data.tddft) == 1


def test_charge_spin_is_set_once(mutable_data: _MutableRecord) -> None:
    assert mutable_data.set_charge_spin(1, 2)
    assert not mutable_data.set_charge_spin(0, 1)
    assert (mutable_data.charge, mutable_data.multiplicity) == (1, 2)
    assert mutable_data.has_charge_spin


def test_mismatched_displacements_are_zero_filled(
    mutable_data: _MutableRecord, caplog: pytest.LogCaptureFixture
) -> None:
    # Arrange
    mutable_data.add_step(OptimizationStep(index=1, atoms=list(WATER)))
    mutable_data.modes.append(VibrationalMode(frequency=1600.0, displacements=[(0.0, 0.0, 0.1)]))
    mutable_data.modes.append(VibrationalMode(frequency=3700.0))

    # Act
    with caplog.at_level(logging.WARNING, logger="fakeg"):
        record = ComputationRecord.from_mutable(mutable_data)

    # Assert
    assert record.has_frequencies
    for mode in record.modes:
        assert mode.displacements == [(0.0, 0.0, 0.0)] * 3
    assert sum("replacing them with zeros" in r.getMessage() for r in caplog.records) == 1


def test_tddft_dropped_when_no_step_has_states(mutable_data: _MutableRecord) -> None:
    mutable_data.add_step(OptimizationStep(index=1, atoms=list(WATER)), TDDFTBlock())
    record = ComputationRecord.from_mutable(mutable_data)
    assert record.tddft == ()
    assert not record.has_tddft


def test_tddft_blocks_stay_aligned_with_steps(mutable_data: _MutableRecord) -> None:
    state = ExcitedState(index=1, symmetry="A", energy_ev=5.0, wavelength_nm=247.97, oscillator_strength=0.1)
    mutable_data.add_step(OptimizationStep(index=1, atoms=list(WATER)))
    mutable_data.add_step(OptimizationStep(index=2, atoms=list(WATER)), TDDFTBlock(states=[state]))

    record = ComputationRecord.from_mutable(mutable_data)

    assert len(record.tddft) == 2
    assert record.tddft_for(0) is None
    assert record.tddft_for(1).states == [state]
    assert record.tddft_for(5) is None


def test_empty_thermochemistry_is_dropped(mutable_data: _MutableRecord) -> None:
    mutable_data.add_step(OptimizationStep(index=1, atoms=list(WATER)))
    mutable_data.thermochemistry = ThermochemistrySummary()
    assert ComputationRecord.from_mutable(mutable_data).thermochemistry is None


def test_diagnostics_alone_keep_thermochemistry(mutable_data: _MutableRecord) -> None:
    mutable_data.add_step(OptimizationStep(index=1, atoms=list(WATER)))
    mutable_data.thermochemistry = ThermochemistrySummary(diagnostics=ConvergenceDiagnostics(max_force=1e-4))
    thermo = ComputationRecord.from_mutable(mutable_data).thermochemistry
    assert thermo is not None
    assert thermo.has_diagnostics
    assert not thermo.has_data


def test_record_summary_properties(mutable_data: _MutableRecord) -> None:
    mutable_data.add_step(OptimizationStep(index=1, atoms=list(WATER), energy=-76.4))
    record = ComputationRecord.from_mutable(mutable_data)

    assert record.n_atoms == 3
    assert record.final_step.energy == pytest.approx(-76.4)
    assert record.is_valid()
    assert "n_atoms=3" in repr(record)
    assert "final_energy=-76.40000000" in repr(record)


def test_empty_record() -> None:
    record = ComputationRecord()
    assert record.final_step is None
    assert record.n_atoms == 0
    assert not record.is_valid()
    assert "final_energy=None" in repr(record)


def test_atom_atomic_number() -> None:
    assert Atom("Cl", 0.0, 0.0, 0.0).atomic_number == 17
    assert Atom("Q", 0.0, 0.0, 0.0).atomic_number == 1
