import io

import pytest

from fakeg.parsers.xyz import MISSING_ENERGY, XyzParser
from fakeg.typing import ComputationRecord


def test_frames_become_steps(xyz_xtbopt: ComputationRecord) -> None:
    assert [step.index for step in xyz_xtbopt.steps] == [1, 2, 3]
    assert all(len(step.atoms) == 3 for step in xyz_xtbopt.steps)
    assert xyz_xtbopt.has_optimization


def test_energies_from_xtb_comments(xyz_xtbopt: ComputationRecord) -> None:
    energies = [step.energy for step in xyz_xtbopt.steps]
    assert energies == pytest.approx([-5.070201123456, -5.070512345678, -5.070523456789])


def test_first_frame_coordinates(xyz_xtbopt: ComputationRecord) -> None:
    atom = xyz_xtbopt.steps[0].atoms[1]
    assert atom.symbol == "H"
    assert atom.y == pytest.approx(0.783154)
    assert atom.z == pytest.approx(0.195213)


def test_charge_spin_from_first_comment(xyz_conformers: ComputationRecord) -> None:
    assert xyz_conformers.has_charge_spin
    assert (xyz_conformers.charge, xyz_conformers.multiplicity) == (0, 1)


def test_missing_energy_uses_sentinel(xyz_conformers: ComputationRecord) -> None:
    assert MISSING_ENERGY == -100.0
    assert [step.energy for step in xyz_conformers.steps] == [MISSING_ENERGY, MISSING_ENERGY]


def test_only_the_first_comment_sets_charge_spin() -> None:
    text = "1\n0 3\nO 0.0 0.0 0.0\n1\n-1 2\nO 0.0 0.0 0.1\n"
    record, ok = XyzParser().parse(io.StringIO(text))
    assert ok
    assert (record.charge, record.multiplicity) == (0, 3)


def test_short_frame_stops_at_next_count_line() -> None:
    """A frame that declares more atoms than it has does not swallow the next frame."""
    text = "3\nframe one\nO 0.0 0.0 0.0\nH 0.0 0.0 0.96\n2\nframe two\nO 0.0 0.0 0.0\nH 0.0 0.0 0.97\n"

    record, ok = XyzParser().parse(io.StringIO(text))

    assert ok
    assert [len(step.atoms) for step in record.steps] == [2, 2]
    assert record.steps[1].atoms[1].z == pytest.approx(0.97)


def test_frame_without_atoms_is_dropped() -> None:
    text = "2\nempty frame\n\n2\nsecond\nH 0.0 0.0 0.0\nH 0.0 0.0 0.74\n"

    record, ok = XyzParser().parse(io.StringIO(text))

    assert ok
    assert len(record.steps) == 1
    assert record.steps[0].index == 2


def test_non_numeric_count_line_is_skipped() -> None:
    text = "garbage\n1\ntitle\nHe 0.0 0.0 0.0\n"
    record, ok = XyzParser().parse(io.StringIO(text))
    assert ok
    assert record.final_step.atoms[0].atomic_number == 2


def test_count_line_only_fails() -> None:
    record, ok = XyzParser().parse(io.StringIO("3\n"))
    assert not ok
    assert not record.steps


def test_announcement_repeats_for_each_parse(caplog: pytest.LogCaptureFixture, example_path) -> None:
    """The detected-format message is printed once per file, not once per frame."""
    parser = XyzParser()
    text = example_path("xyz_xtbopt").read_text()

    with caplog.at_level("INFO", logger="fakeg"):
        parser.parse(io.StringIO(text))
        parser.parse(io.StringIO(text))

    assert sum("Detected xtb output format" in r.getMessage() for r in caplog.records) == 2


def test_charge_spin_ignored_after_first_frame() -> None:
    """A 'charge multiplicity' comment on a later frame does not count."""
    text = "1\ntitle\nO 0 0 0\n1\n0 1\nO 0 0 0.1\n"

    record, ok = XyzParser().parse(io.StringIO(text))

    assert ok
    assert len(record.steps) == 2
    assert not record.has_charge_spin
    assert (record.charge, record.multiplicity) == (0, 1)
