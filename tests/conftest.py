from pathlib import Path

import pytest

from fakeg.parsers import Dialect, get_parser
from fakeg.typing import ComputationRecord

# Load the example logs once per module
ex_folder = Path(__file__).resolve().parents[1] / "data" / "calculations" / "examples"
EXAMPLE_FILES = {
    "amesp_opt_freq": (Dialect.AMESP, ex_folder / "amesp" / "h2o" / "opt_freq.aop"),
    "amesp_td_opt": (Dialect.AMESP, ex_folder / "amesp" / "h2o" / "td_opt.aop"),
    "bdf_opt_freq": (Dialect.BDF, ex_folder / "bdf" / "h2o" / "opt_freq.out"),
    "xtb_g98": (Dialect.XTB, ex_folder / "xtb" / "h2o" / "g98.out"),
    "xyz_xtbopt": (Dialect.XYZ, ex_folder / "xyz" / "h2o" / "xtbopt_log.xyz"),
    "xyz_conformers": (Dialect.XYZ, ex_folder / "xyz" / "h2o" / "conformers.xyz"),
}


def _parse_example(key: str) -> ComputationRecord:
    dialect, path = EXAMPLE_FILES[key]
    if not path.exists():
        pytest.skip(f"Test data file not found: {path}")
    with open(path) as stream:
        record, ok = get_parser(dialect).parse(stream)
    if not ok:
        pytest.fail(f"Parsing {path.name} failed to return data.")
    return record


@pytest.fixture(scope="session")
def example_path():
    """Look up an example log by key, e.g. example_path('bdf_opt_freq')."""

    def _lookup(key: str) -> Path:
        return EXAMPLE_FILES[key][1]

    return _lookup


@pytest.fixture(scope="module")
def amesp_opt_freq() -> ComputationRecord:
    """AMESP optimization followed by frequencies and thermochemistry."""
    return _parse_example("amesp_opt_freq")


@pytest.fixture(scope="module")
def amesp_td_opt() -> ComputationRecord:
    """AMESP excited-state optimization with a TDDFT block in every step."""
    return _parse_example("amesp_td_opt")


@pytest.fixture(scope="module")
def bdf_opt_freq() -> ComputationRecord:
    return _parse_example("bdf_opt_freq")


@pytest.fixture(scope="module")
def xtb_g98() -> ComputationRecord:
    return _parse_example("xtb_g98")


@pytest.fixture(scope="module")
def xyz_xtbopt() -> ComputationRecord:
    return _parse_example("xyz_xtbopt")


@pytest.fixture(scope="module")
def xyz_conformers() -> ComputationRecord:
    return _parse_example("xyz_conformers")
