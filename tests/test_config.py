import pytest

from fakeg.config import APP_SPECS, DEFAULT_PROGRAM, AppSpec, ProgramInfo, RenderSettings
from fakeg.exceptions import ConfigurationError
from fakeg.parsers import Dialect


def test_default_program_banner() -> None:
    assert DEFAULT_PROGRAM.banner() == "FakeG 1.0.0 (FakeG Project)"


def test_program_name_must_not_be_empty() -> None:
    with pytest.raises(ConfigurationError):
        ProgramInfo(name="  ")


def test_render_defaults() -> None:
    settings = RenderSettings()
    assert settings.energy_precision == 9
    assert settings.coordinate_precision == 6
    assert settings.displacement_precision == 2
    assert settings.block_width == 3


@pytest.mark.parametrize("kwargs", [{"energy_precision": -1}, {"frequency_precision": 13}, {"block_width": 0}])
def test_invalid_render_settings(kwargs: dict) -> None:
    with pytest.raises(ConfigurationError):
        RenderSettings(**kwargs)


def test_with_block_width_returns_copy() -> None:
    settings = RenderSettings(energy_precision=8)
    wide = settings.with_block_width(5)
    assert wide.block_width == 5
    assert wide.energy_precision == 8
    assert settings.block_width == 3


def test_every_dialect_has_a_front_end() -> None:
    assert set(APP_SPECS) == set(Dialect)
    assert {spec.program_name for spec in APP_SPECS.values()} == {"AfakeG", "BfakeG", "XfakeG", "XtbfakeG"}
    assert all(spec.dialect == dialect for dialect, spec in APP_SPECS.items())


def test_amesp_front_end_prints_five_modes_per_block() -> None:
    assert APP_SPECS[Dialect.AMESP].block_width == 5
    assert APP_SPECS[Dialect.BDF].block_width == 3


def test_app_spec_rejects_bad_block_width() -> None:
    with pytest.raises(ConfigurationError):
        AppSpec(program_name="Bad", dialect=Dialect.XYZ, description="", input_prompt="", block_width=0)
