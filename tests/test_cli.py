import shutil
from pathlib import Path

import pytest
from typer.testing import CliRunner

from fakeg.cli import app, clean_path, make_dialect_app
from fakeg.parsers import Dialect
from fakeg.writers import validate_output

runner = CliRunner()


@pytest.fixture
def xyz_copy(example_path, tmp_path: Path) -> Path:
    source = example_path("xyz_xtbopt")
    return Path(shutil.copy(source, tmp_path / source.name))


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("  /data/case1.out  ", "/data/case1.out"),
        ('"/data/my case.out"', "/data/my case.out"),
        ("'/data/case1.out'\n", "/data/case1.out"),
    ],
)
def test_clean_path(raw: str, expected: str) -> None:
    assert clean_path(raw) == expected


def test_convert_command(xyz_copy: Path) -> None:
    result = runner.invoke(app, ["convert", str(xyz_copy), "--dialect", "xyz"])

    assert result.exit_code == 0
    assert validate_output(xyz_copy.with_name("xtbopt_log_fake.xyz"))


def test_convert_command_with_output(xyz_copy: Path, tmp_path: Path) -> None:
    output = tmp_path / "out" / "fake.log"
    result = runner.invoke(app, ["convert", str(xyz_copy), "-d", "xyz", "-o", str(output)])
    assert result.exit_code == 0
    assert validate_output(output)


def test_convert_command_failure_exit_code(tmp_path: Path) -> None:
    source = tmp_path / "broken.out"
    source.write_text(" BDF (Beijing Density Functional)\n")

    result = runner.invoke(app, ["convert", str(source), "--dialect", "bdf"])

    assert result.exit_code == 1
    assert not (tmp_path / "broken_fake.out").exists()


def test_unknown_dialect_is_rejected(xyz_copy: Path) -> None:
    result = runner.invoke(app, ["convert", str(xyz_copy), "--dialect", "orca"])
    assert result.exit_code != 0


def test_version_command() -> None:
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "FakeG 1.0.0" in result.output


def test_dialect_app_prompts_for_quoted_path(xyz_copy: Path) -> None:
    # Arrange
    xfakeg = make_dialect_app(Dialect.XYZ)

    # Act
    result = runner.invoke(xfakeg, [], input=f'"{xyz_copy}"\n')

    # Assert
    assert result.exit_code == 0
    assert "Please input the XYZ trajectory file" in result.output
    assert validate_output(xyz_copy.with_name("xtbopt_log_fake.xyz"))


def test_dialect_app_version_flag() -> None:
    result = runner.invoke(make_dialect_app(Dialect.BDF), ["--version"])
    assert result.exit_code == 0
    assert "BfakeG 1.0.0 (FakeG Project)" in result.output


def test_dialect_app_empty_prompt_fails() -> None:
    result = runner.invoke(make_dialect_app(Dialect.AMESP), [], input='""\n')
    assert result.exit_code == 1
