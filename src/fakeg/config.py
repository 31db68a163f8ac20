from collections.abc import Mapping
from dataclasses import dataclass, replace
from types import MappingProxyType

from fakeg.exceptions import ConfigurationError
from fakeg.parsers import Dialect
from fakeg.utils import logger


@dataclass(frozen=True)
class ProgramInfo:
    """Identification printed in the banner of every generated file."""

    name: str = "FakeG"
    version: str = "1.0.0"
    author: str = "FakeG Project"

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ConfigurationError("Program name must not be empty.")
        if not self.version.strip():
            raise ConfigurationError("Program version must not be empty.")

    def banner(self) -> str:
        return f"{self.name} {self.version} ({self.author})"


@dataclass(frozen=True)
class RenderSettings:
    """
    Number formatting for the Gaussian-format artifact.

    Attributes:
        energy_precision (int): Decimals of SCF and total energies. Defaults to 9.
        coordinate_precision (int): Decimals of Cartesian coordinates. Defaults to 6.
        frequency_precision (int): Decimals of frequencies. Defaults to 4.
        intensity_precision (int): Decimals of IR intensities. Defaults to 4.
        displacement_precision (int): Decimals of normal-mode displacements. Defaults to 2.
        thermo_precision (int): Decimals of thermochemistry values. Defaults to 6.
        block_width (int): Vibrational modes per column block. Defaults to 3.
    """

    energy_precision: int = 9
    coordinate_precision: int = 6
    frequency_precision: int = 4
    intensity_precision: int = 4
    displacement_precision: int = 2
    thermo_precision: int = 6
    block_width: int = 3

    def __post_init__(self) -> None:
        for name in (
            "energy_precision",
            "coordinate_precision",
            "frequency_precision",
            "intensity_precision",
            "displacement_precision",
            "thermo_precision",
        ):
            value = getattr(self, name)
            if not isinstance(value, int) or not 0 <= value <= 12:
                raise ConfigurationError(f"{name} must be an integer between 0 and 12, got {value!r}.")
        if not isinstance(self.block_width, int) or self.block_width < 1:
            raise ConfigurationError(f"block_width must be a positive integer, got {self.block_width!r}.")
        if self.displacement_precision < 2:
            logger.warning("Displacements with fewer than 2 decimals are hard to read back.")

    def with_block_width(self, block_width: int) -> "RenderSettings":
        return replace(self, block_width=block_width)


@dataclass(frozen=True)
class AppSpec:
    """One command-line front end: which dialect it reads and how it introduces itself."""

    program_name: str
    dialect: Dialect
    description: str
    input_prompt: str
    block_width: int = 3

    def __post_init__(self) -> None:
        if self.block_width < 1:
            raise ConfigurationError(f"{self.program_name}: block_width must be positive.")


DEFAULT_PROGRAM = ProgramInfo()

APP_SPECS: Mapping[Dialect, AppSpec] = MappingProxyType(
    {
        Dialect.AMESP: AppSpec(
            program_name="AfakeG",
            dialect=Dialect.AMESP,
            description="Convert AMESP output (.aop) into a Gaussian-format log.",
            input_prompt="Please input the AMESP output file (.aop)",
            block_width=5,
        ),
        Dialect.BDF: AppSpec(
            program_name="BfakeG",
            dialect=Dialect.BDF,
            description="Convert BDF output (.out) into a Gaussian-format log.",
            input_prompt="Please input the BDF output file (.out)",
        ),
        Dialect.XYZ: AppSpec(
            program_name="XfakeG",
            dialect=Dialect.XYZ,
            description="Convert a multi-frame XYZ trajectory into a Gaussian-format log.",
            input_prompt="Please input the XYZ trajectory file (.xyz)",
        ),
        Dialect.XTB: AppSpec(
            program_name="XtbfakeG",
            dialect=Dialect.XTB,
            description="Convert xtb Gaussian-style output (g98.out) into a Gaussian-format log.",
            input_prompt="Please input the xtb g98.out file",
        ),
    }
)
