from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Literal, TypeAlias

from fakeg.elements import atomic_number
from fakeg.utils import logger

Vector3: TypeAlias = tuple[float, float, float]


@dataclass(frozen=True)
class Atom:
    """Represents an atom in one conformation."""

    symbol: str
    x: float  # Angstrom
    y: float  # Angstrom
    z: float  # Angstrom

    @property
    def atomic_number(self) -> int:
        return atomic_number(self.symbol)


@dataclass
class OptimizationStep:
    """One optimization step, one single-point calculation, or one trajectory frame."""

    index: int
    atoms: list[Atom] = field(default_factory=list)
    energy: float = 0.0  # Hartree
    rms_force: float = 0.0
    max_force: float = 0.0
    rms_displacement: float = 0.0
    max_displacement: float = 0.0
    converged: bool = False

    def __str__(self) -> str:
        return (
            f"{type(self).__name__}(index={self.index}, n_atoms={len(self.atoms)}, "
            f"energy={self.energy:.8f}, converged={self.converged})"
        )


@dataclass
class VibrationalMode:
    """A harmonic mode with its per-atom Cartesian displacement vectors."""

    frequency: float  # cm-1
    ir_intensity: float = 0.0  # km/mol
    symmetry: str = "A"
    displacements: list[Vector3] = field(default_factory=list)


@dataclass(frozen=True)
class ConvergenceDiagnostics:
    """Final-geometry convergence items reported next to the thermochemistry (BDF/UniMoVib)."""

    max_displacement: float | None = None
    rms_displacement: float | None = None
    max_force: float | None = None
    rms_force: float | None = None
    expected_energy_change: float | None = None

    @property
    def has_data(self) -> bool:
        return any(
            value is not None
            for value in (
                self.max_displacement,
                self.rms_displacement,
                self.max_force,
                self.rms_force,
                self.expected_energy_change,
            )
        )


@dataclass
class ThermochemistrySummary:
    """Thermochemistry values; None marks a value the source did not report."""

    temperature: float | None = None  # K
    pressure: float | None = None  # atm
    electronic_energy: float | None = None  # Hartree
    zero_point_energy: float | None = None  # Hartree
    thermal_energy_correction: float | None = None  # Hartree
    thermal_enthalpy_correction: float | None = None  # Hartree
    thermal_gibbs_correction: float | None = None  # Hartree
    diagnostics: ConvergenceDiagnostics | None = None

    @property
    def has_data(self) -> bool:
        return any(
            value is not None
            for value in (
                self.temperature,
                self.pressure,
                self.zero_point_energy,
                self.thermal_energy_correction,
                self.thermal_enthalpy_correction,
                self.thermal_gibbs_correction,
            )
        )

    @property
    def has_diagnostics(self) -> bool:
        return self.diagnostics is not None and self.diagnostics.has_data


@dataclass(frozen=True)
class OrbitalTransition:
    """Single orbital excitation contributing to an excited state."""

    source: int
    destination: int
    coefficient: float
    spin: Literal["alpha", "beta"] = "alpha"
    direction: Literal["excitation", "deexcitation"] = "excitation"

    @property
    def arrow(self) -> str:
        return "->" if self.direction == "excitation" else "<-"


@dataclass
class ExcitedState:
    index: int
    symmetry: str
    energy_ev: float
    wavelength_nm: float
    oscillator_strength: float
    s_squared: float = 0.0
    transitions: list[OrbitalTransition] = field(default_factory=list)
    total_energy: float | None = None  # Hartree
    tracked: bool = False
    annotation: str | None = None

    @property
    def is_unrestricted(self) -> bool:
        return any(t.spin == "beta" for t in self.transitions)


@dataclass
class TDDFTBlock:
    """Excited states reported for one optimization step."""

    states: list[ExcitedState] = field(default_factory=list)

    @property
    def present(self) -> bool:
        return bool(self.states)


@dataclass
class _MutableRecord:
    """Mutable version of ComputationRecord used internally during parsing."""

    steps: list[OptimizationStep] = field(default_factory=list)
    modes: list[VibrationalMode] = field(default_factory=list)
    thermochemistry: ThermochemistrySummary | None = None
    charge: int = 0
    multiplicity: int = 1
    has_charge_spin: bool = False
    tddft: list[TDDFTBlock] = field(default_factory=list)
    has_optimization: bool = False
    has_frequencies: bool = False

    def add_step(self, step: OptimizationStep, tddft: TDDFTBlock | None = None) -> bool:
        """Append a step; steps without atoms are dropped."""
        if not step.atoms:
            logger.debug(f"Dropping step {step.index}: no atoms found.")
            return False
        self.steps.append(step)
        self.tddft.append(tddft if tddft is not None else TDDFTBlock())
        return True

    def set_charge_spin(self, charge: int, multiplicity: int) -> bool:
        """Record charge and multiplicity once; later calls are ignored."""
        if self.has_charge_spin:
            return False
        self.charge = charge
        self.multiplicity = multiplicity
        self.has_charge_spin = True
        return True

    @property
    def n_atoms(self) -> int:
        return len(self.steps[-1].atoms) if self.steps else 0

    def finalize_modes(self) -> None:
        """Zero-fill displacement tables that do not match the final geometry."""
        n_atoms = self.n_atoms
        for i, mode in enumerate(self.modes, start=1):
            if len(mode.displacements) != n_atoms:
                if mode.displacements:
                    logger.warning(
                        f"Mode {i} has {len(mode.displacements)} displacement vectors for {n_atoms} atoms; "
                        "replacing them with zeros."
                    )
                mode.displacements = [(0.0, 0.0, 0.0)] * n_atoms
        self.has_frequencies = bool(self.modes)


@dataclass(frozen=True)
class ComputationRecord:
    """Canonical representation of one converted calculation."""

    steps: Sequence[OptimizationStep] = ()
    modes: Sequence[VibrationalMode] = ()
    thermochemistry: ThermochemistrySummary | None = None
    charge: int = 0
    multiplicity: int = 1
    has_charge_spin: bool = False
    tddft: Sequence[TDDFTBlock] = ()
    has_optimization: bool = False
    has_frequencies: bool = False

    @classmethod
    def from_mutable(cls, data: _MutableRecord) -> "ComputationRecord":
        data.finalize_modes()
        # Only keep excited-state blocks when at least one step has one.
        tddft = tuple(data.tddft) if any(block.present for block in data.tddft) else ()
        thermo = data.thermochemistry
        if thermo is not None and not (thermo.has_data or thermo.has_diagnostics):
            thermo = None
        return cls(
            steps=tuple(data.steps),
            modes=tuple(data.modes),
            thermochemistry=thermo,
            charge=data.charge,
            multiplicity=data.multiplicity,
            has_charge_spin=data.has_charge_spin,
            tddft=tddft,
            has_optimization=data.has_optimization,
            has_frequencies=data.has_frequencies,
        )

    @property
    def final_step(self) -> OptimizationStep | None:
        return self.steps[-1] if self.steps else None

    @property
    def n_atoms(self) -> int:
        return len(self.steps[-1].atoms) if self.steps else 0

    @property
    def has_tddft(self) -> bool:
        return bool(self.tddft)

    def tddft_for(self, step_index: int) -> TDDFTBlock | None:
        """Excited-state block of the step at position `step_index` (0-based), if any."""
        if 0 <= step_index < len(self.tddft) and self.tddft[step_index].present:
            return self.tddft[step_index]
        return None

    def is_valid(self) -> bool:
        return any(step.atoms for step in self.steps)

    def __repr__(self) -> str:
        final = self.final_step
        energy_str = f"{final.energy:.8f}" if final is not None else "None"
        return (
            f"{type(self).__name__}("
            f"n_steps={len(self.steps)}, "
            f"n_atoms={self.n_atoms}, "
            f"final_energy={energy_str}, "
            f"n_modes={len(self.modes)}, "
            f"has_thermochemistry={self.thermochemistry is not None}, "
            f"charge={self.charge}, multiplicity={self.multiplicity}"
            f")"
        )
