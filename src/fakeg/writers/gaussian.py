"""Render a ComputationRecord as a Gaussian 16 style log."""

import os
from collections.abc import Iterator, Mapping, Sequence
from pathlib import Path

from fakeg.config import DEFAULT_PROGRAM, ProgramInfo, RenderSettings
from fakeg.exceptions import RenderError
from fakeg.parsers.base import CONVERGENCE_THRESHOLDS
from fakeg.typing import (
    Atom,
    ComputationRecord,
    ConvergenceDiagnostics,
    ExcitedState,
    OptimizationStep,
    TDDFTBlock,
    ThermochemistrySummary,
    VibrationalMode,
)
from fakeg.utils import logger
from fakeg.writers.atomic import AtomicWriter

FOOTER_MARKER = "Normal termination of Gaussian"
FOOTER = f" {FOOTER_MARKER} 16."
OUTPUT_SUFFIX = "_fake"

STARS = " " + "*" * 46
DASHES = " " + "-" * 69
TRACKED_STATE_NOTE = "This state for optimization and/or second-order correction."

# (label, step attribute) in Gaussian row order
CONVERGENCE_LAYOUT = (
    ("Maximum Force", "max_force"),
    ("RMS     Force", "rms_force"),
    ("Maximum Displacement", "max_displacement"),
    ("RMS     Displacement", "rms_displacement"),
)
FREQ_BANNER = (
    " Harmonic frequencies (cm**-1), IR intensities (KM/Mole), Raman scattering",
    " activities (A**4/AMU), depolarization ratios for plane and unpolarized",
    " incident light, reduced masses (AMU), force constants (mDyne/A),",
    " and normal coordinates:",
)
THERMO_CORRECTIONS = (
    ("Zero-point correction=", "zero_point_energy"),
    ("Thermal correction to Energy=", "thermal_energy_correction"),
    ("Thermal correction to Enthalpy=", "thermal_enthalpy_correction"),
    ("Thermal correction to Gibbs Free Energy=", "thermal_gibbs_correction"),
)
THERMO_SUMS = (
    ("Sum of electronic and zero-point Energies=", "zero_point_energy"),
    ("Sum of electronic and thermal Energies=", "thermal_energy_correction"),
    ("Sum of electronic and thermal Enthalpies=", "thermal_enthalpy_correction"),
    ("Sum of electronic and thermal Free Energies=", "thermal_gibbs_correction"),
)


def derive_output_path(input_path: str | Path, suffix: str = OUTPUT_SUFFIX) -> str:
    """'case1.out' -> 'case1_fake.out'. Pure string transform on the last extension."""
    root, ext = os.path.splitext(os.fspath(input_path))
    return f"{root}{suffix}{ext}"


def validate_output(path: str | Path) -> bool:
    """Smoke test of a generated file: exists, not empty, ends with the termination line."""
    path = Path(path)
    try:
        if not path.is_file() or path.stat().st_size == 0:
            return False
        return FOOTER_MARKER in path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.error(f"Cannot read output file '{path}': {e}")
        return False


class GaussianWriter:
    """Serializes one record into Gaussian's fixed-column layout."""

    def __init__(
        self,
        settings: RenderSettings | None = None,
        program: ProgramInfo | None = None,
        source: str | None = None,
    ) -> None:
        self.settings = settings if settings is not None else RenderSettings()
        self.program = program if program is not None else DEFAULT_PROGRAM
        self.source = source

    def render(self, record: ComputationRecord, destination: str | Path) -> bool:
        try:
            text = self.render_text(record)
            with AtomicWriter(destination) as f:
                f.write(text)
        except RenderError as e:
            logger.error(f"Cannot render output: {e}")
            return False
        except OSError as e:
            logger.error(f"Cannot write output file '{destination}': {e}")
            return False
        logger.debug(f"Wrote {len(text.splitlines())} lines to {destination}")
        return True

    def render_text(self, record: ComputationRecord) -> str:
        if not record.is_valid():
            raise RenderError("record holds no geometry")
        return "\n".join(self._lines(record)) + "\n"

    def _lines(self, record: ComputationRecord) -> Iterator[str]:
        yield from self._header(record)
        for i, step in enumerate(record.steps):
            yield from self._step(record, i, step)
        if record.modes:
            yield from self._frequencies(record.modes, record.final_step.atoms)
        if record.thermochemistry is not None:
            yield from self._thermochemistry(record.thermochemistry)
        yield FOOTER

    # --- Header --- #

    def _header(self, record: ComputationRecord) -> Iterator[str]:
        route = ["#p"]
        if record.has_optimization:
            route.append("opt")
        if record.has_frequencies:
            route.append("freq")
        if record.has_tddft:
            route.append("td")

        yield " Entering Gaussian System, Link 0=g16"
        yield STARS
        yield " Gaussian 16:  fake output"
        yield f" Generated by {self.program.banner()}"
        if self.source:
            yield f" Converted from {self.source}"
        yield STARS
        yield DASHES
        yield f" {' '.join(route)}"
        yield DASHES
        yield f" NAtoms= {record.n_atoms:6d}"
        yield " Symbolic Z-matrix:"
        yield f" Charge = {record.charge:2d} Multiplicity = {record.multiplicity}"
        yield ""

    # --- Steps --- #

    def _step(self, record: ComputationRecord, position: int, step: OptimizationStep) -> Iterator[str]:
        yield from self._orientation(step.atoms)
        yield f" SCF Done:  E(RDFT) = {self._energy(step.energy)}     A.U. after    1 cycles"

        block = record.tddft_for(position)
        if block is not None:
            yield from self._excited_states(block)

        if record.has_optimization:
            yield from self._convergence_table({attr: getattr(step, attr) for _, attr in CONVERGENCE_LAYOUT})
            yield f" Step number {step.index:3d} out of a maximum of {len(record.steps):3d}"
            if position == len(record.steps) - 1 and step.converged:
                yield " Optimization completed."
                yield "    -- Stationary point found."
        yield ""

    def _orientation(self, atoms: Sequence[Atom]) -> Iterator[str]:
        p = self.settings.coordinate_precision
        w = p + 6
        yield "                         Standard orientation:"
        yield DASHES
        yield " Center     Atomic      Atomic             Coordinates (Angstroms)"
        yield " Number     Number       Type             X           Y           Z"
        yield DASHES
        for i, atom in enumerate(atoms, start=1):
            yield f"{i:7d}{atom.atomic_number:11d}{0:12d}    {atom.x:{w}.{p}f}{atom.y:{w}.{p}f}{atom.z:{w}.{p}f}"
        yield DASHES

    def _energy(self, value: float) -> str:
        p = self.settings.energy_precision
        return f"{value:{p + 9}.{p}f}"

    def _convergence_table(self, values: Mapping[str, float | None]) -> Iterator[str]:
        yield "         Item               Value     Threshold  Converged?"
        for label, attr in CONVERGENCE_LAYOUT:
            value = values.get(attr)
            if value is None:
                continue
            threshold = CONVERGENCE_THRESHOLDS[attr]
            flag = "YES" if value < threshold else "NO"
            yield f" {label:<20}{value:12.6f}{threshold:13.6f}{flag:>8}"

    def _excited_states(self, block: TDDFTBlock) -> Iterator[str]:
        yield " Excitation energies and oscillator strengths:"
        yield ""
        for state in block.states:
            yield from self._excited_state(state)
        yield ""

    def _excited_state(self, state: ExcitedState) -> Iterator[str]:
        yield (
            f" Excited State {state.index:3d}: {state.symmetry:>14}{state.energy_ev:10.4f} eV"
            f"{state.wavelength_nm:8.2f} nm  f={state.oscillator_strength:.4f}  <S**2>={state.s_squared:.3f}"
        )
        unrestricted = state.is_unrestricted
        for t in state.transitions:
            suffix = ("B" if t.spin == "beta" else "A") if unrestricted else ""
            source = f"{t.source}{suffix}"
            destination = f"{t.destination}{suffix}"
            yield f"     {source:>5} {t.arrow} {destination:<5}{t.coefficient:12.5f}"
        if state.annotation:
            yield f" {state.annotation}"
        elif state.tracked:
            yield f" {TRACKED_STATE_NOTE}"
        if state.total_energy is not None:
            yield f" Total Energy, E(TD-HF/TD-DFT) = {self._energy(state.total_energy)}"

    # --- Frequencies --- #

    def _frequencies(self, modes: Sequence[VibrationalMode], atoms: Sequence[Atom]) -> Iterator[str]:
        s = self.settings
        p = s.displacement_precision
        dw = p + 5

        yield from FREQ_BANNER
        for start in range(0, len(modes), s.block_width):
            block = modes[start : start + s.block_width]
            yield _columns(" " * 15, [f"{start + i + 1:11d}" for i in range(len(block))])
            yield _columns(" " * 15, [f"{mode.symmetry:>11}" for mode in block])
            yield _columns(
                " Frequencies --", [f"{mode.frequency:11.{s.frequency_precision}f}" for mode in block]
            )
            yield _columns(
                " IR Inten    --", [f"{mode.ir_intensity:11.{s.intensity_precision}f}" for mode in block]
            )
            yield "  Atom  AN" + "  ".join(f"{'X':>{dw}}{'Y':>{dw}}{'Z':>{dw}}" for _ in block)
            for i, atom in enumerate(atoms):
                cells = []
                for mode in block:
                    dx, dy, dz = mode.displacements[i] if i < len(mode.displacements) else (0.0, 0.0, 0.0)
                    cells.append(f"{dx:{dw}.{p}f}{dy:{dw}.{p}f}{dz:{dw}.{p}f}")
                yield f"{i + 1:6d}{atom.atomic_number:4d}" + "  ".join(cells)
        yield ""

    # --- Thermochemistry --- #

    def _thermochemistry(self, thermo: ThermochemistrySummary) -> Iterator[str]:
        p = self.settings.thermo_precision
        yield " -------------------"
        yield " - Thermochemistry -"
        yield " -------------------"

        conditions = []
        if thermo.temperature is not None:
            conditions.append(f"Temperature {thermo.temperature:9.3f} Kelvin.")
        if thermo.pressure is not None:
            conditions.append(f"Pressure {thermo.pressure:9.5f} Atm.")
        if conditions:
            yield " " + "  ".join(conditions)

        for label, attr in THERMO_CORRECTIONS:
            value = getattr(thermo, attr)
            if value is not None:
                unit = " (Hartree/Particle)" if attr == "zero_point_energy" else ""
                yield f" {label:<41}{value:{p + 9}.{p}f}{unit}"

        if thermo.electronic_energy is not None:
            for label, attr in THERMO_SUMS:
                correction = getattr(thermo, attr)
                if correction is not None:
                    yield f" {label:<45}{thermo.electronic_energy + correction:{p + 9}.{p}f}"

        if thermo.has_diagnostics:
            yield from self._diagnostics(thermo.diagnostics)
        yield ""

    def _diagnostics(self, diagnostics: ConvergenceDiagnostics) -> Iterator[str]:
        yield ""
        yield " Convergence of the final structure:"
        yield from self._convergence_table(
            {
                "max_force": diagnostics.max_force,
                "rms_force": diagnostics.rms_force,
                "max_displacement": diagnostics.max_displacement,
                "rms_displacement": diagnostics.rms_displacement,
            }
        )
        if diagnostics.expected_energy_change is not None:
            # Gaussian prints Fortran D exponents here.
            value = f"{diagnostics.expected_energy_change:.6E}".replace("E", "D")
            yield f" Predicted change in Energy={value}"


def _columns(label: str, cells: Sequence[str]) -> str:
    return (label + (" " * 12).join(cells)).rstrip()


def render(
    record: ComputationRecord,
    destination: str | Path,
    settings: RenderSettings | None = None,
    program: ProgramInfo | None = None,
    source: str | None = None,
) -> bool:
    """Write `record` to `destination`; False on failure, in which case no file is left behind."""
    return GaussianWriter(settings=settings, program=program, source=source).render(record, destination)
