import re

from fakeg.elements import symbol_for
from fakeg.parsers.base import (
    SEPARATOR_PAT,
    LogParser,
    classify_step,
    first_position,
    is_int_token,
    step_bounds,
    to_float,
    value_after,
)
from fakeg.parsers.cursor import LineCursor
from fakeg.typing import (
    Atom,
    ConvergenceDiagnostics,
    OptimizationStep,
    ThermochemistrySummary,
    VibrationalMode,
    _MutableRecord,
)

CHARGE_PAT = re.compile(r"Charge\s*=\s*(-?\d+)\s+Multiplicity\s*=\s*(\d+)")

# --- Optimization ---
ORIENTATION_MARKER = "Standard orientation:"
SCF_DONE_PAT = re.compile(r"SCF Done:\s+E\(.+?\)\s*=\s*(-?\d+\.\d+)")
CONVERGENCE_ROWS = {
    "Maximum Force": "max_force",
    "RMS Force": "rms_force",
    "Maximum Displacement": "max_displacement",
    "RMS Displacement": "rms_displacement",
}

# --- Frequencies ---
FREQ_START = "Harmonic frequencies (cm**-1)"
ATOM_HEADER_PAT = re.compile(r"^\s*Atom\s+AN\b")

# --- Thermochemistry ---
THERMO_START = "- Thermochemistry -"
TEMPERATURE_PAT = re.compile(r"Temperature\s+(-?\d+\.\d+)\s+Kelvin")
PRESSURE_PAT = re.compile(r"Pressure\s+(-?\d+\.\d+)\s+Atm")
THERMO_KEYS = {
    "Zero-point correction=": "zero_point_energy",
    "Thermal correction to Energy=": "thermal_energy_correction",
    "Thermal correction to Enthalpy=": "thermal_enthalpy_correction",
    "Thermal correction to Gibbs Free Energy=": "thermal_gibbs_correction",
}
SUM_EZPE_KEY = "Sum of electronic and zero-point Energies="
PREDICTED_CHANGE_KEY = "Predicted change in Energy="
DIAGNOSTIC_ROWS = {
    "Maximum Force": "max_force",
    "RMS Force": "rms_force",
    "Maximum Displacement": "max_displacement",
    "RMS Displacement": "rms_displacement",
}


def _row_label(line: str) -> str:
    """'RMS     Force' and 'RMS Force' both become 'RMS Force'."""
    return " ".join(line.split()[:2])


class GaussianFormatParser(LogParser):
    """Reads Gaussian-layout logs such as the `g98.out` file written by xtb --hess."""

    NAME = "xtb"
    VERSION = "1.0.0"

    def _parse(self, cursor: LineCursor, data: _MutableRecord) -> None:
        if (line := cursor.find(CHARGE_PAT)) is not None:
            match = CHARGE_PAT.search(line)
            data.set_charge_spin(int(match.group(1)), int(match.group(2)))

        cursor.reset()
        self._parse_steps(cursor, data)

        cursor.reset()
        self._parse_frequencies(cursor, data)

        cursor.reset()
        self._parse_thermochemistry(cursor, data)

    # --- Steps --- #

    def _parse_steps(self, cursor: LineCursor, data: _MutableRecord) -> None:
        starts = cursor.find_all(ORIENTATION_MARKER)
        if not starts:
            self.logger.warning(f"No '{ORIENTATION_MARKER}' block found.")
            return
        section_end = first_position(cursor, (FREQ_START, THERMO_START), len(cursor), after=starts[-1])

        has_convergence = False
        for i, (begin, end) in enumerate(step_bounds(starts, section_end), start=1):
            step = OptimizationStep(index=i)
            cursor.seek(begin + 1)
            step.atoms = self._read_orientation(cursor, end)
            for pos in range(begin, end):
                match = SCF_DONE_PAT.search(cursor.line_at(pos))
                if match:
                    step.energy = float(match.group(1))
            if self._read_convergence(cursor, step, begin, end):
                has_convergence = True
                classify_step(step)
            data.add_step(step)

        data.has_optimization = len(starts) > 1 or has_convergence
        if not has_convergence and len(data.steps) == 1:
            data.steps[0].converged = True
        self.logger.info(f"Found {len(starts)} orientation blocks, kept {len(data.steps)} steps.")

    def _read_orientation(self, cursor: LineCursor, end: int) -> list[Atom]:
        """Rows `center atomic_number type x y z` between the second and third dashed lines."""
        atoms: list[Atom] = []
        separators = 0
        while cursor.tell() < end and separators < 3:
            line = cursor.readline()
            if line is None:
                break
            if SEPARATOR_PAT.match(line):
                separators += 1
                continue
            if separators < 2:
                continue
            tokens = line.split()
            if len(tokens) < 6 or not is_int_token(tokens[1]):
                self.logger.debug(f"Skipping malformed orientation row: '{line.strip()}'")
                continue
            coords = [to_float(t, logger=self.logger) for t in tokens[3:6]]
            if any(c is None for c in coords):
                continue
            atoms.append(Atom(symbol=symbol_for(int(tokens[1])), x=coords[0], y=coords[1], z=coords[2]))
        return atoms

    def _read_convergence(self, cursor: LineCursor, step: OptimizationStep, begin: int, end: int) -> bool:
        found = False
        for pos in range(begin, end):
            line = cursor.line_at(pos)
            attr = CONVERGENCE_ROWS.get(_row_label(line))
            if attr is None:
                continue
            tokens = line.split()
            value = to_float(tokens[2], logger=self.logger) if len(tokens) > 2 else None
            if value is not None:
                setattr(step, attr, value)
                found = True
        return found

    # --- Frequencies --- #

    def _parse_frequencies(self, cursor: LineCursor, data: _MutableRecord) -> None:
        if cursor.find(FREQ_START) is None:
            self.logger.debug("No frequency section found.")
            return

        block: list[VibrationalMode] = []
        expect_symmetry = False
        in_atoms = False
        while (line := cursor.readline()) is not None:
            tokens = line.split()
            if not tokens:
                if in_atoms:
                    break
                continue
            if THERMO_START in line or "Normal termination" in line:
                break

            if all(is_int_token(t) for t in tokens):
                block = [VibrationalMode(frequency=0.0) for _ in tokens]
                data.modes.extend(block)
                expect_symmetry = True
                in_atoms = False
                continue
            if not block:
                continue

            if "--" in line:
                expect_symmetry = False
                label, _, values = line.partition("--")
                label = label.strip()
                if label == "Frequencies":
                    self._assign(block, values.split(), "frequency")
                elif label == "IR Inten":
                    self._assign(block, values.split(), "ir_intensity")
                continue
            if expect_symmetry:
                expect_symmetry = False
                if len(tokens) == len(block):
                    for mode, symmetry in zip(block, tokens, strict=True):
                        mode.symmetry = symmetry
                continue
            if ATOM_HEADER_PAT.match(line):
                in_atoms = True
                continue
            if in_atoms and is_int_token(tokens[0]):
                values = [to_float(t, 0.0, logger=self.logger) for t in tokens[2:]]
                for i, mode in enumerate(block):
                    vector = values[3 * i : 3 * i + 3]
                    if len(vector) == 3:
                        mode.displacements.append((vector[0], vector[1], vector[2]))
                continue
            if in_atoms:
                in_atoms = False

        if data.modes:
            data.has_frequencies = True
            self.logger.info(f"Found {len(data.modes)} vibrational frequencies.")

    def _assign(self, block: list[VibrationalMode], tokens: list[str], attr: str) -> None:
        for mode, token in zip(block, tokens, strict=False):
            value = to_float(token, logger=self.logger)
            if value is not None:
                setattr(mode, attr, value)

    # --- Thermochemistry --- #

    def _parse_thermochemistry(self, cursor: LineCursor, data: _MutableRecord) -> None:
        if cursor.find(THERMO_START) is None:
            self.logger.debug("No thermochemistry section found.")
            return

        thermo = ThermochemistrySummary()
        sum_ezpe: float | None = None
        diagnostics: dict[str, float] = {}
        while (line := cursor.readline()) is not None:
            if "Normal termination" in line:
                break
            if thermo.temperature is None and (match := TEMPERATURE_PAT.search(line)):
                thermo.temperature = float(match.group(1))
            if thermo.pressure is None and (match := PRESSURE_PAT.search(line)):
                thermo.pressure = float(match.group(1))
            for key, attr in THERMO_KEYS.items():
                if key in line:
                    setattr(thermo, attr, value_after(line, key, logger=self.logger))
                    break
            if SUM_EZPE_KEY in line:
                sum_ezpe = value_after(line, SUM_EZPE_KEY, logger=self.logger)
            if PREDICTED_CHANGE_KEY in line:
                value = value_after(line, PREDICTED_CHANGE_KEY, logger=self.logger)
                if value is not None:
                    diagnostics["expected_energy_change"] = value
            attr = DIAGNOSTIC_ROWS.get(_row_label(line))
            if attr is not None:
                tokens = line.split()
                value = to_float(tokens[2], logger=self.logger) if len(tokens) > 2 else None
                if value is not None:
                    diagnostics[attr] = value

        if sum_ezpe is not None and thermo.zero_point_energy is not None:
            thermo.electronic_energy = sum_ezpe - thermo.zero_point_energy
        if diagnostics:
            thermo.diagnostics = ConvergenceDiagnostics(**diagnostics)
        if thermo.has_data or thermo.has_diagnostics:
            data.thermochemistry = thermo
            self.logger.info("Found thermochemistry summary.")
