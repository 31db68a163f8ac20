import re

from fakeg.parsers.base import (
    FLOAT_PAT,
    SEPARATOR_PAT,
    LogParser,
    classify_step,
    first_position,
    floats_in,
    is_int_token,
    parse_atom_line,
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

# --- Optimization ---
STEP_PAT = re.compile(r"Geometry Optimization step\s*:\s*(\d+)")
GEOMETRY_PAT = re.compile(r"^\s*Atom\s+Coord\s*$")
ENERGY_PAT = re.compile(r"Energy=\s*(" + FLOAT_PAT.pattern + r")")
CURRENT_VALUES_MARKER = "Current values"
STEP_SECTION_ENDS = ("Results of vibrations", "Start analytical Hessian")

# --- Frequencies ---
FREQ_START = "Results of vibrations"
FREQ_END = "Results of translations"
ATOM_HEADER_PAT = re.compile(r"^\s*Atom\s+ZA\b")

# --- Thermochemistry ---
THERMO_START = "Thermal Contributions to Energies"
THERMO_END = "UniMoVib job terminated"
TEMPERATURE_PAT = re.compile(r"Temperature\s*=\s*(" + FLOAT_PAT.pattern + r")\s*Kelvin")
PRESSURE_PAT = re.compile(r"Pressure\s*=\s*(" + FLOAT_PAT.pattern + r")\s*Atm")
THERMO_KEYS = {
    "Electronic total energy": "electronic_energy",
    "Zero-point Energy": "zero_point_energy",
    "Thermal correction to Energy": "thermal_energy_correction",
    "Thermal correction to Enthalpy": "thermal_enthalpy_correction",
    "Thermal correction to Gibbs Free Energy": "thermal_gibbs_correction",
}
DIAGNOSTIC_KEYS = {
    "Maximum Delta-X": "max_displacement",
    "RMS Delta-X": "rms_displacement",
    "Maximum Force": "max_force",
    "RMS Force": "rms_force",
    "Expected Delta-E": "expected_energy_change",
}


class BdfParser(LogParser):
    """Reads BDF optimization and frequency logs, including the UniMoVib thermochemistry."""

    NAME = "BDF"
    VERSION = "1.1.0"

    def _parse(self, cursor: LineCursor, data: _MutableRecord) -> None:
        self._parse_steps(cursor, data)

        cursor.reset()
        self._parse_frequencies(cursor, data)

        cursor.reset()
        self._parse_thermochemistry(cursor, data)

    # --- Steps --- #

    def _parse_steps(self, cursor: LineCursor, data: _MutableRecord) -> None:
        starts = cursor.find_all(STEP_PAT)
        section_end = first_position(cursor, STEP_SECTION_ENDS, len(cursor), after=starts[-1] if starts else 0)

        if not starts:
            self.logger.info("No optimization step marker found; treating file as a single point.")
            step = self._parse_step(cursor, 1, 0, section_end)
            step.converged = True
            data.add_step(step)
            return

        data.has_optimization = True
        for begin, end in step_bounds(starts, section_end):
            match = STEP_PAT.search(cursor.line_at(begin))
            index = int(match.group(1)) if match else len(data.steps) + 1
            step = self._parse_step(cursor, index, begin, end)
            classify_step(step)
            data.add_step(step)
        self.logger.info(f"Found {len(starts)} optimization step markers, kept {len(data.steps)} steps.")

    def _parse_step(self, cursor: LineCursor, index: int, begin: int, end: int) -> OptimizationStep:
        step = OptimizationStep(index=index)

        cursor.seek(begin)
        if cursor.find(GEOMETRY_PAT, end=end) is not None:
            step.atoms = self._read_atoms(cursor, end)

        # Last Energy= in the step window.
        for pos in range(begin, end):
            match = ENERGY_PAT.search(cursor.line_at(pos))
            if match:
                value = to_float(match.group(1), logger=self.logger)
                if value is not None:
                    step.energy = value

        self._read_convergence(cursor, step, begin, end)
        return step

    def _read_atoms(self, cursor: LineCursor, end: int) -> list[Atom]:
        atoms = []
        while cursor.tell() < end:
            line = cursor.readline()
            if line is None or not line.strip() or SEPARATOR_PAT.match(line):
                break
            if "State=" in line or "Energy=" in line:
                break
            atom = parse_atom_line(line)
            if atom is None:
                self.logger.debug(f"Skipping malformed atom line: '{line.strip()}'")
                continue
            atoms.append(atom)
        return atoms

    def _read_convergence(self, cursor: LineCursor, step: OptimizationStep, begin: int, end: int) -> None:
        cursor.seek(begin)
        line = cursor.find(CURRENT_VALUES_MARKER, end=end)
        if line is None:
            return
        values = floats_in(line.partition(":")[2])
        if len(values) < 4:
            # Values wrapped onto the following line.
            next_line = cursor.readline() if cursor.tell() < end else None
            if next_line is not None:
                values += floats_in(next_line)
        if len(values) < 4:
            self.logger.debug(f"Incomplete convergence values in step {step.index}: {values}")
            return
        step.rms_force, step.max_force, step.rms_displacement, step.max_displacement = values[:4]

    # --- Frequencies --- #

    def _parse_frequencies(self, cursor: LineCursor, data: _MutableRecord) -> None:
        """Blocks of up to three modes, each a labeled header followed by one row per atom."""
        if cursor.find(FREQ_START) is None:
            self.logger.debug("No frequency section found.")
            return

        block: list[VibrationalMode] = []
        in_atoms = False
        while (line := cursor.readline()) is not None:
            if FREQ_END in line:
                break
            tokens = line.split()
            if not tokens:
                continue

            if all(is_int_token(t) for t in tokens):
                block = [VibrationalMode(frequency=0.0) for _ in tokens]
                data.modes.extend(block)
                in_atoms = False
                continue
            if not block:
                continue

            label = line.strip()
            if label.startswith("Irreps"):
                for mode, symmetry in zip(block, tokens[1:], strict=False):
                    mode.symmetry = symmetry
            elif label.startswith("Frequencies"):
                self._assign(block, tokens[1:], "frequency")
            elif label.startswith("IR intensities"):
                self._assign(block, tokens[2:], "ir_intensity")
            elif ATOM_HEADER_PAT.match(line):
                in_atoms = True
            elif in_atoms and is_int_token(tokens[0]):
                self._read_displacement_row(block, tokens)

        if data.modes:
            data.has_frequencies = True
            self.logger.info(f"Found {len(data.modes)} vibrational frequencies.")

    def _assign(self, block: list[VibrationalMode], tokens: list[str], attr: str) -> None:
        for mode, token in zip(block, tokens, strict=False):
            value = to_float(token, logger=self.logger)
            if value is not None:
                setattr(mode, attr, value)

    def _read_displacement_row(self, block: list[VibrationalMode], tokens: list[str]) -> None:
        """`atom_index Z dx dy dz dx dy dz ...`, three columns per mode."""
        values = [to_float(t, 0.0, logger=self.logger) for t in tokens[2:]]
        for i, mode in enumerate(block):
            vector = values[3 * i : 3 * i + 3]
            if len(vector) == 3:
                mode.displacements.append((vector[0], vector[1], vector[2]))

    # --- Thermochemistry --- #

    def _parse_thermochemistry(self, cursor: LineCursor, data: _MutableRecord) -> None:
        if cursor.find(THERMO_START) is None:
            self.logger.debug("No thermochemistry section found.")
            return

        thermo = ThermochemistrySummary()
        diagnostics: dict[str, float] = {}
        while (line := cursor.readline()) is not None:
            if THERMO_END in line:
                break
            if thermo.temperature is None and (match := TEMPERATURE_PAT.search(line)):
                thermo.temperature = to_float(match.group(1), logger=self.logger)
            if thermo.pressure is None and (match := PRESSURE_PAT.search(line)):
                thermo.pressure = to_float(match.group(1), logger=self.logger)
            for key, attr in THERMO_KEYS.items():
                if key in line and getattr(thermo, attr) is None:
                    setattr(thermo, attr, value_after(line, ":", logger=self.logger))
                    break
            for key, attr in DIAGNOSTIC_KEYS.items():
                if key in line and attr not in diagnostics:
                    value = value_after(line, key, logger=self.logger)
                    if value is not None:
                        diagnostics[attr] = value
                    break

        if diagnostics:
            thermo.diagnostics = ConvergenceDiagnostics(**diagnostics)
        if thermo.has_data or thermo.has_diagnostics:
            data.thermochemistry = thermo
            self.logger.info("Found thermochemistry summary.")
