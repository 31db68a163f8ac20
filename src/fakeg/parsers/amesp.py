import re

from fakeg.parsers.amesp_tddft import parse_tddft_block
from fakeg.parsers.base import (
    SEPARATOR_PAT,
    LogParser,
    classify_step,
    first_position,
    is_int_token,
    parse_atom_line,
    step_bounds,
    to_float,
    value_after,
)
from fakeg.parsers.cursor import LineCursor
from fakeg.typing import (
    Atom,
    OptimizationStep,
    ThermochemistrySummary,
    VibrationalMode,
    _MutableRecord,
)

# --- Optimization ---
STEP_PAT = re.compile(r"Geom Opt Step:\s*(\d+)")
GEOMETRY_MARKER = "Current Geometry(angstroms):"
ENERGY_PAT = re.compile(r"E\[(Eexc|DFT)\]\s*=\s*(-?\d+\.\d+(?:[eE][-+]?\d+)?)")
CONVERGENCE_MARKER = "Geometry Convergence:"
CONVERGENCE_ROWS = {
    "RMS Force": "rms_force",
    "Max Force": "max_force",
    "RMS Step": "rms_displacement",
    "Max Step": "max_displacement",
}

# --- Frequencies ---
FREQ_BANNER_PAT = re.compile(r"=+\s*Frequency\s*=+")
FREQ_START = "Harmonic frequencies(cm-1):"
IR_START = "IR spectrum (T^2,KM/Mole)"
NORMAL_MODES_START = "Normal Modes:"
# `row atom axis values...`; atom is a 1-based index or, in older logs, the element symbol
# with the atom index in the first column.
NORMAL_MODE_ROW_PAT = re.compile(r"^\s*(\d+)\s+(\d+|[A-Za-z]{1,3})\s+([XYZ])\s+(.*)$")
AXES = {"X": 0, "Y": 1, "Z": 2}

# --- Thermochemistry ---
THERMO_START = "Summary of Thermodynamic Quantities"
THERMO_KEYS = {
    "Temperature:": "temperature",
    "Pressure:": "pressure",
    "Zero-point vibrational energy:": "zero_point_energy",
    "Thermal correction to U(T):": "thermal_energy_correction",
    "Thermal correction to H(T):": "thermal_enthalpy_correction",
    "Thermal correction to G(T):": "thermal_gibbs_correction",
    "Final Energy:": "electronic_energy",
}


class AmespParser(LogParser):
    """Reads AMESP `.aop` logs: optimizations, frequencies, thermochemistry and TDDFT."""

    NAME = "AMESP"
    VERSION = "1.0.0"

    def _parse(self, cursor: LineCursor, data: _MutableRecord) -> None:
        self._parse_steps(cursor, data)

        cursor.reset()
        self._parse_frequencies(cursor, data)

        cursor.reset()
        self._parse_thermochemistry(cursor, data)

    # --- Steps --- #

    def _parse_steps(self, cursor: LineCursor, data: _MutableRecord) -> None:
        starts = cursor.find_all(STEP_PAT)
        section_end = first_position(
            cursor, (FREQ_BANNER_PAT, FREQ_START), len(cursor), after=starts[-1] if starts else 0
        )

        if not starts:
            self.logger.info("No optimization step marker found; treating file as a single point.")
            step = self._parse_step(cursor, 1, 0, section_end, data)
            step.converged = True
            return

        data.has_optimization = True
        for begin, end in step_bounds(starts, section_end):
            match = STEP_PAT.search(cursor.line_at(begin))
            index = int(match.group(1)) if match else len(data.steps) + 1
            self._parse_step(cursor, index, begin, end, data)
        self.logger.info(f"Found {len(starts)} optimization step markers, kept {len(data.steps)} steps.")

    def _parse_step(
        self, cursor: LineCursor, index: int, begin: int, end: int, data: _MutableRecord
    ) -> OptimizationStep:
        step = OptimizationStep(index=index)

        cursor.seek(begin)
        if cursor.find(GEOMETRY_MARKER, end=end) is not None:
            cursor.skip(1)  # column header
            step.atoms = self._read_atoms(cursor, end)

        excitation_energy = self._read_energy(cursor, step, begin, end)
        if self._read_convergence(cursor, step, begin, end):
            classify_step(step)

        block = parse_tddft_block(cursor, begin, end, excitation_energy, self.logger)
        data.add_step(step, block)
        return step

    def _read_atoms(self, cursor: LineCursor, end: int) -> list[Atom]:
        atoms = []
        while cursor.tell() < end:
            line = cursor.readline()
            if line is None or not line.strip() or SEPARATOR_PAT.match(line):
                break
            atom = parse_atom_line(line)
            if atom is None:
                self.logger.debug(f"Skipping malformed atom line: '{line.strip()}'")
                continue
            atoms.append(atom)
        return atoms

    def _read_energy(self, cursor: LineCursor, step: OptimizationStep, begin: int, end: int) -> float | None:
        """Set the step energy from the last E[Eexc] line, else the last E[DFT] line.

        Returns the E[Eexc] value when present; it identifies the tracked excited state.
        """
        last: dict[str, float] = {}
        for pos in range(begin, end):
            match = ENERGY_PAT.search(cursor.line_at(pos))
            if match:
                value = to_float(match.group(2), logger=self.logger)
                if value is not None:
                    last[match.group(1)] = value
        if "Eexc" in last:
            step.energy = last["Eexc"]
        elif "DFT" in last:
            step.energy = last["DFT"]
        return last.get("Eexc")

    def _read_convergence(self, cursor: LineCursor, step: OptimizationStep, begin: int, end: int) -> bool:
        """Fill the step metrics from its convergence table. False when the step has none."""
        cursor.seek(begin)
        if cursor.find(CONVERGENCE_MARKER, end=end) is None:
            self.logger.debug(f"Step {step.index} has no convergence table; leaving it unconverged.")
            return False
        found = 0
        while cursor.tell() < end and found < len(CONVERGENCE_ROWS):
            line = cursor.readline()
            if line is None:
                break
            for label, attr in CONVERGENCE_ROWS.items():
                if line.strip().startswith(label):
                    tokens = line.split()
                    value = to_float(tokens[2], logger=self.logger) if len(tokens) > 2 else None
                    if value is not None:
                        setattr(step, attr, value)
                    found += 1
                    break
        return found > 0

    # --- Frequencies --- #

    def _parse_frequencies(self, cursor: LineCursor, data: _MutableRecord) -> None:
        if cursor.find(FREQ_START) is None:
            self.logger.debug("No frequency section found.")
            return
        cursor.skip(1)
        while (line := cursor.readline()) is not None:
            tokens = line.split()
            if not tokens or "Zero-point" in line:
                break
            if len(tokens) < 2 or not is_int_token(tokens[0]):
                break
            frequency = to_float(tokens[1], logger=self.logger)
            if frequency is None:
                continue
            data.modes.append(VibrationalMode(frequency=frequency))
        if not data.modes:
            return
        self.logger.info(f"Found {len(data.modes)} vibrational frequencies.")

        cursor.reset()
        self._parse_ir_intensities(cursor, data)
        cursor.reset()
        self._parse_normal_modes(cursor, data)

    def _parse_ir_intensities(self, cursor: LineCursor, data: _MutableRecord) -> None:
        if cursor.find(IR_START) is None:
            self.logger.debug("No IR spectrum found; intensities stay at zero.")
            return
        cursor.skip(2)
        while (line := cursor.readline()) is not None:
            tokens = line.split()
            if len(tokens) < 3 or not is_int_token(tokens[0]):
                break
            mode_index = int(tokens[0]) - 1
            intensity = to_float(tokens[2], logger=self.logger)
            if 0 <= mode_index < len(data.modes) and intensity is not None:
                data.modes[mode_index].ir_intensity = intensity

    def _parse_normal_modes(self, cursor: LineCursor, data: _MutableRecord) -> None:
        """Blocks of up to five modes, one row per atom and Cartesian axis."""
        if cursor.find(NORMAL_MODES_START) is None:
            self.logger.debug("No normal mode displacements found.")
            return

        n_modes = len(data.modes)
        rows_per_block = data.n_atoms * 3
        grids: list[dict[int, list[float]]] = [{} for _ in range(n_modes)]
        columns: list[int] = []
        rows = 0
        while (line := cursor.readline()) is not None:
            tokens = line.split()
            if not tokens or SEPARATOR_PAT.match(line):
                continue
            if all(is_int_token(t) for t in tokens):
                columns = [int(t) - 1 for t in tokens]
                rows = 0
                continue
            match = NORMAL_MODE_ROW_PAT.match(line)
            if not match:
                break
            values = match.group(4).split()
            if not columns or rows == rows_per_block:
                # Block without an index header: modes continue in order.
                first = columns[-1] + 1 if columns else 0
                columns = list(range(first, first + len(values)))
                rows = 0
            atom = match.group(2)
            atom_index = int(atom) if is_int_token(atom) else int(match.group(1))
            axis = AXES[match.group(3)]
            for mode_index, token in zip(columns, values, strict=False):
                if 0 <= mode_index < n_modes:
                    vector = grids[mode_index].setdefault(atom_index, [0.0, 0.0, 0.0])
                    vector[axis] = to_float(token, 0.0, logger=self.logger)
            rows += 1

        n_atoms = data.n_atoms
        for mode, grid in zip(data.modes, grids, strict=True):
            if grid:
                mode.displacements = [tuple(grid.get(i, (0.0, 0.0, 0.0))) for i in range(1, n_atoms + 1)]

    # --- Thermochemistry --- #

    def _parse_thermochemistry(self, cursor: LineCursor, data: _MutableRecord) -> None:
        if cursor.find(THERMO_START) is None:
            # The banner is optional; the keys are searched from the top of the file.
            cursor.reset()
        start = cursor.tell()

        thermo = ThermochemistrySummary()
        for pos in range(start, len(cursor)):
            line = cursor.line_at(pos)
            for key, attr in THERMO_KEYS.items():
                if key in line:
                    value = value_after(line, key, logger=self.logger)
                    if value is not None:
                        setattr(thermo, attr, value)
                    break
        if thermo.has_data:
            data.thermochemistry = thermo
            self.logger.info("Found thermochemistry summary.")

