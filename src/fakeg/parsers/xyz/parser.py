import logging

from fakeg.parsers.base import LogParser, is_int_token, parse_atom_line
from fakeg.parsers.cursor import LineCursor
from fakeg.parsers.xyz.comment import infer_charge_spin
from fakeg.parsers.xyz.energy import EnergyPipeline
from fakeg.typing import Atom, OptimizationStep, _MutableRecord

# Frame energy when the comment line carries none. Kept distinct from a real 0.0.
MISSING_ENERGY = -100.0


class XyzParser(LogParser):
    """Reads multi-frame XYZ trajectories; every frame becomes one step."""

    NAME = "XYZ"
    VERSION = "1.0.0"

    def __init__(self, logger: logging.Logger | None = None) -> None:
        super().__init__(logger)
        self.energy_pipeline = EnergyPipeline(logger=self.logger)

    def _parse(self, cursor: LineCursor, data: _MutableRecord) -> None:
        self.energy_pipeline.reset()
        data.has_optimization = True

        frame = 0
        while (line := cursor.readline()) is not None:
            count_token = line.strip()
            if not count_token:
                continue
            if not is_int_token(count_token):
                self.logger.warning(f"Expected an atom count, got '{count_token}'; skipping line.")
                continue

            frame += 1
            comment = cursor.readline() or ""
            atoms = self._read_frame_atoms(cursor, int(count_token))

            if frame == 1 and not data.has_charge_spin:
                pair = infer_charge_spin(comment)
                if pair is not None:
                    data.set_charge_spin(*pair)
                    self.logger.info(f"Charge and multiplicity from first comment line: {pair[0]} {pair[1]}")

            energy = self.energy_pipeline.extract(comment)
            step = OptimizationStep(index=frame, atoms=atoms, energy=MISSING_ENERGY if energy is None else energy)
            if len(atoms) != int(count_token):
                self.logger.warning(f"Frame {frame} declares {count_token} atoms but has {len(atoms)}.")
            data.add_step(step)

        self.logger.info(f"Read {frame} frames, kept {len(data.steps)}.")

    def _read_frame_atoms(self, cursor: LineCursor, count: int) -> list[Atom]:
        """Up to `count` atom lines; stops early at a blank or atom-count line."""
        atoms: list[Atom] = []
        for _ in range(count):
            line = cursor.peek()
            if line is None or not line.strip() or is_int_token(line.strip()):
                break
            cursor.readline()
            atom = parse_atom_line(line)
            if atom is None:
                self.logger.debug(f"Skipping malformed atom line: '{line.strip()}'")
                continue
            atoms.append(atom)
        return atoms
