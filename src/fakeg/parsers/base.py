import logging
import re
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Protocol, TextIO

from fakeg.exceptions import ParsingError
from fakeg.parsers.cursor import LineCursor
from fakeg.typing import Atom, ComputationRecord, OptimizationStep, _MutableRecord
from fakeg.utils import logger as package_logger

FLOAT_PAT = re.compile(r"[-+]?(?:\d+\.\d*|\.\d+|\d+)(?:[eEdD][-+]?\d+)?")
INT_PAT = re.compile(r"^[-+]?\d+$")
SEPARATOR_PAT = re.compile(r"^\s*-{5,}\s*$")

# Atomic units; applied to every dialect regardless of the program's own criteria.
CONVERGENCE_THRESHOLDS: Mapping[str, float] = {
    "rms_force": 3.0e-4,
    "max_force": 4.5e-4,
    "rms_displacement": 1.2e-3,
    "max_displacement": 1.8e-3,
}


def is_converged(rms_force: float, max_force: float, rms_displacement: float, max_displacement: float) -> bool:
    """True when every metric is strictly below its threshold."""
    return (
        rms_force < CONVERGENCE_THRESHOLDS["rms_force"]
        and max_force < CONVERGENCE_THRESHOLDS["max_force"]
        and rms_displacement < CONVERGENCE_THRESHOLDS["rms_displacement"]
        and max_displacement < CONVERGENCE_THRESHOLDS["max_displacement"]
    )


def classify_step(step: OptimizationStep) -> None:
    step.converged = is_converged(step.rms_force, step.max_force, step.rms_displacement, step.max_displacement)


def to_float(
    token: str, default: float | None = None, logger: logging.Logger | None = None
) -> float | None:
    """Parse a number, accepting Fortran 'D' exponents. Returns `default` when malformed."""
    try:
        return float(token.replace("D", "E").replace("d", "e"))
    except ValueError:
        log = logger if logger is not None else package_logger
        log.debug(f"Could not convert '{token}' to float, using {default}.")
        return default


def floats_in(line: str) -> list[float]:
    """All numeric tokens of a line, in order."""
    return [float(m.replace("D", "E").replace("d", "e")) for m in FLOAT_PAT.findall(line)]


def is_int_token(token: str) -> bool:
    return INT_PAT.match(token) is not None


def parse_atom_line(line: str) -> Atom | None:
    """`symbol x y z`, ignoring any trailing columns. None when the line is not an atom row."""
    tokens = line.split()
    if len(tokens) < 4 or not tokens[0][0].isalpha():
        return None
    try:
        x, y, z = (float(t) for t in tokens[1:4])
    except ValueError:
        return None
    return Atom(symbol=tokens[0], x=x, y=y, z=z)


def step_bounds(starts: Sequence[int], end: int) -> list[tuple[int, int]]:
    """(begin, end) line ranges between consecutive step markers."""
    bounds = []
    for i, start in enumerate(starts):
        stop = starts[i + 1] if i + 1 < len(starts) else end
        bounds.append((start, max(start, stop)))
    return bounds


def first_position(
    cursor: LineCursor, markers: Sequence[str | re.Pattern[str]], default: int, after: int = 0
) -> int:
    """Earliest line at or past `after` holding any of `markers`, or `default`."""
    positions = [pos for marker in markers for pos in cursor.find_all(marker) if pos >= after]
    return min(positions, default=default)


class SourceParser(Protocol):
    """Capability shared by the four log dialects."""

    def parse(self, stream: TextIO) -> tuple[ComputationRecord, bool]:
        """Populate a record from a text stream; False when no geometry was found."""
        ...

    def validate(self, path: str | Path) -> bool:
        """Liveness check only: can the file be opened for reading."""
        ...

    def name(self) -> str: ...

    def version(self) -> str: ...


class LogParser:
    """Parse boundary shared by the dialect parsers.

    Subclasses implement `_parse(cursor, data)`, raising ParsingError when no
    usable geometry exists. `parse()` converts that into a False result.
    """

    NAME: str = ""
    VERSION: str = "1.0.0"

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self.logger = logger if logger is not None else package_logger

    def name(self) -> str:
        return self.NAME

    def version(self) -> str:
        return self.VERSION

    def validate(self, path: str | Path) -> bool:
        try:
            with open(path, encoding="utf-8", errors="replace"):
                return True
        except OSError as e:
            self.logger.error(f"Cannot open input file '{path}': {e}")
            return False

    def parse(self, stream: TextIO) -> tuple[ComputationRecord, bool]:
        cursor = LineCursor.from_stream(stream)
        data = _MutableRecord()
        self.logger.debug(f"{self.NAME} parser: read {len(cursor)} lines.")
        try:
            self._parse(cursor, data)
            if not data.steps:
                raise ParsingError("no geometry with at least one atom was found")
        except ParsingError as e:
            self.logger.error(f"{self.NAME} parsing failed: {e}")
            return ComputationRecord.from_mutable(data), False
        record = ComputationRecord.from_mutable(data)
        self.logger.debug(f"{self.NAME} parsing finished: {record!r}")
        return record, True

    def _parse(self, cursor: LineCursor, data: _MutableRecord) -> None:
        raise NotImplementedError


def value_after(line: str, key: str, logger: logging.Logger | None = None) -> float | None:
    """First number following `key` in `line`."""
    _, _, rest = line.partition(key)
    match = FLOAT_PAT.search(rest)
    return to_float(match.group(0), logger=logger) if match else None
