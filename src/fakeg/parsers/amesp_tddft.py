import logging
import re

from fakeg.parsers.base import to_float
from fakeg.parsers.cursor import LineCursor
from fakeg.typing import ExcitedState, OrbitalTransition, TDDFTBlock

# --- AMESP TDDFT Block Patterns ---
TDDFT_HEADER_PAT = re.compile(r"Excitation energies and oscillator strengths")
EXCITED_STATE_PAT = re.compile(
    r"Excited State\s+(\d+):\s+(\S+)\s+(-?\d+\.\d+)\s+eV\s+(-?\d+\.\d+)\s+nm\s+f=\s*(-?\d+\.\d+)"
    r"(?:\s+<S\*\*2>=\s*(-?\d+\.\d+))?"
)
TRANSITION_PAT = re.compile(r"^\s*(\d+)([AB]?)\s*(->|<-)\s*(\d+)([AB]?)\s+(-?\d+\.\d+)\s*$")
TOTAL_ENERGY_PAT = re.compile(r"Total Energy, E\(.*?\)\s*=\s*(-?\d+\.\d+)")
ANNOTATION_PAT = re.compile(r"^\s*(This state for optimization.*?)\s*$")

TRACKED_STATE_TOLERANCE = 1.0e-6


def parse_tddft_block(
    cursor: LineCursor,
    begin: int,
    end: int,
    reference_energy: float | None,
    logger: logging.Logger,
) -> TDDFTBlock | None:
    """Parse the excited-state block inside lines [begin, end) of one optimization step.

    A state is tracked when its total energy matches `reference_energy`
    (the step's E[Eexc]) within TRACKED_STATE_TOLERANCE.
    """
    cursor.seek(begin)
    if cursor.find(TDDFT_HEADER_PAT, end=end) is None:
        return None

    block = TDDFTBlock()
    current: ExcitedState | None = None
    while cursor.tell() < end:
        line = cursor.readline()
        if line is None:
            break

        match_state = EXCITED_STATE_PAT.search(line)
        if match_state:
            current = _state_from_match(match_state, logger)
            block.states.append(current)
            continue

        if not line.strip():
            continue

        if current is None:
            # Text between the header and the first state, e.g. a units line.
            continue

        match_trans = TRANSITION_PAT.match(line)
        if match_trans:
            current.transitions.append(_transition_from_match(match_trans))
            continue

        match_note = ANNOTATION_PAT.match(line)
        if match_note:
            current.annotation = match_note.group(1)
            continue

        match_total = TOTAL_ENERGY_PAT.search(line)
        if match_total:
            current.total_energy = float(match_total.group(1))
            if reference_energy is not None and abs(current.total_energy - reference_energy) < TRACKED_STATE_TOLERANCE:
                current.tracked = True
                logger.debug(f"Excited state {current.index} is the tracked state.")
            continue

        # First unrelated line closes the block.
        break

    if not block.states:
        logger.debug("Excitation header found without any excited state.")
        return None
    logger.debug(f"Parsed {len(block.states)} excited states.")
    return block


def _state_from_match(match: re.Match[str], logger: logging.Logger) -> ExcitedState:
    s_squared = to_float(match.group(6), 0.0, logger=logger) if match.group(6) is not None else 0.0
    return ExcitedState(
        index=int(match.group(1)),
        symmetry=match.group(2),
        energy_ev=float(match.group(3)),
        wavelength_nm=float(match.group(4)),
        oscillator_strength=float(match.group(5)),
        s_squared=s_squared,
    )


def _transition_from_match(match: re.Match[str]) -> OrbitalTransition:
    spin_label = match.group(2) or match.group(5)
    return OrbitalTransition(
        source=int(match.group(1)),
        destination=int(match.group(4)),
        coefficient=float(match.group(6)),
        spin="beta" if spin_label == "B" else "alpha",
        direction="excitation" if match.group(3) == "->" else "deexcitation",
    )
