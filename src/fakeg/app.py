"""Conversion driver: one input log in, one Gaussian-format file out."""

import os
from pathlib import Path

from fakeg.config import APP_SPECS, DEFAULT_PROGRAM, ProgramInfo, RenderSettings
from fakeg.parsers import Dialect, get_parser
from fakeg.typing import ComputationRecord
from fakeg.utils import logger
from fakeg.visualize import plot_optimization_progress
from fakeg.writers.gaussian import GaussianWriter, derive_output_path


def ensure_parent_dir(path: str | Path) -> None:
    parent = os.path.dirname(os.path.abspath(os.fspath(path)))
    os.makedirs(parent, exist_ok=True)


def describe_record(record: ComputationRecord) -> list[str]:
    """Human-readable summary lines logged after a successful parse."""
    final = record.final_step
    lines = [f"Steps: {len(record.steps)}", f"Atoms: {record.n_atoms}"]
    if final is not None:
        lines.append(f"Final energy: {final.energy:.8f} Eh")
        if record.has_optimization:
            lines.append(f"Final step converged: {'YES' if final.converged else 'NO'}")
    if record.has_frequencies:
        n_imaginary = sum(1 for mode in record.modes if mode.frequency < 0)
        lines.append(f"Vibrational modes: {len(record.modes)} ({n_imaginary} imaginary)")
    if record.thermochemistry is not None:
        lines.append("Thermochemistry: present")
    if record.has_tddft:
        n_states = sum(len(block.states) for block in record.tddft)
        lines.append(f"Excited states: {n_states} in {sum(b.present for b in record.tddft)} steps")
    if record.has_charge_spin:
        lines.append(f"Charge: {record.charge}, multiplicity: {record.multiplicity}")
    return lines


def convert(
    input_path: str | Path,
    dialect: Dialect | str,
    output_path: str | Path | None = None,
    settings: RenderSettings | None = None,
    program: ProgramInfo | None = None,
    plot_path: str | Path | None = None,
) -> bool:
    """Convert `input_path` written in `dialect` into a Gaussian-format log.

    Args:
        input_path: Log or trajectory to read.
        dialect: One of the supported dialects.
        output_path: Destination; defaults to the input name with '_fake' before the extension.
        settings: Number formatting; the dialect's block width is applied on top.
        program: Identification printed in the banner.
        plot_path: Optional HTML file for the optimization-progress figure.

    Returns:
        True when the output was written. On False no output file is left behind.
    """
    dialect = Dialect(dialect)
    spec = APP_SPECS[dialect]
    parser = get_parser(dialect)
    program = program if program is not None else DEFAULT_PROGRAM
    settings = (settings if settings is not None else RenderSettings()).with_block_width(spec.block_width)
    output_path = os.fspath(output_path) if output_path is not None else derive_output_path(input_path)

    logger.info(f"{spec.program_name}: {spec.description}")
    logger.info(f"Input:  {input_path}")
    logger.info(f"Output: {output_path}")

    # validate() and parse() report their own failures.
    if not parser.validate(input_path):
        return False
    try:
        ensure_parent_dir(output_path)
        with open(input_path, encoding="utf-8", errors="replace") as stream:
            record, ok = parser.parse(stream)
    except OSError as e:
        logger.error(f"{spec.program_name} failed: {e}")
        return False
    if not ok:
        return False

    for line in describe_record(record):
        logger.info(line)

    writer = GaussianWriter(settings=settings, program=program, source=f"{parser.name()} parser {parser.version()}")
    if not writer.render(record, output_path):
        return False

    if plot_path is not None:
        _write_plot(record, plot_path)

    logger.info(f"Successfully generated output file: {output_path}")
    return True


def _write_plot(record: ComputationRecord, plot_path: str | Path) -> None:
    try:
        ensure_parent_dir(plot_path)
        plot_optimization_progress(record).write_html(os.fspath(plot_path))
    except OSError as e:
        logger.warning(f"Could not write plot '{plot_path}': {e}")
        return
    logger.info(f"Optimization progress plot written to {plot_path}")
