from collections.abc import Sequence

import plotly.graph_objects as go
from plotly.graph_objs import Figure
from plotly.subplots import make_subplots

from fakeg.exceptions import ValidationError
from fakeg.parsers.base import CONVERGENCE_THRESHOLDS
from fakeg.typing import Atom, ComputationRecord
from fakeg.visualize.style import StyleName, apply_style, palette


def get_interatomic_distances(atoms: Sequence[Atom]) -> tuple[list[float], list[str]]:
    """Calculate all pairwise interatomic distances.

    Args:
        atoms: Atoms of one step

    Returns:
        Tuple of (distances, labels) with labels such as '1O-2H'
    """
    dists: list[float] = []
    labels: list[str] = []
    for i in range(len(atoms)):
        for j in range(i + 1, len(atoms)):
            dx = atoms[i].x - atoms[j].x
            dy = atoms[i].y - atoms[j].y
            dz = atoms[i].z - atoms[j].z
            dists.append((dx * dx + dy * dy + dz * dz) ** 0.5)
            labels.append(f"{i + 1}{atoms[i].symbol}-{j + 1}{atoms[j].symbol}")
    return dists, labels


def plot_optimization_progress(record: ComputationRecord, style: StyleName = "development") -> Figure:
    """Create a figure showing energy, force, displacement and geometry changes per step.

    Args:
        record: Parsed record with at least one step
        style: 'development' (dark) or 'publication'

    Returns:
        A plotly Figure with 4 subplots; dotted lines mark the convergence thresholds
    """
    if not record.steps:
        raise ValidationError("Record has no optimization steps to plot.")

    fig = make_subplots(
        rows=2,
        cols=2,
        subplot_titles=("Energy", "Force Convergence", "Displacement Convergence", "Geometry Changes"),
    )

    steps = [step.index for step in record.steps]
    energies = [step.energy for step in record.steps]
    colors = palette(4)

    # fmt:off
    fig.add_trace(go.Scatter(x=steps, y=energies, mode="lines+markers", name="Energy", line=dict(color=colors[0])), row=1, col=1)

    fig.add_trace(go.Scatter(x=steps, y=[s.rms_force for s in record.steps], mode="lines+markers", name="RMS Force", line=dict(color=colors[1])), row=1, col=2)
    fig.add_trace(go.Scatter(x=steps, y=[s.max_force for s in record.steps], mode="lines+markers", name="Max Force", line=dict(color=colors[2])), row=1, col=2)
    fig.add_hline(y=CONVERGENCE_THRESHOLDS["rms_force"], line_dash="dot", line_color=colors[1], row=1, col=2)
    fig.add_hline(y=CONVERGENCE_THRESHOLDS["max_force"], line_dash="dot", line_color=colors[2], row=1, col=2)

    fig.add_trace(go.Scatter(x=steps, y=[s.rms_displacement for s in record.steps], mode="lines+markers", name="RMS Displacement", line=dict(color=colors[1])), row=2, col=1)
    fig.add_trace(go.Scatter(x=steps, y=[s.max_displacement for s in record.steps], mode="lines+markers", name="Max Displacement", line=dict(color=colors[2])), row=2, col=1)
    fig.add_hline(y=CONVERGENCE_THRESHOLDS["rms_displacement"], line_dash="dot", line_color=colors[1], row=2, col=1)
    fig.add_hline(y=CONVERGENCE_THRESHOLDS["max_displacement"], line_dash="dot", line_color=colors[2], row=2, col=1)
    # fmt:on

    # Distances are only comparable between steps with the same atom count.
    n_atoms = record.n_atoms
    same_size = [step for step in record.steps if len(step.atoms) == n_atoms]
    distances = [get_interatomic_distances(step.atoms)[0] for step in same_size]
    labels = get_interatomic_distances(record.steps[-1].atoms)[1]
    distance_colors = palette(len(labels), "Dark24")
    for i, label in enumerate(labels):
        fig.add_trace(
            go.Scatter(
                x=[step.index for step in same_size],
                y=[d[i] for d in distances],
                mode="lines+markers",
                name=label,
                line=dict(color=distance_colors[i]),
            ),
            row=2,
            col=2,
        )

    fig.update_layout(height=800, width=1200, showlegend=True, title_text="Geometry Optimization Progress")
    fig.update_xaxes(title_text="Step", row=2, col=1)
    fig.update_xaxes(title_text="Step", row=2, col=2)
    fig.update_yaxes(title_text="Energy (Eh)", row=1, col=1)
    fig.update_yaxes(title_text="Force (a.u.)", row=1, col=2)
    fig.update_yaxes(title_text="Displacement (a.u.)", row=2, col=1)
    fig.update_yaxes(title_text="Distance (Å)", row=2, col=2)
    apply_style(fig, style)

    return fig


def plot_ir_spectrum(record: ComputationRecord, style: StyleName = "development") -> Figure:
    """Stick IR spectrum of the record's vibrational modes."""
    if not record.modes:
        raise ValidationError("Record has no vibrational modes to plot.")

    x: list[float | None] = []
    y: list[float | None] = []
    for mode in record.modes:
        # None breaks the line between sticks.
        x += [mode.frequency, mode.frequency, None]
        y += [0.0, mode.ir_intensity, None]

    fig = go.Figure(
        go.Scatter(
            x=x,
            y=y,
            mode="lines",
            name="IR intensity",
            line=dict(color=palette(1)[0], width=2),
        )
    )
    fig.update_layout(
        height=500,
        width=900,
        title_text="IR Spectrum",
        xaxis_title="Frequency (cm⁻¹)",
        yaxis_title="Intensity (km/mol)",
    )
    fig.update_xaxes(autorange="reversed")
    apply_style(fig, style)

    return fig
