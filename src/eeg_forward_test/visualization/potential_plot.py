"""
Electrode Potential Comparison Plot

Overlays analytical and numerical potentials per electrode, with the
pointwise difference in a second panel. Useful to spot whether errors
concentrate on a few electrodes (e.g. a bad projection onto the mesh)
or are spread over the whole montage.
"""

from __future__ import annotations

from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np

from eeg_forward_test.comparison.metrics import ComparisonMetrics
from .theme import COLORS, apply_dark_theme, setup_axis_style, verdict_color


def plot_electrode_potentials(
    analytical: np.ndarray,
    numerical: np.ndarray,
    path: Path | str | None = None,
    metrics: ComparisonMetrics | None = None,
    title: str = "ELECTRODE POTENTIALS",
    passed: bool | None = None,
):
    """
    Plot analytical vs numerical electrode potentials.

    Parameters
    ----------
    analytical : np.ndarray
        Reference potentials, shape (n_electrodes,).
    numerical : np.ndarray
        Numerical potentials, same shape.
    path : Path or str, optional
        If given, the figure is saved there and closed.
    metrics : ComparisonMetrics, optional
        Shown in the figure subtitle.
    title : str
        Title of the upper panel.
    passed : bool, optional
        Tolerance verdict; colors the subtitle green or red.

    Returns
    -------
    matplotlib.figure.Figure or Path
        The figure, or the saved path when ``path`` is given.
    """
    analytical = np.asarray(analytical, dtype=np.float64)
    numerical = np.asarray(numerical, dtype=np.float64)
    if analytical.shape != numerical.shape:
        raise ValueError(
            f"shape mismatch: analytical {analytical.shape}, numerical {numerical.shape}"
        )

    apply_dark_theme()
    fig, (ax_top, ax_bottom) = plt.subplots(2, 1, figsize=(10, 6), sharex=True)
    electrode_index = np.arange(analytical.size)

    ax_top.plot(electrode_index, analytical, color=COLORS["analytical"], lw=1.5, label="analytical")
    ax_top.plot(
        electrode_index, numerical, color=COLORS["numerical"], lw=1.0,
        ls="--", marker=".", label="numerical",
    )
    ax_top.set_ylabel("Potential")
    ax_top.legend(loc="upper right", fontsize=8)
    setup_axis_style(ax_top, title)

    ax_bottom.bar(electrode_index, numerical - analytical, color=COLORS["difference"])
    ax_bottom.set_xlabel("Electrode")
    ax_bottom.set_ylabel("Difference")
    setup_axis_style(ax_bottom, "NUMERICAL - ANALYTICAL")

    subtitle = []
    if metrics is not None:
        subtitle.append(
            f"RE = {metrics.relative_error:.4f}   "
            f"MAG = {metrics.magnitude_error:.4f}   "
            f"RDM = {metrics.relative_difference_measure:.4f}"
        )
    if passed is not None:
        subtitle.append("PASS" if passed else "FAIL")
    if subtitle:
        fig.suptitle(
            "   ".join(subtitle),
            color=verdict_color(passed),
            fontfamily="monospace",
            fontsize=10,
        )

    fig.tight_layout()

    if path is None:
        return fig

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, dpi=120)
    plt.close(fig)
    return path
