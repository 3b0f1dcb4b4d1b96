"""
Dark Lab Theme for Forward Test Figures

Color palette and matplotlib styling shared by all comparison plots.

Usage:
    from eeg_forward_test.visualization.theme import COLORS, apply_dark_theme, setup_axis_style

    apply_dark_theme()
    fig, ax = plt.subplots()
    setup_axis_style(ax, "My Title")
"""

from __future__ import annotations

import matplotlib.pyplot as plt


# =============================================================================
# COLOR PALETTE
# =============================================================================

COLORS: dict[str, str] = {
    # Backgrounds
    "background": "#0f0f0f",
    "panel_bg": "#12121a",
    "grid_line": "#1a1a2e",

    # Text
    "text_primary": "#E0E0E0",
    "text_secondary": "#808080",
    "text_accent": "#00FFFF",

    # Tolerance verdict
    "pass_green": "#00FF88",
    "fail_red": "#FF3333",

    # Solution traces
    "analytical": "#4ECDC4",
    "numerical": "#FFD93D",
    "difference": "#FF6B6B",
}


def verdict_color(passed: bool | None) -> str:
    """Color for a tolerance verdict; neutral text color when none was checked."""
    if passed is None:
        return COLORS["text_primary"]
    return COLORS["pass_green"] if passed else COLORS["fail_red"]


def apply_dark_theme() -> None:
    """Switch matplotlib to the dark palette for all following figures."""
    plt.style.use("dark_background")
    muted = COLORS["text_secondary"]
    plt.rcParams.update({
        "figure.facecolor": COLORS["background"],
        "savefig.facecolor": COLORS["background"],
        "axes.facecolor": COLORS["panel_bg"],
        "axes.edgecolor": COLORS["grid_line"],
        "axes.labelcolor": muted,
        "xtick.color": muted,
        "ytick.color": muted,
        "xtick.labelsize": 8,
        "ytick.labelsize": 8,
        "grid.color": COLORS["grid_line"],
        "grid.alpha": 0.2,
        "text.color": COLORS["text_primary"],
    })


def setup_axis_style(ax, title: str) -> None:
    """
    Title a panel in the monospace accent style and switch on its grid.

    Parameters
    ----------
    ax : matplotlib.axes.Axes
        Panel to style.
    title : str
        Panel title.
    """
    ax.set_title(
        title,
        loc="left",
        color=COLORS["text_accent"],
        fontsize=10,
        fontweight="bold",
        fontfamily="monospace",
    )
    ax.grid(True)
    ax.spines[["top", "right"]].set_visible(False)
