"""
Visualization Module

Contains shared theming and the electrode potential comparison plot.
"""

from .theme import COLORS, apply_dark_theme, setup_axis_style, verdict_color

__all__ = ["COLORS", "apply_dark_theme", "setup_axis_style", "verdict_color"]
