"""
Source Model Presets

Pre-configured source model parameter sets for the numerical driver.
"""

from __future__ import annotations

from eeg_forward_test.presets.source_models import (
    LOCALIZED_SUBTRACTION,
    PARTIAL_INTEGRATION,
    PRESETS,
    SUBTRACTION,
    VENANT,
    apply_preset,
    get_preset,
    get_preset_names_and_descriptions,
    list_presets,
)

__all__ = [
    "PARTIAL_INTEGRATION",
    "VENANT",
    "LOCALIZED_SUBTRACTION",
    "SUBTRACTION",
    "PRESETS",
    "apply_preset",
    "get_preset",
    "get_preset_names_and_descriptions",
    "list_presets",
]
