"""
Source Model Presets for the EEG Forward Test

Pre-configured source model parameter sets for the numerical driver.
Each preset is merged into the ``source_model`` section of the
configuration, so the same head model can be tested with several
source models by switching one name.

Usage:
    from eeg_forward_test.presets import PARTIAL_INTEGRATION, get_preset

    # Use preset directly
    params = PARTIAL_INTEGRATION

    # Or load by name
    params = get_preset("localized_subtraction")
"""

from __future__ import annotations

from typing import Any

# =============================================================================
# Preset Definitions
# =============================================================================


PARTIAL_INTEGRATION: dict[str, Any] = {
    "name": "Partial Integration",
    "description": (
        "Direct dipole load on the element containing the source. "
        "Cheapest model; accuracy degrades for sources close to a conductivity jump."
    ),
    "source_model": {
        "type": "partial_integration",
    },
}


VENANT: dict[str, Any] = {
    "name": "Saint Venant",
    "description": (
        "Multipolar monopole loads on mesh vertices around the source, "
        "matched to the dipole moments."
    ),
    "source_model": {
        "type": "venant",
        "numberOfMoments": 3,
        "referenceLength": 20,
        "weightingExponent": 1,
        "relaxationFactor": 1e-6,
        "mixedMoments": True,
        "restrict": True,
        "initialization": "closest_vertex",
    },
}


LOCALIZED_SUBTRACTION: dict[str, Any] = {
    "name": "Localized Subtraction",
    "description": (
        "Subtraction of the singular potential restricted to a patch around "
        "the source. Accurate for highly eccentric sources at moderate cost."
    ),
    "source_model": {
        "type": "localized_subtraction",
        "restrict": False,
        "initialization": "single_element",
        "intorderadd_eeg_patch": 0,
        "intorderadd_eeg_boundary": 0,
        "intorderadd_eeg_transition": 0,
        "extensions": "vertex vertex",
    },
}


SUBTRACTION: dict[str, Any] = {
    "name": "Full Subtraction",
    "description": (
        "Subtraction of the singular potential on the whole domain. "
        "Most accurate reference model, and the most expensive."
    ),
    "source_model": {
        "type": "subtraction",
        "intorderadd": 2,
        "intorderadd_lb": 2,
    },
}


# =============================================================================
# Preset Registry
# =============================================================================


PRESETS: dict[str, dict[str, Any]] = {
    "partial_integration": PARTIAL_INTEGRATION,
    "venant": VENANT,
    "localized_subtraction": LOCALIZED_SUBTRACTION,
    "subtraction": SUBTRACTION,
}


def list_presets() -> list[str]:
    """
    List all available preset names.

    Examples
    --------
    >>> list_presets()
    ['partial_integration', 'venant', 'localized_subtraction', 'subtraction']
    """
    return list(PRESETS.keys())


def get_preset(name: str) -> dict[str, Any]:
    """
    Get a preset by name.

    Parameters
    ----------
    name : str
        Preset name (case-insensitive, spaces and dashes accepted).

    Returns
    -------
    dict
        Preset dictionary (a deep enough copy to be modified freely).

    Raises
    ------
    KeyError
        If preset name not found.

    Examples
    --------
    >>> get_preset("Localized Subtraction")["source_model"]["type"]
    'localized_subtraction'
    """
    normalized = name.strip().lower().replace(" ", "_").replace("-", "_")

    if normalized not in PRESETS:
        available = ", ".join(list_presets())
        raise KeyError(
            f"Preset '{name}' not found. Available presets: {available}"
        )

    preset = dict(PRESETS[normalized])
    preset["source_model"] = dict(preset["source_model"])
    return preset


def get_preset_names_and_descriptions() -> list[tuple[str, str, str]]:
    """
    Get all preset names with their display names and descriptions.

    Returns
    -------
    list[tuple[str, str, str]]
        List of (key, display_name, description) tuples.
    """
    result = []
    for key, preset in PRESETS.items():
        result.append((key, preset["name"], preset["description"]))
    return result


def apply_preset(config: dict[str, Any], name: str) -> dict[str, Any]:
    """Return a copy of config with its source_model replaced by the preset."""
    # Import here to avoid circular imports
    from eeg_forward_test.config import merge_config

    preset = get_preset(name)
    merged = merge_config(config, {})
    merged["source_model"] = preset["source_model"]
    return merged
