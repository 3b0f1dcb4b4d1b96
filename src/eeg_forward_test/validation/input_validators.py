"""
Input Validators for the EEG Forward Test Harness

Provides validation for:
- Configuration files (YAML or DUNE INI)
- Sphere model geometry against the electrodes and dipoles
- Numerical/analytical solution pairs before comparison

A forward test that runs on inconsistent input does not crash; it just
reports a large error that is easy to misread as a solver regression.
These validators catch the usual causes up front and say how to fix them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import numpy as np

from eeg_forward_test.physics.constants import (
    DIM,
    ELECTRODE_SURFACE_TOLERANCE,
    HIGH_ECCENTRICITY_WARNING,
    NUMBER_OF_LAYERS,
)
from eeg_forward_test.physics.dipole import Dipole
from eeg_forward_test.physics.sphere_model import SphereModel


# =============================================================================
# Validation Result Types
# =============================================================================


@dataclass
class ConfigValidationResult:
    """Result of configuration file validation.

    Attributes
    ----------
    is_valid : bool
        True if config loaded and validated successfully.
    config : dict | None
        Loaded configuration (None if load failed).
    file_path : Path | None
        Path to the config file (None if using defaults).
    warnings : list[str]
        Non-fatal warnings (e.g., missing optional fields).
    errors : list[str]
        Fatal errors (e.g., parse failures).
    recovery_suggestions : list[str]
        Actionable suggestions for fixing issues.
    """

    is_valid: bool
    config: dict[str, Any] | None
    file_path: Path | None
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    recovery_suggestions: list[str] = field(default_factory=list)


@dataclass
class SphereModelValidationResult:
    """Result of checking electrodes and dipoles against the sphere model.

    Attributes
    ----------
    is_valid : bool
        False if any dipole lies outside the innermost sphere.
    max_eccentricity : float
        Largest dipole eccentricity.
    max_electrode_deviation : float
        Largest relative distance of an electrode from the outer surface.
    warnings, errors, recovery_suggestions : list[str]
        Diagnostics.
    """

    is_valid: bool
    max_eccentricity: float
    max_electrode_deviation: float
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    recovery_suggestions: list[str] = field(default_factory=list)


@dataclass
class SolutionPairValidationResult:
    """Result of checking a numerical/analytical pair before comparison."""

    is_valid: bool
    n_electrodes: int
    errors: list[str] = field(default_factory=list)


# =============================================================================
# Configuration File Validation
# =============================================================================

# Required sections in config
REQUIRED_CONFIG_SECTIONS = [
    "volume_conductor",
    "electrodes",
    "dipole",
    "analytic_solution",
    "output",
]

# Input files the harness reads itself (checked for existence)
REQUIRED_INPUT_FILES = [
    "electrodes.filename",
    "dipole.filename",
]


def _lookup(config: dict[str, Any], dotted_key: str) -> Any:
    node: Any = config
    for part in dotted_key.split("."):
        if not isinstance(node, dict) or part not in node:
            return None
        node = node[part]
    return node


def _array_length(value: Any) -> int | None:
    if value is None:
        return None
    if isinstance(value, str):
        return len(value.split())
    try:
        return len(value)
    except TypeError:
        return 1


def _conductivity_mismatch(config: dict[str, Any], base_dir: Path) -> str | None:
    """Compare explicit analytic conductivities with the head model's tensor file."""
    # Import here to avoid circular imports
    from eeg_forward_test.config import get_array
    from eeg_forward_test.fileio.readers import read_field_vectors

    explicit = _lookup(config, "analytic_solution.conductivities")
    tensors = _lookup(config, "volume_conductor.tensors.filename")
    if explicit is None or tensors is None:
        return None

    path = Path(str(tensors))
    if not path.is_absolute():
        path = base_dir / path
    try:
        analytic = get_array(config, "analytic_solution.conductivities", length=NUMBER_OF_LAYERS)
        head_model = read_field_vectors(path, dim=NUMBER_OF_LAYERS)[0]
    except (OSError, ValueError):
        # Missing files and bad lengths are reported separately
        return None

    if np.allclose(analytic, head_model, rtol=1e-9, atol=0.0):
        return None
    return (
        f"CONDUCTIVITY MISMATCH: analytic_solution.conductivities {analytic.tolist()} "
        f"differs from {path} {head_model.tolist()}; the comparison will measure "
        "the model difference, not the solver error."
    )


def validate_config_file(
    config_path: Path | str | None = None,
    strict: bool = False,
    check_files: bool = True,
    base_dir: Path | str | None = None,
) -> ConfigValidationResult:
    """
    Load and validate a configuration file.

    Provides graceful error handling with helpful messages for:
    - Missing files (falls back to defaults)
    - Malformed YAML/INI (syntax errors)
    - Missing sections, wrong array lengths and missing input files

    Parameters
    ----------
    config_path : Path or str, optional
        Path to config file. If None, uses default_test.yaml.
    strict : bool
        If True, treat warnings as errors. Default False.
    check_files : bool
        If True, check that referenced input files exist.
    base_dir : Path or str, optional
        Directory relative input paths are resolved against. Default is
        the current working directory, as for the driver.

    Returns
    -------
    ConfigValidationResult
        Validation result with loaded config and any issues found.

    Examples
    --------
    >>> result = validate_config_file("nonexistent.yaml")
    >>> result.is_valid
    True  # Falls back to defaults
    >>> len(result.warnings) > 0
    True
    """
    from eeg_forward_test.config import (
        DEFAULT_CONFIG_PATH,
        get_default_config,
        load_config_safe,
    )

    warnings = []
    errors = []
    suggestions = []

    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH
    else:
        config_path = Path(config_path)

    file_exists = config_path.exists()
    config, load_messages = load_config_safe(config_path)

    if not file_exists:
        warnings.append(
            f"CONFIG FILE NOT FOUND: '{config_path}' does not exist. "
            "Using built-in defaults."
        )
        suggestions.append(
            f"Create config file at '{config_path}' or copy configs/default_test.yaml."
        )
    elif load_messages:
        message = load_messages[0]
        if "empty" in message:
            warnings.append(
                f"CONFIG FILE EMPTY: '{config_path}' contains no data. "
                "Using built-in defaults."
            )
        else:
            errors.append(f"PARSE ERROR: {message}")
            suggestions.append(
                "Check syntax: YAML needs consistent indentation and colons "
                "after keys; INI needs 'key = value' lines under [section] headers."
            )

    defaults = get_default_config()
    for section in REQUIRED_CONFIG_SECTIONS:
        if section not in config:
            if strict:
                errors.append(
                    f"MISSING REQUIRED SECTION: '{section}' not found in config."
                )
            else:
                warnings.append(
                    f"MISSING SECTION: '{section}' not found. Using defaults."
                )
            config[section] = defaults[section]

    for key, expected in (
        ("analytic_solution.radii", NUMBER_OF_LAYERS),
        ("analytic_solution.center", DIM),
        ("analytic_solution.conductivities", NUMBER_OF_LAYERS),
    ):
        length = _array_length(_lookup(config, key))
        if length is not None and length != expected:
            errors.append(
                f"LENGTH ERROR: {key} has {length} entries, expected {expected}."
            )

    if _lookup(config, "analytic_solution.conductivities") is None and \
            _lookup(config, "volume_conductor.tensors.filename") is None:
        errors.append(
            "MISSING CONDUCTIVITIES: set analytic_solution.conductivities or "
            "volume_conductor.tensors.filename."
        )

    if check_files:
        base_dir = Path(base_dir) if base_dir is not None else Path.cwd()
        for key in REQUIRED_INPUT_FILES:
            value = _lookup(config, key)
            if value is None:
                errors.append(f"MISSING KEY: '{key}' is required.")
                continue
            path = Path(str(value))
            if not path.is_absolute():
                path = base_dir / path
            if not path.exists():
                message = f"INPUT FILE NOT FOUND: {key} = '{value}' ({path})."
                if strict:
                    errors.append(message)
                else:
                    warnings.append(message)
                suggestions.append(
                    f"Fix '{key}'; relative paths are resolved against {base_dir}."
                )

        mismatch = _conductivity_mismatch(config, base_dir)
        if mismatch:
            warnings.append(mismatch)
            suggestions.append(
                "Remove analytic_solution.conductivities to use the tensor file "
                "for both solvers."
            )

    is_valid = len(errors) == 0
    if strict:
        is_valid = is_valid and len(warnings) == 0

    return ConfigValidationResult(
        is_valid=is_valid,
        config=config,
        file_path=config_path if file_exists else None,
        warnings=warnings,
        errors=errors,
        recovery_suggestions=suggestions,
    )


# =============================================================================
# Sphere Model Consistency
# =============================================================================


def validate_sphere_model(
    model: SphereModel,
    electrodes: np.ndarray,
    dipoles: list[Dipole],
    electrode_tolerance: float = ELECTRODE_SURFACE_TOLERANCE,
    eccentricity_warning: float = HIGH_ECCENTRICITY_WARNING,
) -> SphereModelValidationResult:
    """
    Check that the test geometry matches the sphere model.

    Dipoles must lie strictly inside the innermost sphere, otherwise the
    analytical solution does not describe the same problem. Electrodes
    should lie on the outer sphere; the numerical driver projects them
    onto the mesh surface, so a large offset means the two solutions are
    evaluated at different points.

    Parameters
    ----------
    model : SphereModel
        Sphere geometry.
    electrodes : np.ndarray
        Electrode positions, shape (n_electrodes, 3).
    dipoles : list[Dipole]
        Dipoles under test.
    electrode_tolerance : float
        Allowed relative deviation |r - R_outer| / R_outer.
    eccentricity_warning : float
        Eccentricity above which a warning is issued.

    Returns
    -------
    SphereModelValidationResult
    """
    warnings = []
    errors = []
    suggestions = []

    eccentricities = np.array([model.eccentricity(dipole.position) for dipole in dipoles])
    max_eccentricity = float(eccentricities.max()) if eccentricities.size else 0.0

    outside = np.flatnonzero(eccentricities >= 1.0)
    if outside.size:
        errors.append(
            f"DIPOLE OUTSIDE BRAIN: dipole(s) {outside.tolist()} have eccentricity "
            f">= 1 (max {max_eccentricity:.4f}); the innermost radius is {model.inner_radius} mm."
        )
        suggestions.append(
            "Check analytic_solution.center and radii against the mesh coordinates."
        )

    marginal = np.flatnonzero((eccentricities > eccentricity_warning) & (eccentricities < 1.0))
    if marginal.size:
        warnings.append(
            f"HIGH ECCENTRICITY: {marginal.size} dipole(s) above {eccentricity_warning}; "
            "expect larger numerical errors near the conductivity jump."
        )

    electrodes = np.atleast_2d(np.asarray(electrodes, dtype=np.float64))
    deviations = np.abs(model.distances_from_center(electrodes) - model.outer_radius) / model.outer_radius
    max_deviation = float(deviations.max()) if deviations.size else 0.0

    off_surface = np.flatnonzero(deviations > electrode_tolerance)
    if off_surface.size:
        warnings.append(
            f"ELECTRODES OFF SURFACE: {off_surface.size} electrode(s) deviate more than "
            f"{electrode_tolerance * 100:.1f}% from the outer radius "
            f"(max {max_deviation * 100:.1f}%)."
        )
        suggestions.append(
            "Electrodes should lie on the outer sphere; check units (mm) and the sphere center."
        )

    return SphereModelValidationResult(
        is_valid=len(errors) == 0,
        max_eccentricity=max_eccentricity,
        max_electrode_deviation=max_deviation,
        warnings=warnings,
        errors=errors,
        recovery_suggestions=suggestions,
    )


# =============================================================================
# Solution Pair Validation
# =============================================================================


def validate_solution_pair(
    numerical: np.ndarray,
    analytical: np.ndarray,
) -> SolutionPairValidationResult:
    """
    Check that two solutions can be compared.

    Examples
    --------
    >>> validate_solution_pair([1.0, -1.0], [0.9, -0.9]).is_valid
    True
    >>> validate_solution_pair([1.0], [0.0, 0.0]).errors
    ['LENGTH MISMATCH: ...']
    """
    numerical = np.asarray(numerical, dtype=np.float64).ravel()
    analytical = np.asarray(analytical, dtype=np.float64).ravel()
    errors = []

    if numerical.size != analytical.size:
        errors.append(
            f"LENGTH MISMATCH: numerical has {numerical.size} values, "
            f"analytical has {analytical.size}."
        )

    for name, values in (("numerical", numerical), ("analytical", analytical)):
        if values.size == 0:
            errors.append(f"EMPTY SOLUTION: {name} solution has no values.")
            continue
        if not np.all(np.isfinite(values)):
            errors.append(f"NON-FINITE VALUES: {name} solution contains NaN or Inf.")
        elif not np.any(values):
            errors.append(f"ZERO SOLUTION: {name} solution is identically zero.")

    return SolutionPairValidationResult(
        is_valid=len(errors) == 0,
        n_electrodes=int(analytical.size),
        errors=errors,
    )
