"""
Validation Module for the EEG Forward Test Harness

Provides configuration checks and geometry consistency checks between the
numerical head model inputs and the analytical sphere model.
"""

from __future__ import annotations

from eeg_forward_test.validation.input_validators import (
    ConfigValidationResult,
    SolutionPairValidationResult,
    SphereModelValidationResult,
    validate_config_file,
    validate_solution_pair,
    validate_sphere_model,
)

__all__ = [
    "ConfigValidationResult",
    "SphereModelValidationResult",
    "SolutionPairValidationResult",
    "validate_config_file",
    "validate_sphere_model",
    "validate_solution_pair",
]
