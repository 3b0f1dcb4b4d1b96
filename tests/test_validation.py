"""
Tests for the Forward Test Validation Module

Tests config file validation, sphere geometry consistency checks and the
solution pair checks run before comparison.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from conftest import sphere_points
from eeg_forward_test.config import save_config
from eeg_forward_test.physics.constants import (
    DEFAULT_CONDUCTIVITIES_S_MM,
    DEFAULT_SPHERE_CENTER_MM,
    DEFAULT_SPHERE_RADII_MM,
)
from eeg_forward_test.physics.dipole import Dipole
from eeg_forward_test.physics.sphere_model import SphereModel
from eeg_forward_test.validation import (
    ConfigValidationResult,
    validate_config_file,
    validate_solution_pair,
    validate_sphere_model,
)


# =============================================================================
# Config File Validation Tests
# =============================================================================


class TestConfigFileValidation:
    """Tests for configuration file validation."""

    def test_missing_file_falls_back(self, tmp_path: Path) -> None:
        """Test that a missing config file uses defaults with a warning."""
        result = validate_config_file(tmp_path / "missing.yaml", check_files=False)

        assert isinstance(result, ConfigValidationResult)
        assert result.is_valid
        assert result.file_path is None
        assert any("NOT FOUND" in w for w in result.warnings)

    def test_empty_file(self, tmp_path: Path) -> None:
        """Test that an empty config file warns and uses defaults."""
        path = tmp_path / "empty.yaml"
        path.write_text("")

        result = validate_config_file(path, check_files=False)

        assert result.is_valid
        assert any("EMPTY" in w for w in result.warnings)

    def test_malformed_yaml(self, tmp_path: Path) -> None:
        """Test that a parse error is reported with a suggestion."""
        path = tmp_path / "bad.yaml"
        path.write_text("electrodes: [unclosed\n")

        result = validate_config_file(path, check_files=False)

        assert not result.is_valid
        assert any("PARSE ERROR" in e for e in result.errors)
        assert result.recovery_suggestions

    def test_valid_case(self, sphere_case) -> None:
        path = sphere_case["dir"] / "test.yaml"
        save_config(sphere_case["config"], path)

        result = validate_config_file(path)

        assert result.is_valid
        assert result.errors == []
        assert result.file_path == path

    def test_missing_section_strict(self, sphere_case) -> None:
        """Strict mode turns a missing section into an error."""
        del sphere_case["config"]["output"]
        path = sphere_case["dir"] / "test.yaml"
        save_config(sphere_case["config"], path)

        lenient = validate_config_file(path)
        strict = validate_config_file(path, strict=True)

        assert lenient.is_valid
        assert "output" in lenient.config
        assert not strict.is_valid
        assert any("output" in e for e in strict.errors)

    @pytest.mark.parametrize("key, value", [
        ("radii", [92, 86, 80]),
        ("center", "127 127"),
        ("conductivities", [0.00043, 0.00001]),
    ])
    def test_length_errors(self, sphere_case, key, value) -> None:
        sphere_case["config"]["analytic_solution"][key] = value
        path = sphere_case["dir"] / "test.yaml"
        save_config(sphere_case["config"], path)

        result = validate_config_file(path)

        assert not result.is_valid
        assert any(f"analytic_solution.{key}" in e for e in result.errors)

    def test_missing_conductivities(self, sphere_case) -> None:
        del sphere_case["config"]["volume_conductor"]["tensors"]
        path = sphere_case["dir"] / "test.yaml"
        save_config(sphere_case["config"], path)

        result = validate_config_file(path)

        assert any("MISSING CONDUCTIVITIES" in e for e in result.errors)

    def test_conductivity_mismatch_warns(self, sphere_case) -> None:
        """Explicit analytic conductivities that disagree with the tensor file."""
        sphere_case["config"]["analytic_solution"]["conductivities"] = [
            0.00043, 0.0000042, 0.00179, 0.00033,
        ]
        path = sphere_case["dir"] / "test.yaml"
        save_config(sphere_case["config"], path)

        lenient = validate_config_file(path)
        strict = validate_config_file(path, strict=True)

        assert lenient.is_valid
        assert any("CONDUCTIVITY MISMATCH" in w for w in lenient.warnings)
        assert not strict.is_valid

    def test_matching_conductivities_accepted(self, sphere_case) -> None:
        sphere_case["config"]["analytic_solution"]["conductivities"] = list(
            DEFAULT_CONDUCTIVITIES_S_MM
        )
        path = sphere_case["dir"] / "test.yaml"
        save_config(sphere_case["config"], path)

        result = validate_config_file(path, strict=True)

        assert result.is_valid
        assert result.warnings == []

    def test_missing_input_file(self, sphere_case) -> None:
        (sphere_case["dir"] / "dipoles.txt").unlink()
        path = sphere_case["dir"] / "test.yaml"
        save_config(sphere_case["config"], path)

        lenient = validate_config_file(path)
        strict = validate_config_file(path, strict=True)

        assert lenient.is_valid
        assert any("dipole.filename" in w for w in lenient.warnings)
        assert not strict.is_valid

    def test_relative_input_files(self, sphere_case) -> None:
        """Relative input paths resolve against base_dir."""
        config = sphere_case["config"]
        config["electrodes"]["filename"] = "electrodes.txt"
        config["dipole"]["filename"] = "dipoles.txt"
        path = sphere_case["dir"] / "test.yaml"
        save_config(config, path)

        assert validate_config_file(path, strict=True, base_dir=sphere_case["dir"]).is_valid
        assert not validate_config_file(
            path, strict=True, base_dir=sphere_case["dir"] / "elsewhere"
        ).is_valid

    def test_shipped_ini_config(self) -> None:
        path = Path(__file__).parent.parent / "configs" / "configs.ini"

        result = validate_config_file(path, check_files=False)

        assert result.is_valid
        assert result.config["source_model"]["type"] == "partial_integration"


# =============================================================================
# Sphere Model Consistency Tests
# =============================================================================


class TestSphereModelValidation:
    """Tests for dipole and electrode placement checks."""

    @pytest.fixture
    def model(self) -> SphereModel:
        return SphereModel(
            DEFAULT_SPHERE_RADII_MM, DEFAULT_SPHERE_CENTER_MM, DEFAULT_CONDUCTIVITIES_S_MM
        )

    @staticmethod
    def dipole_at(eccentricity: float) -> Dipole:
        center = np.array(DEFAULT_SPHERE_CENTER_MM, dtype=float)
        return Dipole(center + [0.0, 0.0, eccentricity * 78.0], [0.0, 0.0, 1.0])

    def test_consistent_geometry(self, model) -> None:
        result = validate_sphere_model(model, sphere_points(32), [self.dipole_at(0.5)])

        assert result.is_valid
        assert result.warnings == []
        assert np.isclose(result.max_eccentricity, 0.5)
        assert result.max_electrode_deviation < 1e-12

    def test_dipole_outside_brain(self, model) -> None:
        result = validate_sphere_model(
            model, sphere_points(32), [self.dipole_at(0.5), self.dipole_at(1.05)]
        )

        assert not result.is_valid
        assert "[1]" in result.errors[0]

    def test_high_eccentricity_warns(self, model) -> None:
        result = validate_sphere_model(model, sphere_points(32), [self.dipole_at(0.995)])

        assert result.is_valid
        assert any("HIGH ECCENTRICITY" in w for w in result.warnings)

    def test_electrodes_off_surface(self, model) -> None:
        electrodes = sphere_points(32, radius=80.0)

        result = validate_sphere_model(model, electrodes, [self.dipole_at(0.5)])

        assert result.is_valid
        assert any("OFF SURFACE" in w for w in result.warnings)
        assert np.isclose(result.max_electrode_deviation, 12.0 / 92.0)


# =============================================================================
# Solution Pair Tests
# =============================================================================


class TestSolutionPairValidation:
    """Tests for the pre-comparison checks."""

    def test_valid_pair(self) -> None:
        result = validate_solution_pair([1.0, -1.0], [0.9, -0.9])
        assert result.is_valid
        assert result.n_electrodes == 2

    def test_length_mismatch(self) -> None:
        result = validate_solution_pair([1.0], [0.0, 1.0])
        assert not result.is_valid
        assert "LENGTH MISMATCH" in result.errors[0]

    def test_non_finite(self) -> None:
        result = validate_solution_pair([np.nan, 1.0], [1.0, -1.0])
        assert any("NON-FINITE" in e for e in result.errors)

    def test_zero_solution(self) -> None:
        result = validate_solution_pair([1.0, -1.0], [0.0, 0.0])
        assert any("ZERO SOLUTION" in e for e in result.errors)

    def test_empty(self) -> None:
        result = validate_solution_pair([], [])
        assert not result.is_valid
        assert len(result.errors) == 2


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
