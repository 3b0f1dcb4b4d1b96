"""
Configuration Loading Tests

Covers YAML and DUNE INI parsing, typed accessors and conversion to the
driver's string parameter tree.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from eeg_forward_test.config import (
    get_array,
    get_bool,
    get_default_config,
    get_param,
    get_path,
    get_section,
    load_config,
    load_config_safe,
    merge_config,
    parse_ini_tree,
    save_config,
    to_driver_config,
)


INI_TEXT = """\
# forward test
type = fitted
subtract_mean = true

[solver]
reduction = 1e-14   # tight

[volume_conductor]
grid.filename = tet_mesh.msh
tensors.filename = "conductivities.txt"

[source_model]
type = venant
numberOfMoments = 3

[analytic_solution]
radii = 92 86 80 78
center = 127 127 127

[output.extra]
flag = yes
"""


class TestIniParsing:
    """DUNE parameter tree INI files."""

    def test_top_level_keys(self) -> None:
        config = parse_ini_tree(INI_TEXT)
        assert config["type"] == "fitted"
        assert config["subtract_mean"] == "true"

    def test_dotted_keys_nest(self) -> None:
        config = parse_ini_tree(INI_TEXT)
        assert config["volume_conductor"]["grid"]["filename"] == "tet_mesh.msh"

    def test_quotes_stripped(self) -> None:
        config = parse_ini_tree(INI_TEXT)
        assert config["volume_conductor"]["tensors"]["filename"] == "conductivities.txt"

    def test_inline_comment_removed(self) -> None:
        assert parse_ini_tree(INI_TEXT)["solver"]["reduction"] == "1e-14"

    def test_case_preserved(self) -> None:
        """Driver keys such as numberOfMoments are case-sensitive."""
        assert parse_ini_tree(INI_TEXT)["source_model"]["numberOfMoments"] == "3"

    def test_dotted_section(self) -> None:
        assert parse_ini_tree(INI_TEXT)["output"]["extra"]["flag"] == "yes"

    def test_conflicting_keys(self) -> None:
        with pytest.raises(ValueError, match="conflicts"):
            parse_ini_tree("a = 1\na.b = 2\n")


class TestLoadConfig:
    """File loading with fallback to defaults."""

    def test_missing_file_falls_back(self, tmp_path: Path) -> None:
        config, errors = load_config_safe(tmp_path / "missing.yaml")
        assert config == get_default_config()
        assert "not found" in errors[0]

    def test_empty_file_falls_back(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")
        config, errors = load_config_safe(path)
        assert config == get_default_config()
        assert "empty" in errors[0]

    def test_malformed_yaml_falls_back(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("output: [unclosed\n")
        config, errors = load_config_safe(path)
        assert config == get_default_config()
        assert "YAML parse error" in errors[0]

    def test_load_config_never_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("- just\n- a list\n")
        assert load_config(path) == get_default_config()

    def test_yaml_round_trip(self, tmp_path: Path) -> None:
        path = tmp_path / "cfg" / "test.yaml"
        save_config(get_default_config(), path)
        assert load_config(path) == get_default_config()

    def test_ini_file(self, tmp_path: Path) -> None:
        path = tmp_path / "configs.ini"
        path.write_text(INI_TEXT)
        config, errors = load_config_safe(path)
        assert errors == []
        assert config["source_model"]["type"] == "venant"

    def test_shipped_configs_agree(self) -> None:
        """The YAML and INI configs in configs/ describe the same test."""
        root = Path(__file__).parent.parent / "configs"
        yaml_config, yaml_errors = load_config_safe(root / "default_test.yaml")
        ini_config, ini_errors = load_config_safe(root / "configs.ini")

        assert yaml_errors == [] and ini_errors == []
        for key in ("analytic_solution.radii", "analytic_solution.center"):
            np.testing.assert_allclose(get_array(yaml_config, key), get_array(ini_config, key))
        assert get_bool(yaml_config, "output.write") == get_bool(ini_config, "output.write")
        assert to_driver_config(yaml_config)["solver"]["reduction"] == "1e-14"


class TestAccessors:
    """Typed dotted-key lookup."""

    def test_get_param(self) -> None:
        config = {"output": {"write": True}}
        assert get_param(config, "output.write") is True
        assert get_param(config, "output.missing", default=3) == 3

    def test_get_param_missing_names_key(self) -> None:
        with pytest.raises(KeyError, match="output.filename"):
            get_param({"output": {}}, "output.filename")

    @pytest.mark.parametrize("value, expected", [
        (True, True), ("true", True), ("Yes", True), ("1", True), (1, True),
        (False, False), ("false", False), ("no", False), ("0", False), (0, False),
    ])
    def test_get_bool(self, value, expected) -> None:
        assert get_bool({"output": {"write": value}}, "output.write") is expected

    def test_get_bool_rejects_garbage(self) -> None:
        with pytest.raises(ValueError, match="boolean"):
            get_bool({"write": "maybe"}, "write")

    def test_get_array_from_list(self) -> None:
        values = get_array({"a": [1, 2, 3]}, "a", length=3)
        np.testing.assert_array_equal(values, [1.0, 2.0, 3.0])

    def test_get_array_from_string(self) -> None:
        values = get_array({"a": "92 86 80 78"}, "a", length=4)
        np.testing.assert_array_equal(values, [92.0, 86.0, 80.0, 78.0])

    def test_get_array_length_mismatch(self) -> None:
        with pytest.raises(ValueError, match="4 entries"):
            get_array({"a": "92 86 80"}, "a", length=4)

    def test_get_array_non_numeric(self) -> None:
        with pytest.raises(ValueError, match="numeric"):
            get_array({"a": "92 x"}, "a")

    def test_get_path_relative(self, tmp_path: Path) -> None:
        path = get_path({"f": "data/e.txt"}, "f", base_dir=tmp_path)
        assert path == tmp_path / "data" / "e.txt"

    def test_get_section(self) -> None:
        assert get_section({"a": {"b": 1}}, "a") == {"b": 1}
        assert get_section({}, "a") == {}
        with pytest.raises(ValueError):
            get_section({"a": 1}, "a")


class TestDriverConfig:
    """Conversion to the driver's string tree."""

    def test_conversion(self) -> None:
        config = {
            "post_process": True,
            "subtract_mean": False,
            "solver": {"reduction": 1e-14, "penalty": 20},
            "source_model": {"extensions": ["vertex", "vertex"]},
            "output": {"report": None},
        }
        tree = to_driver_config(config)

        assert tree == {
            "post_process": "true",
            "subtract_mean": "false",
            "solver": {"reduction": "1e-14", "penalty": "20"},
            "source_model": {"extensions": "vertex vertex"},
            "output": {},
        }

    def test_numeric_lists(self) -> None:
        assert to_driver_config({"radii": [92, 86.5]}) == {"radii": "92 86.5"}

    def test_does_not_modify_input(self) -> None:
        config = {"solver": {"reduction": 1e-14}}
        to_driver_config(config)
        assert config == {"solver": {"reduction": 1e-14}}


class TestMergeConfig:
    def test_recursive_merge(self) -> None:
        base = {"output": {"write": False, "filename": "a"}, "type": "fitted"}
        merged = merge_config(base, {"output": {"write": True}})

        assert merged == {"output": {"write": True, "filename": "a"}, "type": "fitted"}
        assert base["output"]["write"] is False


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
