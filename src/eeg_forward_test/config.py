"""
Configuration Management for the EEG Forward Test Harness

Loads test parameters from YAML config files, or from DUNE parameter-tree
INI files, with fallback to hardcoded defaults in physics.constants.

Usage:
    from eeg_forward_test.config import load_config, get_param

    cfg = load_config()  # Load default config
    cfg = load_config("configs.ini")  # Load a DUNE-style INI config

    # Access parameters
    write_output = get_bool(cfg, "output.write")
    radii = get_array(cfg, "analytic_solution.radii", length=4)
"""

from __future__ import annotations

import configparser
import copy
from pathlib import Path
from typing import Any

import numpy as np
import yaml

# Determine project root (works both installed and development mode)
# File is at: src/eeg_forward_test/config.py
# Project root: src/eeg_forward_test -> src -> project_root
_THIS_FILE = Path(__file__)
PROJECT_ROOT = _THIS_FILE.parent.parent.parent

DEFAULT_CONFIG_PATH = PROJECT_ROOT / "configs" / "default_test.yaml"

_INI_SUFFIXES = (".ini", ".cfg")
_INI_ROOT_SECTION = "__root__"
_TRUE_STRINGS = ("true", "yes", "on", "1")
_FALSE_STRINGS = ("false", "no", "off", "0")
_MISSING = object()


def get_config_path(config_name: str = "default_test.yaml") -> Path:
    """
    Get the full path to a config file in the project configs directory.

    Parameters
    ----------
    config_name : str
        Name of the config file (with or without .yaml extension).

    Returns
    -------
    Path
        Full path to the config file.
    """
    if not config_name.endswith((".yaml", ".yml", *_INI_SUFFIXES)):
        config_name = f"{config_name}.yaml"
    return PROJECT_ROOT / "configs" / config_name


def get_default_config() -> dict[str, Any]:
    """
    Return hardcoded default configuration.

    Used as fallback when config file is missing.
    """
    # Import here to avoid circular imports
    from eeg_forward_test.physics.constants import (
        DEFAULT_DRIVER_TYPE,
        DEFAULT_ELECTRODE_PROJECTION,
        DEFAULT_ELEMENT_TYPE,
        DEFAULT_OUTPUT_DIR,
        DEFAULT_SOLVER_REDUCTION,
        DEFAULT_SOLVER_TYPE,
        DEFAULT_SPHERE_CENTER_MM,
        DEFAULT_SPHERE_RADII_MM,
        DEFAULT_TOLERANCES,
    )

    return {
        "type": DEFAULT_DRIVER_TYPE,
        "solver_type": DEFAULT_SOLVER_TYPE,
        "element_type": DEFAULT_ELEMENT_TYPE,
        "post_process": True,
        "subtract_mean": True,
        "solver": {
            "reduction": DEFAULT_SOLVER_REDUCTION,
            "edge_norm_type": "houston",
            "penalty": 20,
            "scheme": "sipg",
            "weights": "tensorOnly",
        },
        "volume_conductor": {
            "grid": {"filename": "tet_mesh.msh"},
            "tensors": {"filename": "conductivities.txt"},
        },
        "source_model": {
            "type": "partial_integration",
        },
        "electrodes": {
            "filename": "electrodes.txt",
            "type": DEFAULT_ELECTRODE_PROJECTION,
            "codims": 3,
        },
        "dipole": {
            "filename": "dipoles.txt",
            "select": "first",
        },
        "analytic_solution": {
            "radii": list(DEFAULT_SPHERE_RADII_MM),
            "center": list(DEFAULT_SPHERE_CENTER_MM),
        },
        "harness": {
            "approach": "direct",
            "tolerances": dict(DEFAULT_TOLERANCES),
        },
        "output": {
            "write": False,
            "filename": f"{DEFAULT_OUTPUT_DIR}/headmodel",
            "mode": "volume",
            "filename_dipole": f"{DEFAULT_OUTPUT_DIR}/dipole",
            "filename_electrode_potentials": f"{DEFAULT_OUTPUT_DIR}/electrode_potentials",
            "report": None,
            "plot": None,
        },
    }


# =============================================================================
# File Parsing
# =============================================================================


def _set_nested(config: dict[str, Any], dotted_key: str, value: Any) -> None:
    parts = [part for part in dotted_key.split(".") if part]
    if not parts:
        raise ValueError(f"Invalid empty key '{dotted_key}'")

    node = config
    for part in parts[:-1]:
        child = node.setdefault(part, {})
        if not isinstance(child, dict):
            raise ValueError(
                f"Key '{dotted_key}' conflicts with scalar value at '{part}'"
            )
        node = child

    if isinstance(node.get(parts[-1]), dict):
        raise ValueError(f"Key '{dotted_key}' conflicts with an existing section")
    node[parts[-1]] = value


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1]
    return value


def parse_ini_tree(text: str) -> dict[str, Any]:
    """
    Parse DUNE parameter-tree INI text into a nested dictionary.

    Keys may appear before the first section. Section headers and keys may
    be dotted; both are expanded into nested dictionaries. All values are
    returned as strings.

    Examples
    --------
    >>> parse_ini_tree("type = fitted\\n[volume_conductor]\\ngrid.filename = mesh.msh")
    {'type': 'fitted', 'volume_conductor': {'grid': {'filename': 'mesh.msh'}}}
    """
    parser = configparser.ConfigParser(
        interpolation=None,
        inline_comment_prefixes=("#",),
        comment_prefixes=("#", ";"),
        strict=False,
        default_section="__defaults_unused__",
    )
    # DUNE keys are case-sensitive (numberOfMoments, tensorOnly, ...)
    parser.optionxform = str
    parser.read_string(f"[{_INI_ROOT_SECTION}]\n{text}")

    config: dict[str, Any] = {}
    for section in parser.sections():
        prefix = "" if section == _INI_ROOT_SECTION else f"{section.strip()}."
        for key, value in parser.items(section):
            _set_nested(config, f"{prefix}{key.strip()}", _unquote(value))
    return config


def _read_config_file(config_path: Path) -> dict[str, Any] | None:
    """Read YAML or INI; None for an empty file. Parse errors propagate."""
    with open(config_path, "r", encoding="utf-8") as f:
        text = f.read()

    if config_path.suffix.lower() in _INI_SUFFIXES:
        config = parse_ini_tree(text)
        return config or None

    config = yaml.safe_load(text)
    if config is not None and not isinstance(config, dict):
        raise ValueError(
            f"Top level of {config_path} must be a mapping, got {type(config).__name__}"
        )
    return config


def load_config(config_path: str | Path | None = None) -> dict[str, Any]:
    """
    Load configuration from a YAML or INI file with fallback to defaults.

    Parameters
    ----------
    config_path : str or Path, optional
        Path to a ``.yaml``/``.yml`` or ``.ini`` config file. If None,
        uses default_test.yaml. If the file doesn't exist, falls back to
        hardcoded defaults.

    Returns
    -------
    dict
        Configuration dictionary.

    Raises
    ------
    None
        This function never raises; it gracefully falls back to defaults.

    Examples
    --------
    >>> cfg = load_config()
    >>> cfg["analytic_solution"]["radii"]
    [92.0, 86.0, 80.0, 78.0]
    """
    config, _ = load_config_safe(config_path)
    return config


def load_config_safe(
    config_path: str | Path | None = None,
) -> tuple[dict[str, Any], list[str]]:
    """
    Load configuration with detailed error reporting.

    Unlike load_config(), this function returns error messages
    for debugging and user feedback.

    Parameters
    ----------
    config_path : str or Path, optional
        Path to YAML or INI config file.

    Returns
    -------
    tuple[dict, list[str]]
        (config_dict, error_messages). Config is always valid (defaults used on error).
        error_messages is empty if load succeeded.
    """
    errors = []

    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH
    else:
        config_path = Path(config_path)

    if not config_path.exists():
        errors.append(f"Config file not found: {config_path}. Using defaults.")
        return get_default_config(), errors

    try:
        config = _read_config_file(config_path)
        if config is None:
            errors.append(f"Config file is empty: {config_path}. Using defaults.")
            return get_default_config(), errors
        return config, errors
    except yaml.YAMLError as e:
        errors.append(
            f"YAML parse error in {config_path}: {e}. "
            "Check indentation and syntax. Using defaults."
        )
        return get_default_config(), errors
    except (configparser.Error, ValueError) as e:
        errors.append(f"Parse error in {config_path}: {e}. Using defaults.")
        return get_default_config(), errors
    except IOError as e:
        errors.append(f"Cannot read {config_path}: {e}. Using defaults.")
        return get_default_config(), errors


def save_config(config: dict[str, Any], config_path: str | Path) -> None:
    """
    Save configuration to a YAML file.

    Parameters
    ----------
    config : dict
        Configuration dictionary.
    config_path : str or Path
        Output path for the YAML file.
    """
    config_path = Path(config_path)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w") as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)


# =============================================================================
# Typed Access
# =============================================================================


def get_param(config: dict[str, Any], key: str, default: Any = _MISSING) -> Any:
    """
    Look up a dotted key such as ``"output.write"``.

    Raises
    ------
    KeyError
        If the key is missing and no default is given.
    """
    node: Any = config
    for part in key.split("."):
        if not isinstance(node, dict) or part not in node:
            if default is _MISSING:
                raise KeyError(f"Missing configuration key '{key}'")
            return default
        node = node[part]
    return node


def get_section(config: dict[str, Any], key: str) -> dict[str, Any]:
    """Return a nested section, or an empty dict if it is absent."""
    section = get_param(config, key, default={})
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ValueError(f"Configuration key '{key}' must be a section")
    return section


def parse_bool(value: Any, key: str = "value") -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, np.integer)) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise ValueError(f"Cannot interpret {key}={value!r} as a boolean")


def get_bool(config: dict[str, Any], key: str, default: Any = _MISSING) -> bool:
    """Boolean lookup accepting YAML booleans and DUNE strings ("true", "1", ...)."""
    return parse_bool(get_param(config, key, default), key)


def get_array(
    config: dict[str, Any],
    key: str,
    length: int | None = None,
    default: Any = _MISSING,
) -> np.ndarray:
    """
    Read a numeric array from a YAML list or a whitespace-separated string.

    Parameters
    ----------
    config : dict
        Configuration dictionary.
    key : str
        Dotted key.
    length : int, optional
        Required number of entries.
    default : optional
        Returned (converted) when the key is missing.

    Raises
    ------
    KeyError
        If the key is missing and no default is given.
    ValueError
        If entries are not numeric or the length does not match.

    Examples
    --------
    >>> get_array({"a": {"radii": "92 86 80 78"}}, "a.radii", length=4)
    array([92., 86., 80., 78.])
    """
    raw = get_param(config, key, default)

    try:
        if isinstance(raw, str):
            values = np.array([float(token) for token in raw.split()], dtype=np.float64)
        else:
            values = np.atleast_1d(np.asarray(raw, dtype=np.float64))
    except (TypeError, ValueError) as e:
        raise ValueError(f"Configuration key '{key}' must be numeric, got {raw!r}") from e

    if values.ndim != 1:
        raise ValueError(f"Configuration key '{key}' must be a flat list")
    if length is not None and values.size != length:
        raise ValueError(
            f"Configuration key '{key}' must have {length} entries, got {values.size}"
        )
    return values


def get_path(
    config: dict[str, Any],
    key: str,
    base_dir: Path | None = None,
) -> Path:
    """Resolve a file path entry relative to base_dir (if relative)."""
    path = Path(str(get_param(config, key)))
    if base_dir is not None and not path.is_absolute():
        path = Path(base_dir) / path
    return path


def _to_parameter_string(value: Any) -> str:
    if isinstance(value, (bool, np.bool_)):
        return "true" if value else "false"
    if isinstance(value, (list, tuple, np.ndarray)):
        return " ".join(_to_parameter_string(item) for item in value)
    return str(value)


def to_driver_config(config: dict[str, Any]) -> dict[str, Any]:
    """
    Convert a configuration to the all-string parameter tree of the driver.

    Booleans become ``"true"``/``"false"``, lists become space-separated
    strings, nested dictionaries are preserved and None entries dropped.

    Examples
    --------
    >>> to_driver_config({"post_process": True, "solver": {"reduction": 1e-14}})
    {'post_process': 'true', 'solver': {'reduction': '1e-14'}}
    """
    tree: dict[str, Any] = {}
    for key, value in config.items():
        if value is None:
            continue
        if isinstance(value, dict):
            tree[str(key)] = to_driver_config(value)
        else:
            tree[str(key)] = _to_parameter_string(value)
    return tree


def merge_config(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge overrides into a copy of base."""
    merged = copy.deepcopy(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged
