"""
Multi-Layer Sphere Model - Analytical Reference Solution

The reference solution for the forward test is the closed-form potential
of a current dipole in a set of concentric spherical shells with
piecewise constant conductivity. The series evaluation itself lives in the
external simbiosphere library (Python module ``simbiopy``); this module
holds the sphere geometry, checks it, and hands plain float lists to the
library.

Unit Convention
---------------
- Radii and coordinates: mm
- Conductivities: S/mm
- Layers ordered from the outermost shell (scalp) inwards (brain)
"""

from __future__ import annotations

import importlib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import numpy as np

from eeg_forward_test.config import get_array, get_param, get_path
from eeg_forward_test.comparison.conversion import (
    copy_to_array,
    copy_to_vector_of_arrays,
)
from eeg_forward_test.comparison.metrics import subtract_mean
from .constants import DIM, NUMBER_OF_LAYERS
from .dipole import Dipole

ANALYTIC_MODULE_NAME = "simbiopy"


@dataclass
class SphereModel:
    """
    Concentric multi-layer sphere volume conductor.

    Attributes
    ----------
    radii : np.ndarray
        Shell radii in mm, shape (NUMBER_OF_LAYERS,), strictly decreasing.
    center : np.ndarray
        Common center in mm, shape (3,).
    conductivities : np.ndarray
        Layer conductivities in S/mm, same order as radii.

    Examples
    --------
    >>> model = SphereModel([92, 86, 80, 78], [127, 127, 127],
    ...                     [0.00043, 0.00001, 0.00179, 0.00033])
    >>> model.eccentricity([127.0, 127.0, 127.0 + 0.5 * 78.0])
    0.5
    """

    radii: np.ndarray
    center: np.ndarray
    conductivities: np.ndarray

    def __post_init__(self) -> None:
        self.radii = np.asarray(self.radii, dtype=np.float64)
        self.center = np.asarray(self.center, dtype=np.float64)
        self.conductivities = np.asarray(self.conductivities, dtype=np.float64)

        if self.radii.shape != (NUMBER_OF_LAYERS,):
            raise ValueError(
                f"radii must have {NUMBER_OF_LAYERS} entries, got shape {self.radii.shape}"
            )
        if self.center.shape != (DIM,):
            raise ValueError(f"center must have shape ({DIM},), got {self.center.shape}")
        if self.conductivities.shape != self.radii.shape:
            raise ValueError(
                f"need one conductivity per layer ({NUMBER_OF_LAYERS}), "
                f"got shape {self.conductivities.shape}"
            )
        if np.any(self.radii <= 0):
            raise ValueError(f"radii must be positive, got {self.radii.tolist()}")
        if np.any(np.diff(self.radii) >= 0):
            raise ValueError(
                f"radii must be strictly decreasing (outermost first), got {self.radii.tolist()}"
            )
        if np.any(self.conductivities <= 0):
            raise ValueError(
                f"conductivities must be positive, got {self.conductivities.tolist()}"
            )

    @property
    def outer_radius(self) -> float:
        return float(self.radii[0])

    @property
    def inner_radius(self) -> float:
        return float(self.radii[-1])

    def eccentricity(self, point) -> float:
        """Distance of a point from the center relative to the innermost radius."""
        point = np.asarray(point, dtype=np.float64)
        return float(np.linalg.norm(point - self.center) / self.inner_radius)

    def distances_from_center(self, points: np.ndarray) -> np.ndarray:
        points = np.atleast_2d(np.asarray(points, dtype=np.float64))
        return np.linalg.norm(points - self.center, axis=1)

    @classmethod
    def from_config(
        cls,
        config: dict[str, Any],
        base_dir: Path | None = None,
    ) -> "SphereModel":
        """
        Build the sphere model from the ``analytic_solution`` section.

        Conductivities are taken from ``analytic_solution.conductivities``
        if present. Otherwise the first NUMBER_OF_LAYERS-vector of the
        conductivity file used by the numerical head model
        (``volume_conductor.tensors.filename``) is used, so that both
        solvers see the same values.
        """
        # Import here to avoid circular imports
        from eeg_forward_test.fileio.readers import read_field_vectors

        radii = get_array(config, "analytic_solution.radii", length=NUMBER_OF_LAYERS)
        center = get_array(config, "analytic_solution.center", length=DIM)

        explicit = get_param(config, "analytic_solution.conductivities", default=None)
        if explicit is not None:
            conductivities = get_array(
                config, "analytic_solution.conductivities", length=NUMBER_OF_LAYERS
            )
        else:
            tensors_path = get_path(config, "volume_conductor.tensors.filename", base_dir)
            conductivities = read_field_vectors(tensors_path, dim=NUMBER_OF_LAYERS)[0]

        return cls(radii=radii, center=center, conductivities=conductivities)


def load_simbiopy() -> Any:
    """
    Import the simbiosphere Python bindings.

    Raises
    ------
    ImportError
        If the compiled ``simbiopy`` module is not importable.
    """
    try:
        return importlib.import_module(ANALYTIC_MODULE_NAME)
    except ImportError as e:
        raise ImportError(
            "The analytical solution requires the simbiosphere Python bindings "
            f"('{ANALYTIC_MODULE_NAME}'). Build simbiosphere with Python support and add "
            "its build/src directory to PYTHONPATH."
        ) from e


def compute_analytical_solution(
    model: SphereModel,
    electrodes: np.ndarray,
    dipole: Dipole,
    backend: Any = None,
) -> np.ndarray:
    """
    Compute the analytical electrode potentials for one dipole.

    Parameters
    ----------
    model : SphereModel
        Sphere geometry and conductivities.
    electrodes : np.ndarray
        Electrode positions with shape (n_electrodes, 3) in mm.
    dipole : Dipole
        Source dipole.
    backend : module, optional
        Object providing ``analytic_solution``; defaults to simbiopy.

    Returns
    -------
    np.ndarray
        Average-referenced potentials with shape (n_electrodes,).

    Raises
    ------
    ValueError
        If the backend returns the wrong number of values.
    """
    if backend is None:
        backend = load_simbiopy()

    electrodes_plain = copy_to_vector_of_arrays(electrodes, DIM)
    solution = backend.analytic_solution(
        model.radii.tolist(),
        model.center.tolist(),
        model.conductivities.tolist(),
        electrodes_plain,
        copy_to_array(dipole.position, DIM),
        copy_to_array(dipole.moment, DIM),
    )

    potentials = np.asarray(solution, dtype=np.float64).ravel()
    if potentials.size != len(electrodes_plain):
        raise ValueError(
            f"analytical solution has {potentials.size} values for "
            f"{len(electrodes_plain)} electrodes"
        )
    return subtract_mean(potentials)
