"""
VTK Export for Visual Inspection of Forward Test Results

Writes three kinds of files:

- the head model with the numerical potential and its gradient
  (delegated to the driver, which owns the mesh),
- the dipoles as a point cloud with a ``moment`` vector field,
- the electrodes as a point cloud with the analytical and numerical
  potentials as scalar fields.

Point clouds are written with meshio as vertex cells, so ParaView can
display them with glyphs directly.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import meshio
import numpy as np

from eeg_forward_test.config import to_driver_config
from eeg_forward_test.physics.constants import DEFAULT_VTK_EXTENSION, DIM
from eeg_forward_test.physics.dipole import Dipole


def with_vtk_extension(path: Path | str) -> Path:
    """Append the default VTK extension if the path has none."""
    path = Path(path)
    if not path.suffix:
        path = path.with_name(path.name + DEFAULT_VTK_EXTENSION)
    return path


def write_point_cloud(
    points: np.ndarray,
    path: Path | str,
    point_data: dict[str, np.ndarray] | None = None,
) -> Path:
    """
    Write points with attached data as a VTK point cloud.

    Parameters
    ----------
    points : np.ndarray
        Coordinates with shape (n_points, 3).
    path : Path or str
        Output file; ``.vtu`` is appended if there is no extension.
    point_data : dict, optional
        Arrays with n_points rows (scalars or vectors).

    Returns
    -------
    Path
        The file written.
    """
    points = np.atleast_2d(np.asarray(points, dtype=np.float64))
    if points.ndim != 2 or points.shape[1] != DIM:
        raise ValueError(f"points must have shape (N, {DIM}), got {points.shape}")

    n_points = points.shape[0]
    data = {}
    for name, values in (point_data or {}).items():
        values = np.asarray(values, dtype=np.float64)
        if values.shape[0] != n_points:
            raise ValueError(
                f"point data '{name}' has {values.shape[0]} rows for {n_points} points"
            )
        data[name] = values

    path = with_vtk_extension(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    mesh = meshio.Mesh(
        points,
        [("vertex", np.arange(n_points, dtype=np.int64).reshape(-1, 1))],
        point_data=data,
    )
    mesh.write(path)
    return path


def write_dipoles(dipoles: list[Dipole], path: Path | str) -> Path:
    """Write dipole positions with their moments as vector data."""
    if not dipoles:
        raise ValueError("no dipoles to write")
    positions = np.array([dipole.position for dipole in dipoles])
    moments = np.array([dipole.moment for dipole in dipoles])
    return write_point_cloud(positions, path, {"moment": moments})


def write_electrode_potentials(
    electrodes: np.ndarray,
    analytical: np.ndarray,
    numerical: np.ndarray,
    path: Path | str,
) -> Path:
    """Write electrodes with analytical and numerical potentials attached."""
    return write_point_cloud(
        electrodes,
        path,
        {
            "potential_analytical": analytical,
            "potential_numerical": numerical,
        },
    )


def write_volume(driver: Any, domain_function: Any, output_config: dict[str, Any]) -> None:
    """
    Export the head model with the volume potential.

    The driver writes vertex data ``potential`` and the cell-wise
    ``gradient`` using the ``filename`` and ``mode`` entries of the output
    section.
    """
    if domain_function is None:
        raise ValueError(
            "no volume solution available; the transfer approach only yields "
            "electrode potentials"
        )
    driver.write(domain_function, to_driver_config(output_config))
