"""
Conversion Between Driver Vectors and Plain Arrays

The numerical driver works with its own fixed-size vector and dipole
types, while the analytical sphere library expects plain lists of floats.
These helpers move data between the two representations.
"""

from __future__ import annotations

from typing import Any, Iterable, Sequence

import numpy as np

from eeg_forward_test.physics.constants import DIM
from eeg_forward_test.physics.dipole import Dipole


def copy_to_array(vector: Sequence[float], dim: int = DIM) -> list[float]:
    """
    Copy a fixed-size vector into a plain list of floats.

    Parameters
    ----------
    vector : sequence
        Anything indexable with ``dim`` entries (driver vector, numpy row,
        tuple).
    dim : int, optional
        Expected size. Default is 3.

    Raises
    ------
    ValueError
        If the vector does not have exactly ``dim`` entries.

    Examples
    --------
    >>> copy_to_array(np.array([1, 2, 3]))
    [1.0, 2.0, 3.0]
    """
    values = np.asarray(vector, dtype=np.float64).ravel()
    if values.size != dim:
        raise ValueError(f"expected a vector with {dim} entries, got {values.size}")
    return values.tolist()


def copy_to_vector_of_arrays(
    vectors: Iterable[Sequence[float]],
    dim: int = DIM,
) -> list[list[float]]:
    """
    Copy a sequence of fixed-size vectors into a new list of float lists.
    """
    return [copy_to_array(vector, dim) for vector in vectors]


def to_field_vectors(points: np.ndarray, backend: Any) -> list[Any]:
    """Wrap rows of an (n, 3) array into the driver's 3D vector type."""
    points = np.asarray(points, dtype=np.float64)
    if points.ndim != 2 or points.shape[1] != DIM:
        raise ValueError(f"points must have shape (N, {DIM}), got {points.shape}")
    return [backend.FieldVector3D(point) for point in points]


def to_driver_dipole(dipole: Dipole, backend: Any) -> Any:
    """Wrap a Dipole into the driver's dipole type."""
    return backend.Dipole3d(dipole.as_row())


def to_driver_dipoles(dipoles: Iterable[Dipole], backend: Any) -> list[Any]:
    return [to_driver_dipole(dipole, backend) for dipole in dipoles]
