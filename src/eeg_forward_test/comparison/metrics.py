"""
Error Measures for Forward Solution Accuracy

Compares a numerical EEG forward solution against a reference
(analytical) solution at the electrode positions.

Definitions
-----------
For numerical potentials u and analytical potentials v:

    RE  = ||u - v|| / ||v||                     (relative error, 0 is ideal)
    MAG = ||u|| / ||v||                         (magnitude error, 1 is ideal)
    RDM = || u / ||u|| - v / ||v|| ||           (relative difference measure,
                                                 0 is ideal, bounded by 2)

EEG potentials are only defined up to a constant, so both solutions must be
referenced the same way before comparison. The harness uses average
reference, i.e. subtract_mean() on each solution.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

import numpy as np


@dataclass
class ComparisonMetrics:
    """The five numbers reported for one numerical/analytical pair."""

    norm_analytical: float
    norm_numerical: float
    relative_error: float
    magnitude_error: float
    relative_difference_measure: float

    def to_dict(self) -> dict[str, float]:
        return {key: float(value) for key, value in asdict(self).items()}


def _as_vector(values) -> np.ndarray:
    vector = np.asarray(values, dtype=np.float64)
    if vector.ndim != 1:
        raise ValueError(f"expected a 1D sequence, got shape {vector.shape}")
    return vector


def _check_pair(numerical_solution, analytical_solution) -> tuple[np.ndarray, np.ndarray]:
    numerical = _as_vector(numerical_solution)
    analytical = _as_vector(analytical_solution)
    if numerical.shape != analytical.shape:
        raise ValueError(
            f"solutions must have the same length, got {numerical.size} "
            f"(numerical) and {analytical.size} (analytical)"
        )
    return numerical, analytical


def _nonzero_norm(vector: np.ndarray, name: str) -> float:
    value = norm(vector)
    if value == 0.0:
        raise ValueError(f"{name} solution has zero norm")
    return value


def norm(vector) -> float:
    """
    Euclidean norm of a sequence.

    Examples
    --------
    >>> norm([3.0, 4.0])
    5.0
    """
    vector = _as_vector(vector)
    return float(np.sqrt(np.dot(vector, vector)))


def relative_error(numerical_solution, analytical_solution) -> float:
    """
    Relative error ||u - v|| / ||v||.

    Parameters
    ----------
    numerical_solution : array_like
        Numerical potentials, shape (n_electrodes,).
    analytical_solution : array_like
        Reference potentials, same length as numerical_solution.

    Raises
    ------
    ValueError
        If lengths differ or the analytical solution has zero norm.
    """
    numerical, analytical = _check_pair(numerical_solution, analytical_solution)
    return norm(numerical - analytical) / _nonzero_norm(analytical, "analytical")


def magnitude_error(numerical_solution, analytical_solution) -> float:
    """Magnitude error ||u|| / ||v||."""
    numerical, analytical = _check_pair(numerical_solution, analytical_solution)
    return norm(numerical) / _nonzero_norm(analytical, "analytical")


def relative_difference_measure(numerical_solution, analytical_solution) -> float:
    """
    Relative difference measure || u/||u|| - v/||v|| ||.

    Insensitive to a global scaling of either solution; it only measures
    the difference in topography.
    """
    numerical, analytical = _check_pair(numerical_solution, analytical_solution)
    norm_numerical = _nonzero_norm(numerical, "numerical")
    norm_analytical = _nonzero_norm(analytical, "analytical")
    return norm(numerical / norm_numerical - analytical / norm_analytical)


def subtract_mean(vector) -> np.ndarray:
    """
    Subtract the arithmetic mean so the result has zero mean.

    Float64 numpy arrays are modified in place and returned. Any other
    sequence is copied to a new float array first. A constant input gives
    exactly zero; what is left at rounding level is cleared so the zero
    norm checks downstream see it.

    Raises
    ------
    ValueError
        If the sequence is empty.

    Examples
    --------
    >>> v = np.array([1.0, 2.0, 3.0])
    >>> subtract_mean(v)
    array([-1.,  0.,  1.])
    >>> v
    array([-1.,  0.,  1.])
    """
    if isinstance(vector, np.ndarray) and vector.dtype == np.float64:
        target = vector
    else:
        target = np.array(vector, dtype=np.float64)

    if target.size == 0:
        raise ValueError("cannot subtract the mean of an empty sequence")

    scale = np.abs(target).max()
    target -= target.mean()
    if np.abs(target).max() <= target.size * np.finfo(np.float64).eps * scale:
        target[:] = 0.0
    return target


def compare_solutions(numerical_solution, analytical_solution) -> ComparisonMetrics:
    """
    Compute all reported measures for one numerical/analytical pair.

    Examples
    --------
    >>> metrics = compare_solutions([1.0, -1.0], [1.0, -1.0])
    >>> metrics.relative_error
    0.0
    >>> metrics.magnitude_error
    1.0
    """
    numerical, analytical = _check_pair(numerical_solution, analytical_solution)
    return ComparisonMetrics(
        norm_analytical=norm(analytical),
        norm_numerical=norm(numerical),
        relative_error=relative_error(numerical, analytical),
        magnitude_error=magnitude_error(numerical, analytical),
        relative_difference_measure=relative_difference_measure(numerical, analytical),
    )


def check_tolerances(
    metrics: ComparisonMetrics,
    tolerances: dict[str, Any] | None,
) -> list[str]:
    """
    Check metrics against regression thresholds.

    Parameters
    ----------
    metrics : ComparisonMetrics
        Measures for one dipole.
    tolerances : dict, optional
        Any of ``max_relative_error``, ``max_rdm``, ``max_mag_deviation``
        (bound on |MAG - 1|). Missing or None entries are not checked.

    Returns
    -------
    list[str]
        One message per violated threshold, empty if all pass.
    """
    if not tolerances:
        return []

    failures = []

    max_re = tolerances.get("max_relative_error")
    if max_re is not None and metrics.relative_error > float(max_re):
        failures.append(
            f"relative error {metrics.relative_error:.6g} exceeds {float(max_re):.6g}"
        )

    max_rdm = tolerances.get("max_rdm")
    if max_rdm is not None and metrics.relative_difference_measure > float(max_rdm):
        failures.append(
            f"RDM {metrics.relative_difference_measure:.6g} exceeds {float(max_rdm):.6g}"
        )

    max_mag = tolerances.get("max_mag_deviation")
    if max_mag is not None and abs(metrics.magnitude_error - 1.0) > float(max_mag):
        failures.append(
            f"|MAG - 1| = {abs(metrics.magnitude_error - 1.0):.6g} exceeds {float(max_mag):.6g}"
        )

    return failures
