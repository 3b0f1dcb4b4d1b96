"""
Comparison Module

Contains the error measures used to judge a numerical forward solution
against the analytical reference, and conversions between the driver's
vector types and plain arrays. The full test pipeline is in
``comparison.harness``.
"""

from .metrics import (
    ComparisonMetrics,
    check_tolerances,
    compare_solutions,
    magnitude_error,
    norm,
    relative_difference_measure,
    relative_error,
    subtract_mean,
)
from .conversion import (
    copy_to_array,
    copy_to_vector_of_arrays,
)

__all__ = [
    "ComparisonMetrics",
    "check_tolerances",
    "compare_solutions",
    "magnitude_error",
    "norm",
    "relative_difference_measure",
    "relative_error",
    "subtract_mean",
    "copy_to_array",
    "copy_to_vector_of_arrays",
]
