"""
Current dipole source representation.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .constants import DIM


@dataclass
class Dipole:
    """
    Point current dipole.

    Attributes
    ----------
    position : np.ndarray
        Dipole location with shape (3,) in mm.
    moment : np.ndarray
        Dipole moment with shape (3,).

    Examples
    --------
    >>> dipole = Dipole([127.0, 127.0, 190.0], [0.0, 0.0, 1.0])
    >>> dipole.position.shape
    (3,)
    """

    position: np.ndarray
    moment: np.ndarray

    def __post_init__(self) -> None:
        self.position = np.asarray(self.position, dtype=np.float64)
        self.moment = np.asarray(self.moment, dtype=np.float64)

        if self.position.shape != (DIM,):
            raise ValueError(
                f"position must have shape ({DIM},), got {self.position.shape}"
            )
        if self.moment.shape != (DIM,):
            raise ValueError(
                f"moment must have shape ({DIM},), got {self.moment.shape}"
            )

    @classmethod
    def from_row(cls, row) -> "Dipole":
        """Build a dipole from a flat ``[px, py, pz, mx, my, mz]`` row."""
        row = np.asarray(row, dtype=np.float64).ravel()
        if row.size != 2 * DIM:
            raise ValueError(f"dipole row must have {2 * DIM} entries, got {row.size}")
        return cls(position=row[:DIM], moment=row[DIM:])

    def as_row(self) -> np.ndarray:
        """Flat ``[px, py, pz, mx, my, mz]`` representation."""
        return np.concatenate([self.position, self.moment])
