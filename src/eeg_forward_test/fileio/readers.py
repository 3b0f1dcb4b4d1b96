"""
Text Readers for Electrode, Conductivity and Dipole Files

The input files are plain whitespace-separated number lists. Numbers are
grouped into fixed-size vectors regardless of line breaks, so a file with
four lines of one number each reads as a single 4-vector. This matches
how the numerical driver's own readers treat the same files, and lets the
conductivity file of a four-compartment head model be consumed both by
the driver and by the analytical sphere model.

Lines starting with ``#`` are ignored.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np

from eeg_forward_test.physics.constants import DIM, DIPOLE_ENTRIES
from eeg_forward_test.physics.dipole import Dipole


def _read_numbers(path: Path | str) -> np.ndarray:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")

    values: list[float] = []
    with open(path, "r", encoding="utf-8") as f:
        for line_number, line in enumerate(f, start=1):
            content = line.split("#", 1)[0].strip()
            if not content:
                continue
            try:
                values.extend(float(token) for token in content.split())
            except ValueError as e:
                raise ValueError(
                    f"{path}:{line_number}: cannot parse '{content}' as numbers"
                ) from e

    return np.asarray(values, dtype=np.float64)


def read_field_vectors(path: Path | str, dim: int = DIM) -> np.ndarray:
    """
    Read a file of whitespace-separated numbers as dim-sized vectors.

    Parameters
    ----------
    path : Path or str
        Text file to read.
    dim : int, optional
        Vector size. Default is 3 (electrode coordinates).

    Returns
    -------
    np.ndarray
        Array with shape (n_vectors, dim).

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the file holds no numbers or the count is not a multiple of dim.

    Examples
    --------
    >>> electrodes = read_field_vectors("electrodes.txt")
    >>> electrodes.shape
    (200, 3)
    >>> conductivities = read_field_vectors("conductivities.txt", dim=4)
    >>> conductivities[0]
    array([4.3e-04, 1.0e-05, 1.79e-03, 3.3e-04])
    """
    if dim < 1:
        raise ValueError(f"dim must be positive, got {dim}")

    values = _read_numbers(path)

    if values.size == 0:
        raise ValueError(f"No numbers found in {path}")
    if values.size % dim != 0:
        raise ValueError(
            f"{path} holds {values.size} numbers, which is not a multiple of {dim}"
        )

    return values.reshape(-1, dim)


def read_dipoles(path: Path | str) -> list[Dipole]:
    """
    Read dipoles stored one per line as ``px py pz mx my mz``.

    Parameters
    ----------
    path : Path or str
        Dipole file.

    Returns
    -------
    list[Dipole]
        Dipoles in file order.
    """
    rows = read_field_vectors(path, dim=DIPOLE_ENTRIES)
    return [Dipole.from_row(row) for row in rows]


def write_field_vectors(vectors: np.ndarray, path: Path | str) -> Path:
    """Write vectors one per line, the inverse of read_field_vectors."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    vectors = np.atleast_2d(np.asarray(vectors, dtype=np.float64))
    np.savetxt(path, vectors, fmt="%.17g")
    return path
