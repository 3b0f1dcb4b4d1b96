"""
Shared fixtures: sphere test geometry on disk and fake solver bindings.

The fake driver and the fake analytic library both evaluate the infinite
homogeneous medium dipole potential, so the numerical error of a test run
is fully controlled by the driver's ``scale`` and ``offset``.
"""

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import numpy as np
import pytest

from eeg_forward_test.physics.constants import (
    DEFAULT_CONDUCTIVITIES_S_MM,
    DEFAULT_SPHERE_CENTER_MM,
    DEFAULT_SPHERE_RADII_MM,
)

CENTER = np.array(DEFAULT_SPHERE_CENTER_MM)
OUTER_RADIUS = DEFAULT_SPHERE_RADII_MM[0]
INNER_RADIUS = DEFAULT_SPHERE_RADII_MM[-1]


def sphere_points(n_points: int, radius: float = OUTER_RADIUS) -> np.ndarray:
    """Quasi-uniform points on a sphere (Fibonacci lattice)."""
    i = np.arange(n_points) + 0.5
    phi = np.arccos(1.0 - 2.0 * i / n_points)
    theta = np.pi * (1.0 + 5.0**0.5) * i
    directions = np.column_stack([
        np.cos(theta) * np.sin(phi),
        np.sin(theta) * np.sin(phi),
        np.cos(phi),
    ])
    return CENTER + radius * directions


def dipole_potential(electrodes, position, moment) -> np.ndarray:
    """Unbounded homogeneous medium dipole potential (up to a constant factor)."""
    diff = np.asarray(electrodes, dtype=np.float64) - np.asarray(position, dtype=np.float64)
    distance = np.linalg.norm(diff, axis=1)
    return diff @ np.asarray(moment, dtype=np.float64) / distance**3


class FakeDipole3d:
    def __init__(self, row):
        row = np.asarray(row, dtype=np.float64)
        self._position = row[:3]
        self._moment = row[3:]

    def position(self):
        return self._position

    def moment(self):
        return self._moment


class FakeMEEGDriver3d:
    """Driver double returning scale * exact + offset at the electrodes."""

    scale = 1.01
    offset = 2.0e-4

    def __init__(self, config):
        self.config = config
        self.electrodes = None
        self.electrode_config = None
        self.solve_calls = 0
        self.transfer_calls = 0
        self.written = []

    def _potentials(self, dipole):
        exact = dipole_potential(self.electrodes, dipole.position(), dipole.moment())
        return list(self.scale * exact + self.offset)

    def makeDomainFunction(self):
        return {"dipole": None}

    def solveEEGForward(self, dipole, solution, config):
        self.solve_calls += 1
        solution["dipole"] = dipole

    def setElectrodes(self, electrodes, config):
        self.electrodes = np.array([np.asarray(e) for e in electrodes])
        self.electrode_config = config

    def evaluateAtElectrodes(self, solution):
        return self._potentials(solution["dipole"])

    def computeEEGTransferMatrix(self, config):
        self.transfer_calls += 1
        self.transfer_config = config
        return "transfer-matrix", {"time": 0.0}

    def applyEEGTransfer(self, matrix, dipoles, config):
        assert matrix == "transfer-matrix"
        return [self._potentials(dipole) for dipole in dipoles], {"time": 0.0}

    def write(self, solution, config):
        self.written.append(config["filename"])


def fake_analytic_solution(radii, center, conductivities, electrodes, position, moment):
    # Plain lists are what the bindings accept
    assert isinstance(radii, list) and isinstance(electrodes, list)
    assert all(isinstance(e, list) for e in electrodes)
    return list(dipole_potential(electrodes, position, moment))


@pytest.fixture
def fake_duneuropy():
    """Module-like double for the DUNEuro bindings."""
    drivers = []

    def make(config):
        driver = FakeMEEGDriver3d(config)
        drivers.append(driver)
        return driver

    return SimpleNamespace(
        MEEGDriver3d=make,
        FieldVector3D=lambda values: np.asarray(values, dtype=np.float64),
        Dipole3d=FakeDipole3d,
        drivers=drivers,
    )


@pytest.fixture
def fake_simbiopy():
    """Module-like double for the simbiosphere bindings."""
    return SimpleNamespace(analytic_solution=fake_analytic_solution)


@pytest.fixture
def sphere_case(tmp_path: Path) -> dict:
    """Electrode, dipole and conductivity files plus a matching config."""
    electrodes = sphere_points(32)
    np.savetxt(tmp_path / "electrodes.txt", electrodes)

    dipoles = np.array([
        [*(CENTER + [0.0, 0.0, 0.5 * INNER_RADIUS]), 0.0, 0.0, 1.0],
        [*(CENTER + [0.3 * INNER_RADIUS, 0.0, 0.0]), 1.0, 0.0, 0.0],
        [*(CENTER + [0.0, -0.7 * INNER_RADIUS, 0.0]), 0.0, 1.0, 1.0],
    ])
    np.savetxt(tmp_path / "dipoles.txt", dipoles)

    with open(tmp_path / "conductivities.txt", "w") as f:
        for value in DEFAULT_CONDUCTIVITIES_S_MM:
            f.write(f"{value}\n")

    config = {
        "type": "fitted",
        "solver_type": "cg",
        "element_type": "tetrahedron",
        "post_process": True,
        "subtract_mean": True,
        "solver": {"reduction": 1e-14},
        "volume_conductor": {
            "grid": {"filename": str(tmp_path / "tet_mesh.msh")},
            "tensors": {"filename": str(tmp_path / "conductivities.txt")},
        },
        "source_model": {"type": "partial_integration"},
        "electrodes": {
            "filename": str(tmp_path / "electrodes.txt"),
            "type": "closest_subentity_center",
            "codims": 3,
        },
        "dipole": {"filename": str(tmp_path / "dipoles.txt"), "select": "first"},
        "analytic_solution": {
            "radii": list(DEFAULT_SPHERE_RADII_MM),
            "center": list(DEFAULT_SPHERE_CENTER_MM),
        },
        "harness": {"approach": "direct"},
        "output": {
            "write": False,
            "filename": str(tmp_path / "out" / "headmodel"),
            "filename_dipole": str(tmp_path / "out" / "dipole"),
            "filename_electrode_potentials": str(tmp_path / "out" / "electrode_potentials"),
        },
    }

    return {
        "dir": tmp_path,
        "config": config,
        "electrodes": electrodes,
        "dipoles": dipoles,
    }
