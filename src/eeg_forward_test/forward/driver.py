"""
Numerical Forward Solution via the DUNEuro Driver

Thin layer over the DUNEuro Python bindings (``duneuropy``). The driver
is an opaque object built by a factory from the parameter tree; it owns
the mesh, the finite element discretization and the linear solver. This
module only feeds it configuration, electrodes and dipoles, and collects
the potentials at the electrode positions.

Two ways of solving are supported:

- direct: one forward solve per dipole on the whole domain. The volume
  solution is kept so it can be exported for visualization.
- transfer: compute the EEG transfer matrix once, then apply it to all
  dipoles. Much faster for many dipoles, but no volume solution exists.
"""

from __future__ import annotations

import importlib
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

import numpy as np

from eeg_forward_test.config import get_section, to_driver_config
from eeg_forward_test.comparison.conversion import to_driver_dipole, to_driver_dipoles, to_field_vectors
from eeg_forward_test.comparison.metrics import subtract_mean
from eeg_forward_test.physics.dipole import Dipole

DRIVER_MODULE_NAME = "duneuropy"

APPROACHES = ("direct", "transfer")


@runtime_checkable
class ForwardDriver(Protocol):
    """The subset of the DUNEuro MEEG driver interface used here."""

    def makeDomainFunction(self) -> Any: ...

    def solveEEGForward(self, dipole: Any, solution: Any, config: dict) -> Any: ...

    def setElectrodes(self, electrodes: list, config: dict) -> Any: ...

    def evaluateAtElectrodes(self, solution: Any) -> Any: ...


@dataclass
class NumericalSolution:
    """
    Numerical potentials for one dipole.

    Attributes
    ----------
    potentials : np.ndarray
        Average-referenced potentials at the electrodes, shape (n_electrodes,).
    domain_function : object, optional
        Driver-side volume solution (direct approach only).
    """

    potentials: np.ndarray
    domain_function: Any = None


def load_duneuropy() -> Any:
    """
    Import the DUNEuro Python bindings.

    Raises
    ------
    ImportError
        If the compiled ``duneuropy`` module is not importable.
    """
    try:
        return importlib.import_module(DRIVER_MODULE_NAME)
    except ImportError as e:
        raise ImportError(
            "The numerical solution requires the DUNEuro Python bindings "
            f"('{DRIVER_MODULE_NAME}'). Build duneuro-py and add its build/src "
            "directory to PYTHONPATH."
        ) from e


def make_driver(config: dict[str, Any], backend: Any = None) -> Any:
    """
    Create a 3D MEEG driver from the configuration.

    Parameters
    ----------
    config : dict
        Full configuration; converted to the driver's string parameter tree.
    backend : module, optional
        Object providing ``MEEGDriver3d``; defaults to duneuropy.

    Returns
    -------
    object
        The driver instance.
    """
    if backend is None:
        backend = load_duneuropy()
    return backend.MEEGDriver3d(to_driver_config(config))


def set_electrodes(
    driver: Any,
    electrodes: np.ndarray,
    electrode_config: dict[str, Any],
    backend: Any,
) -> None:
    """Project electrodes onto the head model surface."""
    driver.setElectrodes(
        to_field_vectors(electrodes, backend),
        to_driver_config(electrode_config),
    )


def _check_length(potentials: np.ndarray, n_electrodes: int) -> np.ndarray:
    if potentials.size != n_electrodes:
        raise ValueError(
            f"driver returned {potentials.size} potentials for {n_electrodes} electrodes"
        )
    return potentials


def solve_direct(
    driver: Any,
    dipole: Dipole,
    config: dict[str, Any],
    backend: Any,
    n_electrodes: int,
) -> NumericalSolution:
    """
    Solve the EEG forward problem for one dipole on the whole domain.

    Electrodes must have been set on the driver before calling this.

    Parameters
    ----------
    driver : object
        Driver created by make_driver().
    dipole : Dipole
        Source dipole.
    config : dict
        Full configuration (source model and solver sections are read by
        the driver).
    backend : module
        Driver bindings used to wrap the dipole.
    n_electrodes : int
        Number of electrodes set on the driver.

    Returns
    -------
    NumericalSolution
        Average-referenced electrode potentials and the volume solution.
    """
    domain_function = driver.makeDomainFunction()
    driver.solveEEGForward(to_driver_dipole(dipole, backend), domain_function, to_driver_config(config))

    potentials = np.asarray(driver.evaluateAtElectrodes(domain_function), dtype=np.float64).ravel()
    potentials = subtract_mean(_check_length(potentials, n_electrodes))

    return NumericalSolution(potentials=potentials, domain_function=domain_function)


def solve_transfer(
    driver: Any,
    dipoles: list[Dipole],
    config: dict[str, Any],
    backend: Any,
    n_electrodes: int,
) -> list[NumericalSolution]:
    """
    Solve for all dipoles through the EEG transfer matrix.

    The transfer solver reads ``harness.transfer_solver`` if present and
    otherwise reuses the ``solver`` section.

    Returns
    -------
    list[NumericalSolution]
        One solution per dipole, without volume solutions.
    """
    transfer_solver = get_section(config, "harness.transfer_solver") or get_section(config, "solver")
    transfer_config = to_driver_config({"solver": transfer_solver})

    transfer_matrix, _ = driver.computeEEGTransferMatrix(transfer_config)
    solutions, _ = driver.applyEEGTransfer(
        transfer_matrix,
        to_driver_dipoles(dipoles, backend),
        to_driver_config(config),
    )

    if len(solutions) != len(dipoles):
        raise ValueError(
            f"driver returned {len(solutions)} solutions for {len(dipoles)} dipoles"
        )

    results = []
    for solution in solutions:
        potentials = np.asarray(solution, dtype=np.float64).ravel()
        potentials = subtract_mean(_check_length(potentials, n_electrodes))
        results.append(NumericalSolution(potentials=potentials))
    return results
