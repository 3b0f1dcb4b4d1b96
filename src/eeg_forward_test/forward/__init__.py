"""
Forward Module

Wraps the DUNEuro MEEG driver: factory, electrode projection and the
numerical forward solve.
"""

from .driver import (
    APPROACHES,
    ForwardDriver,
    NumericalSolution,
    load_duneuropy,
    make_driver,
    set_electrodes,
    solve_direct,
    solve_transfer,
)

__all__ = [
    "APPROACHES",
    "ForwardDriver",
    "NumericalSolution",
    "load_duneuropy",
    "make_driver",
    "set_electrodes",
    "solve_direct",
    "solve_transfer",
]
