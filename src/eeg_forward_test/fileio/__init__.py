"""
File I/O Module

Readers for electrode, conductivity and dipole text files, and VTK
export of the test results.
"""

from .readers import read_dipoles, read_field_vectors, write_field_vectors
from .vtk_export import (
    write_dipoles,
    write_electrode_potentials,
    write_point_cloud,
    write_volume,
)

__all__ = [
    "read_dipoles",
    "read_field_vectors",
    "write_field_vectors",
    "write_dipoles",
    "write_electrode_potentials",
    "write_point_cloud",
    "write_volume",
]
