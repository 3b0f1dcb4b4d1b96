"""
Constants for the EEG Forward Test Harness

Geometry is expressed in mm and conductivities in S/mm, matching the
unit convention of the head models the numerical driver is run on.
"""

from __future__ import annotations

# Spatial dimension of the head model
DIM: int = 3

# Number of shells in the analytical sphere model (scalp, skull, CSF, brain)
NUMBER_OF_LAYERS: int = 4

# Entries per line of a dipole file: px py pz mx my mz
DIPOLE_ENTRIES: int = 2 * DIM

# =============================================================================
# Default Four-Layer Sphere Model
# =============================================================================

# Radii, outermost shell first (mm)
DEFAULT_SPHERE_RADII_MM: tuple[float, ...] = (92.0, 86.0, 80.0, 78.0)

# Sphere center (mm), centre of a 255^3 voxel volume
DEFAULT_SPHERE_CENTER_MM: tuple[float, ...] = (127.0, 127.0, 127.0)

# Layer conductivities in the same order as the radii (S/mm)
SCALP_CONDUCTIVITY_S_MM: float = 0.00043
SKULL_CONDUCTIVITY_S_MM: float = 0.00001
CSF_CONDUCTIVITY_S_MM: float = 0.00179
BRAIN_CONDUCTIVITY_S_MM: float = 0.00033

DEFAULT_CONDUCTIVITIES_S_MM: tuple[float, ...] = (
    SCALP_CONDUCTIVITY_S_MM,
    SKULL_CONDUCTIVITY_S_MM,
    CSF_CONDUCTIVITY_S_MM,
    BRAIN_CONDUCTIVITY_S_MM,
)

# =============================================================================
# Driver Defaults (fitted tetrahedral CG-FEM)
# =============================================================================

DEFAULT_DRIVER_TYPE: str = "fitted"
DEFAULT_SOLVER_TYPE: str = "cg"
DEFAULT_ELEMENT_TYPE: str = "tetrahedron"
DEFAULT_SOLVER_REDUCTION: float = 1e-14
DEFAULT_ELECTRODE_PROJECTION: str = "closest_subentity_center"

# =============================================================================
# Validation Thresholds
# =============================================================================

# Above this eccentricity sources are close enough to the inner boundary
# that numerical errors are expected to rise sharply
HIGH_ECCENTRICITY_WARNING: float = 0.99

# Allowed relative deviation of an electrode from the outer sphere surface
ELECTRODE_SURFACE_TOLERANCE: float = 0.05

# Regression gate defaults, None disables the check
DEFAULT_TOLERANCES: dict[str, float | None] = {
    "max_relative_error": None,
    "max_rdm": None,
    "max_mag_deviation": None,
}

# =============================================================================
# Output Defaults
# =============================================================================

DEFAULT_CONFIG_FILENAME: str = "configs.ini"
DEFAULT_VTK_EXTENSION: str = ".vtu"
DEFAULT_OUTPUT_DIR: str = "output"
