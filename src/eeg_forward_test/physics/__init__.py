"""
Physics Module

Contains unit conventions, the default four-layer sphere geometry and the
dipole source type. The analytical sphere model lives in
``physics.sphere_model``.
"""

from .constants import *
from .dipole import Dipole
