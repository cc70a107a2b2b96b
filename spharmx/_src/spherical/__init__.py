"""
Global Spherical Harmonic Expansion
====================================

Spherical harmonic analysis/synthesis with triangular truncation on a uniform
global latitude-longitude grid, and the spectral Poisson solver built on it.

Public API
----------
Grid classes:
    LatLonGrid

Legendre functions:
    normalized_legendre, spherical_harmonic, QuadratureTable, build_quadrature_table

Transform:
    SphericalHarmonicTransform, TruncatedHarmonicTransform, SpectralCoefficients

Solvers:
    SphericalPoissonSolver, invert_laplacian
"""

from .coefficients import SpectralCoefficients
from .grid import LatLonGrid
from .harmonics import SphericalHarmonicTransform, TruncatedHarmonicTransform
from .legendre import (
    QuadratureTable,
    build_quadrature_table,
    normalized_legendre,
    spherical_harmonic,
)
from .solvers import (
    SphericalPoissonSolver,
    invert_laplacian,
    inverse_laplacian_factors,
    laplacian_eigenvalues,
)

__all__ = [
    "LatLonGrid",
    "QuadratureTable",
    "build_quadrature_table",
    "normalized_legendre",
    "spherical_harmonic",
    "SpectralCoefficients",
    "SphericalHarmonicTransform",
    "TruncatedHarmonicTransform",
    "SphericalPoissonSolver",
    "invert_laplacian",
    "inverse_laplacian_factors",
    "laplacian_eigenvalues",
]
