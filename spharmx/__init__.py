from loguru import logger

from spharmx._src.config import EARTH_RADIUS
from spharmx._src.exceptions import (
    DimensionMismatchError,
    InvalidTruncationError,
    NonGlobalDomainError,
    SpharmxError,
    TruncationNotSetError,
)
from spharmx._src.spherical import (
    LatLonGrid,
    QuadratureTable,
    SpectralCoefficients,
    SphericalHarmonicTransform,
    SphericalPoissonSolver,
    TruncatedHarmonicTransform,
    build_quadrature_table,
    invert_laplacian,
    inverse_laplacian_factors,
    laplacian_eigenvalues,
    normalized_legendre,
    spherical_harmonic,
)

# Library logging is silent until the application opts in with
# logger.enable("spharmx").
logger.disable("spharmx")

__all__ = [
    # Grid
    "LatLonGrid",
    "EARTH_RADIUS",
    # Legendre functions
    "normalized_legendre",
    "spherical_harmonic",
    "QuadratureTable",
    "build_quadrature_table",
    # Transform
    "SpectralCoefficients",
    "SphericalHarmonicTransform",
    "TruncatedHarmonicTransform",
    # Solvers
    "SphericalPoissonSolver",
    "invert_laplacian",
    "inverse_laplacian_factors",
    "laplacian_eigenvalues",
    # Errors
    "SpharmxError",
    "InvalidTruncationError",
    "TruncationNotSetError",
    "DimensionMismatchError",
    "NonGlobalDomainError",
]
