"""
Spherical Harmonic Transform
=============================

Global spherical harmonic analysis/synthesis on a uniform latitude-longitude
grid with triangular truncation T_M.

The engine comes in two states.  ``SphericalHarmonicTransform`` is the
freshly constructed, unconfigured engine: it validates the grid and knows how
to build a quadrature table.  ``set_truncation(M)`` returns a
``TruncatedHarmonicTransform``, an immutable value holding the grid and the
Legendre table for T_M, which performs the transforms.

References:
-----------
[1] Durran, D. R. (2010). Numerical Methods for Fluid Dynamics.
[2] Krishnamurti, T. N. et al. (2006). An Introduction to Global Spectral Modeling.
"""

import functools as ft
import time

import equinox as eqx
import jax
import jax.numpy as jnp
from jaxtyping import Array, Float
from loguru import logger

from ..config import MIN_TRUNCATION
from ..exceptions import (
    DimensionMismatchError,
    InvalidTruncationError,
    TruncationNotSetError,
)
from ..utils import fft_transform, real_part_of_inverse
from .coefficients import SpectralCoefficients
from .grid import LatLonGrid
from .legendre import QuadratureTable, build_quadrature_table

# ============================================================================
# Slice kernels
# ============================================================================


@jax.jit
def _analyze_slices(
    table: Float[Array, "Ny Mp1 Mp1"],
    weights: Float[Array, "Ny"],
    field: Float[Array, "T Z Ny Nx"],
) -> tuple[Float[Array, "T Z Mp1 Mp1"], Float[Array, "T Z Mp1 Mp1"]]:
    """Forward transform of every (t, z) slice."""
    truncation = table.shape[-1] - 1

    def kernel(u):
        # Step 1: FFT along each latitude, keep m = 0..M
        u_m = fft_transform(u, axis=-1)[:, : truncation + 1]  # (Ny, M+1)
        # Step 2: quadrature in latitude
        # re[n, m] = sum_j P[j, n, m] * dlat * cos(lat_j) * u_m[j, m]
        wu = weights[:, None] * u_m
        re = jnp.einsum("jnm,jm->nm", table, wu.real)
        im = jnp.einsum("jnm,jm->nm", table, wu.imag)
        # m = 0 of a real field has no imaginary part
        return re, im.at[:, 0].set(0.0)

    return jax.vmap(jax.vmap(kernel))(field)


@ft.partial(jax.jit, static_argnames=("nx",))
def _synthesize_slices(
    table: Float[Array, "Ny Mp1 Mp1"],
    real: Float[Array, "T Z Mp1 Mp1"],
    imag: Float[Array, "T Z Mp1 Mp1"],
    nx: int,
) -> Float[Array, "T Z Ny Nx"]:
    """Inverse transform of every (t, z) slice onto Nx longitudes."""

    def kernel(re, im):
        # Step 1: inverse Legendre, u_m[j, m] = sum_n P[j, n, m] * c[n, m]
        u_m = jnp.einsum("jnm,nm->jm", table, re) + 1j * jnp.einsum(
            "jnm,nm->jm", table, im
        )
        # Steps 2-3: Hermitian expansion to Nx and inverse FFT
        return real_part_of_inverse(u_m, nx)

    return jax.vmap(jax.vmap(kernel))(real, imag)


def _validate_truncation(grid: LatLonGrid, truncation: int) -> int:
    upper = grid.nx // 2
    if int(truncation) != truncation or not MIN_TRUNCATION <= truncation <= upper:
        raise InvalidTruncationError(truncation, MIN_TRUNCATION, upper)
    return int(truncation)


# ============================================================================
# SphericalHarmonicTransform: unconfigured engine
# ============================================================================


class SphericalHarmonicTransform(eqx.Module):
    """
    Spherical harmonic engine over a global lat-lon grid, before truncation.

    Construction checks that the grid is global and zonally periodic.  No
    transform is possible until a truncation is chosen with
    ``set_truncation``, which returns the configured engine.

    Attributes:
    -----------
    grid : LatLonGrid
        The underlying global grid.
    """

    grid: LatLonGrid

    def __init__(self, grid: LatLonGrid):
        grid.check_global()
        self.grid = grid

    @property
    def max_truncation(self) -> int:
        """Largest admissible truncation, X // 2."""
        return self.grid.nx // 2

    def set_truncation(self, truncation: int) -> "TruncatedHarmonicTransform":
        """
        Build the Legendre quadrature table for T_M.

        Parameters:
        -----------
        truncation : int
            Triangular truncation M, 2 <= M <= X // 2.

        Returns:
        --------
        TruncatedHarmonicTransform
            Configured engine.  ``self`` is left untouched.
        """
        truncation = _validate_truncation(self.grid, truncation)
        table = build_quadrature_table(truncation, self.grid.sin_lat)
        return TruncatedHarmonicTransform(grid=self.grid, table=table)

    def analyze(self, field):
        raise TruncationNotSetError("analyze")

    def synthesize(self, coeffs, imag=None):
        raise TruncationNotSetError("synthesize")

    def invert_laplacian(self, forcing):
        raise TruncationNotSetError("invert the Laplacian")

    def laplacian(self, field):
        raise TruncationNotSetError("take the Laplacian")


# ============================================================================
# TruncatedHarmonicTransform: configured engine
# ============================================================================


class TruncatedHarmonicTransform(eqx.Module):
    """
    Spherical harmonic transform with triangular truncation T_M.

    Mathematical Formulation:
    -------------------------
    A real field is expanded as
        u(phi, lambda) = sum_{m=0}^{M} sum_{n=m}^{M} c(n, m) * P_n^m(sin(phi)) * exp(i*m*lambda)
    (real part implied), with P_n^m the table values P̄_n^m / sqrt(2).

    Forward (analysis), per (t, z) slice:
        Step 1: FFT along each latitude -> u_m(phi_j), m = 0..M
        Step 2: c(n, m) = sum_j P_n^m(sin(phi_j)) * dlat * cos(phi_j) * u_m(phi_j)

    Inverse (synthesis), per (t, z) slice:
        Step 1: u_m(phi_j) = sum_{n>=m} P_n^m(sin(phi_j)) * c(n, m)
        Step 2: Hermitian expansion to X wavenumbers, inverse FFT, real part.

    The latitude sum is a fixed-spacing quadrature, so analysis is accurate
    to O(dlat^2) rather than exact; finer grids resolve higher truncations.
    Every grid value must be defined: there is no missing-value handling.

    Attributes:
    -----------
    grid : LatLonGrid
        The underlying global grid.
    table : QuadratureTable
        Legendre table for T_M, shape (Ny, M+1, M+1).
    """

    grid: LatLonGrid
    table: QuadratureTable

    @property
    def truncation(self) -> int:
        """Triangular truncation M."""
        return self.table.truncation

    @property
    def max_truncation(self) -> int:
        """Largest admissible truncation, X // 2."""
        return self.grid.nx // 2

    def set_truncation(self, truncation: int) -> "TruncatedHarmonicTransform":
        """Re-truncate: a new engine over the same grid with table T_M."""
        return SphericalHarmonicTransform(self.grid).set_truncation(truncation)

    # ------------------------------------------------------------------
    # Transforms
    # ------------------------------------------------------------------

    def analyze(self, field: Float[Array, "T Z Ny Nx"]) -> SpectralCoefficients:
        """
        Forward spherical harmonic transform: u(t, z, phi, lambda) -> c(t, z, n, m).

        Parameters:
        -----------
        field : Float[Array, "T Z Ny Nx"]
            Global field; the last two extents must equal the grid's (Y, X).

        Returns:
        --------
        SpectralCoefficients
            New coefficients of shape (T, Z, M+1, M+1).
        """
        field = jnp.asarray(field)
        if field.ndim != 4 or field.shape[-2:] != self.grid.shape:
            raise DimensionMismatchError(
                "field", ("T", "Z") + self.grid.shape, field.shape
            )

        tic = time.perf_counter()
        real, imag = _analyze_slices(
            self.table.values, self.grid.quadrature_weights, field
        )
        coeffs = SpectralCoefficients(real=real, imag=imag)
        logger.debug(
            "analyze: T{} over {} slices in {:.3f} sec",
            self.truncation,
            field.shape[0] * field.shape[1],
            _elapsed(tic, coeffs.real),
        )
        return coeffs

    def synthesize(self, coeffs, imag=None) -> Float[Array, "T Z Ny Nx"]:
        """
        Inverse spherical harmonic transform: c(t, z, n, m) -> u(t, z, phi, lambda).

        The output always covers the engine's full (Y, X) grid; (T, Z) follow
        the coefficients.

        Parameters:
        -----------
        coeffs : SpectralCoefficients or Float[Array, "T Z Mp1 Mp1"]
            Coefficients, or their real part when ``imag`` is given.
        imag : Float[Array, "T Z Mp1 Mp1"], optional
            Imaginary part, when ``coeffs`` is a bare real array.

        Returns:
        --------
        u : Float[Array, "T Z Ny Nx"]
            Reconstructed field.
        """
        if imag is not None:
            coeffs = SpectralCoefficients(real=coeffs, imag=imag)
        if coeffs.truncation != self.truncation:
            raise DimensionMismatchError(
                f"coefficients for T{self.truncation}",
                ("T", "Z", self.truncation + 1, self.truncation + 1),
                coeffs.shape,
            )

        tic = time.perf_counter()
        u = _synthesize_slices(self.table.values, coeffs.real, coeffs.imag, self.grid.nx)
        logger.debug(
            "synthesize: T{} over {} slices in {:.3f} sec",
            self.truncation,
            coeffs.shape[0] * coeffs.shape[1],
            _elapsed(tic, u),
        )
        return u

    # ------------------------------------------------------------------
    # Laplacian (delegates to the spectral Poisson solver)
    # ------------------------------------------------------------------

    def invert_laplacian(self, forcing: Float[Array, "T Z Ny Nx"]) -> Float[Array, "T Z Ny Nx"]:
        """Solve nabla^2 psi = forcing; see ``SphericalPoissonSolver.solve``."""
        from .solvers import SphericalPoissonSolver

        return SphericalPoissonSolver(self).solve(forcing)

    def laplacian(self, field: Float[Array, "T Z Ny Nx"]) -> Float[Array, "T Z Ny Nx"]:
        """Spectral Laplacian of a field; see ``SphericalPoissonSolver.laplacian``."""
        from .solvers import SphericalPoissonSolver

        return SphericalPoissonSolver(self).laplacian(field)


def _elapsed(tic: float, result: Array) -> float:
    """Seconds since ``tic`` once ``result`` has been computed."""
    jax.block_until_ready(result)
    return time.perf_counter() - tic
