"""
Spherical Spectral Solvers
============================

Spectral Poisson solver on the sphere using eigenvalue inversion in
spherical harmonic space.

Poisson equation on the sphere of radius R:
    nabla^2 psi = f   =>   psi_hat(n, m) = f_hat(n, m) / [-n*(n+1)/R^2],   n != 0

The n = 0 (global mean) mode has a zero eigenvalue and is left at zero: the
mean of psi is not determined by f and must not be relied upon.

References:
-----------
[1] Boyd, J. P. (2001). Chebyshev and Fourier Spectral Methods.
[2] Durran, D. R. (2010). Numerical Methods for Fluid Dynamics.
"""

import equinox as eqx
import jax.numpy as jnp
from jaxtyping import Array, Float

from .coefficients import SpectralCoefficients
from .grid import LatLonGrid
from .harmonics import SphericalHarmonicTransform, TruncatedHarmonicTransform


def laplacian_eigenvalues(truncation: int, radius: float) -> Float[Array, "Mp1"]:
    """Eigenvalues -n*(n+1)/R^2 of the spherical Laplacian, n = 0..M."""
    n = jnp.arange(truncation + 1).astype(jnp.result_type(float))
    return -n * (n + 1) / radius**2


def inverse_laplacian_factors(truncation: int, radius: float) -> Float[Array, "Mp1"]:
    """1 / eigenvalue for n >= 1, and 0 for the singular n = 0 mode."""
    eig = laplacian_eigenvalues(truncation, radius)
    safe = jnp.where(eig == 0.0, 1.0, eig)
    return jnp.where(eig == 0.0, 0.0, 1.0 / safe)


class SphericalPoissonSolver(eqx.Module):
    """
    Spectral Poisson solver on the sphere.

    Solves: nabla^2 psi = f

    Algorithm:
        1. (Re, Im) = analyze(f)
        2. scale every (n, m) with n != 0 by 1 / (-n*(n+1)/R^2); n = 0 -> 0
        3. psi = synthesize(scaled Re, scaled Im)

    Attributes:
    -----------
    transform : TruncatedHarmonicTransform
        Configured spherical harmonic engine (grid + T_M table).
    """

    transform: TruncatedHarmonicTransform

    @property
    def radius(self) -> float:
        """Sphere radius R of the engine's grid."""
        return self.transform.grid.radius

    def solve(
        self,
        f: Float[Array, "T Z Ny Nx"] | SpectralCoefficients,
        spectral: bool = False,
    ) -> Float[Array, "T Z Ny Nx"]:
        """
        Solve nabla^2 psi = f on the sphere.

        Parameters:
        -----------
        f : Array or SpectralCoefficients
            Forcing field (T, Z, Ny, Nx), or its coefficients if spectral=True.
        spectral : bool
            If True, treat f as analysis coefficients and only scale and
            synthesize.

        Returns:
        --------
        psi : Float[Array, "T Z Ny Nx"]
            Solution on the full grid, global mean undetermined (zero mode
            dropped).
        """
        f_hat = f if spectral else self.transform.analyze(f)
        factors = inverse_laplacian_factors(f_hat.truncation, self.radius)
        return self.transform.synthesize(f_hat.scale_by_degree(factors))

    def laplacian(
        self,
        u: Float[Array, "T Z Ny Nx"] | SpectralCoefficients,
        spectral: bool = False,
    ) -> Float[Array, "T Z Ny Nx"]:
        """
        Spectral Laplacian: nabla^2 u = sum -n*(n+1)/R^2 * u_hat(n, m) Y_n^m.

        Parameters:
        -----------
        u : Array or SpectralCoefficients
            Field (T, Z, Ny, Nx), or its coefficients if spectral=True.
        spectral : bool
            If True, treat u as analysis coefficients.

        Returns:
        --------
        lap_u : Float[Array, "T Z Ny Nx"]
            Laplacian on the full grid, truncated at T_M.
        """
        u_hat = u if spectral else self.transform.analyze(u)
        eig = laplacian_eigenvalues(u_hat.truncation, self.radius)
        return self.transform.synthesize(u_hat.scale_by_degree(eig))


def invert_laplacian(
    grid: LatLonGrid,
    forcing: Float[Array, "T Z Ny Nx"],
    truncation: int | None = None,
) -> Float[Array, "T Z Ny Nx"]:
    """
    One-shot spectral inversion of nabla^2 psi = forcing on a global grid.

    Parameters:
    -----------
    grid : LatLonGrid
        Global lat-lon grid.
    forcing : Float[Array, "T Z Ny Nx"]
        Right-hand side.
    truncation : int, optional
        Triangular truncation.  Defaults to min(Y - 1, X // 2).

    Returns:
    --------
    psi : Float[Array, "T Z Ny Nx"]
        Solution with undetermined (zero-mode-dropped) global mean.
    """
    if truncation is None:
        truncation = min(grid.ny - 1, grid.nx // 2)
    engine = SphericalHarmonicTransform(grid).set_truncation(truncation)
    return SphericalPoissonSolver(engine).solve(forcing)
