"""
Associated Legendre Functions and Quadrature Tables
=====================================================

Fully normalised associated Legendre functions

    P̄_n^m(mu) = sqrt((2n+1) * (n-m)! / (n+m)!) * P_n^m(mu),    0 <= m <= n,

without the Condon-Shortley phase, and the per-latitude quadrature table the
spherical harmonic transform is built from.

With this normalisation
    integral_{-1}^{1} P̄_n^m(mu) P̄_n'^m(mu) d_mu = 2 * delta_{n, n'},
so the table stores P̄_n^m / sqrt(2), which is orthonormal on [-1, 1].

The functions are generated with the standard stable recurrences (no
factorials are ever formed, so high truncations do not overflow):

    P̄_m^m     = sqrt((2m+1) / (2m)) * sqrt(1 - mu^2) * P̄_{m-1}^{m-1}
    P̄_{m+1}^m = sqrt(2m+3) * mu * P̄_m^m
    P̄_n^m     = a_nm * mu * P̄_{n-1}^m - b_nm * P̄_{n-2}^m

    a_nm = sqrt((2n-1)(2n+1) / ((n-m)(n+m)))
    b_nm = sqrt((2n+1)(n+m-1)(n-m-1) / ((n-m)(n+m)(2n-3)))

References:
-----------
[1] Holmes, S. A. & Featherstone, W. E. (2002). J. Geodesy 76, 279-299.
[2] Durran, D. R. (2010). Numerical Methods for Fluid Dynamics.
"""

import time

import equinox as eqx
import jax.numpy as jnp
from jaxtyping import Array, Float
from loguru import logger
import numpy as np


def normalized_legendre(truncation: int, x) -> np.ndarray:
    """
    Triangular table of normalised associated Legendre functions.

    Parameters:
    -----------
    truncation : int
        Maximum degree M (>= 1).
    x : float or ndarray
        Argument(s) mu in [-1, 1] (sin(latitude) on the sphere).

    Returns:
    --------
    P : ndarray [..., M+1, M+1]
        P[..., n, m] = P̄_n^m(x) for m <= n, zero for m > n.
    """
    if truncation < 1:
        raise ValueError(f"truncation must be >= 1, got {truncation}")

    x = np.asarray(x, dtype=np.float64)
    if np.any(np.abs(x) > 1.0):
        raise ValueError("Legendre argument must lie in [-1, 1]")

    M = truncation
    c = np.sqrt(np.clip(1.0 - x * x, 0.0, None))
    P = np.zeros(x.shape + (M + 1, M + 1), dtype=np.float64)

    # sectoral P̄_m^m
    P[..., 0, 0] = 1.0
    for m in range(1, M + 1):
        P[..., m, m] = np.sqrt((2 * m + 1) / (2.0 * m)) * c * P[..., m - 1, m - 1]

    for m in range(M):
        # semi-sectoral P̄_{m+1}^m
        P[..., m + 1, m] = np.sqrt(2 * m + 3.0) * x * P[..., m, m]
        for n in range(m + 2, M + 1):
            a = np.sqrt((2 * n - 1.0) * (2 * n + 1.0) / ((n - m) * (n + m)))
            b = np.sqrt(
                (2 * n + 1.0) * (n + m - 1.0) * (n - m - 1.0)
                / ((n - m) * (n + m) * (2 * n - 3.0))
            )
            P[..., n, m] = a * x * P[..., n - 1, m] - b * P[..., n - 2, m]

    return P


class QuadratureTable(eqx.Module):
    """
    Per-latitude Legendre table for a triangular truncation T_M.

    values[j, n, m] = P̄_n^m(sin(lat_j)) / sqrt(2)   for 0 <= m <= n <= M,
    zero for m > n.  Read-only once built.

    Attributes:
    -----------
    values : Float[Array, "Ny Mp1 Mp1"]
        Normalised Legendre values.
    truncation : int
        Triangular truncation M.
    """

    values: Float[Array, "Ny Mp1 Mp1"]
    truncation: int = eqx.field(static=True)

    @property
    def ny(self) -> int:
        """Number of latitude rows."""
        return self.values.shape[0]


def build_quadrature_table(truncation: int, sin_lat) -> QuadratureTable:
    """
    Build the Legendre quadrature table for all latitudes.

    Parameters:
    -----------
    truncation : int
        Triangular truncation M.
    sin_lat : array [Ny]
        sin(latitude) per grid row.

    Returns:
    --------
    QuadratureTable
        Table of shape (Ny, M+1, M+1).
    """
    tic = time.perf_counter()
    # sin(±90°) may round a hair past ±1
    mu = np.clip(np.asarray(sin_lat, dtype=np.float64), -1.0, 1.0)
    values = normalized_legendre(truncation, mu) / np.sqrt(2.0)
    logger.debug(
        "quadrature table T{} built: shape={} in {:.3f} sec",
        truncation,
        values.shape,
        time.perf_counter() - tic,
    )
    return QuadratureTable(values=jnp.asarray(values), truncation=truncation)


def spherical_harmonic(n: int, m: int, lat, lon) -> Float[Array, "Ny Nx"]:
    """
    Real spherical harmonic of degree n, order m on a lat-lon grid.

        Y(phi, lambda) = P̄_n^m(sin(phi)) / sqrt(2) * cos(m * lambda)

    Synthesizing a single coefficient c(n, m) = a reproduces
    a * (2 / X) * Y for 0 < m < X/2, and a * (1 / X) * Y for m = 0.

    Parameters:
    -----------
    n, m : int
        Degree and order, 0 <= m <= n.
    lat : array [Ny]
        Latitudes [deg].
    lon : array [Nx]
        Longitudes [deg].

    Returns:
    --------
    Y : Float[Array, "Ny Nx"]
    """
    if not 0 <= m <= n:
        raise ValueError(f"need 0 <= m <= n, got n={n}, m={m}")
    mu = np.clip(np.sin(np.deg2rad(np.asarray(lat, dtype=np.float64))), -1.0, 1.0)
    p = normalized_legendre(max(n, 1), mu)[:, n, m] / np.sqrt(2.0)
    zonal = np.cos(m * np.deg2rad(np.asarray(lon, dtype=np.float64)))
    return jnp.asarray(p[:, None] * zonal[None, :])
