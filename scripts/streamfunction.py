"""
Streamfunction from Vorticity on the Sphere
=============================================

This script inverts a global relative-vorticity field for the streamfunction
with the spectral Poisson solver:

  nabla^2 psi = zeta

The test case is the Rossby-Haurwitz wave of wavenumber R (Williamson et al.
1992, test case 6), whose streamfunction is a sum of two spherical harmonics:

  psi  = -a^2 * omega * sin(phi) + a^2 * K * cos^R(phi) * sin(phi) * cos(R * lambda)
  zeta =  2 * omega * sin(phi) - K * (R+1) * (R+2) * cos^R(phi) * sin(phi) * cos(R * lambda)

Since both terms are exact eigenfunctions of the Laplacian, the recovered
streamfunction should match the analytic one up to the quadrature error of
the fixed-spacing latitude sum.

Numerical Method:
-----------------
- Forward spherical harmonic transform of zeta (FFT in longitude, Legendre
  quadrature in latitude) with triangular truncation T_M.
- Division of every coefficient by -n*(n+1)/a^2 (n = 0 dropped).
- Inverse transform back to the lat-lon grid.

Usage:
------
Example:
  python scripts/streamfunction.py --dlat 2.0 --truncation 45 --wavenumber 4
"""

import pathlib
import time
from typing import Annotated

import cyclopts
import jax
import jax.numpy as jnp
from jaxtyping import Array, Float
from loguru import logger
import matplotlib.pyplot as plt
import xarray as xr

from spharmx import (
    EARTH_RADIUS,
    LatLonGrid,
    SphericalHarmonicTransform,
    SphericalPoissonSolver,
)

# JAX configuration
jax.config.update("jax_enable_x64", True)

app = cyclopts.App()


def rossby_haurwitz(
    grid: LatLonGrid, wavenumber: int, omega: float, K: float
) -> tuple[Float[Array, "Ny Nx"], Float[Array, "Ny Nx"]]:
    """Analytic (psi, zeta) of a Rossby-Haurwitz wave on the grid."""
    LON, LAT = grid.X
    phi, lam = jnp.deg2rad(LAT), jnp.deg2rad(LON)
    a = grid.radius
    wave = jnp.cos(phi) ** wavenumber * jnp.sin(phi) * jnp.cos(wavenumber * lam)
    psi = -(a**2) * omega * jnp.sin(phi) + a**2 * K * wave
    zeta = 2 * omega * jnp.sin(phi) - K * (wavenumber + 1) * (wavenumber + 2) * wave
    return psi, zeta


@app.default
def main(
    dlat: Annotated[float, cyclopts.Parameter(help="Grid spacing [deg]")] = 2.0,
    truncation: Annotated[
        int | None, cyclopts.Parameter(help="Triangular truncation M (default X // 4)")
    ] = None,
    wavenumber: Annotated[int, cyclopts.Parameter(help="Rossby-Haurwitz wavenumber R")] = 4,
    omega: Annotated[float, cyclopts.Parameter(help="Zonal flow rate [1/s]")] = 7.848e-6,
    amplitude: Annotated[float, cyclopts.Parameter(help="Wave amplitude K [1/s]")] = 7.848e-6,
    output_dir: Annotated[
        pathlib.Path | None, cyclopts.Parameter(help="Output directory")
    ] = None,
    plot: Annotated[bool, cyclopts.Parameter(help="Show diagnostic plots")] = False,
):
    """
    Invert Rossby-Haurwitz vorticity for the streamfunction.
    """
    logger.enable("spharmx")
    logger.info("=" * 60)
    logger.info("Spectral streamfunction inversion on the sphere")
    logger.info("=" * 60)

    # ========================================================================
    # 1. Grid and engine
    # ========================================================================
    logger.info("Setting up grid and spherical harmonic engine...")
    grid = LatLonGrid.from_spacing(dlat, dlat, radius=EARTH_RADIUS)
    M = truncation if truncation is not None else grid.nx // 4
    engine = SphericalHarmonicTransform(grid).set_truncation(M)
    solver = SphericalPoissonSolver(engine)
    logger.success(f"Grid: {grid.ny} x {grid.nx} ({dlat} deg), truncation T{M}")

    # ========================================================================
    # 2. Forcing
    # ========================================================================
    psi_true, zeta = rossby_haurwitz(grid, wavenumber, omega, amplitude)
    logger.info(f"Rossby-Haurwitz wave: R={wavenumber}, omega={omega:.3e}, K={amplitude:.3e}")

    # ========================================================================
    # 3. Inversion
    # ========================================================================
    logger.info("Inverting vorticity...")
    tic = time.perf_counter()
    psi = solver.solve(zeta[None, None])[0, 0]
    psi.block_until_ready()
    logger.success(f"Inversion done in {time.perf_counter() - tic:.3f} sec")

    error = psi - psi_true
    rel_err = float(jnp.max(jnp.abs(error)) / jnp.max(jnp.abs(psi_true)))
    logger.info(f"Max relative error: {rel_err:.3e}")

    # ========================================================================
    # 4. Save
    # ========================================================================
    ds = xr.Dataset(
        data_vars={
            "zeta": (("lat", "lon"), zeta),
            "psi": (("lat", "lon"), psi),
            "psi_true": (("lat", "lon"), psi_true),
        },
        coords={
            "lat": grid.lat,
            "lon": grid.lon,
        },
        attrs={
            "description": "Spectral streamfunction of a Rossby-Haurwitz wave",
            "truncation": M,
            "radius": grid.radius,
            "max_relative_error": rel_err,
        },
    )

    if output_dir is None:
        output_dir = pathlib.Path("./output/streamfunction")
    output_dir.mkdir(parents=True, exist_ok=True)
    output_path = output_dir / "rossby_haurwitz_psi.nc"
    ds.to_netcdf(output_path)
    logger.success(f"Output saved to: {output_path}")

    if plot:
        plot_results(ds)
        plt.show()


def plot_results(ds: xr.Dataset):
    """
    Vorticity, recovered streamfunction and its error.
    """
    fig, axes = plt.subplots(1, 3, figsize=(15, 4))

    ds["zeta"].plot(ax=axes[0], cmap="RdBu_r")
    axes[0].set_title("Relative vorticity zeta")

    ds["psi"].plot(ax=axes[1], cmap="viridis")
    axes[1].set_title("Spectral streamfunction psi")

    (ds["psi"] - ds["psi_true"]).plot(ax=axes[2], cmap="RdBu_r")
    axes[2].set_title("psi - psi_true")

    fig.suptitle(f"Rossby-Haurwitz wave, T{ds.attrs['truncation']}")
    plt.tight_layout(rect=[0, 0, 1, 0.96])


if __name__ == "__main__":
    app()
