"""
Tests for SphericalPoissonSolver and the spectral Laplacian.
"""

import jax.numpy as jnp
import numpy as np
import pytest

from spharmx._src.config import EARTH_RADIUS
from spharmx._src.exceptions import (
    InvalidTruncationError,
    NonGlobalDomainError,
    TruncationNotSetError,
)
from spharmx._src.spherical.coefficients import SpectralCoefficients
from spharmx._src.spherical.grid import LatLonGrid
from spharmx._src.spherical.harmonics import SphericalHarmonicTransform
from spharmx._src.spherical.legendre import spherical_harmonic
from spharmx._src.spherical.solvers import (
    SphericalPoissonSolver,
    inverse_laplacian_factors,
    invert_laplacian,
    laplacian_eigenvalues,
)


def _solver(ny=91, nx=180, M=10, radius=1.0) -> SphericalPoissonSolver:
    g = LatLonGrid.from_counts(ny, nx, radius=radius)
    return SphericalPoissonSolver(SphericalHarmonicTransform(g).set_truncation(M))


def _mode(grid, n, m):
    return spherical_harmonic(n, m, grid.lat, grid.lon)[None, None]


def _fd_laplacian(psi, grid):
    """
    Second-order finite-difference Laplacian in conservative spherical form.

    Pole rows are left at zero, which is exact for modes with m >= 1.
    """
    phi = jnp.deg2rad(grid.lat)
    h, dl = grid.dlat, grid.dlon
    cos_c = jnp.cos(phi)[1:-1, None]
    cos_half = jnp.cos(0.5 * (phi[1:] + phi[:-1]))[:, None]
    flux = cos_half * (psi[1:] - psi[:-1]) / h
    merid = (flux[1:] - flux[:-1]) / h / cos_c
    d2l = jnp.roll(psi, -1, axis=1) - 2 * psi + jnp.roll(psi, 1, axis=1)
    zonal = d2l[1:-1] / dl**2 / cos_c**2
    return jnp.zeros_like(psi).at[1:-1].set((merid + zonal) / grid.radius**2)


# ---------------------------------------------------------------------------
# Eigenvalues
# ---------------------------------------------------------------------------


def test_laplacian_eigenvalues():
    eig = laplacian_eigenvalues(4, 2.0)
    assert jnp.allclose(eig, jnp.array([0.0, -2.0, -6.0, -12.0, -20.0]) / 4.0)


def test_inverse_factors_drop_mean_mode():
    """The singular n = 0 mode maps to 0, the rest to 1 / eigenvalue."""
    inv = inverse_laplacian_factors(4, 1.0)
    assert float(inv[0]) == 0.0
    assert jnp.allclose(inv[1:], -1.0 / jnp.array([2.0, 6.0, 12.0, 20.0]))
    assert jnp.all(jnp.isfinite(inv))


# ---------------------------------------------------------------------------
# Poisson inversion
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("n, m", [(1, 1), (3, 1), (4, 2), (6, 5)])
def test_spherical_poisson_eigenfunction(n, m):
    """
    nabla^2 psi = f with f = -n*(n+1)/R^2 * Y_n^m recovers psi = Y_n^m.
    """
    solver = _solver()
    g = solver.transform.grid
    psi = _mode(g, n, m)
    f = -n * (n + 1) * psi
    assert jnp.allclose(solver.solve(f), psi, atol=1e-4)


def test_spherical_poisson_earth_radius():
    """The eigenvalue scaling uses the grid radius."""
    solver = _solver(radius=EARTH_RADIUS)
    g = solver.transform.grid
    psi = 1e7 * _mode(g, 3, 1)
    f = -12.0 / EARTH_RADIUS**2 * psi
    out = solver.solve(f)
    assert jnp.allclose(out, psi, atol=1e-4 * 1e7)
    assert solver.radius == EARTH_RADIUS


def test_spherical_poisson_stacked_slices():
    """Each (t, z) slice is inverted independently."""
    solver = _solver()
    g = solver.transform.grid
    psi = jnp.concatenate(
        [
            jnp.concatenate([_mode(g, 2, 1), 3.0 * _mode(g, 5, 4)], axis=1),
            jnp.concatenate([-_mode(g, 7, 2), _mode(g, 4, 3)], axis=1),
        ],
        axis=0,
    )
    n = jnp.array([[2.0, 5.0], [7.0, 4.0]])[:, :, None, None]
    f = -n * (n + 1) * psi
    out = solver.solve(f)
    assert out.shape == (2, 2, 91, 180)
    assert jnp.allclose(out, psi, atol=1e-4)


def test_spherical_poisson_finite_difference_forcing():
    """
    Inverting a finite-difference Laplacian recovers psi to the accuracy of
    the finite differences, improving with resolution.
    """

    def error(ny, nx):
        solver = _solver(ny=ny, nx=nx, M=10)
        g = solver.transform.grid
        psi = _mode(g, 4, 2)
        f = _fd_laplacian(psi[0, 0], g)[None, None]
        return float(jnp.max(jnp.abs(solver.solve(f) - psi)) / jnp.max(jnp.abs(psi)))

    coarse, fine = error(46, 90), error(91, 180)
    assert fine < 1e-2
    assert fine < coarse / 2


def test_spherical_poisson_constant_forcing():
    """A constant forcing lives in n = 0 only, so the solution is ~0."""
    solver = _solver()
    f = jnp.ones((1, 1, 91, 180))
    assert float(jnp.max(jnp.abs(solver.solve(f)))) < 1e-2


def test_spherical_poisson_spectral_input():
    """
    With spectral=True the coefficients are only scaled and synthesized:
    a at (n, m) gives a / (-n*(n+1)/R^2) * (2 / X) * Y_n^m, and the n = 0
    coefficient is ignored.
    """
    solver = _solver(radius=2.0)
    g = solver.transform.grid
    coeffs = SpectralCoefficients.zeros(10).with_mode(3, 1, 6.0)
    out = solver.solve(coeffs, spectral=True)
    expected = 6.0 / (-12.0 / 4.0) * (2.0 / g.nx) * _mode(g, 3, 1)
    assert jnp.allclose(out, expected, atol=1e-12)

    with_mean = coeffs.with_mode(0, 0, 50.0)
    assert jnp.array_equal(solver.solve(with_mean, spectral=True), out)


def test_spherical_laplacian_eigenfunction():
    """nabla^2 Y_n^m = -n*(n+1)/R^2 * Y_n^m."""
    solver = _solver(radius=3.0)
    g = solver.transform.grid
    psi = _mode(g, 5, 2)
    assert jnp.allclose(solver.laplacian(psi), -30.0 / 9.0 * psi, atol=1e-4)


def test_spherical_laplacian_then_solve():
    """solve(laplacian(psi)) == psi for a zero-mean non-zonal psi."""
    solver = _solver()
    g = solver.transform.grid
    psi = _mode(g, 3, 1) + 0.5 * _mode(g, 6, 4)
    coeffs = solver.transform.analyze(psi)
    lap = solver.laplacian(coeffs, spectral=True)
    assert jnp.allclose(solver.solve(lap), psi, atol=1e-3)


# ---------------------------------------------------------------------------
# Engine methods and one-shot helper
# ---------------------------------------------------------------------------


def test_engine_invert_laplacian_matches_solver():
    solver = _solver()
    g = solver.transform.grid
    f = -6.0 * _mode(g, 2, 1) - 20.0 * _mode(g, 4, 4)
    assert jnp.array_equal(solver.transform.invert_laplacian(f), solver.solve(f))
    assert jnp.array_equal(solver.transform.laplacian(f), solver.laplacian(f))


def test_invert_laplacian_default_truncation():
    """Without a truncation, min(Y - 1, X // 2) is used."""
    g = LatLonGrid.from_counts(37, 72, radius=1.0)
    f = -12.0 * _mode(g, 3, 1)
    psi = invert_laplacian(g, f)
    engine = SphericalHarmonicTransform(g).set_truncation(36)
    assert psi.shape == (1, 1, 37, 72)
    assert jnp.allclose(psi, SphericalPoissonSolver(engine).solve(f), atol=1e-12)


def test_invert_laplacian_explicit_truncation():
    g = LatLonGrid.from_counts(91, 180, radius=1.0)
    psi = _mode(g, 3, 1)
    assert jnp.allclose(invert_laplacian(g, -12.0 * psi, truncation=8), psi, atol=1e-4)


def test_invert_laplacian_invalid_inputs():
    g = LatLonGrid.from_counts(19, 36, radius=1.0)
    f = jnp.zeros((1, 1, 19, 36))
    with pytest.raises(InvalidTruncationError):
        invert_laplacian(g, f, truncation=1)

    regional = LatLonGrid(lat=np.linspace(-60.0, 60.0, 13), lon=np.arange(36) * 10.0)
    with pytest.raises(NonGlobalDomainError):
        invert_laplacian(regional, jnp.zeros((1, 1, 13, 36)))


def test_solver_requires_truncation():
    """A solver built on the unconfigured engine cannot solve."""
    g = LatLonGrid.from_counts(19, 36, radius=1.0)
    solver = SphericalPoissonSolver(SphericalHarmonicTransform(g))
    with pytest.raises(TruncationNotSetError):
        solver.solve(jnp.zeros((1, 1, 19, 36)))
