"""
Latitude-Longitude Grid Module
================================

Grid descriptor for global spectral transforms on a uniform latitude-longitude
grid.  Unlike a Gauss-Legendre grid, the latitudes are equally spaced and the
two poles are part of the sampling, so the meridional quadrature is a plain
fixed-spacing sum weighted by cos(latitude).

Key Concepts:
-------------
    • Latitude phi in [-90, 90] degrees, equally spaced, poles included.
    • Longitude lambda in [0, 360) degrees, equally spaced, periodic.
    • mu = sin(phi) in [-1, 1]: the argument of the Legendre functions.
    • Quadrature: integral f d_mu ≈ sum_j f(phi_j) * cos(phi_j) * dlat.

References:
-----------
[1] Durran, D. R. (2010). Numerical Methods for Fluid Dynamics.
[2] Krishnamurti, T. N. et al. (2006). An Introduction to Global Spectral Modeling.
"""

import equinox as eqx
import jax.numpy as jnp
from jaxtyping import Array, Float
import numpy as np

from ..config import EARTH_RADIUS, GLOBAL_TOLERANCE_DEG, UNIFORM_SPACING_RTOL
from ..exceptions import NonGlobalDomainError


def _uniform_increment(samples: np.ndarray, name: str) -> float:
    """
    Return the constant increment of a 1D sample axis.

    Raises:
    -------
    ValueError
        If fewer than two samples are given or the spacing is not uniform.
    """
    if samples.ndim != 1 or samples.size < 2:
        raise ValueError(f"{name} needs at least two samples, got shape {samples.shape}")
    diffs = np.diff(samples)
    step = float(diffs[0])
    if step == 0.0 or not np.allclose(diffs, step, rtol=UNIFORM_SPACING_RTOL, atol=0.0):
        raise ValueError(f"{name} samples are not uniformly spaced")
    return step


class LatLonGrid(eqx.Module):
    """
    Uniform latitude-longitude grid on a sphere of radius R.

    Mathematical Framework:
    -----------------------
    With Y latitudes phi_j (spacing dlat) and X longitudes lambda_k
    (spacing 2*pi/X), a field is sampled as u[j, k] = u(phi_j, lambda_k).
    The grid is global when the latitudes run pole to pole and the longitudes
    close the circle:
        dlat = 180 / (Y - 1),    dlon = 360 / X.

    Attributes:
    -----------
    lat : Float[Array, "Ny"]
        Latitude samples [deg], ascending or descending.
    lon : Float[Array, "Nx"]
        Longitude samples [deg].
    radius : float
        Sphere radius [m].
    ny : int
        Number of latitudes Y.
    nx : int
        Number of longitudes X.
    dlat : float
        Latitude spacing [rad], positive.
    dlon : float
        Longitude spacing [rad], positive.
    """

    lat: Float[Array, "Ny"]
    lon: Float[Array, "Nx"]
    radius: float
    ny: int = eqx.field(static=True)
    nx: int = eqx.field(static=True)
    dlat: float
    dlon: float

    def __init__(self, lat, lon, radius: float = EARTH_RADIUS):
        lat_np = np.asarray(lat, dtype=np.float64)
        lon_np = np.asarray(lon, dtype=np.float64)

        if np.any(np.abs(lat_np) > 90.0 + GLOBAL_TOLERANCE_DEG):
            raise ValueError("latitudes must lie within [-90, 90] degrees")
        if radius <= 0:
            raise ValueError(f"radius must be positive, got {radius}")

        dlat_deg = abs(_uniform_increment(lat_np, "latitude"))
        dlon_deg = abs(_uniform_increment(lon_np, "longitude"))

        self.lat = jnp.asarray(lat_np)
        self.lon = jnp.asarray(lon_np)
        self.radius = float(radius)
        self.ny = int(lat_np.size)
        self.nx = int(lon_np.size)
        self.dlat = float(np.deg2rad(dlat_deg))
        self.dlon = float(np.deg2rad(dlon_deg))

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @classmethod
    def from_counts(
        cls, ny: int, nx: int, radius: float = EARTH_RADIUS
    ) -> "LatLonGrid":
        """Global grid from counts: pole-to-pole latitudes, lon in [0, 360)."""
        lat = np.linspace(-90.0, 90.0, ny)
        lon = np.arange(nx) * (360.0 / nx)
        return cls(lat=lat, lon=lon, radius=radius)

    @classmethod
    def from_spacing(
        cls, dlat: float, dlon: float, radius: float = EARTH_RADIUS
    ) -> "LatLonGrid":
        """Global grid from spacings [deg]. 180/dlat and 360/dlon must be integers."""
        ny_f, nx_f = 180.0 / dlat, 360.0 / dlon
        errors = []
        if not np.isclose(ny_f, round(ny_f)):
            errors.append(f"180 is not divisible by dlat={dlat}")
        if not np.isclose(nx_f, round(nx_f)):
            errors.append(f"360 is not divisible by dlon={dlon}")
        if errors:
            raise ValueError("\n".join(errors))
        return cls.from_counts(int(round(ny_f)) + 1, int(round(nx_f)), radius=radius)

    # ------------------------------------------------------------------
    # Global-domain checks
    # ------------------------------------------------------------------

    @property
    def is_zonal_periodic(self) -> bool:
        """Whether the longitudes close the full circle: dlon == 360 / X."""
        return abs(360.0 / self.nx - np.rad2deg(self.dlon)) <= GLOBAL_TOLERANCE_DEG

    @property
    def is_global(self) -> bool:
        """Whether the grid is zonally periodic and runs pole to pole."""
        if not self.is_zonal_periodic:
            return False
        if abs(180.0 / (self.ny - 1) - np.rad2deg(self.dlat)) > GLOBAL_TOLERANCE_DEG:
            return False
        ends = sorted(float(v) for v in (self.lat[0], self.lat[-1]))
        return (
            abs(ends[0] + 90.0) <= GLOBAL_TOLERANCE_DEG
            and abs(ends[1] - 90.0) <= GLOBAL_TOLERANCE_DEG
        )

    def check_global(self) -> bool:
        """
        Verify the grid supports global spectral transforms.

        Returns:
        --------
        bool
            True if global, raises NonGlobalDomainError otherwise.
        """
        if not self.is_zonal_periodic:
            raise NonGlobalDomainError(
                f"longitude spacing {np.rad2deg(self.dlon):.6g} deg != 360/{self.nx}"
            )
        if not self.is_global:
            raise NonGlobalDomainError(
                f"latitudes {float(self.lat[0]):.6g}..{float(self.lat[-1]):.6g} deg "
                f"with spacing {np.rad2deg(self.dlat):.6g} do not run pole to pole"
            )
        return True

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def shape(self) -> tuple[int, int]:
        """Horizontal shape (Y, X)."""
        return (self.ny, self.nx)

    @property
    def sin_lat(self) -> Float[Array, "Ny"]:
        """mu = sin(latitude), the Legendre argument at each row."""
        return jnp.sin(jnp.deg2rad(self.lat))

    @property
    def cos_lat(self) -> Float[Array, "Ny"]:
        """cos(latitude); zero (to rounding) at the poles."""
        return jnp.cos(jnp.deg2rad(self.lat))

    @property
    def quadrature_weights(self) -> Float[Array, "Ny"]:
        """
        Meridional weights dlat * cos(lat_j).

        integral_{-1}^{1} f(mu) d_mu ≈ sum_j weights[j] * f(sin(lat_j))
        """
        return self.dlat * self.cos_lat

    @property
    def X(self) -> tuple[Float[Array, "Ny Nx"], Float[Array, "Ny Nx"]]:
        """2D meshgrid (LON, LAT) in degrees, shapes (Ny, Nx)."""
        result = jnp.meshgrid(self.lon, self.lat, indexing="xy")
        return (result[0], result[1])
