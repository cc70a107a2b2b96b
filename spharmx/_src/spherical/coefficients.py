"""
Spectral Coefficients
======================

Container for triangular spherical harmonic expansions of real fields.
"""

import equinox as eqx
import jax.numpy as jnp
from jaxtyping import Array, Complex, Float

from ..exceptions import DimensionMismatchError


class SpectralCoefficients(eqx.Module):
    """
    Triangular spherical harmonic coefficients, real and imaginary parts.

    Both arrays are indexed [t, z, n, m] with 0 <= m <= n <= M.  Entries with
    m > n are unused and stay zero.  The m = 0 column of ``imag`` is zero for
    coefficients produced by an analysis of a real field.

    Attributes:
    -----------
    real : Float[Array, "T Z Mp1 Mp1"]
        Real part of the coefficients.
    imag : Float[Array, "T Z Mp1 Mp1"]
        Imaginary part of the coefficients.
    """

    real: Float[Array, "T Z Mp1 Mp1"]
    imag: Float[Array, "T Z Mp1 Mp1"]

    def __init__(self, real, imag):
        real = jnp.asarray(real)
        imag = jnp.asarray(imag)
        if real.shape != imag.shape:
            raise DimensionMismatchError("imaginary coefficients", real.shape, imag.shape)
        if real.ndim != 4 or real.shape[-1] != real.shape[-2]:
            raise DimensionMismatchError(
                "spectral coefficients", ("T", "Z", "M+1", "M+1"), real.shape
            )
        self.real = real
        self.imag = imag

    @classmethod
    def zeros(cls, truncation: int, nt: int = 1, nz: int = 1) -> "SpectralCoefficients":
        """All-zero coefficients for T_M with (nt, nz) slices."""
        shape = (nt, nz, truncation + 1, truncation + 1)
        return cls(real=jnp.zeros(shape), imag=jnp.zeros(shape))

    @property
    def truncation(self) -> int:
        """Triangular truncation M."""
        return self.real.shape[-1] - 1

    @property
    def shape(self) -> tuple[int, ...]:
        """Shape (T, Z, M+1, M+1) shared by both parts."""
        return self.real.shape

    @property
    def degrees(self) -> Float[Array, "Mp1"]:
        """Total wavenumbers n = 0..M."""
        return jnp.arange(self.truncation + 1, dtype=self.real.dtype)

    @property
    def triangular_mask(self) -> Float[Array, "Mp1 Mp1"]:
        """1 where m <= n (used entries), 0 elsewhere."""
        n = jnp.arange(self.truncation + 1)
        return (n[None, :] <= n[:, None]).astype(self.real.dtype)

    def as_complex(self) -> Complex[Array, "T Z Mp1 Mp1"]:
        """Coefficients as a single complex array, real + i * imag."""
        return self.real + 1j * self.imag

    def with_mode(self, n: int, m: int, real: float, imag: float = 0.0) -> "SpectralCoefficients":
        """
        Copy with the (n, m) coefficient set to ``real + i*imag`` in every slice.

        Raises:
        -------
        ValueError
            If (n, m) is not a triangular index 0 <= m <= n <= M.
        """
        if not 0 <= m <= n <= self.truncation:
            raise ValueError(f"(n={n}, m={m}) outside triangular truncation T{self.truncation}")
        return SpectralCoefficients(
            real=self.real.at[..., n, m].set(real),
            imag=self.imag.at[..., n, m].set(imag),
        )

    def scale_by_degree(self, factor: Float[Array, "Mp1"]) -> "SpectralCoefficients":
        """
        Multiply every degree row n by ``factor[n]`` (both parts).

        Used for operators diagonal in spherical harmonic space, e.g. the
        Laplacian with eigenvalue -n(n+1)/R^2.
        """
        factor = jnp.asarray(factor)[:, None]
        return SpectralCoefficients(real=self.real * factor, imag=self.imag * factor)
