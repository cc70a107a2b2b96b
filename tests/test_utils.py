"""
Tests for the FFT helpers and the Hermitian spectrum expansion.
"""

import jax.numpy as jnp
import numpy as np
import pytest

from spharmx._src.exceptions import (
    DimensionMismatchError,
    InvalidTruncationError,
    SpharmxError,
    TruncationNotSetError,
)
from spharmx._src.utils import fft_transform, hermitian_spectrum, real_part_of_inverse


def test_fft_roundtrip():
    u = jnp.asarray(np.random.default_rng(0).standard_normal((3, 16)))
    u_rec = fft_transform(fft_transform(u), inverse=True)
    assert jnp.allclose(u_rec.real, u, atol=1e-12)
    assert jnp.allclose(u_rec.imag, 0.0, atol=1e-12)


def test_fft_forward_unnormalized():
    """The forward transform of a constant carries the factor N at m = 0."""
    u_hat = fft_transform(jnp.full(12, 2.0))
    assert float(u_hat[0].real) == pytest.approx(24.0)
    assert jnp.allclose(u_hat[1:], 0.0, atol=1e-12)


def test_hermitian_spectrum_layout():
    u_hat = jnp.array([1.0, 2.0 + 1.0j, 3.0 - 2.0j])
    full = hermitian_spectrum(u_hat, 8)
    expected = jnp.array([1.0, 2.0 + 1.0j, 3.0 - 2.0j, 0, 0, 0, 3.0 + 2.0j, 2.0 - 1.0j])
    assert jnp.allclose(full, expected)


def test_real_part_of_inverse_matches_full_spectrum():
    """Truncating, expanding and inverting recovers a band-limited signal."""
    n = 32
    lam = 2 * jnp.pi * jnp.arange(n) / n
    u = 1.5 + jnp.cos(lam) - 0.25 * jnp.sin(3 * lam) + 0.5 * jnp.cos(7 * lam)
    u_hat = fft_transform(u)[:8]
    assert jnp.allclose(real_part_of_inverse(u_hat, n), u, atol=1e-12)


def test_exceptions_share_base():
    """All library errors are SpharmxError and ValueError, with details."""
    for err in (
        InvalidTruncationError(1, 2, 18),
        TruncationNotSetError("analyze"),
        DimensionMismatchError("field", (1, 1, 19, 36), (19, 36)),
    ):
        assert isinstance(err, SpharmxError)
        assert isinstance(err, ValueError)
        assert err.details
    assert "M=1" in str(InvalidTruncationError(1, 2, 18))
