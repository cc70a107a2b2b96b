import jax.numpy as jnp
from jaxtyping import Array, Complex, Float


def fft_transform(u: Array, axis: int = -1, inverse: bool = False) -> Array:
    """the FFT transformation (forward and inverse)

    The forward transform is unnormalized, the inverse carries the 1/N factor,
    so ``fft_transform(fft_transform(u), inverse=True) == u``.

    Args:
        u (Array): the input array to be transformed
        axis (int, optional): the axis to do the FFT transformation. Defaults to -1.
        inverse (bool, optional): whether to do the forward or inverse transformation.
            Defaults to False.

    Returns:
        u (Array): the transformation that maybe forward or backwards
    """
    if inverse:
        return jnp.fft.ifft(a=u, axis=axis)
    return jnp.fft.fft(a=u, axis=axis)


def hermitian_spectrum(
    u_hat: Complex[Array, "... Mp1"], n: int
) -> Complex[Array, "... n"]:
    """Expand a truncated one-sided spectrum into a full Hermitian one.

    Position 0 is copied as-is, positions 1..M are copied in place and
    position n-i receives the conjugate of position i. When M == n // 2 the
    conjugate write wins at the Nyquist index.

    Args:
        u_hat (Array): Fourier coefficients for wavenumbers 0..M along the last axis
        n (int): length of the full spectrum, M <= n // 2

    Returns:
        u_full (Array): length-n spectrum whose inverse FFT is real
    """
    truncation = u_hat.shape[-1] - 1
    full = jnp.zeros(u_hat.shape[:-1] + (n,), dtype=u_hat.dtype)
    full = full.at[..., : truncation + 1].set(u_hat)
    if truncation > 0:
        # positions n-M .. n-1 hold conj(u_hat[M]) .. conj(u_hat[1])
        full = full.at[..., n - truncation :].set(jnp.conj(u_hat[..., :0:-1]))
    return full


def real_part_of_inverse(
    u_hat: Complex[Array, "... Mp1"], n: int
) -> Float[Array, "... n"]:
    """Inverse FFT of a truncated spectrum, keeping the real part only."""
    return fft_transform(hermitian_spectrum(u_hat, n), axis=-1, inverse=True).real
