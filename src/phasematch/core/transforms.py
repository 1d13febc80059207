"""Frequency-domain stages: forward DFT, phase-only normalization, cross-power.

Convention: ``norm="inverse"`` leaves the forward DFT unscaled and defers the
``1/(D*D)`` factor to the inverse; ``norm="forward"`` applies it at forward
time. Every ComplexGrid records the convention it was produced with and the
stages below refuse to mix conventions.
"""

from __future__ import annotations

import logging
import warnings
from typing import Optional

import jax.numpy as jnp

from .errors import DegenerateSpectrumWarning, GridMismatchError
from .grids import NORMS, ComplexGrid, PixelGrid


LOG = logging.getLogger(__name__)

# Multiples of machine epsilon, relative to the channel RMS magnitude, below
# which a bin counts as empty
_DEGENERATE_EPS_SCALE = 64.0

_NUMPY_NORM = {"forward": "forward", "inverse": "backward"}


def forward(grid: PixelGrid, norm: str = "inverse") -> ComplexGrid:
    """2-D DFT of every channel of a square grid."""
    if norm not in NORMS:
        raise ValueError(f"transform normalization must be one of {NORMS}, got {norm!r}")
    if grid.height != grid.width:
        raise GridMismatchError(f"forward transform expects a square canvas, got {grid.width}x{grid.height}")
    F = jnp.fft.fft2(grid.data, axes=(-2, -1), norm=_NUMPY_NORM[norm])
    return ComplexGrid.from_complex(F, norm=norm)


def default_degenerate_eps(dtype) -> float:
    return float(jnp.finfo(dtype).eps) * _DEGENERATE_EPS_SCALE


def degenerate_mask(spectrum: ComplexGrid, eps: Optional[float] = None) -> jnp.ndarray:
    """Bins whose magnitude is at the transform's roundoff level.

    The reference is the channel's RMS bin magnitude, i.e. the L2 norm of the
    input by Parseval, which sets the FFT roundoff scale. A large DC term from a
    brightness offset does not raise the cutoff.
    """
    mag = spectrum.magnitude()
    if eps is None:
        eps = default_degenerate_eps(mag.dtype)
    rms = jnp.sqrt(jnp.mean(mag * mag, axis=(-2, -1), keepdims=True))
    return mag <= eps * rms


def normalize(spectrum: ComplexGrid, eps: Optional[float] = None) -> ComplexGrid:
    """Divide each bin by its own magnitude, leaving a unit-magnitude spectrum.

    The divisor and the planes carry the same convention scale, so the result
    is the same under either convention. Degenerate bins become exact zeros.
    """
    mag = spectrum.magnitude()
    mask = degenerate_mask(spectrum, eps)
    safe = jnp.where(mask, 1.0, mag)
    real = jnp.where(mask, 0.0, spectrum.real / safe)
    imag = jnp.where(mask, 0.0, spectrum.imag / safe)

    n_bad = int(jnp.sum(mask))
    if n_bad:
        per_channel = mask.reshape((mask.shape[0], -1)).all(axis=1)
        if bool(jnp.any(per_channel)):
            warnings.warn(
                "spectrum has no non-zero bins in at least one channel; its surface will be zero",
                DegenerateSpectrumWarning,
                stacklevel=2,
            )
        LOG.debug("Zeroed %d degenerate frequency bins of %d", n_bad, int(mask.size))
    return ComplexGrid(real.astype(spectrum.real.dtype), imag.astype(spectrum.imag.dtype), spectrum.norm)


def _check_compatible(a: ComplexGrid, b: ComplexGrid) -> None:
    if a.shape != b.shape:
        raise GridMismatchError(f"spectra differ in shape: {a.shape} vs {b.shape}")
    if a.norm != b.norm:
        raise GridMismatchError(f"spectra use different conventions: {a.norm!r} vs {b.norm!r}")


def cross_power(template_t: ComplexGrid, search_t: ComplexGrid) -> ComplexGrid:
    """conj(template_t) * search_t, channel by channel."""
    _check_compatible(template_t, search_t)
    a1, a2 = template_t.real, template_t.imag
    b1, b2 = search_t.real, search_t.imag
    real = a1 * b1 + a2 * b2
    imag = a1 * b2 - a2 * b1
    return ComplexGrid(real, imag, search_t.norm)


__all__ = [
    "forward",
    "normalize",
    "degenerate_mask",
    "default_degenerate_eps",
    "cross_power",
]
