from __future__ import annotations

import logging

import jax.numpy as jnp

from .grids import ComplexGrid, CorrelationSurface


LOG = logging.getLogger(__name__)

COMBINATIONS = ("gray", "average", "rms")

LUMA_WEIGHTS = {
    "rec709": (0.2126, 0.7152, 0.0722),
    "rec601": (0.299, 0.587, 0.114),
}


def inverse(spectrum: ComplexGrid) -> jnp.ndarray:
    """Inverse 2-D DFT of every channel, keeping the real part.

    Expects a phase-only spectrum: its bins are unit-scaled whatever forward
    convention produced it, so the ``1/(D*D)`` factor is applied here.
    """
    z = spectrum.as_complex()
    spatial = jnp.fft.ifft2(z, axes=(-2, -1), norm="backward")
    return jnp.real(spatial).astype(spectrum.real.dtype)


def crop(planes: jnp.ndarray, width: int, height: int) -> jnp.ndarray:
    """Origin-anchored crop of (C, D, D) planes back to (C, height, width)."""
    if height > planes.shape[-2] or width > planes.shape[-1]:
        raise ValueError(f"crop {width}x{height} larger than planes {tuple(planes.shape[-2:])}")
    return planes[..., :height, :width]


def combine_channels(planes: jnp.ndarray, mode: str = "gray", luma: str = "rec709") -> jnp.ndarray:
    """Reduce (C, H, W) surfaces to one (H, W) surface.

    A single channel is returned as is for every mode.
    """
    mode = str(mode).lower()
    if mode not in COMBINATIONS:
        raise ValueError(f"channel combination must be one of {COMBINATIONS}, got {mode!r}")
    if planes.shape[0] == 1:
        return planes[0]
    if mode == "gray":
        if luma not in LUMA_WEIGHTS:
            raise ValueError(f"luma must be one of {tuple(LUMA_WEIGHTS)}, got {luma!r}")
        if planes.shape[0] != 3:
            raise ValueError(f"gray combination needs 1 or 3 channels, got {planes.shape[0]}")
        w = jnp.asarray(LUMA_WEIGHTS[luma], dtype=planes.dtype)
        return jnp.tensordot(w, planes, axes=1)
    if mode == "average":
        return jnp.mean(planes, axis=0)
    return jnp.sqrt(jnp.mean(planes * planes, axis=0))


def build_surface(
    spectrum: ComplexGrid,
    width: int,
    height: int,
    *,
    mode: str = "gray",
    luma: str = "rec709",
) -> CorrelationSurface:
    """Cross-power spectrum -> cropped, channel-combined correlation surface."""
    planes = crop(inverse(spectrum), width, height)
    combined = combine_channels(planes, mode=mode, luma=luma)
    LOG.debug("Surface %dx%d from %d channel(s) via %s", width, height, spectrum.channels, mode)
    return CorrelationSurface(combined)


__all__ = [
    "COMBINATIONS",
    "LUMA_WEIGHTS",
    "inverse",
    "crop",
    "combine_channels",
    "build_surface",
]
