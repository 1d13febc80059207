"""Numeric backend checks run before a match starts."""

from __future__ import annotations

import logging

import numpy as np
import jax
import jax.numpy as jnp

from ..core.errors import NumericCapabilityError


LOG = logging.getLogger(__name__)

_DTYPES = {
    "float32": jnp.float32,
    "fp32": jnp.float32,
    "float64": jnp.float64,
    "fp64": jnp.float64,
}


def x64_enabled() -> bool:
    return jax.dtypes.canonicalize_dtype(jnp.float64) == jnp.dtype(jnp.float64)


def resolve_dtype(name: str):
    key = str(name).lower()
    if key not in _DTYPES:
        raise NumericCapabilityError(f"unsupported dtype {name!r}; use float32 or float64")
    dt = _DTYPES[key]
    if dt == jnp.float64 and not x64_enabled():
        raise NumericCapabilityError(
            "float64 requested but JAX x64 mode is disabled; set JAX_ENABLE_X64=1 "
            "or jax.config.update('jax_enable_x64', True)"
        )
    return dt


def index_pixel_limit() -> int:
    """Largest pixel count the peak search can address with JAX's default int type."""
    itype = jnp.int64 if x64_enabled() else jnp.int32
    return int(np.iinfo(np.dtype(itype)).max)


def check_numeric_capability(canvas_size: int, dtype_name: str = "float32"):
    """Validate dtype availability and index range for a D x D canvas.

    Float32 FFTs stay usable for large canvases since their roundoff grows with
    log(D); the hard limit is the flat argmax index of the surface.

    Returns the resolved JAX dtype; raises NumericCapabilityError otherwise.
    """
    dt = resolve_dtype(dtype_name)
    n = int(canvas_size) * int(canvas_size)
    limit = index_pixel_limit()
    if n > limit:
        raise NumericCapabilityError(
            f"canvas {canvas_size}x{canvas_size} ({n} px) exceeds the addressable range "
            f"of {limit} px; enable JAX x64 mode for larger canvases"
        )
    LOG.debug("Numeric backend %s on %s, canvas %d px", jnp.dtype(dt).name, jax.default_backend(), n)
    return dt


__all__ = ["x64_enabled", "resolve_dtype", "index_pixel_limit", "check_numeric_capability"]
