from __future__ import annotations

import jax.numpy as jnp

from .grids import CorrelationSurface, MatchResult


def locate_peak(surface: CorrelationSurface) -> MatchResult:
    """Global maximum of the surface; ties go to the first in row-major order.

    The score is the peak value clipped to [0, 1].
    """
    data = surface.data
    # argmax returns the first occurrence of the maximum in flattened order
    flat_idx = int(jnp.argmax(data))
    y, x = divmod(flat_idx, surface.width)
    m = float(data[y, x])
    score = min(max(m, 0.0), 1.0)
    return MatchResult(x=int(x), y=int(y), score=score)


__all__ = ["locate_peak"]
