from __future__ import annotations

import logging
import math
from typing import Tuple

import jax.numpy as jnp

from .errors import InputSizeError
from .grids import PixelGrid


LOG = logging.getLogger(__name__)


def even_square_size(width: int, height: int) -> int:
    """Smallest even integer >= max(width, height)."""
    return 2 * int(math.ceil(max(int(width), int(height)) / 2.0))


def pad_to_canvas(grid: PixelGrid, size: int, fill: float = 0.0) -> PixelGrid:
    """Place ``grid`` at the origin of a ``size`` x ``size`` canvas."""
    if grid.height > size or grid.width > size:
        raise InputSizeError(f"grid {grid.width}x{grid.height} does not fit a {size}x{size} canvas")
    if grid.height == size and grid.width == size:
        return grid
    pad = ((0, 0), (0, size - grid.height), (0, size - grid.width))
    return PixelGrid(jnp.pad(grid.data, pad, mode="constant", constant_values=fill))


def check_sizes(template: PixelGrid, search: PixelGrid) -> None:
    if template.width > search.width or template.height > search.height:
        raise InputSizeError(
            f"template {template.width}x{template.height} exceeds search image "
            f"{search.width}x{search.height}"
        )


def normalize_canvas(template: PixelGrid, search: PixelGrid) -> Tuple[PixelGrid, PixelGrid]:
    """Pad both grids to the even square canvas derived from the search image.

    Returns (template_padded, search_padded), both D x D with zero fill.
    """
    check_sizes(template, search)
    size = even_square_size(search.width, search.height)
    LOG.debug(
        "Canvas %dx%d (search %dx%d, template %dx%d)",
        size, size, search.width, search.height, template.width, template.height,
    )
    return pad_to_canvas(template, size), pad_to_canvas(search, size)


__all__ = ["even_square_size", "pad_to_canvas", "check_sizes", "normalize_canvas"]
