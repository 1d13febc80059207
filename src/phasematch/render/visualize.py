"""Display helpers for correlation surfaces and match locations.

Presentation only: nothing here feeds back into a MatchResult. Inputs are
host arrays or CorrelationSurface values; outputs are float numpy arrays in
[0, 1] ready for an external image writer.
"""

from __future__ import annotations

from typing import Dict, Sequence, Tuple

import numpy as np

from ..core.grids import CorrelationSurface, MatchResult


# (position, (r, g, b)) control points of piecewise-linear colour ramps
_COLORMAPS: Dict[str, Tuple[Tuple[float, Tuple[float, float, float]], ...]] = {
    "rainbow": (
        (0.0, (0.0, 0.0, 1.0)),
        (0.25, (0.0, 1.0, 1.0)),
        (0.5, (0.0, 1.0, 0.0)),
        (0.75, (1.0, 1.0, 0.0)),
        (1.0, (1.0, 0.0, 0.0)),
    ),
    "heat": (
        (0.0, (0.0, 0.0, 0.0)),
        (1.0 / 3.0, (1.0, 0.0, 0.0)),
        (2.0 / 3.0, (1.0, 1.0, 0.0)),
        (1.0, (1.0, 1.0, 1.0)),
    ),
    "gray": (
        (0.0, (0.0, 0.0, 0.0)),
        (1.0, (1.0, 1.0, 1.0)),
    ),
}

COLORMAPS = tuple(_COLORMAPS)


def _as_array(values) -> np.ndarray:
    if isinstance(values, CorrelationSurface):
        values = values.data
    return np.asarray(values, dtype=np.float32)


def stretch(values) -> np.ndarray:
    """Auto-level: map [min, max] linearly onto [0, 1]."""
    a = _as_array(values)
    lo = float(np.min(a))
    hi = float(np.max(a))
    if hi - lo <= 0.0:
        return np.zeros_like(a)
    return (a - lo) / (hi - lo)


def pseudocolor(values, colormap: str = "rainbow") -> np.ndarray:
    """Map gray values in [0, 1] to an (H, W, 3) RGB image."""
    key = str(colormap).lower()
    if key not in _COLORMAPS:
        raise ValueError(f"unknown colormap {colormap!r}; choose from {COLORMAPS}")
    a = np.clip(_as_array(values), 0.0, 1.0)
    stops = _COLORMAPS[key]
    xp = np.asarray([s[0] for s in stops], dtype=np.float32)
    rgb = np.asarray([s[1] for s in stops], dtype=np.float32)
    out = np.stack([np.interp(a, xp, rgb[:, c]) for c in range(3)], axis=-1)
    return out.astype(np.float32, copy=False)


def _to_rgb(image) -> np.ndarray:
    img = np.array(image, dtype=np.float32, copy=True)
    if img.ndim == 2:
        img = np.repeat(img[:, :, None], 3, axis=-1)
    elif img.ndim == 3 and img.shape[-1] == 1:
        img = np.repeat(img, 3, axis=-1)
    elif img.ndim != 3:
        raise ValueError(f"expected (H, W) or (H, W, C) image, got shape {img.shape}")
    return img


def draw_box(
    image,
    result: MatchResult,
    template_shape: Sequence[int],
    *,
    color: Sequence[float] = (1.0, 0.0, 0.0),
    thickness: int = 1,
) -> np.ndarray:
    """Copy of ``image`` with a rectangle outline around the matched region.

    ``template_shape`` is (height, width). Grayscale images are promoted to RGB.
    """
    img = _to_rgb(image)
    h, w = int(template_shape[0]), int(template_shape[1])
    H, W = img.shape[:2]
    y0, x0 = int(result.y), int(result.x)
    y1, x1 = min(y0 + h, H), min(x0 + w, W)
    t = max(1, int(thickness))
    col = np.asarray(color, dtype=np.float32)
    if col.shape[0] != img.shape[-1]:
        raise ValueError(f"color has {col.shape[0]} components for a {img.shape[-1]}-channel image")
    img[y0 : min(y0 + t, y1), x0:x1] = col
    img[max(y1 - t, y0) : y1, x0:x1] = col
    img[y0:y1, x0 : min(x0 + t, x1)] = col
    img[y0:y1, max(x1 - t, x0) : x1] = col
    return img


def overlay(image, template, result: MatchResult, *, alpha: float = 1.0) -> np.ndarray:
    """Copy of ``image`` with ``template`` blended in at the match location."""
    if not 0.0 <= float(alpha) <= 1.0:
        raise ValueError(f"alpha must be in [0, 1], got {alpha}")
    img = np.array(image, dtype=np.float32, copy=True)
    tmpl = np.asarray(template, dtype=np.float32)
    if tmpl.ndim == 2 and img.ndim == 3:
        tmpl = np.repeat(tmpl[:, :, None], img.shape[-1], axis=-1)
    elif tmpl.ndim == 3 and img.ndim == 2:
        img = np.repeat(img[:, :, None], tmpl.shape[-1], axis=-1)
    H, W = img.shape[:2]
    y0, x0 = int(result.y), int(result.x)
    h = min(tmpl.shape[0], H - y0)
    w = min(tmpl.shape[1], W - x0)
    region = img[y0 : y0 + h, x0 : x0 + w]
    img[y0 : y0 + h, x0 : x0 + w] = (1.0 - alpha) * region + alpha * tmpl[:h, :w]
    return img


def render_surface(surface, *, auto_level: bool = True, colormap: str | None = None) -> np.ndarray:
    """Surface as a displayable array: optional stretch, optional pseudocolor."""
    a = stretch(surface) if auto_level else np.clip(_as_array(surface), 0.0, 1.0)
    if colormap:
        return pseudocolor(a, colormap)
    return a


__all__ = ["COLORMAPS", "stretch", "pseudocolor", "draw_box", "overlay", "render_surface"]
