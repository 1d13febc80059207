"""Grid value types passed between pipeline stages.

Every stage consumes these and returns new instances; nothing here is mutated
after construction. Arrays are stored channels-first, ``(C, H, W)``, so the
transforms can batch over the leading axis.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

import numpy as np
import jax.numpy as jnp

from .errors import GridMismatchError


NORMS = ("forward", "inverse")


@dataclass(frozen=True, eq=False)
class PixelGrid:
    data: jnp.ndarray  # (C, H, W) real samples

    def __post_init__(self) -> None:
        if self.data.ndim != 3:
            raise ValueError(f"PixelGrid data must be (C, H, W), got shape {tuple(self.data.shape)}")
        if min(self.data.shape) < 1:
            raise ValueError(f"PixelGrid has an empty axis: {tuple(self.data.shape)}")

    @classmethod
    def from_array(cls, arr, dtype=jnp.float32) -> "PixelGrid":
        """Wrap an ``(H, W)`` or ``(H, W, C)`` array (numpy or JAX)."""
        a = jnp.asarray(arr, dtype=dtype)
        if a.ndim == 2:
            a = a[None, :, :]
        elif a.ndim == 3:
            a = jnp.moveaxis(a, -1, 0)
        else:
            raise ValueError(f"expected a 2-D or 3-D array, got {a.ndim}-D")
        return cls(a)

    @property
    def channels(self) -> int:
        return int(self.data.shape[0])

    @property
    def height(self) -> int:
        return int(self.data.shape[1])

    @property
    def width(self) -> int:
        return int(self.data.shape[2])

    @property
    def shape(self) -> tuple[int, int, int]:
        return (self.channels, self.height, self.width)

    def to_numpy(self) -> np.ndarray:
        """Return an ``(H, W)`` or ``(H, W, C)`` host array."""
        arr = np.asarray(self.data)
        if arr.shape[0] == 1:
            return arr[0]
        return np.moveaxis(arr, 0, -1)


@dataclass(frozen=True, eq=False)
class ComplexGrid:
    real: jnp.ndarray  # (C, D, D)
    imag: jnp.ndarray  # (C, D, D)
    norm: str = "inverse"

    def __post_init__(self) -> None:
        if self.real.shape != self.imag.shape:
            raise GridMismatchError(
                f"real/imag planes differ: {tuple(self.real.shape)} vs {tuple(self.imag.shape)}"
            )
        if self.real.ndim != 3:
            raise GridMismatchError(f"ComplexGrid planes must be (C, D, D), got {tuple(self.real.shape)}")
        if self.norm not in NORMS:
            raise ValueError(f"norm must be one of {NORMS}, got {self.norm!r}")

    @classmethod
    def from_complex(cls, z: jnp.ndarray, norm: str = "inverse") -> "ComplexGrid":
        return cls(jnp.real(z), jnp.imag(z), norm)

    @property
    def channels(self) -> int:
        return int(self.real.shape[0])

    @property
    def size(self) -> int:
        return int(self.real.shape[-1])

    @property
    def shape(self) -> tuple[int, int, int]:
        return tuple(int(s) for s in self.real.shape)  # type: ignore[return-value]

    def magnitude(self) -> jnp.ndarray:
        return jnp.sqrt(self.real * self.real + self.imag * self.imag)

    def as_complex(self) -> jnp.ndarray:
        return jnp.asarray(self.real) + 1j * jnp.asarray(self.imag)


@dataclass(frozen=True, eq=False)
class CorrelationSurface:
    data: jnp.ndarray  # (H, W)

    def __post_init__(self) -> None:
        if self.data.ndim != 2:
            raise ValueError(f"CorrelationSurface must be 2-D, got shape {tuple(self.data.shape)}")

    @property
    def height(self) -> int:
        return int(self.data.shape[0])

    @property
    def width(self) -> int:
        return int(self.data.shape[1])

    @property
    def shape(self) -> tuple[int, int]:
        return (self.height, self.width)


@dataclass(frozen=True)
class MatchResult:
    x: int
    y: int
    score: float

    def __post_init__(self) -> None:
        if self.x < 0 or self.y < 0:
            raise ValueError(f"match offset must be non-negative, got ({self.x}, {self.y})")

    def to_dict(self) -> dict:
        return {"x": int(self.x), "y": int(self.y), "score": float(self.score)}


def split_channels(grid: PixelGrid) -> List[PixelGrid]:
    """Split a multi-channel grid into single-channel grids (no colour math)."""
    return [PixelGrid(grid.data[c : c + 1]) for c in range(grid.channels)]


def broadcast_channels(grid: PixelGrid, channels: int) -> PixelGrid:
    """Repeat a single-channel grid to ``channels`` channels."""
    if grid.channels == channels:
        return grid
    if grid.channels != 1:
        raise GridMismatchError(f"cannot broadcast {grid.channels} channels to {channels}")
    return PixelGrid(jnp.repeat(grid.data, channels, axis=0))


def ensure_grid(obj, dtype=jnp.float32) -> PixelGrid:
    if isinstance(obj, PixelGrid):
        return PixelGrid(jnp.asarray(obj.data, dtype=dtype))
    return PixelGrid.from_array(obj, dtype=dtype)


__all__ = [
    "NORMS",
    "PixelGrid",
    "ComplexGrid",
    "CorrelationSurface",
    "MatchResult",
    "split_channels",
    "broadcast_channels",
    "ensure_grid",
]
