"""Phase-correlation template matching pipeline.

raw grids -> even-square canvas -> forward DFT -> unit-magnitude spectra
-> cross-power spectrum -> inverse DFT -> cropped, channel-combined surface
-> peak (x, y, score).
"""

from __future__ import annotations

from dataclasses import dataclass, fields
import logging
import time
from typing import Any, Dict, Optional, Tuple

from .core.canvas import check_sizes, even_square_size, normalize_canvas
from .core.grids import NORMS, CorrelationSurface, MatchResult, broadcast_channels, ensure_grid
from .core.peak import locate_peak
from .core.surface import COMBINATIONS, LUMA_WEIGHTS, build_surface
from .core.transforms import cross_power, forward, normalize
from .utils.capability import check_numeric_capability, resolve_dtype
from .utils.logging import format_duration


LOG = logging.getLogger(__name__)

_COMBINATION_ALIASES = {"ave": "average", "avg": "average", "mean": "average", "grey": "gray"}

# camelCase keys accepted by MatchConfig.from_dict
_KEY_ALIASES = {
    "channelCombination": "channel_combination",
    "transformNormalization": "transform_normalization",
    "degenerateEps": "degenerate_eps",
}


@dataclass(frozen=True)
class MatchConfig:
    channel_combination: str = "gray"  # gray|average|rms
    transform_normalization: str = "inverse"  # forward|inverse
    luma: str = "rec709"  # weights for gray combination
    dtype: str = "float32"
    # Relative magnitude below which a frequency bin is zeroed (None: dtype default)
    degenerate_eps: float | None = None

    def __post_init__(self) -> None:
        mode = str(self.channel_combination).lower()
        object.__setattr__(self, "channel_combination", _COMBINATION_ALIASES.get(mode, mode))
        object.__setattr__(self, "transform_normalization", str(self.transform_normalization).lower())
        object.__setattr__(self, "luma", str(self.luma).lower())
        self.validate()

    def validate(self) -> None:
        if self.channel_combination not in COMBINATIONS:
            raise ValueError(
                f"channel_combination must be one of {COMBINATIONS}, got {self.channel_combination!r}"
            )
        if self.transform_normalization not in NORMS:
            raise ValueError(
                f"transform_normalization must be one of {NORMS}, got {self.transform_normalization!r}"
            )
        if self.luma not in LUMA_WEIGHTS:
            raise ValueError(f"luma must be one of {tuple(LUMA_WEIGHTS)}, got {self.luma!r}")
        if self.degenerate_eps is not None and not (0.0 <= float(self.degenerate_eps) < 1.0):
            raise ValueError(f"degenerate_eps must be in [0, 1), got {self.degenerate_eps}")

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "MatchConfig":
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for k, v in (d or {}).items():
            key = _KEY_ALIASES.get(k, k)
            if key not in known:
                raise ValueError(f"unknown match config key {k!r}")
            kwargs[key] = v
        return cls(**kwargs)


def correlate(
    template,
    search,
    config: Optional[MatchConfig] = None,
) -> Tuple[CorrelationSurface, MatchResult]:
    """Run the full pipeline and return (surface, result).

    ``template`` and ``search`` are PixelGrids or ``(H, W)`` / ``(H, W, C)``
    arrays. Raises InputSizeError when the template exceeds the search image
    and NumericCapabilityError before any transform when the dtype cannot
    handle the canvas.
    """
    cfg = config if config is not None else MatchConfig()
    t_start = time.perf_counter()

    dt = resolve_dtype(cfg.dtype)
    tmpl = ensure_grid(template, dt)
    srch = ensure_grid(search, dt)
    check_sizes(tmpl, srch)
    check_numeric_capability(even_square_size(srch.width, srch.height), cfg.dtype)

    channels = max(tmpl.channels, srch.channels)
    tmpl = broadcast_channels(tmpl, channels)
    srch = broadcast_channels(srch, channels)

    tmpl_pad, srch_pad = normalize_canvas(tmpl, srch)
    norm = cfg.transform_normalization
    tmpl_t = normalize(forward(tmpl_pad, norm), cfg.degenerate_eps)
    srch_t = normalize(forward(srch_pad, norm), cfg.degenerate_eps)
    spectrum = cross_power(tmpl_t, srch_t)

    surface = build_surface(
        spectrum,
        srch.width,
        srch.height,
        mode=cfg.channel_combination,
        luma=cfg.luma,
    )
    result = locate_peak(surface)
    LOG.debug(
        "Match at (%d, %d) score %.4f [%s, %s] in %s",
        result.x, result.y, result.score,
        cfg.channel_combination, norm,
        format_duration(time.perf_counter() - t_start),
    )
    return surface, result


def match_template(template, search, config: Optional[MatchConfig] = None) -> MatchResult:
    """Top-left offset and confidence of the best template placement."""
    _, result = correlate(template, search, config)
    return result


__all__ = ["MatchConfig", "correlate", "match_template"]
