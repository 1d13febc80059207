"""phasematch: phase-correlation template matching.

Locates a template inside a larger search image from the phase of their
Fourier transforms. Use via `phasematch.match_template` or
`python -m phasematch.cli.match`.
"""

from .core.errors import (
    DegenerateSpectrumWarning,
    GridMismatchError,
    InputSizeError,
    NumericCapabilityError,
    PhaseMatchError,
)
from .core.grids import CorrelationSurface, MatchResult, PixelGrid
from .match import MatchConfig, correlate, match_template

__all__ = [
    "__version__",
    "MatchConfig",
    "MatchResult",
    "PixelGrid",
    "CorrelationSurface",
    "correlate",
    "match_template",
    "PhaseMatchError",
    "InputSizeError",
    "GridMismatchError",
    "NumericCapabilityError",
    "DegenerateSpectrumWarning",
]

__version__ = "0.1.0"
