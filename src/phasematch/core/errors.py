"""Exception and warning types raised by the matching pipeline."""

from __future__ import annotations


class PhaseMatchError(Exception):
    """Base class for phasematch errors."""


class InputSizeError(PhaseMatchError, ValueError):
    """Template exceeds the search image in at least one dimension."""


class GridMismatchError(PhaseMatchError, ValueError):
    """Grids of different shape, channel count or convention were mixed."""


class NumericCapabilityError(PhaseMatchError, RuntimeError):
    """The numeric backend cannot represent the requested transform."""


class DegenerateSpectrumWarning(UserWarning):
    """A spectrum had no usable (non-zero magnitude) frequency bins."""
