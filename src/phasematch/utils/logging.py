"""Logging setup for the phasematch CLI.

Library modules only create ``logging.getLogger(__name__)`` loggers; handlers
are installed here, once, by the command-line entry point.
"""

from __future__ import annotations

import logging


LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logging(level: str = "WARNING") -> None:
    lvl = logging.getLevelName(str(level).upper())
    if not isinstance(lvl, int):
        raise ValueError(f"unknown log level {level!r}")
    logging.basicConfig(level=lvl, format=LOG_FORMAT)
    # JAX's compile/dispatch chatter only when phasematch itself is at DEBUG
    logging.getLogger("jax").setLevel(max(lvl, logging.INFO))


def log_backend(dtype_name: str) -> None:
    """Report where the transforms will run and in which precision."""
    import jax

    from .capability import x64_enabled

    logging.getLogger("phasematch").debug(
        "Backend %s (%d device(s)), dtype %s, x64 %s",
        jax.default_backend(), len(jax.devices()), dtype_name, "on" if x64_enabled() else "off",
    )


def format_duration(seconds: float) -> str:
    """Timing for log lines: microseconds, milliseconds or seconds."""
    value = max(float(seconds), 0.0)
    if value < 1e-3:
        return f"{value * 1e6:.0f}µs"
    if value < 1.0:
        return f"{value * 1e3:.1f}ms"
    return f"{value:.2f}s"
