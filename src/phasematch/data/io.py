"""Array and result files exchanged at the CLI boundary.

Image decoding is not handled here: inputs are already-decoded pixel arrays
stored as ``.npy`` or ``.npz``. Results go to ``.npz`` or to HDF5, where the
match and the config it was computed with are kept as attributes of
``/match``.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Optional

import numpy as np
import h5py

from ..core.grids import CorrelationSurface, MatchResult
from ..utils.config import config_to_dict


LOG = logging.getLogger(__name__)

HDF5_SUFFIXES = (".h5", ".hdf5")


def load_grid(path: str, key: Optional[str] = None) -> np.ndarray:
    """Load an (H, W) or (H, W, C) pixel array from ``.npy`` or ``.npz``."""
    path = str(path)
    if path.endswith(".npy"):
        if key is not None:
            raise ValueError(f"key {key!r} given for a .npy file: {path}")
        return np.load(path)
    if path.endswith(".npz"):
        with np.load(path) as z:
            if not z.files:
                raise ValueError(f"no arrays in {path}")
            name = key if key is not None else z.files[0]
            if name not in z.files:
                raise KeyError(f"array {name!r} not in {path}; available: {z.files}")
            return z[name]
    raise ValueError(f"unsupported array file {path}; use .npy or .npz")


def _ensure_parent(path: str) -> None:
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)


def save_result(
    path: str,
    surface: CorrelationSurface,
    result: MatchResult,
    *,
    config: Any = None,
    rendered: Optional[np.ndarray] = None,
) -> str:
    """Write the surface, match and config to ``.npz`` or HDF5."""
    path = str(path)
    _ensure_parent(path)
    data = np.asarray(surface.data, dtype=np.float32)
    cfg = config_to_dict(config) if config is not None else {}
    if path.endswith(HDF5_SUFFIXES):
        with h5py.File(path, "w") as f:
            g = f.create_group("match")
            g.attrs["x"] = int(result.x)
            g.attrs["y"] = int(result.y)
            g.attrs["score"] = float(result.score)
            g.attrs["config"] = json.dumps(cfg)
            g.create_dataset("surface", data=data, compression="lzf")
            if rendered is not None:
                g.create_dataset("rendered", data=np.asarray(rendered, dtype=np.float32), compression="lzf")
    elif path.endswith(".npz"):
        extras: Dict[str, Any] = {}
        if rendered is not None:
            extras["rendered"] = np.asarray(rendered, dtype=np.float32)
        np.savez_compressed(
            path,
            surface=data,
            match=np.asarray([result.x, result.y], dtype=np.int64),
            score=np.float64(result.score),
            config=np.asarray(json.dumps(cfg)),
            **extras,
        )
    else:
        raise ValueError(f"unsupported result file {path}; use .npz, .h5 or .hdf5")
    LOG.info("Wrote correlation surface: %s", path)
    return path


def load_result(path: str) -> Dict[str, Any]:
    """Read a file written by ``save_result`` into a plain dict."""
    path = str(path)
    out: Dict[str, Any] = {}
    if path.endswith(HDF5_SUFFIXES):
        with h5py.File(path, "r") as f:
            g = f["match"]
            out["surface"] = g["surface"][...]
            if "rendered" in g:
                out["rendered"] = g["rendered"][...]
            out["result"] = MatchResult(int(g.attrs["x"]), int(g.attrs["y"]), float(g.attrs["score"]))
            cfg = g.attrs["config"]
            out["config"] = json.loads(cfg.decode() if isinstance(cfg, bytes) else str(cfg))
    elif path.endswith(".npz"):
        with np.load(path) as z:
            out["surface"] = z["surface"]
            if "rendered" in z.files:
                out["rendered"] = z["rendered"]
            x, y = (int(v) for v in z["match"])
            out["result"] = MatchResult(x, y, float(z["score"]))
            out["config"] = json.loads(str(z["config"]))
    else:
        raise ValueError(f"unsupported result file {path}; use .npz, .h5 or .hdf5")
    return out


__all__ = ["load_grid", "save_result", "load_result"]
