from __future__ import annotations

import json
from dataclasses import asdict, is_dataclass
from typing import Any, Dict, Mapping


def load_config(path: str) -> Dict[str, Any]:
    """Load match settings from a JSON or YAML file.

    YAML needs PyYAML (``pip install phasematch[yaml]``). A file may hold the
    settings at top level or under a ``match`` key.
    """
    path = str(path)
    if path.endswith((".yaml", ".yml")):
        try:
            import yaml  # type: ignore
        except ImportError as exc:  # pragma: no cover
            raise RuntimeError("YAML config requested but PyYAML not installed") from exc
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    else:
        with open(path, "r") as f:
            data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"config {path} must contain a mapping, got {type(data).__name__}")
    if isinstance(data.get("match"), dict):
        return data["match"]
    return data


def config_to_dict(cfg: Any) -> Dict[str, Any]:
    """Plain dict of a MatchConfig (or mapping) for JSON output and result files."""
    if is_dataclass(cfg) and not isinstance(cfg, type):
        return asdict(cfg)
    if isinstance(cfg, Mapping):
        return dict(cfg)
    raise TypeError(f"cannot serialize config of type {type(cfg).__name__}")
