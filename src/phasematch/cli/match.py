"""CLI: locate a template inside a search image by phase correlation.

Usage examples:

  python -m phasematch.cli.match --template tmpl.npy --search scene.npy
  python -m phasematch.cli.match --template tmpl.npy --search scene.npz --mode rms \
      --out surface.h5 --stretch --pseudocolor heat
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import time
from typing import Any, Dict, List, Optional

import numpy as np

from ..core.errors import PhaseMatchError
from ..core.surface import COMBINATIONS, LUMA_WEIGHTS
from ..data.io import load_grid, save_result
from ..match import MatchConfig, correlate
from ..render.visualize import COLORMAPS, draw_box, overlay, render_surface
from ..utils.config import config_to_dict, load_config
from ..utils.logging import format_duration, log_backend, setup_logging


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Phase-correlation template matching on decoded pixel arrays")
    p.add_argument("--template", required=True, help="Template array (.npy or .npz)")
    p.add_argument("--search", required=True, help="Search image array (.npy or .npz)")
    p.add_argument("--template-key", default=None, help="Array name inside a template .npz")
    p.add_argument("--search-key", default=None, help="Array name inside a search .npz")
    p.add_argument("--config", default=None, help="JSON/YAML file with match settings; flags override it")
    p.add_argument("--mode", choices=list(COMBINATIONS), default=None, help="Channel combination (default gray)")
    p.add_argument("--norm", choices=["forward", "inverse"], default=None,
                   help="DFT normalization convention (default inverse)")
    p.add_argument("--luma", choices=list(LUMA_WEIGHTS), default=None, help="Luma weights for --mode gray")
    p.add_argument("--dtype", choices=["float32", "float64"], default=None,
                   help="Compute dtype (float64 needs JAX_ENABLE_X64=1)")
    p.add_argument("--out", default=None, help="Write surface and match to .npz or .h5/.hdf5")
    p.add_argument("--stretch", action="store_true", help="Auto-level the rendered surface")
    p.add_argument("--pseudocolor", nargs="?", const="rainbow", default=None, choices=list(COLORMAPS),
                   help="Pseudocolor the rendered surface (default map: rainbow)")
    p.add_argument("--draw-box", action="store_true", help="Outline the match on the search image")
    p.add_argument("--overlay", action="store_true", help="Paste the template onto the search image at the match")
    p.add_argument("--annotated-out", default=None, help="Output .npy for --draw-box/--overlay")
    p.add_argument("--json", action="store_true", help="Print the match as JSON")
    p.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG, INFO, WARNING, ...)")
    return p


def resolve_config(args: argparse.Namespace) -> MatchConfig:
    settings: Dict[str, Any] = {}
    if args.config:
        settings.update(load_config(args.config))
    flag_map = {
        "mode": "channel_combination",
        "norm": "transform_normalization",
        "luma": "luma",
        "dtype": "dtype",
    }
    for flag, key in flag_map.items():
        v = getattr(args, flag)
        if v is not None:
            settings[key] = v
    return MatchConfig.from_dict(settings)


def main(argv: Optional[List[str]] = None) -> int:
    p = build_parser()
    args = p.parse_args(argv)
    try:
        setup_logging(args.log_level)
    except ValueError as exc:
        p.error(str(exc))
    if (args.draw_box or args.overlay) and not args.annotated_out:
        p.error("--draw-box/--overlay require --annotated-out")

    try:
        cfg = resolve_config(args)
    except (ValueError, RuntimeError, OSError) as exc:
        p.error(f"invalid config: {exc}")

    log_backend(cfg.dtype)

    try:
        template = load_grid(args.template, args.template_key)
        search = load_grid(args.search, args.search_key)
    except (OSError, KeyError, ValueError) as exc:
        p.error(f"cannot load input array: {exc}")
    logging.info(
        "Template %s, search %s, mode=%s norm=%s",
        template.shape, search.shape, cfg.channel_combination, cfg.transform_normalization,
    )

    t0 = time.perf_counter()
    try:
        surface, result = correlate(template, search, cfg)
    except (PhaseMatchError, ValueError) as exc:
        # Input-contract errors: oversized template, unusable channel layout, dtype
        p.error(str(exc))
    logging.info("Matched in %s", format_duration(time.perf_counter() - t0))

    if args.out:
        rendered = None
        if args.stretch or args.pseudocolor:
            rendered = render_surface(surface, auto_level=args.stretch, colormap=args.pseudocolor)
        save_result(args.out, surface, result, config=cfg, rendered=rendered)

    if args.annotated_out:
        annotated = np.asarray(search, dtype=np.float32)
        if args.overlay:
            annotated = overlay(annotated, template, result)
        if args.draw_box:
            annotated = draw_box(annotated, result, template.shape[:2])
        parent = os.path.dirname(args.annotated_out)
        if parent:
            os.makedirs(parent, exist_ok=True)
        np.save(args.annotated_out, annotated)
        logging.info("Wrote annotated search image: %s", args.annotated_out)

    if args.json:
        print(json.dumps({**result.to_dict(), "config": config_to_dict(cfg)}))
    else:
        print(f"{result.x} {result.y} {result.score:.6f}")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
