#!/usr/bin/env python
"""
Run the vineyard calculators on a YAML scenario file.

The scenario lists ETc and LAI requests:

    etc:
      - name: block-a
        weather: {observed_on: 2025-01-15, temperature_max_c: 30, ...}
        growth_stage: flowering
        location: {latitude: 19.9975, longitude: 73.7898, elevation_m: 500}
        irrigation_method: drip
        soil_type: loamy
        farm_area: {value: 2.0, unit: hectares}
    lai:
      - name: block-a
        geometry: {vine_spacing_m: 2.0, row_spacing_m: 3.0, ...}

Results are printed (or written with --out) as JSON. A CSV of many farms
can be processed instead with --csv and --engine.

Run from the project root with:
    python scripts/run_vineyard_calculations.py --scenario scripts/scenarios/flowering_block.yaml
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List

import pandas as pd
import yaml

from vinecalc.core.config import EngineConfig, get_config, set_config
from vinecalc.core.exceptions import VineCalcError
from vinecalc.physics import compute_etc, compute_lai
from vinecalc.pipeline import compute_etc_frame, compute_lai_frame

logger = logging.getLogger("vinecalc.scripts.run")


def load_scenario(path: Path) -> Dict[str, Any]:
    with open(path, encoding="utf-8") as f:
        scenario = yaml.safe_load(f) or {}
    if not isinstance(scenario, dict):
        raise SystemExit(f"Scenario {path} must be a mapping with 'etc' and/or 'lai' lists")
    return scenario


def run_scenario(scenario: Dict[str, Any], config: EngineConfig) -> Dict[str, List[Dict[str, Any]]]:
    output: Dict[str, List[Dict[str, Any]]] = {"etc": [], "lai": []}

    for i, request in enumerate(scenario.get("etc") or []):
        name = request.get("name", f"etc-{i}")
        try:
            result = compute_etc(
                weather=request.get("weather"),
                growth_stage=request.get("growth_stage"),
                location=request.get("location"),
                irrigation_method=request.get("irrigation_method"),
                soil_type=request.get("soil_type"),
                planting_date=request.get("planting_date"),
                farm_area=request.get("farm_area"),
                config=config,
            )
            output["etc"].append({"name": name, **result.to_dict()})
            logger.info(
                f"{name}: ETc {result.crop_et_mm} mm, depth {result.recommended_depth_mm} mm"
            )
        except VineCalcError as e:
            logger.error(f"{name}: {e}")
            output["etc"].append({"name": name, "error": e.message})

    for i, request in enumerate(scenario.get("lai") or []):
        name = request.get("name", f"lai-{i}")
        try:
            result = compute_lai(request.get("geometry"), config=config)
            output["lai"].append({"name": name, **result.to_dict()})
            logger.info(f"{name}: LAI {result.lai} ({result.canopy_density.value})")
        except VineCalcError as e:
            logger.error(f"{name}: {e}")
            output["lai"].append({"name": name, "error": e.message})

    return output


def main(argv: list[str]) -> int:
    parser = argparse.ArgumentParser(
        description="Vineyard irrigation (ETc) and canopy (LAI) calculations")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--scenario", type=Path, help="YAML scenario file")
    source.add_argument("--csv", type=Path, help="CSV with one calculation per row")
    parser.add_argument("--engine", choices=["etc", "lai"], default="etc",
                        help="Engine applied to --csv rows")
    parser.add_argument("--config", type=Path, default=None,
                        help="YAML engine configuration")
    parser.add_argument("--out", type=Path, default=None,
                        help="Output file (JSON for --scenario, CSV for --csv)")
    parser.add_argument("--workers", type=int, default=4)
    args = parser.parse_args(argv)

    config = EngineConfig.from_yaml(args.config) if args.config else get_config()
    set_config(config)

    logging.basicConfig(level=getattr(logging, config.logging.log_level),
                        format=config.logging.log_format)

    if args.csv is not None:
        frame = pd.read_csv(args.csv)
        if args.engine == "etc":
            result_frame = compute_etc_frame(frame, config=config, max_workers=args.workers)
        else:
            result_frame = compute_lai_frame(frame, config=config, max_workers=args.workers)

        if args.out:
            result_frame.to_csv(args.out, index=False)
            logger.info(f"Wrote {len(result_frame)} rows to {args.out}")
        else:
            print(result_frame.to_string(index=False))
        return 1 if result_frame["error"].notna().any() else 0

    output = run_scenario(load_scenario(args.scenario), config)
    text = json.dumps(output, indent=2, ensure_ascii=False, default=str)

    if args.out:
        args.out.parent.mkdir(parents=True, exist_ok=True)
        args.out.write_text(text, encoding="utf-8")
        logger.info(f"Results saved to {args.out}")
    else:
        print(text)

    failed = [r["name"] for r in output["etc"] + output["lai"] if "error" in r]
    return 1 if failed else 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
