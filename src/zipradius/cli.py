"""
ZipRadius CLI entrypoint.

For quick local searches and debugging without a map frontend. It delegates all work to
`zipradius.planner.plan`.
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any

from zipradius.catalog.loader import load_reference_dataset
from zipradius.config.settings import get_settings
from zipradius.core.geo import validated_point
from zipradius.core.logging import configure_logging
from zipradius.domain.models import LayoutRequest, SearchRequest, Seed, SingleMap, SplitTwoWay
from zipradius.export.geojson import circles_feature_collection, matches_feature_collection
from zipradius.ingestion.geocoding_client import GeocodingClient
from zipradius.layout.viewport import VIEWPORT_MODES
from zipradius.planner.plan import build_cache, plan_layout, plan_search


def _parse_seed_point(value: str) -> Seed:
    """Parse `LABEL=LAT,LON` into a seed."""
    if "=" not in value:
        raise ValueError(f"Invalid --seed '{value}', expected LABEL=LAT,LON")
    label, coords = value.split("=", 1)
    parts = coords.split(",")
    if len(parts) != 2:
        raise ValueError(f"Invalid --seed '{value}', expected LABEL=LAT,LON")
    return Seed(label=label.strip(), location=validated_point(float(parts[0]), float(parts[1])))


def _describe_plan(plan: Any) -> str:
    if isinstance(plan, SingleMap):
        return f"single map (max internal distance {plan.max_internal_distance_mi:.1f} mi)"
    if isinstance(plan, SplitTwoWay):
        sides = " | ".join(", ".join(c.labels) for c in plan.clusters)
        return f"split view [{sides}] ({plan.distance_mi:.1f} mi apart, angle {plan.angle_degrees:.1f} deg)"
    return f"grid view ({len(plan.seeds)} maps)"


def _cmd_search(args: argparse.Namespace) -> int:
    settings = get_settings()
    dataset = load_reference_dataset(args.dataset or settings.dataset.path)
    geocoder = None if args.offline else GeocodingClient(settings, build_cache(settings))

    request = SearchRequest(seeds=args.seeds, radius_mi=args.radius, mode=args.mode)
    result = plan_search(request, dataset=dataset, settings=settings, geocoder=geocoder)

    if args.geojson:
        payload = {
            "circles": circles_feature_collection(result.seeds, result.meta["radius_mi"], settings.circle.point_count),
            "matches": matches_feature_collection(result.matches),
        }
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        return 0
    if args.json:
        print(json.dumps(result.model_dump(mode="json"), ensure_ascii=False, indent=2))
        return 0
    if args.labels_only:
        print(", ".join(r.label for r in result.matches))
        return 0

    s = result.summary
    print(f"Seeds: {', '.join(seed.label for seed in result.seeds)}")
    if result.unresolved:
        print(f"Not found: {', '.join(result.unresolved)}")
    print(
        f"Found {s.match_count} zip codes within {result.meta['radius_mi']:g} miles "
        f"(population {s.total_weight:,.0f}, average {s.average_weight:,.0f} per zip)"
    )
    print(f"Layout: {_describe_plan(result.plan)}")
    for i, vp in enumerate(result.viewports, start=1):
        b = vp.bounds
        labels = ", ".join(seed.label for seed in vp.seeds)
        print(f"  map {i}: [{labels}] zoom={vp.zoom:.2f} bounds=({b.south:.4f},{b.west:.4f})-({b.north:.4f},{b.east:.4f})")
    return 0


def _cmd_layout(args: argparse.Namespace) -> int:
    settings = get_settings()
    seeds = [_parse_seed_point(v) for v in args.seed]
    result = plan_layout(LayoutRequest(seeds=seeds, radius_mi=args.radius, mode=args.mode), settings=settings)
    if args.json:
        print(json.dumps(result.model_dump(mode="json"), ensure_ascii=False, indent=2))
        return 0
    print(f"Layout: {_describe_plan(result.plan)}")
    for i, vp in enumerate(result.viewports, start=1):
        print(f"  map {i}: [{', '.join(s.label for s in vp.seeds)}] zoom={vp.zoom:.2f}")
    return 0


def _cmd_dataset_stats(args: argparse.Namespace) -> int:
    settings = get_settings()
    dataset = load_reference_dataset(args.dataset or settings.dataset.path)
    print(json.dumps(dataset.stats.model_dump(mode="json"), ensure_ascii=False, indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the ZipRadius CLI."""
    parser = argparse.ArgumentParser(prog="zipradius")
    parser.add_argument("--log-level", type=str, default=None, help="Override the configured log level.")
    sub = parser.add_subparsers(dest="command", required=True)

    s = sub.add_parser("search", help="Find every zip code within a radius of one or more seed zip codes.")
    s.add_argument("seeds", help="Comma-separated seed zip codes (e.g. '10001, 60601, 90210').")
    s.add_argument("--radius", type=float, default=None, help="Radius in miles (default from config).")
    s.add_argument("--mode", choices=VIEWPORT_MODES, default=None)
    s.add_argument("--dataset", type=str, default=None, help="Dataset JSON path (default from config).")
    s.add_argument("--offline", action="store_true", help="Do not fall back to the geocoding API.")
    out = s.add_mutually_exclusive_group()
    out.add_argument("--json", action="store_true", help="Output the full result as JSON")
    out.add_argument("--geojson", action="store_true", help="Output circles + matches as GeoJSON")
    out.add_argument("--labels-only", action="store_true", help="Output matched zip codes, comma-separated")
    s.set_defaults(func=_cmd_search)

    lay = sub.add_parser("layout", help="Decide the map layout for seeds with known coordinates.")
    lay.add_argument("--seed", action="append", required=True, help="Repeatable: LABEL=LAT,LON")
    lay.add_argument("--radius", type=float, default=None)
    lay.add_argument("--mode", choices=VIEWPORT_MODES, default=None)
    lay.add_argument("--json", action="store_true")
    lay.set_defaults(func=_cmd_layout)

    st = sub.add_parser("dataset-stats", help="Summarize the reference dataset.")
    st.add_argument("--dataset", type=str, default=None)
    st.set_defaults(func=_cmd_dataset_stats)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m zipradius.cli`."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level)
    func: Any = getattr(args, "func")
    try:
        return int(func(args))
    except (ValueError, FileNotFoundError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
