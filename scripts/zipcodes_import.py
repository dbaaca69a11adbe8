from __future__ import annotations

import argparse
import csv
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from zipradius.catalog.loader import compute_stats, parse_records
from zipradius.core.env import resolve_project_path
from zipradius.core.logging import configure_logging

logger = logging.getLogger("zipradius.scripts.zipcodes_import")


def _as_float(v: Any) -> float | None:
    try:
        return float(v)
    except (TypeError, ValueError):
        return None


def _as_bool(v: Any) -> bool:
    return str(v or "").strip().upper() in {"TRUE", "1", "YES"}


def import_rows_from_csv(path: Path) -> list[dict[str, Any]]:
    with path.open("r", encoding="utf-8-sig", newline="") as f:
        return [row for row in csv.DictReader(f) if isinstance(row, dict)]


def to_dataset_row(row: dict[str, Any]) -> dict[str, Any]:
    """Map one `uszips.csv` row onto the dataset JSON row shape."""
    return {
        "zipCode": str(row.get("zip") or "").strip().zfill(5),
        "city": (row.get("city") or "").strip(),
        "state": (row.get("state_id") or "").strip(),
        "stateName": (row.get("state_name") or "").strip(),
        "lat": _as_float(row.get("lat")),
        "lng": _as_float(row.get("lng")),
        "population": int(_as_float(row.get("population")) or 0),
        "density": _as_float(row.get("density")) or 0.0,
        "countyName": (row.get("county_name") or "").strip(),
        "imprecise": _as_bool(row.get("imprecise")),
        "military": _as_bool(row.get("military")),
        "timezone": (row.get("timezone") or "").strip(),
    }


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Convert a uszips.csv export into the zip code dataset JSON (offline).")
    p.add_argument("--in-csv", type=str, required=True)
    p.add_argument("--out", type=str, default="data/zipCodeDatabase.json")
    args = p.parse_args(argv)
    configure_logging()

    rows = [to_dataset_row(r) for r in import_rows_from_csv(resolve_project_path(args.in_csv))]
    # Validate through the loader so the written file is exactly what the app accepts.
    records = parse_records(rows)
    valid = {r.label for r in records}
    rows = [r for r in rows if r["zipCode"] in valid]

    generated_at = datetime.now(timezone.utc).isoformat()
    stats = compute_stats(records, generated_at=generated_at)
    payload = {
        "zipCodes": rows,
        "stats": {
            "totalZipCodes": stats.total_records,
            "generatedAt": generated_at,
            "avgPopulation": round(stats.average_weight),
            "totalPopulation": int(stats.total_weight),
            "states": stats.states,
            "counties": stats.counties,
        },
    }

    out_path = resolve_project_path(args.out)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
    logger.info("Wrote %d zip codes to %s", len(rows), out_path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
