"""CLI entrypoint."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv as _load_dotenv

from clubfinder import config
from clubfinder.errors import ConfigurationError, ValidationError
from clubfinder.http import HttpClient, RequestBudget, RequestMetrics
from clubfinder.isochrone_client import IsochroneClient
from clubfinder.models import LatLng
from clubfinder.pipeline import run
from clubfinder.reporting import write_response

logger = logging.getLogger("run")


def _repo_root() -> Path:
    return Path(__file__).resolve().parent


def load_env(path: str = ".env", root_dir: Optional[Path] = None) -> None:
    """Optionally load a repo-root .env file without overriding real env vars."""
    root = Path(root_dir) if root_dir else _repo_root()
    env_path = (root / path).resolve()
    if not env_path.exists():
        return
    _load_dotenv(dotenv_path=env_path, override=False)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Find youth and competitive sports clubs within a drive-time budget"
    )
    parser.add_argument("--lat", type=float, required=True, help="Origin latitude")
    parser.add_argument("--lng", type=float, required=True, help="Origin longitude")
    parser.add_argument(
        "--sport",
        action="append",
        dest="sports",
        default=[],
        help="Sport category (repeatable), e.g. --sport volleyball --sport basketball",
    )
    parser.add_argument("--minutes", type=float, default=20, help="Drive-time budget in minutes")
    parser.add_argument(
        "--school-type",
        action="append",
        dest="school_types",
        default=[],
        choices=sorted(config.SCHOOL_TYPE_KEYWORDS),
        help="Also search schools of this type (repeatable)",
    )
    polygon = parser.add_mutually_exclusive_group()
    polygon.add_argument("--polygon", help="GeoJSON file with the reachability polygon ([lng, lat])")
    polygon.add_argument(
        "--isochrone",
        action="store_true",
        help="Fetch a reachability polygon for the origin before searching",
    )
    parser.add_argument("--config", default=None, help="Path to search_config.json")
    parser.add_argument("--out", default=config.OUTPUT_DIR, help="Output directory")
    parser.add_argument("--max-places", type=int, default=config.MAX_PLACES_REQUESTS_PER_RUN)
    parser.add_argument("--max-routes", type=int, default=config.MAX_ROUTES_REQUESTS_PER_RUN)
    parser.add_argument("--print", action="store_true", dest="print_json", help="Print response JSON")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def fetch_isochrone(lat: float, lng: float, minutes: float) -> Optional[Dict[str, Any]]:
    """Reachability polygon from the provider, or None if the call failed."""
    token = config.require_mapbox_access_token()
    client = IsochroneClient(
        HttpClient(timeout=config.HTTP_TIMEOUT_SECONDS),
        token,
        RequestBudget(max_places=0, max_routes=0),
    )
    result = client.generate(LatLng(lat, lng), minutes)
    if not result.ok:
        logger.warning("Isochrone unavailable, continuing without polygon: %s", result.error)
        return None
    return result.value


def build_payload(args: argparse.Namespace) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "origin": {"lat": args.lat, "lng": args.lng},
        "sports": list(args.sports),
        "driveTimeMinutes": args.minutes,
    }
    if args.school_types:
        payload["schoolTypes"] = list(args.school_types)
    if args.polygon:
        with open(args.polygon, "r", encoding="utf-8") as f:
            payload["isochronePolygon"] = json.load(f)
    return payload


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    load_env()
    config.load_search_config(args.config)

    metrics = RequestMetrics()
    try:
        payload = build_payload(args)
        if args.isochrone:
            polygon = fetch_isochrone(args.lat, args.lng, args.minutes)
            if polygon is not None:
                payload["isochronePolygon"] = polygon
        response = run(
            payload,
            metrics=metrics,
            max_places=args.max_places,
            max_routes=args.max_routes,
        )
    except (ConfigurationError, ValidationError, OSError, ValueError) as exc:
        print(json.dumps({"error": str(exc)}), file=sys.stderr)
        return 1

    paths = write_response(args.out, response)
    logger.info("Requests: %s", metrics.to_dict())
    if args.print_json:
        print(json.dumps(response.to_dict(), ensure_ascii=False, indent=2))
    label = "Bypass sample" if response.diagnostics.bypassed else "Done"
    print(f"{label}. {response.diagnostics.unique_count} results written to {paths['results']}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
