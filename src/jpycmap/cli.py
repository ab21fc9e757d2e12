"""
JPYC Map CLI entrypoint.

This CLI is intended for quick local checks of the directory without the web UI.
It delegates all logic to `jpycmap.directory`.
"""

from __future__ import annotations

import argparse
import asyncio
import json
from typing import Any

from jpycmap.config.settings import get_settings
from jpycmap.core.geo import GeoPoint
from jpycmap.core.geolocation import FixedGeolocation, build_geolocation_source, fallback_point, locate
from jpycmap.core.logging import configure_logging
from jpycmap.directory.browse import fetch_merchants, fetch_shops
from jpycmap.directory.nearby import nearby_shops, resolve_radius_km
from jpycmap.directory.search import ALL_SERVICE_TYPES, filter_merchants, service_type_options
from jpycmap.store.supabase import build_store_client


async def _nearby(args: argparse.Namespace) -> int:
    settings = get_settings()
    radius = resolve_radius_km(args.radius_km, settings.nearby)
    if (args.lat is None) != (args.lng is None):
        raise ValueError("--lat and --lng must be given together")
    if args.lat is not None and args.lng is not None:
        source = FixedGeolocation(GeoPoint(lat=float(args.lat), lng=float(args.lng)))
    else:
        source = build_geolocation_source(settings)
    origin = await locate(source, fallback=fallback_point(settings))

    load = await fetch_shops(build_store_client(settings), settings)
    if not load.ok:
        print(load.error)
        return 1
    results = nearby_shops(load.items, origin, radius)

    if args.json:
        payload = {
            "origin": {"lat": origin.lat, "lng": origin.lng},
            "radius_km": radius,
            "shops": [r.model_dump(mode="json") for r in results],
        }
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        return 0

    print(f"Origin: {origin.lat:.4f}, {origin.lng:.4f}  radius={radius:g}km  found={len(results)}")
    for i, item in enumerate(results, start=1):
        shop = item.shop
        networks = ", ".join(shop.jpyc_networks or []) or "-"
        print(f"{i:>2}. {shop.name} ({item.distance_km:.2f}km)  {shop.address}")
        print(f"    networks: {networks}")
    return 0


async def _merchants(args: argparse.Namespace) -> int:
    settings = get_settings()
    load = await fetch_merchants(build_store_client(settings), settings)
    if not load.ok:
        print(load.error)
        return 1
    results = filter_merchants(load.items, args.query, args.service_type)

    if args.json:
        payload = {
            "service_types": service_type_options(load.items),
            "merchants": [m.model_dump(mode="json") for m in results],
        }
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        return 0

    print(f"{len(results)} services found")
    for i, m in enumerate(results, start=1):
        print(f"{i:>2}. {m.name} [{m.service_type or '-'}]  {m.url}")
        if m.tags:
            print(f"    tags: {', '.join(m.tags)}")
    return 0


def _cmd_nearby(args: argparse.Namespace) -> int:
    """Handle the `nearby` subcommand."""
    return asyncio.run(_nearby(args))


def _cmd_merchants(args: argparse.Namespace) -> int:
    """Handle the `merchants` subcommand."""
    return asyncio.run(_merchants(args))


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the JPYC Map CLI."""
    parser = argparse.ArgumentParser(prog="jpycmap")
    sub = parser.add_subparsers(dest="command", required=True)

    near = sub.add_parser("nearby", help="List approved shops near a coordinate, nearest first.")
    near.add_argument("--lat", type=float, default=None, help="Omit to locate (or fall back to Tokyo Station).")
    near.add_argument("--lng", type=float, default=None)
    near.add_argument("--radius-km", type=float, default=None, help="1..50 (default from config)")
    near.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    near.set_defaults(func=_cmd_nearby)

    mer = sub.add_parser("merchants", help="Search approved online services.")
    mer.add_argument("--query", "-q", type=str, default="", help="Keyword (name, description, tags)")
    mer.add_argument("--service-type", type=str, default=ALL_SERVICE_TYPES)
    mer.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    mer.set_defaults(func=_cmd_merchants)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m jpycmap.cli`."""
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)
    func: Any = getattr(args, "func")
    try:
        return int(func(args))
    except ValueError as e:
        parser.error(str(e))


if __name__ == "__main__":
    raise SystemExit(main())
