#!/usr/bin/env python3
"""
Validate the price and historical endpoints of a running server.

Checks performed:
- HTTP 200 and JSON object
- price is a decimal string whose precision matches its magnitude tier
- historical points are [month, price] pairs with valid month labels
- at most 12 points, months never go backwards (oldest -> newest)

Usage examples:
  python -m scripts.validate_prices --type crypto --symbol BTC
  python -m scripts.validate_prices --host 127.0.0.1 --port 8000 --type fx --symbol EURUSD --base EUR --quote USD
  python -m scripts.validate_prices --type stock --symbol AAPL --print-sample 3
"""

import argparse
import sys
from typing import Any, Dict, List, Tuple

import httpx

from core.utils.formatting import decimals_for
from core.utils.time import MONTH_NAMES


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Validate /price and /historical responses.")
    p.add_argument("--host", default="localhost", help="Server host (default: localhost)")
    p.add_argument("--port", type=int, default=8000, help="Server port (default: 8000)")
    p.add_argument("--type", required=True, help="Asset type (crypto, stock, fx, commodity, index)")
    p.add_argument("--symbol", required=True, help="Ticker (e.g., BTC, AAPL, XAU)")
    p.add_argument("--id", dest="coin_id", default=None, help="CoinGecko id for unmapped tickers")
    p.add_argument("--base", default=None, help="FX base currency")
    p.add_argument("--quote", default=None, help="FX quote currency")
    p.add_argument("--skip-historical", action="store_true", help="Only validate the price endpoint")
    p.add_argument("--print-sample", type=int, default=0, help="Print first N historical points")
    return p.parse_args()


def validate_price(body: Dict[str, Any], req_type: str) -> Tuple[bool, str]:
    for field in ("symbol", "type", "price", "provider"):
        if field not in body:
            return False, f"missing field '{field}'"

    if body["type"] != req_type:
        return False, f"type mismatch: {body['type']} != {req_type}"

    price = body["price"]
    if not isinstance(price, str):
        return False, f"price must be a string, got {type(price).__name__}"
    try:
        value = float(price)
    except ValueError:
        return False, f"price is not numeric: {price!r}"
    if value <= 0:
        return False, f"price must be positive: {price}"

    decimals = len(price.split(".")[1]) if "." in price else 0
    expected = decimals_for(value)
    if decimals != expected:
        return False, f"price {price} has {decimals} decimals, expected {expected}"

    return True, ""


def validate_series(points: List[Any]) -> Tuple[bool, str]:
    if len(points) > 12:
        return False, f"expected at most 12 points, got {len(points)}"

    months = []
    for idx, point in enumerate(points):
        if not isinstance(point, list) or len(point) != 2:
            return False, f"point {idx} is not a [month, price] pair: {point!r}"
        month, price = point
        if month not in MONTH_NAMES:
            return False, f"point {idx} has invalid month label {month!r}"
        if not isinstance(price, (int, float)) or price <= 0:
            return False, f"point {idx} has invalid price {price!r}"
        months.append(MONTH_NAMES.index(month))

    # Same month or the next one (Dec -> Jan wraps); FMP rows can share a month
    for i in range(1, len(months)):
        if months[i] not in (months[i - 1], (months[i - 1] + 1) % 12):
            return False, f"months out of order at index {i}: {points[i-1][0]} -> {points[i][0]}"
    return True, ""


def get_json(url: str, params: Dict[str, str]) -> Tuple[int, Any]:
    print(f"[Info] Requesting: {url} {params or ''}")
    try:
        resp = httpx.get(url, params=params, timeout=30.0)
    except httpx.RequestError as e:
        print(f"[Error] Request failed: {e}")
        return 2, None

    if resp.status_code != 200:
        print(f"[Error] HTTP {resp.status_code}: {resp.text[:300]}")
        return 2, None

    try:
        return 0, resp.json()
    except ValueError as e:
        print(f"[Error] Invalid JSON: {e}")
        return 2, None


def main() -> int:
    args = parse_args()
    base = f"http://{args.host}:{args.port}"
    params = {k: v for k, v in (("id", args.coin_id), ("base", args.base), ("quote", args.quote)) if v}

    code, body = get_json(f"{base}/price/{args.type}/{args.symbol}", params)
    if code:
        return code

    ok, msg = validate_price(body, args.type)
    if not ok:
        print(f"[Error] Price invalid: {msg}")
        return 1
    print(f"[OK] {args.symbol} price {body['price']} via {body['provider']}")

    if args.skip_historical:
        return 0

    code, body = get_json(f"{base}/historical/{args.type}/{args.symbol}", params)
    if code:
        return code

    points = body.get("points") if isinstance(body, dict) else None
    if not isinstance(points, list):
        print("[Error] Response has no points list")
        return 2
    if not points:
        print("[Warn] Empty series.")
        return 0

    ok, msg = validate_series(points)
    if not ok:
        print(f"[Error] Series invalid: {msg}")
        return 1

    if args.print_sample > 0:
        sample = points[: args.print_sample]
        print(f"[Info] Sample ({len(sample)} of {len(points)}):")
        for point in sample:
            print(point)

    print(f"[OK] Validated {len(points)} monthly points for {args.type} {args.symbol} via {body['provider']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
