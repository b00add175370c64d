#!/usr/bin/env python3
"""
Fetch one asset's price (and optionally its monthly history) through the
fallback chain, bypassing the HTTP server.

Useful for checking API keys and provider reachability from a shell.

Usage examples:
  python -m scripts.check_price --type crypto --symbol BTC
  python -m scripts.check_price --type crypto --symbol PEPE --id pepe --history
  python -m scripts.check_price --type fx --symbol EURUSD --base EUR --quote USD
  python -m scripts.check_price --type commodity --symbol XAU --history
"""

import argparse
import asyncio
import sys

from core.errors import AssetDataUnavailableError, ProviderError, UnsupportedAssetTypeError
from core.price_service import PriceService
from core.schemas import Asset, AssetType


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Fetch an asset price through the provider chain.")
    p.add_argument("--type", required=True, choices=[t.value for t in AssetType], help="Asset class")
    p.add_argument("--symbol", required=True, help="Ticker (e.g., BTC, AAPL, XAU, SPX)")
    p.add_argument("--name", default="", help="Display name (defaults to symbol)")
    p.add_argument("--id", dest="coin_id", default=None, help="CoinGecko id for unmapped tickers")
    p.add_argument("--base", default=None, help="FX base currency")
    p.add_argument("--quote", default=None, help="FX quote currency")
    p.add_argument("--history", action="store_true", help="Also fetch the 12-month series")
    return p.parse_args()


async def run(args: argparse.Namespace) -> int:
    asset = Asset(
        symbol=args.symbol,
        name=args.name,
        type=args.type,
        id=args.coin_id,
        base=args.base,
        quote=args.quote,
    )

    service = PriceService()
    await service.initialize()
    try:
        quote = await service.get_price_quote(asset)
        print(f"[OK] {asset.name}: ${quote.price} (via {quote.provider})")

        if args.history:
            series = await service.get_historical_series(asset)
            print(f"[OK] {len(series.points)} monthly points (via {series.provider}):")
            for month, price in series.points:
                print(f"  {month}: {price}")
        return 0
    except AssetDataUnavailableError as e:
        print(f"[Error] {e}")
        for attempt in e.attempts:
            print(f"  - {attempt.provider} [{attempt.kind.value}]: {attempt.message}")
        return 1
    except (ProviderError, UnsupportedAssetTypeError) as e:
        print(f"[Error] {e}")
        return 1
    finally:
        await service.shutdown()


def main() -> int:
    return asyncio.run(run(parse_args()))


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n[Info] Interrupted. Bye.")
        sys.exit(130)
