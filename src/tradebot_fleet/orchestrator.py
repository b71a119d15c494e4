from __future__ import annotations

import logging

from tradebot_fleet.market import MarketDataClient, fetch_tickers
from tradebot_fleet.reconciler import InstallReport, UnitReconciler
from tradebot_fleet.selector import select_top_pairs
from tradebot_fleet.settings import Settings


async def generate(
    *,
    settings: Settings,
    client: MarketDataClient,
    reconciler: UnitReconciler,
    logger: logging.Logger | None = None,
) -> InstallReport | None:
    """
    Rank the pairs, then render and install one unit per ranked symbol.

    Returns None when nothing qualifies; no files are touched in that case.
    """
    log = logger or logging.getLogger("tradebot_fleet")
    tickers = await fetch_tickers(client)
    ranked = select_top_pairs(
        tickers,
        quote_asset=settings.quote_asset,
        trading_status=settings.trading_status,
        top_n=settings.top_n,
    )
    if not ranked:
        log.info(f"No {settings.quote_asset} pairs found. Exiting.")
        return None

    for i, pair in enumerate(ranked, start=1):
        log.info(
            f"Top {i}: {pair.symbol} with quoteVolume {pair.quote_volume:.2f} {settings.quote_asset}",
            extra={"symbol": pair.symbol},
        )
    return reconciler.install([pair.symbol for pair in ranked])
