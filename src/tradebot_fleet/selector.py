from __future__ import annotations

import math
from typing import Iterable

from tradebot_fleet.errors import DataFormatError
from tradebot_fleet.types import RankedPair, Ticker

DEFAULT_TOP_N = 20


def parse_quote_volume(ticker: Ticker) -> float:
    try:
        value = float(ticker.quote_volume)
    except (TypeError, ValueError) as e:
        raise DataFormatError(
            symbol=ticker.symbol,
            field="quoteVolume",
            value=ticker.quote_volume,
        ) from e
    if not math.isfinite(value):
        raise DataFormatError(symbol=ticker.symbol, field="quoteVolume", value=ticker.quote_volume)
    return value


def is_eligible(ticker: Ticker, *, quote_asset: str, trading_status: str) -> bool:
    return ticker.symbol.endswith(quote_asset) and ticker.status == trading_status


def select_top_pairs(
    tickers: Iterable[Ticker],
    *,
    quote_asset: str,
    trading_status: str,
    top_n: int = DEFAULT_TOP_N,
) -> list[RankedPair]:
    if top_n < 0:
        raise ValueError("top_n must be >= 0")
    candidates = [
        RankedPair(symbol=t.symbol, quote_volume=parse_quote_volume(t))
        for t in tickers
        if is_eligible(t, quote_asset=quote_asset, trading_status=trading_status)
    ]
    # sorted() keeps input order for equal volumes, reverse=True included.
    ranked = sorted(candidates, key=lambda p: p.quote_volume, reverse=True)
    return ranked[:top_n]
