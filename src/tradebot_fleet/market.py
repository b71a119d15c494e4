from __future__ import annotations

from typing import Any, Iterable, Protocol

from tradebot_fleet.types import Ticker


class MarketDataClient(Protocol):
    async def exchange_info(self) -> dict[str, Any]: ...

    async def ticker_24h(self) -> list[dict[str, Any]]: ...


def symbol_statuses(exchange_info: dict[str, Any]) -> dict[str, str]:
    statuses: dict[str, str] = {}
    for entry in exchange_info.get("symbols", []):
        symbol = entry.get("symbol")
        if symbol:
            statuses[str(symbol)] = str(entry.get("status", ""))
    return statuses


def build_tickers(
    rows: Iterable[dict[str, Any]],
    *,
    statuses: dict[str, str],
) -> list[Ticker]:
    """
    Attach the exchange-info trading status to each 24h ticker row.

    Symbols missing from the exchange metadata get an empty status, so they
    can never be selected.
    """
    tickers: list[Ticker] = []
    for row in rows:
        symbol = row.get("symbol")
        if not symbol:
            continue
        symbol = str(symbol)
        tickers.append(
            Ticker(
                symbol=symbol,
                quote_volume=str(row.get("quoteVolume", "")),
                status=statuses.get(symbol, ""),
            )
        )
    return tickers


async def fetch_tickers(client: MarketDataClient) -> list[Ticker]:
    info = await client.exchange_info()
    rows = await client.ticker_24h()
    return build_tickers(rows, statuses=symbol_statuses(info))
