__all__ = ["BinanceApiError", "BinanceSpotClient"]

from tradebot_fleet.exchange.binance_spot import BinanceApiError, BinanceSpotClient
