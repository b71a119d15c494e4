__all__ = [
    "ApiCredentials",
    "load_credentials",
    "parse_properties",
]

from tradebot_fleet.config.credentials import ApiCredentials, load_credentials, parse_properties
