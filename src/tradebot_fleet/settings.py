from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Binance (spot)
    credentials_file: Path = Field(
        default=Path("config.properties"),
        validation_alias="CREDENTIALS_FILE",
    )
    binance_base_url: str = Field(
        default="https://api.binance.com",
        validation_alias="BINANCE_BASE_URL",
    )

    # Selection
    top_n: int = Field(default=20, ge=1, validation_alias="TOP_N")
    quote_asset: str = Field(default="USDC", validation_alias="QUOTE_ASSET")
    trading_status: str = Field(default="TRADING", validation_alias="TRADING_STATUS")

    # Units
    jar_name: str = Field(default="tradingbot.jar", validation_alias="JAR_NAME")
    launcher: str = Field(default="/usr/bin/java -jar", validation_alias="LAUNCHER")
    bots_dir_name: str = Field(default="trader_bots", validation_alias="BOTS_DIR_NAME")
    systemd_unit_dir: Path = Field(
        default=Path("/etc/systemd/system"),
        validation_alias="SYSTEMD_UNIT_DIR",
    )
    systemctl: str = Field(default="systemctl", validation_alias="SYSTEMCTL")

    # Logging
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    def working_directory(self, home: Path) -> Path:
        return home / self.bots_dir_name
