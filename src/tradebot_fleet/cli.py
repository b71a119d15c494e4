from __future__ import annotations

import asyncio
import logging

import httpx
import typer

from tradebot_fleet.config.credentials import load_credentials
from tradebot_fleet.context import ExecutionContext, resolve_execution_context
from tradebot_fleet.errors import FleetError
from tradebot_fleet.exchange import BinanceApiError, BinanceSpotClient
from tradebot_fleet.logging_utils import configure_logging
from tradebot_fleet.orchestrator import generate
from tradebot_fleet.reconciler import UnitReconciler
from tradebot_fleet.settings import Settings
from tradebot_fleet.system import SubprocessRunner, SystemdManager

app = typer.Typer(add_completion=False)
logger = logging.getLogger("tradebot_fleet")


def _build_reconciler(settings: Settings, context: ExecutionContext) -> UnitReconciler:
    manager = SystemdManager(
        SubprocessRunner(logger=logger),
        unit_dir=settings.systemd_unit_dir,
        systemctl=settings.systemctl,
    )
    return UnitReconciler(
        context=context,
        manager=manager,
        working_directory=settings.working_directory(context.home),
        jar_name=settings.jar_name,
        launcher=settings.launcher,
        systemctl=settings.systemctl,
        logger=logger,
    )


def _run_generate(settings: Settings, reconciler: UnitReconciler) -> None:
    credentials = load_credentials(settings.credentials_file)
    logger.info(f"Loaded API credentials from {settings.credentials_file}")

    async def _run() -> None:
        client = BinanceSpotClient(
            api_key=credentials.api_key,
            base_url=settings.binance_base_url,
        )
        try:
            await generate(settings=settings, client=client, reconciler=reconciler, logger=logger)
        finally:
            await client.aclose()

    asyncio.run(_run())


@app.command()
def main(
    mode: str = typer.Argument(
        "",
        help="Leave empty to generate and install units; 'delete' removes them.",
        show_default=False,
    ),
) -> None:
    """
    Generate systemd units for the top USDC pairs by 24h quote volume.
    """
    normalized = mode.strip().lower()
    if normalized not in ("", "delete"):
        raise typer.BadParameter(f"unknown mode: {mode!r} (expected nothing or 'delete')")

    settings = Settings()
    configure_logging(settings.log_level)
    context = resolve_execution_context()
    reconciler = _build_reconciler(settings, context)

    try:
        if normalized == "delete":
            reconciler.delete()
        else:
            _run_generate(settings, reconciler)
    except (FleetError, BinanceApiError, httpx.HTTPError) as e:
        logger.error(str(e), exc_info=True)
        raise typer.Exit(code=1) from e
