from tradebot_fleet.cli import app

app()
