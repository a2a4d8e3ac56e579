from liquidity_engine.apps.main import app

app()
