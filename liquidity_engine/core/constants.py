"""Constants and default values for the liquidity engine."""

from decimal import Decimal

# Price grid
PRICE_BASE = Decimal("1.00001")  # price at limit L is PRICE_BASE ** L
MIN_LIMIT = -1_900_000
MAX_LIMIT = 1_900_000
DEFAULT_WIDTH = 1

# Market defaults
DEFAULT_MARKET_ID = "ETH-USDC"
DEFAULT_PAIR_ID = "ETH/USD"

# Avellaneda-Stoikov defaults
DEFAULT_RISK_AVERSION = "0.5"
DEFAULT_VOLATILITY_SQ = "0.0001"
DEFAULT_ARRIVAL_INTENSITY = "200"
DEFAULT_TARGET_RATIO = "0.5"  # half of pool value held in quote

# Oracle strategy defaults (in limits)
DEFAULT_MIN_SPREAD = 0

# Rate limiting (in blocks)
DEFAULT_MIN_INTERVAL = 1

# Administration
DEFAULT_OWNER = "owner"

# Event history kept in memory
DEFAULT_EVENT_HISTORY = 1000

# Logging defaults
DEFAULT_LOG_LEVEL = "INFO"
