"""Configuration: loads overrides from environment variables."""
import os
from dotenv import load_dotenv

load_dotenv()

# ── Remote API ────────────────────────────────────────────────────────────
BASE_URL = os.getenv("MARKETS_API_URL", "https://markets.bisq.network/api/")
REQUEST_TIMEOUT = float(os.getenv("MARKETS_API_TIMEOUT", "15"))  # seconds
USER_AGENT = os.getenv("MARKETS_API_USER_AGENT", "markets-api-client/0.1")

# Advisory only, no operation filters on this list
MARKETS_OF_INTEREST = [
    m.strip().lower()
    for m in os.getenv("MARKETS_OF_INTEREST", "btc_eur,btc_usd,xmr_btc,ltc_btc,dash_btc").split(",")
    if m.strip()
]

# ── Parameter rules ───────────────────────────────────────────────────────
DEFAULT_FORMAT = "json"
DEFAULT_BASECURRENCY = "BTC"
CURRENCY_TYPES = ("crypto", "fiat")
VOLUME_BASECURRENCIES = ("BTC", "DOGE", "LTC", "DASH")
INTERVALS = ("minute", "half_hour", "hour", "half_day", "day", "week", "month", "year")
DIRECTIONS = ("buy", "sell")
TRADES_LIMIT_CEILING = 2000  # enforced by the server, not here

# ── Status-code notifications ─────────────────────────────────────────────
NOTIFY_STATUS_CODES = (200, 400, 418)
