"""
Market data client, one method per remote action.

Each method builds validated parameters, resolves the action's URL under
the configured base URL, and hands off to the RequestExecutor. Calls block
and return data by default; pass sync=False inside a running event loop to
get an asyncio.Task and have the result merged into `client.cache`.
"""
import logging
from typing import Dict, List, Optional

from actions import Action, descriptor_for
from cache_manager import DataCache
from param_builder import BaseOptions, build, options_from_kwargs, resolve_result_format
from request_executor import (
    RequestExecutor,
    ResultHandler,
    StatusHandler,
    SuccessHandler,
)
from transport import HttpTransport
import config

logger = logging.getLogger(__name__)


class MarketDataClient:
    """Read-only client for the markets API, with its own cache."""

    _default: Optional["MarketDataClient"] = None

    def __init__(self, base_url: Optional[str] = None,
                 transport: Optional[HttpTransport] = None,
                 cache: Optional[DataCache] = None,
                 status_handlers: Optional[Dict[int, StatusHandler]] = None,
                 on_error: Optional[ResultHandler] = None,
                 on_complete: Optional[ResultHandler] = None,
                 markets_of_interest: Optional[List[str]] = None):
        self.base_url = base_url or config.BASE_URL
        self._executor = RequestExecutor(
            transport=transport,
            cache=cache,
            status_handlers=status_handlers,
            on_error=on_error,
            on_complete=on_complete,
        )
        self.markets_of_interest = list(
            markets_of_interest if markets_of_interest is not None else config.MARKETS_OF_INTEREST
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    # ── Configuration surface ─────────────────────────────────────────────

    @property
    def base_url(self) -> str:
        return self._base_url

    @base_url.setter
    def base_url(self, value: str):
        if not value.endswith("/"):
            value += "/"
        self._base_url = value

    @property
    def cache(self) -> DataCache:
        return self._executor.cache

    @property
    def status_handlers(self) -> Dict[int, StatusHandler]:
        return self._executor.status_handlers

    @property
    def last_result(self):
        """Result of whichever call finished most recently, in any mode."""
        return self._executor.last_result

    def url_for(self, action) -> str:
        return self.base_url + descriptor_for(action).path

    # ── Shared call path ──────────────────────────────────────────────────

    def _call(self, action: Action, options: Optional[BaseOptions], sync: bool,
              on_success: Optional[SuccessHandler], kwargs: dict):
        if options is None:
            options = options_from_kwargs(action, **kwargs)
        elif kwargs:
            logger.debug("%s: options object given, ignoring keywords %s",
                         action.value, sorted(kwargs))
        params = build(action, options)
        return self._executor.execute(
            action,
            self.url_for(action),
            params,
            result_format=resolve_result_format(action, options),
            sync=sync,
            on_success=on_success,
        )

    # ── Actions ───────────────────────────────────────────────────────────

    def currencies(self, options=None, *, sync: bool = True,
                   on_success: Optional[SuccessHandler] = None, **kwargs):
        """Known currencies. Options: basecurrency, type (crypto | fiat)."""
        return self._call(Action.CURRENCIES, options, sync, on_success, kwargs)

    def depth(self, options=None, *, sync: bool = True,
              on_success: Optional[SuccessHandler] = None, **kwargs):
        """Order book depth for one market. Options: market (required)."""
        return self._call(Action.DEPTH, options, sync, on_success, kwargs)

    def hloc(self, options=None, *, sync: bool = True,
             on_success: Optional[SuccessHandler] = None, **kwargs):
        """
        High/low/open/close history for one market.

        Options: market (required), interval, timestamp_from, timestamp_to,
        milliseconds. result_format="csv" returns the server's CSV text.
        """
        return self._call(Action.HLOC, options, sync, on_success, kwargs)

    def markets(self, options=None, *, sync: bool = True,
                on_success: Optional[SuccessHandler] = None, **kwargs):
        """All markets the server trades."""
        return self._call(Action.MARKETS, options, sync, on_success, kwargs)

    def offers(self, options=None, *, sync: bool = True,
               on_success: Optional[SuccessHandler] = None, **kwargs):
        """Open offers for one market. Options: market (required), direction."""
        return self._call(Action.OFFERS, options, sync, on_success, kwargs)

    def ticker(self, options=None, *, sync: bool = True,
               on_success: Optional[SuccessHandler] = None, **kwargs):
        """Ticker for one market, or for all markets when market is omitted."""
        return self._call(Action.TICKER, options, sync, on_success, kwargs)

    def trades(self, options=None, *, sync: bool = True,
               on_success: Optional[SuccessHandler] = None, **kwargs):
        """
        Trade history.

        Options: market, direction, timestamp_from, timestamp_to,
        trade_id_from, trade_id_to, limit, sort ("asc"; desc is the default).
        """
        return self._call(Action.TRADES, options, sync, on_success, kwargs)

    def volumes(self, options=None, *, sync: bool = True,
                on_success: Optional[SuccessHandler] = None, **kwargs):
        """
        Volume series. Exactly one of market or basecurrency is required.

        Options: market, basecurrency (BTC | DOGE | LTC | DASH), interval,
        timestamp_from, timestamp_to, milliseconds.
        """
        return self._call(Action.VOLUMES, options, sync, on_success, kwargs)

    # ── Lifecycle ─────────────────────────────────────────────────────────

    def close(self):
        """Close the HTTP session and drop the shared default if it is this client."""
        self._executor.transport.close()
        if MarketDataClient._default is self:
            MarketDataClient._default = None


def default_client() -> MarketDataClient:
    """Process-wide client, created on first use."""
    if MarketDataClient._default is None:
        MarketDataClient._default = MarketDataClient()
    return MarketDataClient._default
