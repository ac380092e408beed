"""
Query parameter construction.

Each action has an options dataclass with documented defaults and a builder
that validates it and returns an ordered list of (name, value) string pairs.
Validation happens here, before any request is issued.
"""
import logging
from dataclasses import dataclass, fields
from typing import Callable, Dict, List, Optional, Tuple, Union

from actions import Action
from errors import ValidationError
import config

logger = logging.getLogger(__name__)

QueryParameters = List[Tuple[str, str]]

RESULT_JSON = "json"
RESULT_TEXT = "text"
RESULT_CSV = "csv"
UNPARSED_FORMATS = (RESULT_TEXT, RESULT_CSV)


# ═══════════════════════════════════════════════════════════════════════════
# Options
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class BaseOptions:
    """
    Options shared by every action.

    pretty:        let the server pretty-print (no format parameter is sent)
    result_format: "json" parses the body, "text" returns it unparsed,
                   "csv" (hloc only) asks the server for CSV text
    """
    pretty: bool = False
    result_format: str = RESULT_JSON


@dataclass
class CurrenciesOptions(BaseOptions):
    basecurrency: str = config.DEFAULT_BASECURRENCY
    type: Optional[str] = None  # crypto | fiat | all (server default)


@dataclass
class DepthOptions(BaseOptions):
    market: Optional[str] = None  # required


@dataclass
class HlocOptions(BaseOptions):
    market: Optional[str] = None  # required
    interval: Optional[str] = None  # None / "auto" lets the server pick
    timestamp_from: Optional[int] = None
    timestamp_to: Optional[int] = None
    milliseconds: bool = False


@dataclass
class MarketsOptions(BaseOptions):
    pass


@dataclass
class OffersOptions(BaseOptions):
    market: Optional[str] = None  # required
    direction: Optional[str] = None


@dataclass
class TickerOptions(BaseOptions):
    market: Optional[str] = None  # None = all markets


@dataclass
class TradesOptions(BaseOptions):
    market: Optional[str] = None
    direction: Optional[str] = None
    timestamp_from: Optional[int] = None
    timestamp_to: Optional[int] = None
    trade_id_from: Optional[str] = None
    trade_id_to: Optional[str] = None
    limit: Optional[int] = None  # not checked; the server caps at TRADES_LIMIT_CEILING
    sort: Optional[str] = None  # only "asc" is sent; desc is the default


@dataclass
class VolumesOptions(BaseOptions):
    market: Optional[str] = None
    basecurrency: Optional[str] = None
    interval: Optional[str] = None
    timestamp_from: Optional[int] = None
    timestamp_to: Optional[int] = None
    milliseconds: bool = False


OPTIONS_TYPES: Dict[Action, type] = {
    Action.CURRENCIES: CurrenciesOptions,
    Action.DEPTH: DepthOptions,
    Action.HLOC: HlocOptions,
    Action.MARKETS: MarketsOptions,
    Action.OFFERS: OffersOptions,
    Action.TICKER: TickerOptions,
    Action.TRADES: TradesOptions,
    Action.VOLUMES: VolumesOptions,
}


def options_from_kwargs(action, **kwargs) -> BaseOptions:
    """Build the options dataclass for *action*, ignoring unknown keywords."""
    cls = OPTIONS_TYPES[Action(action)]
    known = {f.name for f in fields(cls)}
    ignored = sorted(set(kwargs) - known)
    if ignored:
        logger.debug("%s: ignoring unsupported options %s", Action(action).value, ignored)
    return cls(**{k: v for k, v in kwargs.items() if k in known})


# ── Small helpers ─────────────────────────────────────────────────────────

def _add(params: QueryParameters, name: str, value) -> None:
    if value is None:
        return
    if isinstance(value, bool):
        value = "true" if value else "false"
    params.append((name, str(value)))


def _choice(name: str, value: Optional[str], allowed, implicit=()) -> Optional[str]:
    """
    Normalize an enumerated option to lower case.

    Returns None for values in *implicit* (server defaults that are never
    sent explicitly). Raises ValidationError for anything not allowed.
    """
    if value is None:
        return None
    token = str(value).strip().lower()
    if token in implicit:
        return None
    if token not in allowed:
        raise ValidationError(
            f"Invalid {name} {value!r}; expected one of {', '.join(allowed)}"
        )
    return token


def _require_market(action: Action, market: Optional[str]) -> str:
    if not market:
        raise ValidationError(f"{action.value}: 'market' is required")
    return market


def resolve_result_format(action, opts: BaseOptions) -> str:
    """Validated, lower-cased result format for *action* ("json" when unset)."""
    action = Action(action)
    allowed = (RESULT_JSON, RESULT_TEXT, RESULT_CSV) if action is Action.HLOC else (RESULT_JSON, RESULT_TEXT)
    return _choice("result_format", opts.result_format, allowed) or RESULT_JSON


def _format_params(action: Action, opts: BaseOptions) -> QueryParameters:
    if resolve_result_format(action, opts) == RESULT_CSV:
        return [("format", "csv")]
    if opts.pretty:
        return []
    return [("format", config.DEFAULT_FORMAT)]


def _time_range(params: QueryParameters, opts) -> None:
    _add(params, "timestamp_from", opts.timestamp_from)
    _add(params, "timestamp_to", opts.timestamp_to)


# ═══════════════════════════════════════════════════════════════════════════
# Per-action builders
# ═══════════════════════════════════════════════════════════════════════════

def _currencies(opts: CurrenciesOptions) -> QueryParameters:
    params: QueryParameters = []
    base = (opts.basecurrency or config.DEFAULT_BASECURRENCY).upper()
    if base != config.DEFAULT_BASECURRENCY:
        _add(params, "basecurrency", base)
    _add(params, "type", _choice("type", opts.type, config.CURRENCY_TYPES, implicit=("all",)))
    return params


def _depth(opts: DepthOptions) -> QueryParameters:
    return [("market", _require_market(Action.DEPTH, opts.market))]


def _hloc(opts: HlocOptions) -> QueryParameters:
    params = [("market", _require_market(Action.HLOC, opts.market))]
    _add(params, "interval", _choice("interval", opts.interval, config.INTERVALS, implicit=("auto",)))
    _time_range(params, opts)
    if opts.milliseconds:
        _add(params, "milliseconds", True)
    return params


def _markets(opts: MarketsOptions) -> QueryParameters:
    return []


def _offers(opts: OffersOptions) -> QueryParameters:
    params = [("market", _require_market(Action.OFFERS, opts.market))]
    _add(params, "direction", _choice("direction", opts.direction, config.DIRECTIONS))
    return params


def _ticker(opts: TickerOptions) -> QueryParameters:
    params: QueryParameters = []
    _add(params, "market", opts.market or None)
    return params


def _trades(opts: TradesOptions) -> QueryParameters:
    params: QueryParameters = []
    _add(params, "market", opts.market or None)
    _add(params, "direction", _choice("direction", opts.direction, config.DIRECTIONS))
    _time_range(params, opts)
    _add(params, "trade_id_from", opts.trade_id_from)
    _add(params, "trade_id_to", opts.trade_id_to)
    if isinstance(opts.limit, int) and opts.limit > config.TRADES_LIMIT_CEILING:
        logger.debug("trades: limit %s exceeds server ceiling %d, sending as-is",
                     opts.limit, config.TRADES_LIMIT_CEILING)
    _add(params, "limit", opts.limit)
    _add(params, "sort", _choice("sort", opts.sort, ("asc",), implicit=("desc",)))
    return params


def _volumes(opts: VolumesOptions) -> QueryParameters:
    if bool(opts.market) == bool(opts.basecurrency):
        raise ValidationError("volumes: supply exactly one of 'market' or 'basecurrency'")

    params: QueryParameters = []
    if opts.market:
        _add(params, "market", opts.market)
    else:
        base = str(opts.basecurrency).strip().upper()
        if base not in config.VOLUME_BASECURRENCIES:
            raise ValidationError(
                f"Invalid basecurrency {opts.basecurrency!r}; "
                f"expected one of {', '.join(config.VOLUME_BASECURRENCIES)}"
            )
        _add(params, "basecurrency", base)
    _add(params, "interval", _choice("interval", opts.interval, config.INTERVALS, implicit=("auto",)))
    _time_range(params, opts)
    if opts.milliseconds:
        _add(params, "milliseconds", True)
    return params


BUILDERS: Dict[Action, Callable[[BaseOptions], QueryParameters]] = {
    Action.CURRENCIES: _currencies,
    Action.DEPTH: _depth,
    Action.HLOC: _hloc,
    Action.MARKETS: _markets,
    Action.OFFERS: _offers,
    Action.TICKER: _ticker,
    Action.TRADES: _trades,
    Action.VOLUMES: _volumes,
}


def build(action: Union[Action, str], options: Optional[BaseOptions] = None) -> QueryParameters:
    """
    Validate *options* for *action* and return its query parameters.

    The format parameter always comes first, followed by the action's own
    parameters in a fixed order. Raises ValidationError on bad input.
    """
    action = Action(action)
    cls = OPTIONS_TYPES[action]
    if options is None:
        options = cls()
    elif not isinstance(options, cls):
        raise ValidationError(
            f"{action.value}: expected {cls.__name__}, got {type(options).__name__}"
        )
    return _format_params(action, options) + BUILDERS[action](options)
