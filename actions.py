"""
Action descriptors.

One entry per remote action: the URL sub-path, whether results are cached
per market, and the envelope key the server wraps per-market payloads in.
The normalizer and the cache both read from this table.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

# Cache key used when a per-market action was requested without a market
ALL_MARKETS = "all"


class Action(str, Enum):
    CURRENCIES = "currencies"
    DEPTH = "depth"
    HLOC = "hloc"
    MARKETS = "markets"
    OFFERS = "offers"
    TICKER = "ticker"
    TRADES = "trades"
    VOLUMES = "volumes"


@dataclass(frozen=True)
class ActionDescriptor:
    action: Action
    path: str
    keyed_by_market: bool
    envelope_key: Optional[str] = None


def _whole(action: Action) -> ActionDescriptor:
    return ActionDescriptor(action, f"{action.value}/", keyed_by_market=False)


def _per_market(action: Action) -> ActionDescriptor:
    return ActionDescriptor(action, f"{action.value}/", keyed_by_market=True,
                            envelope_key=action.value)


ACTION_DESCRIPTORS: Dict[Action, ActionDescriptor] = {
    Action.CURRENCIES: _whole(Action.CURRENCIES),
    Action.DEPTH: _per_market(Action.DEPTH),
    Action.HLOC: _per_market(Action.HLOC),
    Action.MARKETS: _whole(Action.MARKETS),
    Action.OFFERS: _per_market(Action.OFFERS),
    Action.TICKER: _per_market(Action.TICKER),
    Action.TRADES: _per_market(Action.TRADES),
    Action.VOLUMES: _whole(Action.VOLUMES),
}


def descriptor_for(action) -> ActionDescriptor:
    """Look up the descriptor for an Action or its string name."""
    return ACTION_DESCRIPTORS[Action(action)]
