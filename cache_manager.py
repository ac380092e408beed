"""In-memory cache of the latest payload per action (and per market)."""
import copy
import logging
from typing import Any, Dict, Optional

from actions import ACTION_DESCRIPTORS, Action, descriptor_for

logger = logging.getLogger(__name__)

_NOT_QUERIED = object()


class DataCache:
    """
    One slot per action, all empty until the first merge.

    Whole-dataset actions hold a single payload that each merge replaces.
    Per-market actions hold {market: payload}; a merge replaces only the
    entry for its market. Entries never expire.
    """

    def __init__(self):
        self._slots: Dict[Action, Any] = {}

    def merge(self, action, key: Optional[str], payload: Any) -> None:
        """Store *payload* for *action* (under *key* for per-market actions)."""
        descriptor = descriptor_for(action)
        if descriptor.keyed_by_market:
            if not key:
                raise ValueError(f"{descriptor.action.value}: a market key is required")
            self._slots.setdefault(descriptor.action, {})[key] = payload
            logger.info("Cache merge: %s[%s]", descriptor.action.value, key)
        else:
            self._slots[descriptor.action] = payload
            logger.info("Cache merge: %s", descriptor.action.value)

    def _lookup(self, action, key: Optional[str]):
        descriptor = descriptor_for(action)
        slot = self._slots.get(descriptor.action, _NOT_QUERIED)
        if slot is _NOT_QUERIED or key is None or not descriptor.keyed_by_market:
            return slot
        return slot.get(key, _NOT_QUERIED)

    def get(self, action, key: Optional[str] = None, default: Any = None) -> Any:
        """
        Cached payload for *action*, or *default* if it was never queried.

        For per-market actions pass *key* to get one market's payload;
        without it the whole {market: payload} mapping is returned.
        """
        value = self._lookup(action, key)
        return default if value is _NOT_QUERIED else value

    def contains(self, action, key: Optional[str] = None) -> bool:
        return self._lookup(action, key) is not _NOT_QUERIED

    def __contains__(self, action) -> bool:
        return self.contains(action)

    def snapshot(self) -> Dict[str, Any]:
        """Deep copy of every queried slot, keyed by action name."""
        return {action.value: copy.deepcopy(value) for action, value in self._slots.items()}

    def clear(self):
        """Forget everything; every slot goes back to "not queried"."""
        self._slots.clear()

    def get_stats(self) -> Dict:
        """Get cache statistics"""
        markets = {
            d.action.value: len(self._slots.get(d.action, {}))
            for d in ACTION_DESCRIPTORS.values() if d.keyed_by_market
        }
        return {
            "queried_actions": sorted(a.value for a in self._slots),
            "markets_per_action": markets,
            "total_entries": sum(
                len(v) if descriptor_for(a).keyed_by_market else 1
                for a, v in self._slots.items()
            ),
        }
