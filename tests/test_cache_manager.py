"""Tests for the per-action data cache."""

import pytest

from actions import Action
from cache_manager import DataCache


class TestDataCache:

    def test_starts_empty(self, cache) -> None:
        for action in Action:
            assert action not in cache
            assert cache.get(action) is None
        assert cache.snapshot() == {}

    def test_scalar_merge_replaces(self, cache) -> None:
        cache.merge(Action.MARKETS, None, [{"pair": "btc_eur"}])
        cache.merge(Action.MARKETS, None, [{"pair": "xmr_btc"}])
        assert cache.get(Action.MARKETS) == [{"pair": "xmr_btc"}]

    def test_scalar_merge_ignores_key(self, cache) -> None:
        cache.merge(Action.VOLUMES, "btc_eur", [1, 2])
        assert cache.get(Action.VOLUMES) == [1, 2]

    def test_keyed_merge_only_touches_one_market(self, cache) -> None:
        cache.merge(Action.DEPTH, "btc_eur", {"buys": ["1"]})
        cache.merge(Action.DEPTH, "xmr_btc", {"buys": ["2"]})
        cache.merge(Action.DEPTH, "btc_eur", {"buys": ["3"]})
        assert cache.get(Action.DEPTH) == {
            "btc_eur": {"buys": ["3"]},
            "xmr_btc": {"buys": ["2"]},
        }
        assert cache.get(Action.DEPTH, "xmr_btc") == {"buys": ["2"]}

    def test_keyed_merge_requires_key(self, cache) -> None:
        with pytest.raises(ValueError):
            cache.merge(Action.TICKER, None, {})

    def test_not_queried_vs_empty(self, cache) -> None:
        cache.merge(Action.OFFERS, "btc_eur", [])
        assert cache.contains(Action.OFFERS, "btc_eur")
        assert cache.get(Action.OFFERS, "btc_eur", default="missing") == []
        assert not cache.contains(Action.OFFERS, "xmr_btc")
        assert cache.get(Action.OFFERS, "xmr_btc", default="missing") == "missing"

    def test_snapshot_is_a_copy(self, cache) -> None:
        cache.merge(Action.TRADES, "btc_eur", [{"price": "1"}])
        snap = cache.snapshot()
        snap["trades"]["btc_eur"].append({"price": "2"})
        assert cache.get(Action.TRADES, "btc_eur") == [{"price": "1"}]

    def test_stats_and_clear(self, cache) -> None:
        cache.merge(Action.CURRENCIES, None, {"BTC": {}})
        cache.merge(Action.TICKER, "btc_eur", {})
        cache.merge(Action.TICKER, "xmr_btc", {})
        stats = cache.get_stats()
        assert stats["queried_actions"] == ["currencies", "ticker"]
        assert stats["markets_per_action"]["ticker"] == 2
        assert stats["total_entries"] == 3

        cache.clear()
        assert Action.TICKER not in cache

    def test_string_action_names(self) -> None:
        cache = DataCache()
        cache.merge("hloc", "btc_eur", [1])
        assert cache.get(Action.HLOC, "btc_eur") == [1]
