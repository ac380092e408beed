"""Tests for envelope stripping."""

import pytest

from actions import Action
from errors import NormalizationError
from normalizer import normalize


class TestNormalize:

    @pytest.mark.parametrize("action", ["depth", "hloc", "offers", "ticker", "trades"])
    def test_per_market_envelope_unwrapped(self, action) -> None:
        payload = [{"price": "1.0"}]
        assert normalize(action, {action: payload}) == payload

    @pytest.mark.parametrize("action", [Action.CURRENCIES, Action.MARKETS, Action.VOLUMES])
    def test_whole_dataset_returned_as_is(self, action) -> None:
        body = {"btc_eur": {"name": "Bitcoin/Euro"}}
        assert normalize(action, body) is body

    def test_missing_envelope(self) -> None:
        with pytest.raises(NormalizationError) as exc_info:
            normalize(Action.DEPTH, {"ticker": {}})
        assert exc_info.value.action == "depth"

    def test_non_mapping_body(self) -> None:
        with pytest.raises(NormalizationError):
            normalize(Action.TRADES, [{"price": "1.0"}])

    @pytest.mark.parametrize("fmt", ["text", "csv"])
    def test_unparsed_formats_pass_through(self, fmt) -> None:
        body = "period_start,open,high,low,close\n1500000000,1,2,0.5,1.5\n"
        assert normalize(Action.HLOC, body, fmt) == body

    def test_empty_payload_inside_envelope(self) -> None:
        assert normalize(Action.OFFERS, {"offers": []}) == []
