"""Tests for the player catalog and dynamic pricing."""

import json
import random

import pandas as pd
import pytest

from src.auction_manager.auction_state import OfferedItem
from src.auction_manager.errors import SupplyExhaustedError
from src.item_supply.catalog import (
    CatalogError,
    ItemFilter,
    PlayerCatalog,
    SupplyDraw,
    to_offered_item,
)
from src.item_supply.pricing import draw_volatility, dynamic_value, form_for


# ── Loading ──────────────────────────────────────────────────────────


class TestLoading:
    def test_from_records(self, sample_players):
        catalog = PlayerCatalog.from_records(sample_players)
        assert len(catalog.players) == len(sample_players)

    def test_missing_required_column(self):
        with pytest.raises(CatalogError, match="market_value"):
            PlayerCatalog(pd.DataFrame([{"name": "x", "position": "ST", "tier": "A"}]))

    def test_optional_columns_added(self):
        catalog = PlayerCatalog.from_records(
            [{"name": "x", "position": "ST", "tier": "A", "market_value": 5}]
        )
        assert "club" in catalog.players.columns

    def test_rows_without_value_dropped(self):
        catalog = PlayerCatalog.from_records(
            [
                {"name": "x", "position": "ST", "tier": "A", "market_value": "n/a"},
                {"name": "y", "position": "ST", "tier": "A", "market_value": 5},
            ]
        )
        assert catalog.players["name"].tolist() == ["y"]

    def test_from_json_list(self, tmp_path, sample_players):
        path = tmp_path / "players.json"
        path.write_text(json.dumps(sample_players))
        assert len(PlayerCatalog.from_file(path).players) == len(sample_players)

    def test_from_json_wrapped_with_camel_case_value(self, tmp_path):
        path = tmp_path / "players.json"
        players = [{"name": "x", "position": "ST", "tier": "A", "marketValue": 5}]
        path.write_text(json.dumps({"players": players}))
        catalog = PlayerCatalog.from_file(path)
        assert catalog.players["market_value"].tolist() == [5]

    def test_from_csv(self, tmp_path, sample_players):
        path = tmp_path / "players.csv"
        pd.DataFrame(sample_players).to_csv(path, index=False)
        assert len(PlayerCatalog.from_file(path).players) == len(sample_players)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            PlayerCatalog.from_file(tmp_path / "nope.json")

    def test_corrupt_json(self, tmp_path):
        path = tmp_path / "players.json"
        path.write_text("[{")
        with pytest.raises(CatalogError):
            PlayerCatalog.from_file(path)


# ── Filtering ────────────────────────────────────────────────────────


class TestFilter:
    def test_no_filter_returns_all(self, catalog, sample_players):
        assert catalog.count(ItemFilter()) == len(sample_players)

    def test_position_group(self, catalog):
        names = catalog.filter(ItemFilter(position="DEF"))["name"].tolist()
        assert set(names) == {"Virgil van Dijk", "Ruben Dias", "Paolo Maldini"}

    def test_tier_and_era(self, catalog):
        df = catalog.filter(ItemFilter(tier="S", era="legend"))
        assert set(df["name"]) == {"Thierry Henry", "Paolo Maldini"}

    def test_league(self, catalog):
        assert catalog.count(ItemFilter(league="La Liga")) == 2

    def test_clubs(self, catalog):
        df = catalog.filter(ItemFilter(clubs=frozenset({"Liverpool", "Arsenal"})))
        assert set(df["name"]) == {"Alisson Becker", "Virgil van Dijk", "Thierry Henry"}

    def test_exclude_names(self, catalog):
        df = catalog.filter(ItemFilter(position="FWD"), exclude=["Harry Kane"])
        assert set(df["name"]) == {"Vinicius Junior", "Thierry Henry"}

    def test_unknown_group_matches_nothing(self, catalog):
        assert catalog.count(ItemFilter(position="WINGER")) == 0

    def test_clubs_sorted_distinct(self, catalog):
        clubs = catalog.clubs()
        assert clubs == sorted(set(clubs))
        assert "Real Madrid" in clubs


# ── Draw ─────────────────────────────────────────────────────────────


class TestDraw:
    def test_returns_matching_player(self, catalog):
        draw = catalog.draw(ItemFilter(position="GK"))
        assert isinstance(draw, SupplyDraw)
        assert draw.player["name"] == "Alisson Becker"
        assert draw.remaining == 1

    def test_never_returns_excluded(self, catalog):
        seen = []
        for _ in range(3):
            seen.append(catalog.draw(ItemFilter(position="FWD"), exclude=seen).player["name"])
        assert len(set(seen)) == 3

    def test_exhausted(self, catalog):
        with pytest.raises(SupplyExhaustedError):
            catalog.draw(ItemFilter(position="GK"), exclude=["Alisson Becker"])

    def test_dynamic_value_within_volatility_band(self, catalog):
        for _ in range(20):
            draw = catalog.draw(ItemFilter(position="GK"))
            assert 32 <= draw.dynamic_value <= 48

    def test_plain_python_values(self, catalog):
        player = catalog.draw(ItemFilter(position="GK")).player
        assert type(player["market_value"]) in (int, float)
        assert player["age"] is None

    def test_offer_builds_offered_item(self, catalog):
        item, remaining = catalog.offer(ItemFilter(position="MID"), ["Rodri"])
        assert isinstance(item, OfferedItem)
        assert item.position == "CAM"
        assert remaining == 2
        assert item.details["market_value"] in (180, 8)

    def test_offer_defaults_to_unfiltered(self, catalog, sample_players):
        _, remaining = catalog.offer()
        assert remaining == len(sample_players)

    def test_to_offered_item(self):
        draw = SupplyDraw(
            player={"name": "x", "position": "ST", "tier": "A", "club": "Roma"},
            remaining=4,
            dynamic_value=12,
            form="up",
        )
        item = to_offered_item(draw)
        assert item.dynamic_value == 12
        assert item.form == "up"
        assert item.details["club"] == "Roma"


# ── Pricing ──────────────────────────────────────────────────────────


class _FixedRandom:
    def __init__(self, value):
        self.value = value

    def random(self):
        return self.value


class TestPricing:
    def test_volatility_range(self):
        rng = random.Random(1)
        for _ in range(100):
            assert 0.8 <= draw_volatility(rng) <= 1.2

    def test_form_labels(self):
        assert form_for(1.1) == "up"
        assert form_for(0.9) == "down"
        assert form_for(1.0) == "stable"
        assert form_for(1.05) == "stable"
        assert form_for(0.95) == "stable"

    def test_dynamic_value_low_end(self):
        assert dynamic_value(100, _FixedRandom(0.0)) == (80, "down")

    def test_dynamic_value_mid(self):
        assert dynamic_value(100, _FixedRandom(0.5)) == (100, "stable")

    def test_dynamic_value_rounds_half_up(self):
        # 0.8 + 0.5 * 0.4 = 1.0; 2.5 * 1.0 rounds to 3, not banker's 2
        assert dynamic_value(2.5, _FixedRandom(0.5))[0] == 3
