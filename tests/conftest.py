"""Shared fixtures for the auction test suite."""

import random

import pytest

from src.auction_manager.auction_engine import AuctionEngine
from src.auction_manager.state_persistence import StatePersistence
from src.auction_manager.turn_scheduler import ManualClock
from src.item_supply.catalog import PlayerCatalog


# ------------------------------------------------------------------
# Lightweight factories – cheap to construct, no I/O
# ------------------------------------------------------------------

SAMPLE_PLAYERS = [
    {"name": "Alisson Becker", "position": "GK", "tier": "S", "league": "Premier League",
     "era": "modern", "club": "Liverpool", "market_value": 40},
    {"name": "Virgil van Dijk", "position": "CB", "tier": "S", "league": "Premier League",
     "era": "modern", "club": "Liverpool", "market_value": 60},
    {"name": "Ruben Dias", "position": "CB", "tier": "A", "league": "Premier League",
     "era": "modern", "club": "Manchester City", "market_value": 70},
    {"name": "Rodri", "position": "CDM", "tier": "S", "league": "Premier League",
     "era": "modern", "club": "Manchester City", "market_value": 110},
    {"name": "Jude Bellingham", "position": "CAM", "tier": "S", "league": "La Liga",
     "era": "modern", "club": "Real Madrid", "market_value": 180},
    {"name": "Vinicius Junior", "position": "LW", "tier": "S", "league": "La Liga",
     "era": "modern", "club": "Real Madrid", "market_value": 180},
    {"name": "Harry Kane", "position": "ST", "tier": "S", "league": "Bundesliga",
     "era": "modern", "club": "Bayern Munich", "market_value": 100},
    {"name": "Thierry Henry", "position": "ST", "tier": "S", "league": "Premier League",
     "era": "legend", "club": "Arsenal", "market_value": 120},
    {"name": "Paolo Maldini", "position": "LB", "tier": "S", "league": "Serie A",
     "era": "legend", "club": "AC Milan", "market_value": 90},
    {"name": "Jesse Lingard", "position": "CAM", "tier": "C", "league": "Premier League",
     "era": "modern", "club": "Man Utd", "market_value": 8},
]



@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def catalog():
    return PlayerCatalog.from_records(SAMPLE_PLAYERS, rng=random.Random(7))


@pytest.fixture
def persistence(tmp_path):
    return StatePersistence(storage_dir=tmp_path / "state")


@pytest.fixture
def engine(clock, catalog, persistence):
    return AuctionEngine(item_supply=catalog, persistence=persistence, clock=clock)


@pytest.fixture
def sample_players():
    return [dict(p) for p in SAMPLE_PLAYERS]
