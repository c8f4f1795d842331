"""Player catalog - the pool of items that can be put up for auction.

Loads the player database into a pandas DataFrame and serves random unseen
players matching the operator's filters.
"""

import json
import logging
import random
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

import pandas as pd

from src.auction_manager.auction_state import OfferedItem
from src.auction_manager.errors import SupplyExhaustedError
from src.auction_manager.positions import filter_group_positions
from src.item_supply.config import ANY, OPTIONAL_COLUMNS, PLAYERS_FILE, REQUIRED_COLUMNS
from src.item_supply.pricing import dynamic_value

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Raised when the player database cannot be loaded."""


@dataclass(frozen=True)
class ItemFilter:
    """Operator filter; ``"all"`` (or an empty club set) means unrestricted."""

    position: str = ANY  # "GK", "DEF", "MID", "FWD" or "all"
    tier: str = ANY
    league: str = ANY
    era: str = ANY
    clubs: FrozenSet[str] = field(default_factory=frozenset)


@dataclass
class SupplyDraw:
    """One randomly chosen player plus pricing and the size of the pool."""

    player: Dict
    remaining: int  # Matches before this draw is marked as shown
    dynamic_value: float
    form: str


class PlayerCatalog:
    """Filterable pool of players backed by a DataFrame."""

    def __init__(self, players: pd.DataFrame, rng: Optional[random.Random] = None):
        missing = [col for col in REQUIRED_COLUMNS if col not in players.columns]
        if missing:
            raise CatalogError(f"Player data missing required columns: {missing}")

        players = players.copy()
        for col in OPTIONAL_COLUMNS:
            if col not in players.columns:
                players[col] = None
        players["market_value"] = pd.to_numeric(
            players["market_value"], errors="coerce"
        )
        self.players = players.dropna(subset=["name", "market_value"]).reset_index(
            drop=True
        )
        self.rng = rng or random.Random()

        logger.info("Catalog ready with %d players", len(self.players))

    @classmethod
    def from_records(
        cls, records: Iterable[Dict], rng: Optional[random.Random] = None
    ) -> "PlayerCatalog":
        return cls(pd.DataFrame(list(records)), rng=rng)

    @classmethod
    def from_file(
        cls, path: Optional[Path] = None, rng: Optional[random.Random] = None
    ) -> "PlayerCatalog":
        """Load players from a JSON or CSV file.

        JSON may be a plain list of player objects or ``{"players": [...]}``.
        Camel-case ``marketValue`` is accepted for ``market_value``.

        Raises:
            FileNotFoundError: If the file does not exist.
            CatalogError: If the file cannot be parsed.
        """
        path = Path(path or PLAYERS_FILE)
        if not path.exists():
            raise FileNotFoundError(f"Player database not found: {path}")

        logger.info("Reading player database: %s", path.name)
        try:
            if path.suffix.lower() == ".csv":
                df = pd.read_csv(path)
            else:
                with open(path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                if isinstance(data, dict):
                    data = data["players"]
                df = pd.DataFrame(data)
        except (
            json.JSONDecodeError,
            KeyError,
            pd.errors.ParserError,
            pd.errors.EmptyDataError,
        ) as e:
            raise CatalogError(f"Failed to read player database {path}: {e}") from e

        if "market_value" not in df.columns and "marketValue" in df.columns:
            df = df.rename(columns={"marketValue": "market_value"})

        return cls(df, rng=rng)

    def filter(
        self, item_filter: ItemFilter, exclude: Iterable[str] = ()
    ) -> pd.DataFrame:
        """Players matching the filter whose names are not excluded."""
        df = self.players

        for col in ("era", "league", "tier"):
            value = getattr(item_filter, col)
            if value and value != ANY:
                df = df[df[col] == value]

        if item_filter.position and item_filter.position != ANY:
            df = df[df["position"].isin(filter_group_positions(item_filter.position))]

        if item_filter.clubs:
            df = df[df["club"].isin(list(item_filter.clubs))]

        excluded = list(exclude)
        if excluded:
            df = df[~df["name"].isin(excluded)]

        return df

    def count(self, item_filter: ItemFilter, exclude: Iterable[str] = ()) -> int:
        return len(self.filter(item_filter, exclude))

    def clubs(self) -> List[str]:
        """Sorted distinct club names."""
        return sorted(self.players["club"].dropna().unique().tolist())

    def draw(self, item_filter: ItemFilter, exclude: Iterable[str] = ()) -> SupplyDraw:
        """Pick one random unseen player matching the filter.

        Raises:
            SupplyExhaustedError: If nothing matches the filter and exclusions.
        """
        candidates = self.filter(item_filter, exclude)
        if candidates.empty:
            raise SupplyExhaustedError("No players found matching criteria")

        row = candidates.iloc[self.rng.randrange(len(candidates))]
        player = _row_to_dict(row)
        value, form = dynamic_value(player["market_value"], self.rng)

        logger.info(
            "Drew %s (%s, tier %s) at %d, %d candidates",
            player["name"],
            player["position"],
            player["tier"],
            value,
            len(candidates),
        )

        return SupplyDraw(
            player=player,
            remaining=len(candidates),
            dynamic_value=value,
            form=form,
        )

    def offer(
        self, item_filter: Optional[ItemFilter] = None, exclude: Iterable[str] = ()
    ) -> Tuple[OfferedItem, int]:
        """Item-supply port used by AuctionEngine: (offered item, remaining matches)."""
        drawn = self.draw(item_filter or ItemFilter(), exclude)
        return to_offered_item(drawn), drawn.remaining


def _row_to_dict(row: pd.Series) -> Dict:
    """Convert a catalog row to plain Python values (NaN -> None)."""
    player = {}
    for key, value in row.to_dict().items():
        if isinstance(value, (list, dict)):
            player[key] = value
        elif pd.isna(value):
            player[key] = None
        elif hasattr(value, "item"):
            player[key] = value.item()  # numpy scalar
        else:
            player[key] = value
    return player


def to_offered_item(draw: SupplyDraw) -> OfferedItem:
    """Build the engine's OfferedItem from a catalog draw."""
    player = draw.player
    return OfferedItem(
        name=player["name"],
        position=player["position"],
        tier=player["tier"],
        dynamic_value=draw.dynamic_value,
        form=draw.form,
        details={
            "club": player.get("club"),
            "league": player.get("league"),
            "era": player.get("era"),
            "age": player.get("age"),
            "nationality": player.get("nationality"),
            "market_value": player.get("market_value"),
        },
    )
