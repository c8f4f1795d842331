"""State persistence - save and load the full game state to/from JSON."""

import json
import logging
from pathlib import Path
from typing import Optional

from src.auction_manager.auction_state import GameState
from src.auction_manager.config import STATE_DIR, STATE_FILENAME
from src.auction_manager.roster_assigner import RosterAssigner

logger = logging.getLogger(__name__)


class StatePersistence:
    """Stores the whole GameState as one JSON document.

    Every save rewrites the complete state; there are no partial writes.
    Concurrent writers are not reconciled: the last save wins.
    """

    def __init__(self, storage_dir: Optional[Path] = None, filename: str = STATE_FILENAME):
        self.storage_dir = storage_dir or STATE_DIR
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        self.filepath = self.storage_dir / filename

    def save(self, game_state: GameState) -> Path:
        """Save the game state.

        The document is written to a sibling temp file and then swapped in,
        so readers never see a half-written file.

        Returns:
            Path to the saved file.
        """
        tmp_path = self.filepath.with_suffix(self.filepath.suffix + ".tmp")

        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(game_state.to_dict(), f, indent=2)

        tmp_path.replace(self.filepath)

        logger.debug(
            "Saved %d participants to %s",
            len(game_state.participants),
            self.filepath,
        )
        return self.filepath

    def load(self) -> Optional[GameState]:
        """Load the game state.

        Returns:
            GameState if a readable file exists, None otherwise. Roster
            entries pointing at missing inventory items are dropped.
        """
        if not self.filepath.exists():
            return None

        try:
            with open(self.filepath, "r", encoding="utf-8") as f:
                state_dict = json.load(f)
            if not isinstance(state_dict, dict):
                raise TypeError(
                    f"expected a JSON object, got {type(state_dict).__name__}"
                )
            state = GameState.from_dict(state_dict)
        except (
            json.JSONDecodeError,
            AttributeError,
            KeyError,
            TypeError,
            ValueError,
        ) as e:
            logger.warning("Corrupt state file %s: %s", self.filepath, e)
            return None

        roster = RosterAssigner()
        for participant in state.participants:
            roster.repair(participant)

        logger.info(
            "Loaded %d participants from %s", len(state.participants), self.filepath
        )
        return state

    def last_modified(self) -> Optional[int]:
        """Modification stamp (ns) of the state file, None if absent.

        Front ends poll this to notice writes made elsewhere and then call
        ``AuctionEngine.reload()``.
        """
        if not self.filepath.exists():
            return None
        return self.filepath.stat().st_mtime_ns

    def delete(self) -> bool:
        """Delete the saved state. Returns False if there was nothing to delete."""
        if not self.filepath.exists():
            return False
        self.filepath.unlink()
        logger.info("Deleted state file %s", self.filepath)
        return True
