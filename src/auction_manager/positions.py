"""Position vocabulary, formation slots and compatibility lookups.

Two separate policies live here:

* **Browse** - group based. While a slot is selected on the squad board, any
  player from the slot's positional group may be offered for it.
* **Autofill** - an exact position to candidate-slot table used only for
  automatic placement of a newly clicked bench player.
"""

from typing import Dict, List

from src.auction_manager.errors import NotFoundError

GOALKEEPER = "GK"

# Concrete positions produced by the catalog plus the generic group tags.
POSITIONS = (
    "GK",
    "CB", "LB", "RB", "LWB", "RWB",
    "CDM", "CM", "CAM", "LM", "RM",
    "LW", "RW", "ST", "CF", "SS",
    "DEF", "MID", "FWD",
)

# 4-3-3 formation shared by every participant: slot id -> required position.
SLOTS: Dict[str, str] = {
    "GK": "GK",
    "LB": "LB",
    "CB1": "CB",
    "CB2": "CB",
    "RB": "RB",
    "CDM": "CDM",
    "CM1": "CM",
    "CM2": "CM",
    "LW": "LW",
    "ST": "ST",
    "RW": "RW",
}

# Browse policy: slot positions grouped with the player positions they accept.
_DEFENSIVE_SLOTS = {"LB", "RB", "CB"}
_MIDFIELD_SLOTS = {"CDM", "CM"}
_ATTACKING_SLOTS = {"LW", "RW", "ST"}

_DEFENSIVE_PLAYERS = {"DEF", "LB", "RB", "CB", "LWB", "RWB"}
_MIDFIELD_PLAYERS = {"MID", "CDM", "CM", "CAM", "RM", "LM"}
_ATTACKING_PLAYERS = {"FWD", "LW", "RW", "ST", "CF", "SS", "LM", "RM"}

# Autofill policy: exact player position -> ordered candidate slots.
AUTOFILL_SLOTS: Dict[str, List[str]] = {
    "GK": ["GK"],
    "LB": ["LB"],
    "LWB": ["LB"],
    "RB": ["RB"],
    "RWB": ["RB"],
    "CB": ["CB1", "CB2"],
    "CDM": ["CDM"],
    "CM": ["CM1", "CM2"],
    "CAM": ["CM1", "CM2"],
    "LM": ["LW"],
    "LW": ["LW"],
    "RM": ["RW"],
    "RW": ["RW"],
    "ST": ["ST"],
    "CF": ["ST"],
    "SS": ["ST"],
}

# Catalog filter groups (position filter on the item supply side).
FILTER_POSITION_GROUPS: Dict[str, List[str]] = {
    "GK": ["GK"],
    "DEF": ["CB", "LB", "RB", "LWB", "RWB"],
    "MID": ["CDM", "CM", "CAM", "RM", "LM"],
    "FWD": ["ST", "CF", "RW", "LW", "SS"],
}


def slot_position(slot_id: str) -> str:
    """Required position tag for a formation slot."""
    try:
        return SLOTS[slot_id]
    except KeyError:
        raise NotFoundError(f"Unknown roster slot '{slot_id}'") from None


def is_browse_compatible(player_position: str, slot_pos: str) -> bool:
    """Loose, group-based eligibility used while browsing for a selected slot."""
    if slot_pos == GOALKEEPER:
        return player_position == GOALKEEPER
    if slot_pos in _DEFENSIVE_SLOTS:
        return player_position in _DEFENSIVE_PLAYERS
    if slot_pos in _MIDFIELD_SLOTS:
        return player_position in _MIDFIELD_PLAYERS
    if slot_pos in _ATTACKING_SLOTS:
        return player_position in _ATTACKING_PLAYERS
    return False


def autofill_candidates(player_position: str) -> List[str]:
    """Strict candidate slots for automatic placement, in preference order.

    Generic group tags (DEF/MID/FWD) and unknown positions have no candidates.
    """
    return list(AUTOFILL_SLOTS.get(player_position, []))


def filter_group_positions(group: str) -> List[str]:
    """Concrete positions matched by a catalog position filter group."""
    return list(FILTER_POSITION_GROUPS.get(group, []))
