"""Auction state data models - single source of truth for the game."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from src.auction_manager.errors import NotFoundError


@dataclass(frozen=True)
class Item:
    """A player bought at auction and held in a participant's inventory."""

    name: str
    position: str
    tier: str
    price: float  # Price paid


@dataclass
class Bid:
    """Represents a single bid in the current round."""

    participant_id: int
    participant_name: str
    amount: float
    timestamp: str

    @classmethod
    def create(cls, participant_id: int, participant_name: str, amount: float):
        return cls(
            participant_id=participant_id,
            participant_name=participant_name,
            amount=amount,
            timestamp=datetime.now().isoformat(),
        )


@dataclass
class OfferedItem:
    """The item currently under the hammer."""

    name: str
    position: str
    tier: str
    dynamic_value: float
    form: str = "stable"  # "up", "down" or "stable"
    details: Dict = field(default_factory=dict)


@dataclass
class Participant:
    """A manager taking part in the auction."""

    participant_id: int
    name: str
    budget: float
    inventory: List[Item] = field(default_factory=list)
    roster: Dict[str, int] = field(default_factory=dict)

    def add_item(self, item: Item) -> int:
        """Append an item to the inventory and return its index."""
        self.inventory.append(item)
        return len(self.inventory) - 1

    def get_item(self, index: int) -> Item:
        if not 0 <= index < len(self.inventory):
            raise NotFoundError(
                f"{self.name} has no inventory item at index {index}"
            )
        return self.inventory[index]

    def remove_item(self, index: int) -> Item:
        """Remove the item at index. Roster indices are NOT adjusted here."""
        item = self.get_item(index)
        del self.inventory[index]
        return item

    def slot_of(self, index: int) -> Optional[str]:
        """Slot currently holding the inventory index, if any."""
        for slot, assigned in self.roster.items():
            if assigned == index:
                return slot
        return None

    def unassigned_indices(self) -> List[int]:
        assigned = set(self.roster.values())
        return [i for i in range(len(self.inventory)) if i not in assigned]


@dataclass
class GameState:
    """Complete persisted game state - every participant and the id counter."""

    participants: List[Participant] = field(default_factory=list)
    next_participant_id: int = 0

    def find_participant(self, participant_id: int) -> Participant:
        """Get participant by ID."""
        for participant in self.participants:
            if participant.participant_id == participant_id:
                return participant
        raise NotFoundError(f"Participant {participant_id} not found")

    def find_by_name(self, name: str) -> Optional[Participant]:
        """Case-insensitive lookup by name."""
        wanted = name.strip().lower()
        for participant in self.participants:
            if participant.name.lower() == wanted:
                return participant
        return None

    def to_dict(self) -> Dict:
        """Convert to a JSON-serializable dict."""
        return {
            "next_participant_id": self.next_participant_id,
            "participants": [
                {
                    "participant_id": p.participant_id,
                    "name": p.name,
                    "budget": p.budget,
                    "inventory": [
                        {
                            "name": item.name,
                            "position": item.position,
                            "tier": item.tier,
                            "price": item.price,
                        }
                        for item in p.inventory
                    ],
                    "roster": dict(p.roster),
                }
                for p in self.participants
            ],
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "GameState":
        """Reconstruct GameState from dict."""
        participants = [
            Participant(
                participant_id=pd["participant_id"],
                name=pd["name"],
                budget=float(pd["budget"]),
                inventory=[
                    Item(
                        name=it["name"],
                        position=it["position"],
                        tier=it["tier"],
                        price=float(it["price"]),
                    )
                    for it in pd.get("inventory", [])
                ],
                roster={
                    slot: int(index) for slot, index in pd.get("roster", {}).items()
                },
            )
            for pd in data.get("participants", [])
        ]

        next_id = data.get("next_participant_id")
        if next_id is None:
            next_id = max((p.participant_id for p in participants), default=-1) + 1

        return cls(participants=participants, next_participant_id=next_id)
