from src.auction_manager.auction_engine import AuctionEngine
from src.auction_manager.auction_state import (
    Bid,
    GameState,
    Item,
    OfferedItem,
    Participant,
)
from src.auction_manager.bid_ledger import BidLedger, Round
from src.auction_manager.errors import (
    AuctionError,
    InsufficientFundsError,
    NoBidsError,
    NoEmptySlotError,
    NotFoundError,
    SupplyExhaustedError,
    ValidationError,
)
from src.auction_manager.roster_assigner import RosterAssigner
from src.auction_manager.sale_resolver import Sale, SaleResolver
from src.auction_manager.state_persistence import StatePersistence
from src.auction_manager.turn_scheduler import (
    AsyncioClock,
    ManualClock,
    SchedulerState,
    TurnScheduler,
)

__all__ = [
    "AsyncioClock",
    "AuctionEngine",
    "AuctionError",
    "Bid",
    "BidLedger",
    "GameState",
    "InsufficientFundsError",
    "Item",
    "ManualClock",
    "NoBidsError",
    "NoEmptySlotError",
    "NotFoundError",
    "OfferedItem",
    "Participant",
    "RosterAssigner",
    "Round",
    "Sale",
    "SaleResolver",
    "SchedulerState",
    "StatePersistence",
    "SupplyExhaustedError",
    "TurnScheduler",
    "ValidationError",
]
